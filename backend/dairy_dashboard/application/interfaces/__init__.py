from .auth_gateway import AuthGateway
from .record_gateway import RecordGateway
from .spreadsheet_writer import SpreadsheetWriter

__all__ = [
    "AuthGateway",
    "RecordGateway",
    "SpreadsheetWriter",
]
