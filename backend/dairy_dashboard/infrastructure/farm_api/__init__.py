"""Farm REST API infrastructure package."""

from .farm_api_client import FarmApiClient

__all__ = ["FarmApiClient"]
