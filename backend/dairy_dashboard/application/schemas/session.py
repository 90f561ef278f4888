"""Pydantic DTOs for login, the current session and the supervisor directory."""

from pydantic import BaseModel, Field

from dairy_dashboard.domain.entities import UserSession


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1)
    role: str = Field(..., examples=["supervisor", "admin"])


class SessionResponse(BaseModel):
    """The signed-in user. The token never leaves the service."""

    authenticated: bool
    user_id: str | None = None
    username: str | None = None
    role: str | None = None
    is_admin: bool = False

    @classmethod
    def from_session(cls, session: UserSession | None) -> "SessionResponse":
        if session is None:
            return cls(authenticated=False)
        return cls(
            authenticated=True,
            user_id=session.user_id,
            username=session.username,
            role=session.role,
            is_admin=session.is_admin,
        )


class SupervisorSchema(BaseModel):
    id: int | str
    username: str
    email: str | None = None
    role: str
