"""Session endpoints — login, logout and the current user."""

from fastapi import APIRouter, Depends, HTTPException, status

from dairy_dashboard.application.schemas import LoginRequest, SessionResponse
from dairy_dashboard.application.services import SessionContext
from dairy_dashboard.domain.exceptions import AuthenticationFailedError
from dairy_dashboard.infrastructure.dependencies import get_session_context

router = APIRouter(prefix="/session", tags=["Session"])


@router.get("", response_model=SessionResponse)
async def get_session(
    session: SessionContext = Depends(get_session_context),
) -> SessionResponse:
    """The signed-in user, if any."""
    return SessionResponse.from_session(session.current)


@router.post("/login", response_model=SessionResponse)
async def login(
    data: LoginRequest,
    session: SessionContext = Depends(get_session_context),
) -> SessionResponse:
    """Authenticate against the farm API and start the session."""
    try:
        user = await session.login(data.username, data.password, data.role)
    except AuthenticationFailedError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)
    return SessionResponse.from_session(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    session: SessionContext = Depends(get_session_context),
) -> None:
    """End the session and unmount every record module."""
    session.end()
