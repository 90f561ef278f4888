"""Supervisor directory endpoint — admin only."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from dairy_dashboard.application.schemas import SupervisorSchema
from dairy_dashboard.application.services import SupervisorDirectory
from dairy_dashboard.domain.exceptions import (
    AuthenticationFailedError,
    FarmApiError,
    NotAuthenticatedError,
    PermissionDeniedError,
)
from dairy_dashboard.infrastructure.dependencies import get_supervisor_directory

router = APIRouter(prefix="/supervisors", tags=["Supervisors"])


@router.get("", response_model=list[SupervisorSchema])
async def list_supervisors(
    search: str = Query("", description="Filter by username or email"),
    directory: SupervisorDirectory = Depends(get_supervisor_directory),
) -> list[SupervisorSchema]:
    """Supervisors an admin can scope record modules to."""
    try:
        users = await directory.list_supervisors(search)
    except (NotAuthenticatedError, AuthenticationFailedError) as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except FarmApiError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return [SupervisorSchema.model_validate(u) for u in users]
