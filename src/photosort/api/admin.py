"""Admin API endpoints with simple token auth."""

from fastapi import APIRouter, Depends, Header, HTTPException, status

from photosort.api.deps import get_container
from photosort.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(container: AppContainer = Depends(get_container)) -> str:
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/summary", dependencies=[Depends(require_admin)])
async def platform_summary(
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return platform-wide totals."""
    return container.admin_service.platform_summary()


@router.get("/events", dependencies=[Depends(require_admin)])
async def list_events(
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return every event with its workflow and payment state."""
    return {"events": container.admin_service.list_events()}


@router.get("/events/{event_id}/audit", dependencies=[Depends(require_admin)])
async def event_audit(
    event_id: str,
    limit: int = 20,
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return recent audit entries for an event."""
    return {"audit": container.admin_service.event_audit(event_id, limit)}
