"""Request dependencies shared by the API routers."""

from fastapi import Header, HTTPException, Request, status

from photosort.adapters.rows import event_to_row
from photosort.containers import AppContainer
from photosort.domain.events import Event
from photosort.domain.viewers import UserRole, Viewer


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the running app."""
    return request.app.state.container


async def get_viewer(
    x_viewer_id: str | None = Header(default=None),
    x_viewer_role: str | None = Header(default=None),
) -> Viewer:
    """Build the viewer from identity headers set by the gateway."""
    if not x_viewer_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        role = UserRole(x_viewer_role.upper()) if x_viewer_role else UserRole.USER
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown viewer role: {x_viewer_role}",
        ) from exc
    return Viewer(id=x_viewer_id, role=role)


def serialize_event(event: Event) -> dict[str, object]:
    """Render an event row with its derived balance."""
    return {**event_to_row(event), "balance": event.balance}
