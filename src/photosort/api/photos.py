"""Photo-level endpoints: selection, edits, comments and review."""

from fastapi import APIRouter, Depends

from photosort.adapters.rows import photo_to_row
from photosort.api.deps import get_container, get_viewer
from photosort.api.models import (
    AttachEditedRequest,
    CommentRequest,
    ReviewStatusRequest,
)
from photosort.containers import AppContainer
from photosort.domain.photos import Photo
from photosort.domain.viewers import Viewer
from photosort.errors import PermissionDeniedError

router = APIRouter(prefix="/photos", tags=["photos"])


@router.post("/{photo_id}/selection")
async def toggle_selection(
    photo_id: str,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Flip the photo's selection flag."""
    photo = container.photo_service.toggle_selection(photo_id, viewer)
    return {"photo": photo_to_row(photo)}


@router.post("/{photo_id}/edit")
async def attach_edited(
    photo_id: str,
    body: AttachEditedRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Attach the edited deliverable for a photo."""
    photo = _visible_photo(container, photo_id, viewer, photographer_only=True)
    updated = container.photo_service.attach_edited(photo.id, body.edited_url)
    return {"photo": photo_to_row(updated)}


@router.post("/{photo_id}/comments", status_code=201)
async def add_comment(
    photo_id: str,
    body: CommentRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Leave a review comment on a photo."""
    photo = _visible_photo(container, photo_id, viewer)
    updated = container.photo_service.add_comment(
        photo.id, body.author, body.text, viewer.role.value
    )
    return {"photo": photo_to_row(updated)}


@router.post("/{photo_id}/comments/{comment_id}/resolve")
async def resolve_comment(
    photo_id: str,
    comment_id: str,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Mark a review comment as resolved."""
    photo = _visible_photo(container, photo_id, viewer)
    updated = container.photo_service.resolve_comment(photo.id, comment_id)
    return {"photo": photo_to_row(updated)}


@router.post("/{photo_id}/review-status")
async def update_review_status(
    photo_id: str,
    body: ReviewStatusRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Record the client's verdict on an edited photo."""
    photo = _visible_photo(container, photo_id, viewer)
    updated = container.photo_service.update_review_status(photo.id, body.status)
    return {"photo": photo_to_row(updated)}


def _visible_photo(
    container: AppContainer,
    photo_id: str,
    viewer: Viewer,
    photographer_only: bool = False,
) -> Photo:
    photo = container.photo_service.get_photo(photo_id)
    event = container.event_service.get_event_for(photo.event_id, viewer)
    if photographer_only and not viewer.is_photographer_of(event):
        raise PermissionDeniedError("Only the event photographer can do this")
    return photo
