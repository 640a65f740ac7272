"""Photo selection, tagging and delivery services."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

import httpx

from photosort.adapters.face_service_client import FaceGroupingClient
from photosort.domain.gallery import rename_person
from photosort.domain.photos import Comment, Photo, ReviewStatus
from photosort.domain.uploads import EditedUploadPlan, match_edited_uploads
from photosort.domain.viewers import Viewer
from photosort.domain.workflow import is_locked
from photosort.errors import NotFoundError, PermissionDeniedError, SelectionLockedError
from photosort.services.events import EventRepository

_logger = logging.getLogger(__name__)


class PhotoRepository(Protocol):
    """Persistence interface for photos."""

    def list_photos(self, event_id: str) -> list[Photo]:
        """Return the photos of an event in upload order."""

    def get_photo(self, photo_id: str) -> Photo | None:
        """Return a photo by id, if present."""

    def create_photos(
        self, event_id: str, payloads: list[dict[str, object]]
    ) -> list[Photo]:
        """Insert photo records for an event and return them."""

    def count_photos(self, event_id: str) -> int:
        """Return the number of photos stored for an event."""

    def update_photo(self, photo: Photo) -> Photo:
        """Persist a photo document and return the stored version."""

    def set_review_status(self, photo_ids: list[str], status: ReviewStatus) -> int:
        """Set the review status on many photos; return how many were updated."""


@dataclass
class PhotoService:
    """Application service for photo-level operations."""

    repository: PhotoRepository
    event_repository: EventRepository
    face_client: FaceGroupingClient | None = None

    def list_photos(self, event_id: str) -> list[Photo]:
        """Return an event's photos."""
        return self.repository.list_photos(event_id)

    def get_photo(self, photo_id: str) -> Photo:
        """Return a photo or raise NotFoundError."""
        photo = self.repository.get_photo(photo_id)
        if photo is None:
            raise NotFoundError(f"Photo {photo_id} not found")
        return photo

    def toggle_selection(self, photo_id: str, viewer: Viewer) -> Photo:
        """Flip a photo's selection flag if the viewer may still select."""
        photo = self.get_photo(photo_id)
        event = self.event_repository.get_event(photo.event_id)
        if event is None:
            raise NotFoundError(f"Event {photo.event_id} not found")
        if not viewer.can_view(event):
            raise PermissionDeniedError("Event is not shared with this viewer")
        if is_locked(event, viewer.is_photographer_of(event)):
            raise SelectionLockedError(
                f"Selections for {event.name} are {event.selection_status.value}"
            )
        return self.repository.update_photo(photo.with_selection(not photo.is_selected))

    def rename_person(self, event_id: str, old_name: str, new_name: str) -> int:
        """Rename a person across an event's photos; return photos changed."""
        if not new_name.strip():
            raise ValueError("New name must not be empty")
        photos = self.repository.list_photos(event_id)
        changed = 0
        for before, after in zip(
            photos, rename_person(photos, event_id, old_name, new_name), strict=True
        ):
            if after is not before:
                self.repository.update_photo(after)
                changed += 1
        return changed

    async def add_photos(
        self, event_id: str, payloads: list[dict[str, object]]
    ) -> list[Photo]:
        """Store new photo records and notify the face-grouping service."""
        event = self.event_repository.get_event(event_id)
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")
        created = self.repository.create_photos(event_id, payloads)
        count = self.repository.count_photos(event_id)
        self.event_repository.update_event(replace(event, photo_count=count))
        if self.face_client is not None:
            try:
                await self.face_client.process_event(event_id)
            except httpx.HTTPError as exc:
                _logger.warning(
                    "Face grouping trigger failed: event_id=%s error=%s", event_id, exc
                )
        return created

    def attach_edited(self, photo_id: str, edited_url: str) -> Photo:
        """Attach an edited deliverable; review starts over as pending."""
        photo = self.get_photo(photo_id)
        return self.repository.update_photo(
            replace(photo, edited_url=edited_url, review_status=ReviewStatus.PENDING)
        )

    def attach_edited_batch(
        self, event_id: str, uploads: dict[str, str]
    ) -> EditedUploadPlan:
        """Attach edited uploads matched to originals by filename."""
        photos = self.repository.list_photos(event_id)
        plan = match_edited_uploads(photos, uploads)
        for filename, photo_id in plan.matches.items():
            self.attach_edited(photo_id, uploads[filename])
        if plan.conflicts or plan.unmatched:
            _logger.info(
                "Edited uploads not attached: event_id=%s unmatched=%s conflicts=%s",
                event_id,
                len(plan.unmatched),
                len(plan.conflicts),
            )
        return plan

    def add_comment(self, photo_id: str, author: str, text: str, role: str) -> Photo:
        """Append a review comment to a photo."""
        if not text.strip():
            raise ValueError("Comment text must not be empty")
        photo = self.get_photo(photo_id)
        comment = Comment(
            id=uuid4().hex,
            author=author,
            text=text.strip(),
            created_at=datetime.now(tz=UTC),
            role=role,
        )
        return self.repository.update_photo(
            replace(photo, comments=(*photo.comments, comment))
        )

    def resolve_comment(self, photo_id: str, comment_id: str) -> Photo:
        """Mark a comment as resolved."""
        photo = self.get_photo(photo_id)
        if not any(comment.id == comment_id for comment in photo.comments):
            raise NotFoundError(f"Comment {comment_id} not found")
        comments = tuple(
            replace(comment, resolved=True) if comment.id == comment_id else comment
            for comment in photo.comments
        )
        return self.repository.update_photo(replace(photo, comments=comments))

    def update_review_status(self, photo_id: str, status: ReviewStatus) -> Photo:
        """Set the client's verdict on an edited photo."""
        photo = self.get_photo(photo_id)
        if photo.edited_url is None:
            raise ValueError("Only edited photos can be reviewed")
        return self.repository.update_photo(photo.with_review_status(status))
