"""Workflow transitions for an event's selection and delivery."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime

from photosort.domain.events import Event, SelectionStatus
from photosort.domain.photos import ReviewStatus
from photosort.domain.viewers import Viewer
from photosort.domain.workflow import (
    check_transition,
    is_locked,
    is_reopen,
    stamp_timeline,
)
from photosort.errors import (
    NotFoundError,
    PartialBulkUpdateError,
    PermissionDeniedError,
    SelectionLockedError,
)
from photosort.services.audit import AuditService
from photosort.services.events import EventRepository
from photosort.services.photos import PhotoRepository

_logger = logging.getLogger(__name__)


@dataclass
class WorkflowService:
    """Applies workflow transitions and records them in the audit trail."""

    event_repository: EventRepository
    photo_repository: PhotoRepository
    audit_service: AuditService

    def update_workflow(  # noqa: PLR0913
        self,
        event_id: str,
        target: SelectionStatus,
        viewer: Viewer,
        delivery_estimate: date | None = None,
        note: str | None = None,
        confirm_reopen: bool = False,
    ) -> Event:
        """Move an event to ``target`` if the viewer may take that edge."""
        event = self._get_event(event_id, viewer)
        is_photographer = viewer.is_photographer_of(event)
        if delivery_estimate is not None and not is_photographer:
            raise PermissionDeniedError("Only the photographer sets delivery estimates")
        check_transition(
            event.selection_status,
            target,
            is_photographer=is_photographer,
            confirm_reopen=confirm_reopen,
        )
        return self._transition(event, target, viewer, delivery_estimate, note)

    def submit_selections(self, event_id: str, viewer: Viewer) -> Event:
        """Lock the client's selection; repeated submits are no-ops."""
        event = self._get_event(event_id, viewer)
        if event.selection_status == SelectionStatus.SUBMITTED:
            return event
        if is_locked(event, viewer.is_photographer_of(event)):
            raise SelectionLockedError(
                f"Selections for {event.name} are {event.selection_status.value}"
            )
        check_transition(
            event.selection_status,
            SelectionStatus.SUBMITTED,
            is_photographer=viewer.is_photographer_of(event),
        )
        return self._transition(event, SelectionStatus.SUBMITTED, viewer)

    def approve_all_edits(self, event_id: str, viewer: Viewer) -> Event:
        """Approve every edited photo and accept the delivery.

        The event only moves to ``accepted`` after the bulk review update has
        touched every edited photo; otherwise PartialBulkUpdateError is raised
        and the event is left in its current state.
        """
        event = self._get_event(event_id, viewer)
        check_transition(
            event.selection_status,
            SelectionStatus.ACCEPTED,
            is_photographer=viewer.is_photographer_of(event),
        )
        edited_ids = [
            photo.id
            for photo in self.photo_repository.list_photos(event_id)
            if photo.edited_url is not None
        ]
        updated = (
            self.photo_repository.set_review_status(edited_ids, ReviewStatus.APPROVED)
            if edited_ids
            else 0
        )
        if updated != len(edited_ids):
            _logger.warning(
                "Approve-all incomplete: event_id=%s expected=%s updated=%s",
                event_id,
                len(edited_ids),
                updated,
            )
            raise PartialBulkUpdateError(expected=len(edited_ids), updated=updated)
        return self._transition(event, SelectionStatus.ACCEPTED, viewer)

    def _get_event(self, event_id: str, viewer: Viewer) -> Event:
        event = self.event_repository.get_event(event_id)
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")
        if not viewer.can_view(event):
            raise PermissionDeniedError("Event is not shared with this viewer")
        return event

    def _transition(
        self,
        event: Event,
        target: SelectionStatus,
        viewer: Viewer,
        delivery_estimate: date | None = None,
        note: str | None = None,
    ) -> Event:
        timeline = stamp_timeline(event.timeline, target, datetime.now(tz=UTC))
        if delivery_estimate is not None:
            timeline = replace(timeline, delivery_estimate=delivery_estimate)
        saved = self.event_repository.update_event(event.with_status(target, timeline))
        event_type = (
            "workflow_reopened"
            if is_reopen(event.selection_status, target)
            else "workflow_transition"
        )
        _logger.info(
            "Workflow %s: event_id=%s %s -> %s by %s",
            event_type,
            event.id,
            event.selection_status.value,
            target.value,
            viewer.id,
        )
        self.audit_service.record_event(
            actor_id=viewer.id,
            entity_type="event",
            entity_id=event.id,
            event_type=event_type,
            before={"selection_status": event.selection_status.value},
            after={"selection_status": target.value, "note": note},
        )
        return saved
