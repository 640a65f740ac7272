"""Event management services."""

from dataclasses import dataclass, replace
from datetime import date
from typing import Protocol
from uuid import uuid4

from photosort.domain.events import (
    AddonRequest,
    Event,
    PaymentRecord,
    SubEvent,
    derive_payment_status,
)
from photosort.domain.viewers import UserRole, Viewer
from photosort.errors import NotFoundError, PermissionDeniedError

DEFAULT_SUB_EVENT_NAME = "Main Event"


class EventRepository(Protocol):
    """Persistence interface for events."""

    def list_events(self) -> list[Event]:
        """Return every event."""

    def list_events_for_photographer(self, photographer_id: str) -> list[Event]:
        """Return events owned by a photographer."""

    def list_events_for_user(self, user_id: str) -> list[Event]:
        """Return events a client is assigned to."""

    def get_event(self, event_id: str) -> Event | None:
        """Return an event by id, if present."""

    def create_event(self, photographer_id: str, payload: dict[str, object]) -> Event:
        """Create an event and return it."""

    def update_event(self, event: Event) -> Event:
        """Persist the full event document and return the stored version."""


@dataclass
class EventService:
    """Application service for event lifecycle actions."""

    repository: EventRepository

    def list_events(self, viewer: Viewer) -> list[Event]:
        """Return the events visible to a viewer."""
        if viewer.role == UserRole.ADMIN:
            return self.repository.list_events()
        if viewer.role == UserRole.PHOTOGRAPHER:
            return self.repository.list_events_for_photographer(viewer.id)
        return self.repository.list_events_for_user(viewer.id)

    def get_event(self, event_id: str) -> Event:
        """Return an event or raise NotFoundError."""
        event = self.repository.get_event(event_id)
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")
        return event

    def get_event_for(self, event_id: str, viewer: Viewer) -> Event:
        """Return an event the viewer is allowed to see."""
        event = self.get_event(event_id)
        if not viewer.can_view(event):
            raise PermissionDeniedError("Event is not shared with this viewer")
        return event

    def create_event(self, viewer: Viewer, payload: dict[str, object]) -> Event:
        """Create an event owned by the photographer viewer."""
        if viewer.role != UserRole.PHOTOGRAPHER:
            raise PermissionDeniedError("Only photographers can create events")
        data = dict(payload)
        sub_events = [
            {**item, "id": item.get("id") or _new_sub_event_id()}
            for item in data.get("sub_events") or []
        ]
        data["sub_events"] = sub_events or [
            {
                "id": _new_sub_event_id(),
                "name": DEFAULT_SUB_EVENT_NAME,
                "date": data.get("date"),
            }
        ]
        return self.repository.create_event(viewer.id, data)

    def record_payment(
        self, event_id: str, amount: float, paid_on: date | None = None
    ) -> Event:
        """Append a payment to the ledger and update collected totals."""
        if amount <= 0:
            raise ValueError("Payment amount must be positive")
        event = self.get_event(event_id)
        paid_amount = (event.paid_amount or 0) + amount
        updated = replace(
            event,
            paid_amount=paid_amount,
            payment_status=derive_payment_status(event.price, paid_amount),
            payment_history=(
                *event.payment_history,
                PaymentRecord(amount=amount, paid_on=paid_on or date.today()),
            ),
        )
        return self.repository.update_event(updated)

    def add_sub_event(
        self,
        viewer: Viewer,
        event_id: str,
        name: str,
        on: date | None = None,
        location: str | None = None,
    ) -> Event:
        """Add a sub-event to the event taxonomy."""
        event = self._owned_event(viewer, event_id)
        sub_event = SubEvent(
            id=_new_sub_event_id(), name=name, date=on, location=location
        )
        return self.repository.update_event(
            replace(event, sub_events=(*event.sub_events, sub_event))
        )

    def remove_sub_event(
        self, viewer: Viewer, event_id: str, sub_event_id: str
    ) -> Event:
        """Remove a sub-event; photos keep their dangling reference."""
        event = self._owned_event(viewer, event_id)
        remaining = tuple(se for se in event.sub_events if se.id != sub_event_id)
        if len(remaining) == len(event.sub_events):
            raise NotFoundError(f"Sub-event {sub_event_id} not found")
        return self.repository.update_event(replace(event, sub_events=remaining))

    def assign_user(self, viewer: Viewer, event_id: str, user_id: str) -> Event:
        """Give a client view and select rights on the event."""
        event = self._owned_event(viewer, event_id)
        if user_id in event.assigned_users:
            return event
        return self.repository.update_event(
            replace(event, assigned_users=(*event.assigned_users, user_id))
        )

    def remove_user(self, viewer: Viewer, event_id: str, user_id: str) -> Event:
        """Revoke a client's access to the event."""
        event = self._owned_event(viewer, event_id)
        if user_id not in event.assigned_users:
            return event
        return self.repository.update_event(
            replace(
                event,
                assigned_users=tuple(u for u in event.assigned_users if u != user_id),
            )
        )

    def request_addon(self, viewer: Viewer, event_id: str, service_id: str) -> Event:
        """Record a client's add-on request once per service."""
        event = self.get_event_for(event_id, viewer)
        if any(request.service_id == service_id for request in event.addon_requests):
            return event
        return self.repository.update_event(
            replace(
                event,
                addon_requests=(
                    *event.addon_requests,
                    AddonRequest(service_id=service_id),
                ),
            )
        )

    def _owned_event(self, viewer: Viewer, event_id: str) -> Event:
        event = self.get_event(event_id)
        if not viewer.is_photographer_of(event):
            raise PermissionDeniedError("Only the event photographer can do this")
        return event


def _new_sub_event_id() -> str:
    return f"se-{uuid4().hex[:12]}"
