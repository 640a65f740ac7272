"""Admin service for platform oversight."""

from collections import Counter
from dataclasses import dataclass

from photosort.domain.events import Event, SelectionStatus
from photosort.services.audit import AuditService
from photosort.services.events import EventRepository


@dataclass
class AdminService:
    """Service for admin dashboards."""

    event_repository: EventRepository
    audit_service: AuditService

    def platform_summary(self) -> dict[str, object]:
        """Return totals across every event on the platform."""
        events = self.event_repository.list_events()
        by_status = Counter(event.selection_status.value for event in events)
        return {
            "total_events": len(events),
            "total_photos": sum(event.photo_count for event in events),
            "photographers": len({event.photographer_id for event in events}),
            "revenue_collected": sum(event.paid_amount or 0 for event in events),
            "outstanding_balance": sum(event.balance for event in events),
            "events_by_status": {
                status.value: by_status.get(status.value, 0)
                for status in SelectionStatus
            },
        }

    def list_events(self) -> list[dict[str, object]]:
        """Return a compact row per event."""
        events = self.event_repository.list_events()
        return [_serialize_event(event) for event in events]

    def event_audit(self, event_id: str, limit: int = 20) -> list[dict[str, object]]:
        """Return the audit trail of an event."""
        return self.audit_service.list_events(event_id, limit)


def _serialize_event(event: Event) -> dict[str, object]:
    return {
        "id": event.id,
        "name": event.name,
        "date": event.date.isoformat(),
        "photographer_id": event.photographer_id,
        "selection_status": event.selection_status.value,
        "photo_count": event.photo_count,
        "price": event.price,
        "paid_amount": event.paid_amount,
        "balance": event.balance,
        "payment_status": event.payment_status.value,
    }
