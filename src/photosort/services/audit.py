"""Audit logging service."""

from dataclasses import dataclass
from typing import Protocol


class AuditRepository(Protocol):
    """Persistence interface for audit events."""

    def create_event(  # noqa: PLR0913
        self,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        """Create an audit event row."""

    def list_events(self, entity_id: str, limit: int) -> list[dict[str, object]]:
        """Return recent audit events for an entity."""


@dataclass
class AuditService:
    """Service for recording audit events."""

    repository: AuditRepository

    def record_event(  # noqa: PLR0913
        self,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        """Persist an audit event."""
        self.repository.create_event(
            actor_id=actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
            event_type=event_type,
            before=before,
            after=after,
        )

    def list_events(self, entity_id: str, limit: int = 20) -> list[dict[str, object]]:
        """Return the audit trail for an entity."""
        return self.repository.list_events(entity_id, limit)
