"""Supabase repository for audit events."""

from dataclasses import dataclass

from supabase import Client

from photosort.services.audit import AuditRepository


@dataclass
class SupabaseAuditRepository(AuditRepository):
    """Supabase-backed audit repository."""

    client: Client

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
        self.client.table("audit_events").insert(
            {
                "actor_id": actor_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "event_type": event_type,
                "before_json": before,
                "after_json": after,
            }
        ).execute()

    def list_events(self, entity_id: str, limit: int) -> list[dict[str, object]]:
        """Return recent audit events for an entity."""
        response = (
            self.client.table("audit_events")
            .select("actor_id, event_type, before_json, after_json, created_at")
            .eq("entity_id", entity_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return list(response.data or [])
