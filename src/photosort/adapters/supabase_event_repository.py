"""Supabase-backed event repository."""

from dataclasses import dataclass

from supabase import Client

from photosort.adapters.rows import event_from_row, event_to_row
from photosort.domain.events import Event
from photosort.services.events import EventRepository


@dataclass
class SupabaseEventRepository(EventRepository):
    """Supabase implementation for event documents."""

    client: Client

    def list_events(self) -> list[Event]:
        """Return every event, newest first."""
        response = (
            self.client.table("events").select("*").order("date", desc=True).execute()
        )
        return [event_from_row(row) for row in response.data or []]

    def list_events_for_photographer(self, photographer_id: str) -> list[Event]:
        """Return events owned by a photographer."""
        response = (
            self.client.table("events")
            .select("*")
            .eq("photographer_id", photographer_id)
            .order("date", desc=True)
            .execute()
        )
        return [event_from_row(row) for row in response.data or []]

    def list_events_for_user(self, user_id: str) -> list[Event]:
        """Return events whose assigned users include the client."""
        response = (
            self.client.table("events")
            .select("*")
            .contains("assigned_users", [user_id])
            .order("date", desc=True)
            .execute()
        )
        return [event_from_row(row) for row in response.data or []]

    def get_event(self, event_id: str) -> Event | None:
        """Return an event by id, if present."""
        response = (
            self.client.table("events")
            .select("*")
            .eq("id", event_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return event_from_row(response.data[0])

    def create_event(self, photographer_id: str, payload: dict[str, object]) -> Event:
        """Create an event row and return it."""
        response = (
            self.client.table("events")
            .insert({**payload, "photographer_id": photographer_id})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create event")
        return event_from_row(response.data[0])

    def update_event(self, event: Event) -> Event:
        """Write the event document and return the stored row."""
        row = event_to_row(event)
        row.pop("id")
        response = self.client.table("events").update(row).eq("id", event.id).execute()
        if not response.data:
            raise RuntimeError(f"Failed to update event {event.id}")
        return event_from_row(response.data[0])
