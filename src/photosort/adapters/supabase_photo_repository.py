"""Supabase-backed photo repository."""

from dataclasses import dataclass

from supabase import Client

from photosort.adapters.rows import photo_from_row, photo_to_row
from photosort.domain.photos import Photo, ReviewStatus
from photosort.services.photos import PhotoRepository


@dataclass
class SupabasePhotoRepository(PhotoRepository):
    """Supabase implementation for photo documents."""

    client: Client

    def list_photos(self, event_id: str) -> list[Photo]:
        """Return an event's photos in upload order."""
        response = (
            self.client.table("photos")
            .select("*")
            .eq("event_id", event_id)
            .order("created_at")
            .execute()
        )
        return [photo_from_row(row) for row in response.data or []]

    def get_photo(self, photo_id: str) -> Photo | None:
        """Return a photo by id, if present."""
        response = (
            self.client.table("photos")
            .select("*")
            .eq("id", photo_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return photo_from_row(response.data[0])

    def create_photos(
        self, event_id: str, payloads: list[dict[str, object]]
    ) -> list[Photo]:
        """Insert photo rows for an event."""
        if not payloads:
            return []
        response = (
            self.client.table("photos")
            .insert([{**payload, "event_id": event_id} for payload in payloads])
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create photos")
        return [photo_from_row(row) for row in response.data]

    def count_photos(self, event_id: str) -> int:
        """Return the number of photos stored for an event."""
        response = (
            self.client.table("photos")
            .select("id", count="exact")
            .eq("event_id", event_id)
            .execute()
        )
        if response.count is not None:
            return response.count
        return len(response.data or [])

    def update_photo(self, photo: Photo) -> Photo:
        """Write the photo document and return the stored row."""
        row = photo_to_row(photo)
        row.pop("id")
        row.pop("event_id")
        response = self.client.table("photos").update(row).eq("id", photo.id).execute()
        if not response.data:
            raise RuntimeError(f"Failed to update photo {photo.id}")
        return photo_from_row(response.data[0])

    def set_review_status(self, photo_ids: list[str], status: ReviewStatus) -> int:
        """Set the review status on many photos and count the rows touched."""
        response = (
            self.client.table("photos")
            .update({"review_status": status.value})
            .in_("id", photo_ids)
            .execute()
        )
        return len(response.data or [])
