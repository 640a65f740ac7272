"""HTTP client for the PhotoSort delivery API."""

from dataclasses import dataclass
from datetime import date
from typing import Protocol

import httpx

from photosort.adapters.rows import event_from_row, photo_from_row
from photosort.domain.events import Event, SelectionStatus
from photosort.domain.photos import Photo
from photosort.domain.viewers import Viewer


class DeliveryApi(Protocol):
    """Interface for the remote operations a gallery client performs."""

    async def fetch_events(self, viewer: Viewer) -> list[Event]:
        """Return the events visible to the viewer."""

    async def fetch_photos(self, viewer: Viewer, event_id: str) -> list[Photo]:
        """Return an event's photos."""

    async def toggle_selection(self, viewer: Viewer, photo_id: str) -> Photo:
        """Flip a photo's selection and return the stored photo."""

    async def submit_selections(self, viewer: Viewer, event_id: str) -> Event:
        """Submit the viewer's selection and return the stored event."""

    async def update_workflow(  # noqa: PLR0913
        self,
        viewer: Viewer,
        event_id: str,
        status: SelectionStatus,
        delivery_estimate: date | None = None,
        note: str | None = None,
        confirm_reopen: bool = False,
    ) -> Event:
        """Move the event to a new workflow state."""

    async def approve_all_edits(self, viewer: Viewer, event_id: str) -> Event:
        """Approve all edited photos and accept the delivery."""

    async def rename_person(
        self, viewer: Viewer, event_id: str, old_name: str, new_name: str
    ) -> int:
        """Rename a person across the event; return photos changed."""

    async def record_payment(
        self, viewer: Viewer, event_id: str, amount: float, paid_on: date | None = None
    ) -> Event:
        """Record a payment and return the stored event."""


@dataclass
class HttpxDeliveryApiClient(DeliveryApi):
    """HTTPX-backed delivery API client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, base_url: str, timeout_seconds: float = 15
    ) -> "HttpxDeliveryApiClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def fetch_events(self, viewer: Viewer) -> list[Event]:
        """Fetch the viewer's events."""
        data = await self._request("GET", "/events", viewer)
        return [event_from_row(row) for row in data["events"]]

    async def fetch_photos(self, viewer: Viewer, event_id: str) -> list[Photo]:
        """Fetch an event's photos."""
        data = await self._request("GET", f"/events/{event_id}/photos", viewer)
        return [photo_from_row(row) for row in data["photos"]]

    async def toggle_selection(self, viewer: Viewer, photo_id: str) -> Photo:
        """Toggle a photo's selection."""
        data = await self._request("POST", f"/photos/{photo_id}/selection", viewer)
        return photo_from_row(data["photo"])

    async def submit_selections(self, viewer: Viewer, event_id: str) -> Event:
        """Submit the selection for an event."""
        data = await self._request(
            "POST", f"/events/{event_id}/submit-selections", viewer
        )
        return event_from_row(data["event"])

    async def update_workflow(  # noqa: PLR0913
        self,
        viewer: Viewer,
        event_id: str,
        status: SelectionStatus,
        delivery_estimate: date | None = None,
        note: str | None = None,
        confirm_reopen: bool = False,
    ) -> Event:
        """Request a workflow transition."""
        data = await self._request(
            "PATCH",
            f"/events/{event_id}/workflow",
            viewer,
            json={
                "status": status.value,
                "delivery_estimate": (
                    delivery_estimate.isoformat() if delivery_estimate else None
                ),
                "note": note,
                "confirm_reopen": confirm_reopen,
            },
        )
        return event_from_row(data["event"])

    async def approve_all_edits(self, viewer: Viewer, event_id: str) -> Event:
        """Approve every edited photo of an event."""
        data = await self._request("POST", f"/events/{event_id}/approve-all", viewer)
        return event_from_row(data["event"])

    async def rename_person(
        self, viewer: Viewer, event_id: str, old_name: str, new_name: str
    ) -> int:
        """Rename a person across an event."""
        data = await self._request(
            "POST",
            f"/events/{event_id}/people/rename",
            viewer,
            json={"old_name": old_name, "new_name": new_name},
        )
        return int(data["updated"])

    async def record_payment(
        self, viewer: Viewer, event_id: str, amount: float, paid_on: date | None = None
    ) -> Event:
        """Record a payment against an event."""
        data = await self._request(
            "POST",
            f"/events/{event_id}/payment",
            viewer,
            json={
                "amount": amount,
                "date": paid_on.isoformat() if paid_on else None,
            },
        )
        return event_from_row(data["event"])

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        viewer: Viewer,
        json: dict[str, object] | None = None,
    ) -> dict:
        response = await self.http_client.request(
            method,
            f"{self.base_url}{path}",
            headers={"X-Viewer-Id": viewer.id, "X-Viewer-Role": viewer.role.value},
            json=json,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()
