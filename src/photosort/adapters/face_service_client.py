"""Client for the external face-grouping service."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class FaceGroupingClient(Protocol):
    """Interface for notifying the face-grouping service."""

    async def process_event(self, event_id: str) -> None:
        """Ask the service to (re)group faces for an event's photos."""


@dataclass
class HttpxFaceGroupingClient(FaceGroupingClient):
    """HTTPX-backed face-grouping client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, base_url: str, timeout_seconds: float = 15
    ) -> "HttpxFaceGroupingClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def process_event(self, event_id: str) -> None:
        """Trigger processing of an event's photos."""
        response = await self.http_client.post(
            f"{self.base_url}/process-event/{event_id}",
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
