"""Domain models for the people viewing the platform."""

from dataclasses import dataclass
from enum import Enum

from photosort.domain.events import Event


class UserRole(str, Enum):
    """Platform role of a viewer."""

    ADMIN = "ADMIN"
    PHOTOGRAPHER = "PHOTOGRAPHER"
    USER = "USER"


@dataclass(frozen=True)
class Viewer:
    """Identity of whoever is acting on an event."""

    id: str
    role: UserRole = UserRole.USER

    def is_photographer_of(self, event: Event) -> bool:
        """Whether this viewer owns the event as its photographer."""
        return self.role == UserRole.PHOTOGRAPHER and self.id == event.photographer_id

    def can_view(self, event: Event) -> bool:
        """Whether this viewer may see the event at all."""
        if self.role == UserRole.ADMIN:
            return True
        if self.is_photographer_of(event):
            return True
        return self.id in event.assigned_users
