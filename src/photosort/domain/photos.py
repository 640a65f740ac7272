"""Domain models for event photos."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class ReviewStatus(str, Enum):
    """Client review state of an edited deliverable."""

    PENDING = "pending"
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"


class PhotoQuality(str, Enum):
    """Quality bucket assigned at upload."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Comment:
    """A review comment left on a photo."""

    id: str
    author: str
    text: str
    created_at: datetime
    role: str = "USER"
    resolved: bool = False


@dataclass(frozen=True)
class Photo:
    """Represents a photo belonging to an event."""

    id: str
    url: str
    event_id: str
    edited_url: str | None = None
    tags: tuple[str, ...] = ()
    people: tuple[str, ...] = ()
    is_ai_pick: bool = False
    category: str = ""
    sub_event_id: str | None = None
    is_selected: bool = False
    review_status: ReviewStatus = ReviewStatus.PENDING
    comments: tuple[Comment, ...] = field(default_factory=tuple)
    quality: PhotoQuality = PhotoQuality.MEDIUM
    original_filename: str | None = None
    original_size: int | None = None
    optimized_size: int | None = None

    def __post_init__(self) -> None:
        if self.edited_url is None and self.review_status != ReviewStatus.PENDING:
            raise ValueError(
                f"Photo {self.id} has no edited version but review status "
                f"{self.review_status.value}"
            )

    @property
    def is_edited(self) -> bool:
        """Whether an edited deliverable has been attached."""
        return self.edited_url is not None

    def with_selection(self, selected: bool) -> "Photo":
        """Return a copy with the selection flag set."""
        return replace(self, is_selected=selected)

    def with_review_status(self, status: ReviewStatus) -> "Photo":
        """Return a copy with a new review status."""
        return replace(self, review_status=status)

    def with_people(self, people: tuple[str, ...]) -> "Photo":
        """Return a copy with a new people sequence."""
        return replace(self, people=people)
