"""Domain models for photography events."""

from dataclasses import dataclass, field, replace
import datetime
from enum import Enum


class SelectionStatus(str, Enum):
    """Workflow state of an event's selection and delivery process."""

    OPEN = "open"
    SUBMITTED = "submitted"
    EDITING = "editing"
    REVIEW = "review"
    ACCEPTED = "accepted"


class EventStatus(str, Enum):
    """Administrative status of an event."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CLOSED = "closed"


class PaymentStatus(str, Enum):
    """Collection state derived from price and paid amount."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


@dataclass(frozen=True)
class SubEvent:
    """An occasion within an event, used to facet photos."""

    id: str
    name: str
    date: datetime.date | None = None
    location: str | None = None


@dataclass(frozen=True)
class PaymentRecord:
    """A single entry in an event's payment ledger."""

    amount: float
    paid_on: datetime.date


@dataclass(frozen=True)
class AddonRequest:
    """A client request for an extra service."""

    service_id: str
    status: str = "pending"


@dataclass(frozen=True)
class EventTimeline:
    """Milestone timestamps for the workflow."""

    delivery_estimate: datetime.date | None = None
    selection_deadline: datetime.date | None = None
    selection_submitted_at: datetime.datetime | None = None
    editing_started_at: datetime.datetime | None = None
    review_started_at: datetime.datetime | None = None
    finalized_at: datetime.datetime | None = None


@dataclass(frozen=True)
class Event:
    """Represents a photographer's event and its delivery workflow."""

    id: str
    name: str
    date: datetime.date
    photographer_id: str
    cover_image: str | None = None
    assigned_users: tuple[str, ...] = ()
    sub_events: tuple[SubEvent, ...] = ()
    selection_status: SelectionStatus = SelectionStatus.OPEN
    status: EventStatus = EventStatus.ACTIVE
    timeline: EventTimeline = field(default_factory=EventTimeline)
    price: float | None = None
    paid_amount: float | None = None
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_history: tuple[PaymentRecord, ...] = ()
    addon_requests: tuple[AddonRequest, ...] = ()
    photo_count: int = 0
    plan: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    deadline: datetime.date | None = None

    @property
    def balance(self) -> float:
        """Outstanding amount; negative when over-collected."""
        return (self.price or 0) - (self.paid_amount or 0)

    def sub_event_name(self, sub_event_id: str | None) -> str | None:
        """Resolve a sub-event id to its name."""
        if sub_event_id is None:
            return None
        for sub_event in self.sub_events:
            if sub_event.id == sub_event_id:
                return sub_event.name
        return None

    def with_status(
        self, status: SelectionStatus, timeline: EventTimeline | None = None
    ) -> "Event":
        """Return a copy in a new workflow state."""
        return replace(
            self,
            selection_status=status,
            timeline=timeline if timeline is not None else self.timeline,
        )


def derive_payment_status(price: float | None, paid_amount: float) -> PaymentStatus:
    """Derive the collection state for a price and paid amount."""
    if paid_amount <= 0:
        return PaymentStatus.PENDING
    if price is not None and paid_amount >= price:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL
