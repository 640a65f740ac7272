"""Pydantic request models for the delivery API."""

import datetime
from enum import Enum

from pydantic import BaseModel, Field

from photosort.domain.events import SelectionStatus
from photosort.domain.photos import PhotoQuality, ReviewStatus


class MainTab(str, Enum):
    """Top-level gallery tab requested by the client."""

    ALL = "all"
    SELECTED = "selected"
    EDITED = "edited"


class SubEventPayload(BaseModel):
    """Sub-event supplied when creating an event."""

    id: str | None = None
    name: str = Field(min_length=1)
    date: datetime.date | None = None
    location: str | None = None


class CreateEventRequest(BaseModel):
    """Request body for creating an event."""

    name: str = Field(min_length=1)
    date: datetime.date
    cover_image: str | None = None
    assigned_users: list[str] = Field(default_factory=list)
    sub_events: list[SubEventPayload] = Field(default_factory=list)
    price: float | None = Field(default=None, ge=0)
    plan: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    deadline: datetime.date | None = None


class PhotoPayload(BaseModel):
    """Metadata for a photo that has already been stored."""

    url: str
    tags: list[str] = Field(default_factory=list)
    people: list[str] = Field(default_factory=list)
    is_ai_pick: bool = False
    category: str = ""
    sub_event_id: str | None = None
    quality: PhotoQuality = PhotoQuality.MEDIUM
    original_filename: str | None = None
    original_size: int | None = None
    optimized_size: int | None = None


class AddPhotosRequest(BaseModel):
    """Request body for adding photos to an event."""

    photos: list[PhotoPayload] = Field(min_length=1)


class WorkflowUpdateRequest(BaseModel):
    """Request body for a workflow transition."""

    status: SelectionStatus
    delivery_estimate: datetime.date | None = None
    note: str | None = None
    confirm_reopen: bool = False


class RenamePersonRequest(BaseModel):
    """Request body for renaming a person label."""

    old_name: str
    new_name: str


class PaymentRequest(BaseModel):
    """Request body for recording a payment."""

    amount: float
    date: datetime.date | None = None


class AddSubEventRequest(BaseModel):
    """Request body for adding a sub-event."""

    name: str = Field(min_length=1)
    date: datetime.date | None = None
    location: str | None = None


class AssignUserRequest(BaseModel):
    """Request body for assigning a client to an event."""

    user_id: str = Field(min_length=1)


class AddonRequestBody(BaseModel):
    """Request body for an add-on service request."""

    service_id: str = Field(min_length=1)


class MatchEditsRequest(BaseModel):
    """Uploaded edited files keyed by their file name."""

    uploads: dict[str, str]


class AttachEditedRequest(BaseModel):
    """Request body for attaching an edited version."""

    edited_url: str = Field(min_length=1)


class CommentRequest(BaseModel):
    """Request body for a review comment."""

    author: str
    text: str


class ReviewStatusRequest(BaseModel):
    """Request body for a review verdict."""

    status: ReviewStatus
