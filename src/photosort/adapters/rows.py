"""Conversion between domain records and document-store rows.

The same snake_case row shape is stored in Supabase and sent over the HTTP
API, so both the repositories and the API client parse through here.
"""

import logging
from datetime import date, datetime

from photosort.domain.events import (
    AddonRequest,
    Event,
    EventStatus,
    EventTimeline,
    PaymentRecord,
    PaymentStatus,
    SelectionStatus,
    SubEvent,
)
from photosort.domain.photos import Comment, Photo, PhotoQuality, ReviewStatus

_logger = logging.getLogger(__name__)


def photo_from_row(row: dict[str, object]) -> Photo:
    """Build a Photo from a stored row."""
    edited_url = row.get("edited_url") or None
    review_status = ReviewStatus(row.get("review_status") or ReviewStatus.PENDING)
    if edited_url is None and review_status != ReviewStatus.PENDING:
        _logger.warning(
            "Dropping review status %s on unedited photo %s",
            review_status.value,
            row["id"],
        )
        review_status = ReviewStatus.PENDING
    return Photo(
        id=str(row["id"]),
        url=str(row["url"]),
        event_id=str(row["event_id"]),
        edited_url=str(edited_url) if edited_url else None,
        tags=tuple(row.get("tags") or ()),
        people=tuple(row.get("people") or ()),
        is_ai_pick=bool(row.get("is_ai_pick", False)),
        category=str(row.get("category") or ""),
        sub_event_id=_optional_str(row.get("sub_event_id")),
        is_selected=bool(row.get("is_selected", False)),
        review_status=review_status,
        comments=tuple(_comment_from_row(item) for item in row.get("comments") or ()),
        quality=PhotoQuality(row.get("quality") or PhotoQuality.MEDIUM),
        original_filename=_optional_str(row.get("original_filename")),
        original_size=_optional_int(row.get("original_size")),
        optimized_size=_optional_int(row.get("optimized_size")),
    )


def photo_to_row(photo: Photo) -> dict[str, object]:
    """Serialize a Photo into a JSON-compatible row."""
    return {
        "id": photo.id,
        "url": photo.url,
        "event_id": photo.event_id,
        "edited_url": photo.edited_url,
        "tags": list(photo.tags),
        "people": list(photo.people),
        "is_ai_pick": photo.is_ai_pick,
        "category": photo.category,
        "sub_event_id": photo.sub_event_id,
        "is_selected": photo.is_selected,
        "review_status": photo.review_status.value,
        "comments": [_comment_to_row(comment) for comment in photo.comments],
        "quality": photo.quality.value,
        "original_filename": photo.original_filename,
        "original_size": photo.original_size,
        "optimized_size": photo.optimized_size,
    }


def event_from_row(row: dict[str, object]) -> Event:
    """Build an Event from a stored row."""
    timeline = row.get("timeline") or {}
    return Event(
        id=str(row["id"]),
        name=str(row["name"]),
        date=_parse_date(row["date"]),
        photographer_id=str(row["photographer_id"]),
        cover_image=_optional_str(row.get("cover_image")),
        assigned_users=tuple(str(user) for user in row.get("assigned_users") or ()),
        sub_events=tuple(
            SubEvent(
                id=str(item["id"]),
                name=str(item["name"]),
                date=_parse_optional_date(item.get("date")),
                location=_optional_str(item.get("location")),
            )
            for item in row.get("sub_events") or ()
        ),
        selection_status=SelectionStatus(
            row.get("selection_status") or SelectionStatus.OPEN
        ),
        status=EventStatus(row.get("status") or EventStatus.ACTIVE),
        timeline=EventTimeline(
            delivery_estimate=_parse_optional_date(timeline.get("delivery_estimate")),
            selection_deadline=_parse_optional_date(timeline.get("selection_deadline")),
            selection_submitted_at=_parse_optional_datetime(
                timeline.get("selection_submitted_at")
            ),
            editing_started_at=_parse_optional_datetime(
                timeline.get("editing_started_at")
            ),
            review_started_at=_parse_optional_datetime(
                timeline.get("review_started_at")
            ),
            finalized_at=_parse_optional_datetime(timeline.get("finalized_at")),
        ),
        price=_optional_float(row.get("price")),
        paid_amount=_optional_float(row.get("paid_amount")),
        payment_status=PaymentStatus(
            row.get("payment_status") or PaymentStatus.PENDING
        ),
        payment_history=tuple(
            PaymentRecord(
                amount=float(item["amount"]), paid_on=_parse_date(item["paid_on"])
            )
            for item in row.get("payment_history") or ()
        ),
        addon_requests=tuple(
            AddonRequest(
                service_id=str(item["service_id"]),
                status=str(item.get("status") or "pending"),
            )
            for item in row.get("addon_requests") or ()
        ),
        photo_count=int(row.get("photo_count") or 0),
        plan=_optional_str(row.get("plan")),
        client_email=_optional_str(row.get("client_email")),
        client_phone=_optional_str(row.get("client_phone")),
        deadline=_parse_optional_date(row.get("deadline")),
    )


def event_to_row(event: Event) -> dict[str, object]:
    """Serialize an Event into a JSON-compatible row."""
    timeline = event.timeline
    return {
        "id": event.id,
        "name": event.name,
        "date": event.date.isoformat(),
        "photographer_id": event.photographer_id,
        "cover_image": event.cover_image,
        "assigned_users": list(event.assigned_users),
        "sub_events": [
            {
                "id": sub_event.id,
                "name": sub_event.name,
                "date": _iso(sub_event.date),
                "location": sub_event.location,
            }
            for sub_event in event.sub_events
        ],
        "selection_status": event.selection_status.value,
        "status": event.status.value,
        "timeline": {
            "delivery_estimate": _iso(timeline.delivery_estimate),
            "selection_deadline": _iso(timeline.selection_deadline),
            "selection_submitted_at": _iso(timeline.selection_submitted_at),
            "editing_started_at": _iso(timeline.editing_started_at),
            "review_started_at": _iso(timeline.review_started_at),
            "finalized_at": _iso(timeline.finalized_at),
        },
        "price": event.price,
        "paid_amount": event.paid_amount,
        "payment_status": event.payment_status.value,
        "payment_history": [
            {"amount": record.amount, "paid_on": record.paid_on.isoformat()}
            for record in event.payment_history
        ],
        "addon_requests": [
            {"service_id": request.service_id, "status": request.status}
            for request in event.addon_requests
        ],
        "photo_count": event.photo_count,
        "plan": event.plan,
        "client_email": event.client_email,
        "client_phone": event.client_phone,
        "deadline": _iso(event.deadline),
    }


def _comment_from_row(row: dict[str, object]) -> Comment:
    return Comment(
        id=str(row["id"]),
        author=str(row.get("author") or ""),
        text=str(row.get("text") or ""),
        created_at=_parse_datetime(row["created_at"]),
        role=str(row.get("role") or "USER"),
        resolved=bool(row.get("resolved", False)),
    )


def _comment_to_row(comment: Comment) -> dict[str, object]:
    return {
        "id": comment.id,
        "author": comment.author,
        "text": comment.text,
        "created_at": comment.created_at.isoformat(),
        "role": comment.role,
        "resolved": comment.resolved,
    }


def _parse_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # stored values may be full ISO timestamps
    return date.fromisoformat(str(value)[:10])


def _parse_optional_date(value: object) -> date | None:
    return None if value in (None, "") else _parse_date(value)


def _parse_datetime(value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _parse_optional_datetime(value: object) -> datetime | None:
    return None if value in (None, "") else _parse_datetime(value)


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _optional_str(value: object) -> str | None:
    return None if value in (None, "") else str(value)


def _optional_int(value: object) -> int | None:
    return None if value is None else int(value)  # type: ignore[call-overload]


def _optional_float(value: object) -> float | None:
    return None if value is None else float(value)  # type: ignore[arg-type]
