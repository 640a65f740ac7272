"""Selection workflow state machine.

An event moves through ``open -> submitted -> editing -> review -> accepted``.
Clients may only take the two edges that belong to them (submitting their
selection and accepting the delivery). Every other forward edge belongs to
the photographer, as does the single back-edge: re-opening the selection
from any state, which must be explicitly confirmed.
"""

from dataclasses import replace
from datetime import datetime

from photosort.domain.events import Event, EventTimeline, SelectionStatus
from photosort.errors import InvalidTransitionError

WORKFLOW_ORDER: tuple[SelectionStatus, ...] = (
    SelectionStatus.OPEN,
    SelectionStatus.SUBMITTED,
    SelectionStatus.EDITING,
    SelectionStatus.REVIEW,
    SelectionStatus.ACCEPTED,
)

_NEXT_STATE = {
    current: WORKFLOW_ORDER[index + 1]
    for index, current in enumerate(WORKFLOW_ORDER[:-1])
}

_CLIENT_EDGES = {
    (SelectionStatus.OPEN, SelectionStatus.SUBMITTED),
    (SelectionStatus.REVIEW, SelectionStatus.ACCEPTED),
}


def is_locked(event: Event, viewer_is_photographer: bool) -> bool:
    """Return whether client selection mutations are frozen for this viewer."""
    return event.selection_status != SelectionStatus.OPEN and not viewer_is_photographer


def next_status(current: SelectionStatus) -> SelectionStatus | None:
    """Return the forward successor of a state, if any."""
    return _NEXT_STATE.get(current)


def is_reopen(current: SelectionStatus, target: SelectionStatus) -> bool:
    """Whether a transition is the re-open back-edge."""
    return target == SelectionStatus.OPEN and current != SelectionStatus.OPEN


def check_transition(
    current: SelectionStatus,
    target: SelectionStatus,
    *,
    is_photographer: bool,
    confirm_reopen: bool = False,
) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is legal."""
    if current == target:
        raise InvalidTransitionError(f"Event is already {current.value}")

    if target == SelectionStatus.OPEN:
        if not is_photographer:
            raise InvalidTransitionError("Only the photographer can re-open selections")
        if not confirm_reopen:
            raise InvalidTransitionError("Re-opening selections must be confirmed")
        return

    if _NEXT_STATE.get(current) != target:
        raise InvalidTransitionError(
            f"Cannot move from {current.value} to {target.value}"
        )
    if not is_photographer and (current, target) not in _CLIENT_EDGES:
        raise InvalidTransitionError(
            f"Only the photographer can move from {current.value} to {target.value}"
        )


def can_transition(
    current: SelectionStatus,
    target: SelectionStatus,
    *,
    is_photographer: bool,
    confirm_reopen: bool = False,
) -> bool:
    """Boolean form of check_transition."""
    try:
        check_transition(
            current,
            target,
            is_photographer=is_photographer,
            confirm_reopen=confirm_reopen,
        )
    except InvalidTransitionError:
        return False
    return True


def stamp_timeline(
    timeline: EventTimeline, target: SelectionStatus, at: datetime
) -> EventTimeline:
    """Record the time a state was entered."""
    match target:
        case SelectionStatus.SUBMITTED:
            return replace(timeline, selection_submitted_at=at)
        case SelectionStatus.EDITING:
            return replace(timeline, editing_started_at=at)
        case SelectionStatus.REVIEW:
            return replace(timeline, review_started_at=at)
        case SelectionStatus.ACCEPTED:
            return replace(timeline, finalized_at=at)
        case SelectionStatus.OPEN:
            return timeline
