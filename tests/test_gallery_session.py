"""Tests for the client-side gallery session."""

import asyncio

from photosort.client.session import GallerySession, MutationOutcome
from photosort.domain.events import SelectionStatus
from photosort.domain.gallery import AllTab, EditedTab
from photosort.domain.photos import ReviewStatus
from photosort.domain.viewers import Viewer
from tests.conftest import (
    ADMIN,
    CLIENT,
    PHOTOGRAPHER,
    FakeDeliveryApi,
    InMemoryEventRepository,
    InMemoryPhotoRepository,
    make_photo,
    set_status,
)


def _open_session(api: FakeDeliveryApi, viewer: Viewer = CLIENT) -> GallerySession:
    session = GallerySession(api=api, viewer=viewer)
    asyncio.run(session.load_events())
    asyncio.run(session.set_active_event(session.my_events[-1]))
    return session


def _photo(session: GallerySession, photo_id: str):  # type: ignore[no-untyped-def]
    return next(photo for photo in session.photos if photo.id == photo_id)


def test_load_events_and_activate(delivery_api: FakeDeliveryApi) -> None:
    session = _open_session(delivery_api)

    assert [event.id for event in session.my_events] == ["evt-1"]
    assert [photo.id for photo in session.photos] == ["p1", "p2", "p3"]
    assert session.selected_ids == frozenset()
    assert not session.is_locked


def test_switching_events_discards_previous_selection(
    delivery_api: FakeDeliveryApi, photo_repository: InMemoryPhotoRepository
) -> None:
    photo_repository.add(make_photo("p4", event_id="evt-2", is_selected=True))
    session = _open_session(delivery_api, viewer=ADMIN)
    assert session.active_event is not None
    assert session.active_event.id == "evt-1"

    assert asyncio.run(session.toggle_photo_selection("p1")) == MutationOutcome.APPLIED
    assert session.selected_ids == frozenset({"p1"})

    asyncio.run(session.set_active_event(session.my_events[0]))

    assert [photo.id for photo in session.photos] == ["p4"]
    assert session.selected_ids == frozenset({"p4"})


def test_failed_photo_load_leaves_empty_gallery(
    delivery_api: FakeDeliveryApi,
) -> None:
    session = GallerySession(api=delivery_api, viewer=CLIENT)
    asyncio.run(session.load_events())
    delivery_api.failures.add("fetch_photos")

    asyncio.run(session.set_active_event(session.my_events[0]))

    assert session.photos == []
    assert session.view(AllTab()).photos == ()


def test_select_submit_then_locked(
    delivery_api: FakeDeliveryApi, photo_repository: InMemoryPhotoRepository
) -> None:
    session = _open_session(delivery_api)

    outcome = asyncio.run(session.set_photo_selection("p1", True))
    assert outcome == MutationOutcome.APPLIED
    calls = len(delivery_api.calls)
    assert asyncio.run(session.set_photo_selection("p1", True)) == MutationOutcome.NOOP
    assert len(delivery_api.calls) == calls
    assert _photo(session, "p1").is_selected

    assert asyncio.run(session.submit_selections()) == MutationOutcome.APPLIED
    assert session.active_event is not None
    assert session.active_event.selection_status == SelectionStatus.SUBMITTED
    assert session.is_locked

    assert asyncio.run(session.toggle_photo_selection("p1")) == MutationOutcome.REJECTED
    assert _photo(session, "p1").is_selected
    assert photo_repository.photos["p1"].is_selected

    assert asyncio.run(session.submit_selections()) == MutationOutcome.NOOP


def test_toggle_rolls_back_on_failure(delivery_api: FakeDeliveryApi) -> None:
    session = _open_session(delivery_api)
    delivery_api.failures.add("toggle_selection")

    outcome = asyncio.run(session.toggle_photo_selection("p2"))

    assert outcome == MutationOutcome.FAILED
    assert not _photo(session, "p2").is_selected
    assert session.selected_ids == frozenset()


def test_concurrent_mutation_on_same_photo_is_busy(
    delivery_api: FakeDeliveryApi,
) -> None:
    session = _open_session(delivery_api)

    async def scenario() -> tuple[MutationOutcome, MutationOutcome]:
        delivery_api.gate = asyncio.Event()
        first = asyncio.create_task(session.toggle_photo_selection("p1"))
        await asyncio.sleep(0)
        second = await session.toggle_photo_selection("p1")
        delivery_api.gate.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert first == MutationOutcome.APPLIED
    assert second == MutationOutcome.BUSY
    assert delivery_api.calls.count("toggle_selection") == 1
    assert _photo(session, "p1").is_selected


def test_invalid_workflow_change_is_rejected_locally(
    delivery_api: FakeDeliveryApi,
) -> None:
    session = _open_session(delivery_api)

    outcome = asyncio.run(session.update_event_workflow(SelectionStatus.EDITING))

    assert outcome == MutationOutcome.REJECTED
    assert "update_workflow" not in delivery_api.calls


def test_photographer_reopen_needs_confirmation(
    delivery_api: FakeDeliveryApi, event_repository: InMemoryEventRepository
) -> None:
    set_status(event_repository, SelectionStatus.EDITING)
    session = _open_session(delivery_api, viewer=PHOTOGRAPHER)

    rejected = asyncio.run(session.update_event_workflow(SelectionStatus.OPEN))
    applied = asyncio.run(
        session.update_event_workflow(SelectionStatus.OPEN, confirm_reopen=True)
    )

    assert rejected == MutationOutcome.REJECTED
    assert applied == MutationOutcome.APPLIED
    assert event_repository.events["evt-1"].selection_status == SelectionStatus.OPEN


def test_workflow_failure_restores_event(
    delivery_api: FakeDeliveryApi, event_repository: InMemoryEventRepository
) -> None:
    set_status(event_repository, SelectionStatus.SUBMITTED)
    session = _open_session(delivery_api, viewer=PHOTOGRAPHER)
    delivery_api.failures.add("update_workflow")

    outcome = asyncio.run(session.update_event_workflow(SelectionStatus.EDITING))

    assert outcome == MutationOutcome.FAILED
    assert session.active_event is not None
    assert session.active_event.selection_status == SelectionStatus.SUBMITTED
    assert session.my_events[0].selection_status == SelectionStatus.SUBMITTED


def test_approve_all_edits_reconciles_with_server(
    delivery_api: FakeDeliveryApi,
    event_repository: InMemoryEventRepository,
    photo_repository: InMemoryPhotoRepository,
) -> None:
    photo_repository.add(make_photo("e1", edited_url="https://cdn.example.com/e1.jpg"))
    set_status(event_repository, SelectionStatus.REVIEW)
    session = _open_session(delivery_api)

    outcome = asyncio.run(session.approve_all_edits())

    assert outcome == MutationOutcome.APPLIED
    assert session.active_event is not None
    assert session.active_event.selection_status == SelectionStatus.ACCEPTED
    assert _photo(session, "e1").review_status == ReviewStatus.APPROVED
    assert delivery_api.calls[-1] == "fetch_photos"


def test_approve_all_partial_failure_resyncs_with_server(
    delivery_api: FakeDeliveryApi,
    event_repository: InMemoryEventRepository,
    photo_repository: InMemoryPhotoRepository,
) -> None:
    photo_repository.add(
        make_photo("e1", edited_url="https://cdn.example.com/e1.jpg"),
        make_photo("e2", edited_url="https://cdn.example.com/e2.jpg"),
    )
    photo_repository.fail_review_ids = {"e2"}
    set_status(event_repository, SelectionStatus.REVIEW)
    session = _open_session(delivery_api)

    outcome = asyncio.run(session.approve_all_edits())

    assert outcome == MutationOutcome.FAILED
    assert session.active_event is not None
    assert session.active_event.selection_status == SelectionStatus.REVIEW
    assert _photo(session, "e1").review_status == ReviewStatus.APPROVED
    assert _photo(session, "e2").review_status == ReviewStatus.PENDING
    assert delivery_api.calls[-1] == "fetch_photos"
    assert event_repository.events["evt-1"].selection_status == SelectionStatus.REVIEW


def test_rename_person_applies_and_rolls_back(
    delivery_api: FakeDeliveryApi, photo_repository: InMemoryPhotoRepository
) -> None:
    session = _open_session(delivery_api)

    outcome = asyncio.run(session.rename_person("Ravi", "Ravi K"))
    assert outcome == MutationOutcome.APPLIED
    assert _photo(session, "p2").people == ("Ravi K",)
    assert photo_repository.photos["p2"].people == ("Ravi K",)

    delivery_api.failures.add("rename_person")
    outcome = asyncio.run(session.rename_person("Asha", "Asha M"))
    assert outcome == MutationOutcome.FAILED
    assert _photo(session, "p1").people == ("Asha", "Ravi K")
    assert asyncio.run(session.rename_person("Nobody", "X")) == MutationOutcome.NOOP
    assert asyncio.run(session.rename_person("Asha", " ")) == MutationOutcome.REJECTED


def test_photo_held_by_rename_rejects_toggle(
    delivery_api: FakeDeliveryApi, photo_repository: InMemoryPhotoRepository
) -> None:
    session = _open_session(delivery_api)

    async def scenario() -> tuple[MutationOutcome, MutationOutcome]:
        delivery_api.gate = asyncio.Event()
        rename = asyncio.create_task(session.rename_person("Asha", "Asha K"))
        await asyncio.sleep(0)
        toggle = await session.toggle_photo_selection("p1")
        delivery_api.failures.add("rename_person")
        delivery_api.gate.set()
        return await rename, toggle

    rename, toggle = asyncio.run(scenario())

    assert rename == MutationOutcome.FAILED
    assert toggle == MutationOutcome.BUSY
    assert "toggle_selection" not in delivery_api.calls
    assert _photo(session, "p1").people == ("Asha", "Ravi")
    assert not _photo(session, "p1").is_selected
    assert not photo_repository.photos["p1"].is_selected


def test_rename_rollback_keeps_confirmed_toggle_elsewhere(
    delivery_api: FakeDeliveryApi, photo_repository: InMemoryPhotoRepository
) -> None:
    session = _open_session(delivery_api)

    async def scenario() -> tuple[MutationOutcome, MutationOutcome]:
        gate = asyncio.Event()
        delivery_api.gate = gate
        rename = asyncio.create_task(session.rename_person("Asha", "Asha K"))
        await asyncio.sleep(0)
        delivery_api.gate = None
        toggle = await session.toggle_photo_selection("p2")
        delivery_api.failures.add("rename_person")
        gate.set()
        return await rename, toggle

    rename, toggle = asyncio.run(scenario())

    assert toggle == MutationOutcome.APPLIED
    assert rename == MutationOutcome.FAILED
    assert _photo(session, "p1").people == ("Asha", "Ravi")
    assert _photo(session, "p2").is_selected
    assert photo_repository.photos["p2"].is_selected


def test_approve_all_waits_for_pending_photo_toggle(
    delivery_api: FakeDeliveryApi,
    event_repository: InMemoryEventRepository,
    photo_repository: InMemoryPhotoRepository,
) -> None:
    photo_repository.add(make_photo("e1", edited_url="https://cdn.example.com/e1.jpg"))
    set_status(event_repository, SelectionStatus.REVIEW)
    session = _open_session(delivery_api, viewer=PHOTOGRAPHER)

    async def scenario() -> MutationOutcome:
        delivery_api.gate = asyncio.Event()
        toggle = asyncio.create_task(session.toggle_photo_selection("e1"))
        await asyncio.sleep(0)
        approve = await session.approve_all_edits()
        delivery_api.gate.set()
        await toggle
        return approve

    assert asyncio.run(scenario()) == MutationOutcome.BUSY
    assert "approve_all_edits" not in delivery_api.calls
    assert session.active_event is not None
    assert session.active_event.selection_status == SelectionStatus.REVIEW


def test_record_payment(delivery_api: FakeDeliveryApi) -> None:
    session = _open_session(delivery_api, viewer=PHOTOGRAPHER)

    assert asyncio.run(session.record_payment(0)) == MutationOutcome.REJECTED
    assert asyncio.run(session.record_payment(300)) == MutationOutcome.APPLIED
    assert session.active_event is not None
    assert session.active_event.balance == 700
    assert len(session.active_event.payment_history) == 1

    delivery_api.failures.add("record_payment")
    assert asyncio.run(session.record_payment(100)) == MutationOutcome.FAILED
    assert session.active_event.paid_amount == 300


def test_view_and_download_url(
    delivery_api: FakeDeliveryApi, photo_repository: InMemoryPhotoRepository
) -> None:
    empty = GallerySession(api=delivery_api, viewer=CLIENT)
    assert empty.view(AllTab()).photos == ()
    assert empty.view(AllTab()).is_locked

    edited_url = "https://cdn.example.com/e1-edit.jpg"
    photo_repository.add(make_photo("e1", edited_url=edited_url))
    session = _open_session(delivery_api)

    assert [photo.id for photo in session.view(EditedTab()).photos] == ["e1"]
    assert session.download_url("e1", EditedTab()) == edited_url
    assert session.download_url("e1", AllTab()) == "https://cdn.example.com/e1.jpg"
    assert session.download_url("missing", AllTab()) is None
