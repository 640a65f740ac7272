"""Tests for the admin service."""

from photosort.domain.events import SelectionStatus
from photosort.services.admin import AdminService
from photosort.services.events import EventService
from photosort.services.workflow import WorkflowService
from tests.conftest import CLIENT, InMemoryEventRepository


def test_platform_summary(
    container, event_service: EventService, event_repository: InMemoryEventRepository
) -> None:
    event_service.record_payment("evt-1", 250)
    event_repository.events["evt-1"] = event_repository.events["evt-1"].with_status(
        SelectionStatus.EDITING
    )
    admin_service: AdminService = container.admin_service

    summary = admin_service.platform_summary()

    assert summary["total_events"] == 2
    assert summary["photographers"] == 2
    assert summary["revenue_collected"] == 250
    assert summary["outstanding_balance"] == 1750
    assert summary["events_by_status"]["editing"] == 1
    assert summary["events_by_status"]["open"] == 1
    assert summary["events_by_status"]["accepted"] == 0


def test_list_events_includes_balance(container) -> None:
    rows = container.admin_service.list_events()

    by_id = {row["id"]: row for row in rows}
    assert by_id["evt-1"]["balance"] == 1000
    assert by_id["evt-1"]["selection_status"] == "open"


def test_event_audit(container, workflow_service: WorkflowService) -> None:
    workflow_service.submit_selections("evt-1", CLIENT)

    audit = container.admin_service.event_audit("evt-1")

    assert audit[0]["event_type"] == "workflow_transition"
    assert audit[0]["actor_id"] == CLIENT.id
