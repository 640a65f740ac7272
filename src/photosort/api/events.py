"""Event, workflow and gallery endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from photosort.adapters.rows import photo_to_row
from photosort.api.deps import get_container, get_viewer, serialize_event
from photosort.api.models import (
    AddonRequestBody,
    AddPhotosRequest,
    AddSubEventRequest,
    AssignUserRequest,
    CreateEventRequest,
    MainTab,
    MatchEditsRequest,
    PaymentRequest,
    RenamePersonRequest,
    WorkflowUpdateRequest,
)
from photosort.containers import AppContainer
from photosort.domain.gallery import (
    AllTab,
    EditedTab,
    GalleryTab,
    SelectedFilters,
    SelectedTab,
    SubTab,
    build_gallery_view,
)
from photosort.domain.viewers import Viewer
from photosort.errors import PermissionDeniedError

router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
async def list_events(
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return the events visible to the viewer."""
    events = container.event_service.list_events(viewer)
    return {"events": [serialize_event(event) for event in events]}


@router.post("", status_code=201)
async def create_event(
    body: CreateEventRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Create an event owned by the calling photographer."""
    event = container.event_service.create_event(viewer, body.model_dump(mode="json"))
    return {"event": serialize_event(event)}


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return one event."""
    event = container.event_service.get_event_for(event_id, viewer)
    return {"event": serialize_event(event)}


@router.get("/{event_id}/photos")
async def list_photos(
    event_id: str,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return the photos of an event."""
    container.event_service.get_event_for(event_id, viewer)
    photos = container.photo_service.list_photos(event_id)
    return {"photos": [photo_to_row(photo) for photo in photos]}


@router.post("/{event_id}/photos", status_code=201)
async def add_photos(
    event_id: str,
    body: AddPhotosRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Register uploaded photos with an event."""
    _require_photographer(container, event_id, viewer)
    created = await container.photo_service.add_photos(
        event_id, [photo.model_dump(mode="json") for photo in body.photos]
    )
    return {"photos": [photo_to_row(photo) for photo in created]}


@router.get("/{event_id}/gallery")
async def gallery(  # noqa: PLR0913
    event_id: str,
    main_tab: MainTab = MainTab.ALL,
    sub_tab: SubTab = SubTab.GRID,
    people: list[str] = Query(default=[]),
    events: list[str] = Query(default=[]),
    tags: list[str] = Query(default=[]),
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return the visible photos, facets and selection for a tab."""
    event = container.event_service.get_event_for(event_id, viewer)
    photos = container.photo_service.list_photos(event_id)
    tab = _parse_tab(main_tab, sub_tab, people, events, tags)
    view = build_gallery_view(photos, event, tab, viewer.is_photographer_of(event))
    return {
        "photos": [photo_to_row(photo) for photo in view.photos],
        "facets": asdict(view.facets),
        "selected_ids": sorted(view.selected_ids),
        "is_locked": view.is_locked,
    }


@router.post("/{event_id}/submit-selections")
async def submit_selections(
    event_id: str,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Lock the client's selection for editing."""
    event = container.workflow_service.submit_selections(event_id, viewer)
    return {"event": serialize_event(event)}


@router.patch("/{event_id}/workflow")
async def update_workflow(
    event_id: str,
    body: WorkflowUpdateRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Move the event through the selection and delivery workflow."""
    event = container.workflow_service.update_workflow(
        event_id,
        body.status,
        viewer,
        delivery_estimate=body.delivery_estimate,
        note=body.note,
        confirm_reopen=body.confirm_reopen,
    )
    return {"event": serialize_event(event)}


@router.post("/{event_id}/approve-all")
async def approve_all_edits(
    event_id: str,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Approve every edited photo and accept the delivery."""
    event = container.workflow_service.approve_all_edits(event_id, viewer)
    return {"event": serialize_event(event)}


@router.post("/{event_id}/people/rename")
async def rename_person(
    event_id: str,
    body: RenamePersonRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Rename a person label across the event's photos."""
    container.event_service.get_event_for(event_id, viewer)
    updated = container.photo_service.rename_person(
        event_id, body.old_name, body.new_name
    )
    return {"updated": updated}


@router.post("/{event_id}/payment")
async def record_payment(
    event_id: str,
    body: PaymentRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Record a payment received from the client."""
    _require_photographer(container, event_id, viewer)
    event = container.event_service.record_payment(event_id, body.amount, body.date)
    return {"event": serialize_event(event)}


@router.post("/{event_id}/subevents", status_code=201)
async def add_sub_event(
    event_id: str,
    body: AddSubEventRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Add a sub-event."""
    event = container.event_service.add_sub_event(
        viewer, event_id, body.name, on=body.date, location=body.location
    )
    return {"event": serialize_event(event)}


@router.delete("/{event_id}/subevents/{sub_event_id}")
async def remove_sub_event(
    event_id: str,
    sub_event_id: str,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Remove a sub-event."""
    event = container.event_service.remove_sub_event(viewer, event_id, sub_event_id)
    return {"event": serialize_event(event)}


@router.post("/{event_id}/assigned-users")
async def assign_user(
    event_id: str,
    body: AssignUserRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Share the event with a client."""
    event = container.event_service.assign_user(viewer, event_id, body.user_id)
    return {"event": serialize_event(event)}


@router.delete("/{event_id}/assigned-users/{user_id}")
async def remove_user(
    event_id: str,
    user_id: str,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Stop sharing the event with a client."""
    event = container.event_service.remove_user(viewer, event_id, user_id)
    return {"event": serialize_event(event)}


@router.post("/{event_id}/addons")
async def request_addon(
    event_id: str,
    body: AddonRequestBody,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Request an add-on service for the event."""
    event = container.event_service.request_addon(viewer, event_id, body.service_id)
    return {"event": serialize_event(event)}


@router.post("/{event_id}/edits/match")
async def match_edits(
    event_id: str,
    body: MatchEditsRequest,
    viewer: Viewer = Depends(get_viewer),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Attach a batch of edited files to their originals by file name."""
    _require_photographer(container, event_id, viewer)
    plan = container.photo_service.attach_edited_batch(event_id, body.uploads)
    return {
        "matches": plan.matches,
        "unmatched": list(plan.unmatched),
        "conflicts": {name: list(ids) for name, ids in plan.conflicts.items()},
    }


def _require_photographer(
    container: AppContainer, event_id: str, viewer: Viewer
) -> None:
    event = container.event_service.get_event(event_id)
    if not viewer.is_photographer_of(event):
        raise PermissionDeniedError("Only the event photographer can do this")


def _parse_tab(
    main_tab: MainTab,
    sub_tab: SubTab,
    people: list[str],
    events: list[str],
    tags: list[str],
) -> GalleryTab:
    if main_tab == MainTab.SELECTED:
        return SelectedTab()
    if main_tab == MainTab.EDITED:
        return EditedTab()
    return AllTab(
        sub_tab=sub_tab,
        filters=SelectedFilters(
            people=frozenset(people), events=frozenset(events), tags=frozenset(tags)
        ),
    )
