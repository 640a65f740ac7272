"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date
from typing import TypeVar

import httpx
import pytest

from photosort.adapters.delivery_api_client import DeliveryApi
from photosort.adapters.face_service_client import FaceGroupingClient
from photosort.adapters.rows import event_from_row, photo_from_row
from photosort.config import Settings
from photosort.containers import AppContainer
from photosort.domain.events import Event, SelectionStatus, SubEvent
from photosort.domain.photos import Photo, ReviewStatus
from photosort.domain.viewers import UserRole, Viewer
from photosort.services.admin import AdminService
from photosort.services.audit import AuditRepository, AuditService
from photosort.services.events import EventRepository, EventService
from photosort.services.photos import PhotoRepository, PhotoService
from photosort.services.workflow import WorkflowService

T = TypeVar("T")

PHOTOGRAPHER = Viewer(id="pg-1", role=UserRole.PHOTOGRAPHER)
OTHER_PHOTOGRAPHER = Viewer(id="pg-2", role=UserRole.PHOTOGRAPHER)
CLIENT = Viewer(id="client-1", role=UserRole.USER)
STRANGER = Viewer(id="client-9", role=UserRole.USER)
ADMIN = Viewer(id="admin-1", role=UserRole.ADMIN)


def make_event(**overrides: object) -> Event:
    """Build an event owned by PHOTOGRAPHER and shared with CLIENT."""
    values: dict[str, object] = {
        "id": "evt-1",
        "name": "Wedding",
        "date": date(2024, 6, 1),
        "photographer_id": PHOTOGRAPHER.id,
        "assigned_users": (CLIENT.id,),
        "sub_events": (
            SubEvent(id="se-haldi", name="Haldi"),
            SubEvent(id="se-sangeet", name="Sangeet"),
        ),
        "price": 1000.0,
        "paid_amount": 0.0,
    }
    values.update(overrides)
    return Event(**values)  # type: ignore[arg-type]


def make_photo(photo_id: str, **overrides: object) -> Photo:
    """Build a photo in evt-1."""
    values: dict[str, object] = {
        "id": photo_id,
        "url": f"https://cdn.example.com/{photo_id}.jpg",
        "event_id": "evt-1",
    }
    values.update(overrides)
    return Photo(**values)  # type: ignore[arg-type]


@dataclass
class InMemoryEventRepository(EventRepository):
    """In-memory event repository for tests."""

    events: dict[str, Event] = field(default_factory=dict)
    writes: int = 0

    def add(self, event: Event) -> Event:
        self.events[event.id] = event
        return event

    def list_events(self) -> list[Event]:
        return sorted(self.events.values(), key=lambda event: event.date, reverse=True)

    def list_events_for_photographer(self, photographer_id: str) -> list[Event]:
        return [e for e in self.list_events() if e.photographer_id == photographer_id]

    def list_events_for_user(self, user_id: str) -> list[Event]:
        return [e for e in self.list_events() if user_id in e.assigned_users]

    def get_event(self, event_id: str) -> Event | None:
        return self.events.get(event_id)

    def create_event(self, photographer_id: str, payload: dict[str, object]) -> Event:
        event_id = f"evt-{len(self.events) + 1}"
        event = event_from_row(
            {**payload, "id": event_id, "photographer_id": photographer_id}
        )
        return self.add(event)

    def update_event(self, event: Event) -> Event:
        self.writes += 1
        return self.add(event)


@dataclass
class InMemoryPhotoRepository(PhotoRepository):
    """In-memory photo repository; ids in ``fail_review_ids`` drop bulk writes."""

    photos: dict[str, Photo] = field(default_factory=dict)
    fail_review_ids: set[str] = field(default_factory=set)

    def add(self, *photos: Photo) -> None:
        for photo in photos:
            self.photos[photo.id] = photo

    def list_photos(self, event_id: str) -> list[Photo]:
        return [photo for photo in self.photos.values() if photo.event_id == event_id]

    def get_photo(self, photo_id: str) -> Photo | None:
        return self.photos.get(photo_id)

    def create_photos(
        self, event_id: str, payloads: list[dict[str, object]]
    ) -> list[Photo]:
        created = []
        for payload in payloads:
            photo_id = f"photo-{len(self.photos) + 1}"
            photo = photo_from_row({**payload, "id": photo_id, "event_id": event_id})
            self.photos[photo_id] = photo
            created.append(photo)
        return created

    def count_photos(self, event_id: str) -> int:
        return len(self.list_photos(event_id))

    def update_photo(self, photo: Photo) -> Photo:
        self.photos[photo.id] = photo
        return photo

    def set_review_status(self, photo_ids: list[str], status: ReviewStatus) -> int:
        updated = 0
        for photo_id in photo_ids:
            if photo_id in self.fail_review_ids or photo_id not in self.photos:
                continue
            self.photos[photo_id] = self.photos[photo_id].with_review_status(status)
            updated += 1
        return updated


@dataclass
class InMemoryAuditRepository(AuditRepository):
    """In-memory audit repository for tests."""

    events: list[dict[str, object]] = field(default_factory=list)

    def create_event(  # noqa: PLR0913
        self,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        event_type: str,
        before: dict[str, object] | None,
        after: dict[str, object] | None,
    ) -> None:
        self.events.append(
            {
                "actor_id": actor_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "event_type": event_type,
                "before_json": before,
                "after_json": after,
            }
        )

    def list_events(self, entity_id: str, limit: int) -> list[dict[str, object]]:
        matching = [e for e in self.events if e["entity_id"] == entity_id]
        return list(reversed(matching))[:limit]


@dataclass
class FakeFaceClient(FaceGroupingClient):
    """Fake face-grouping client that records notified events."""

    processed: list[str] = field(default_factory=list)
    fail: bool = False
    closed: bool = False

    async def process_event(self, event_id: str) -> None:
        if self.fail:
            raise httpx.ConnectError("face service unreachable")
        self.processed.append(event_id)

    async def close(self) -> None:
        self.closed = True


@dataclass
class FakeDeliveryApi(DeliveryApi):
    """Delivery API backed by in-process services.

    Service errors surface as ``httpx.HTTPStatusError`` like the real API.
    Operations named in ``failures`` raise a transport error instead, and
    setting ``gate`` holds every request until the gate opens.
    """

    event_service: EventService
    photo_service: PhotoService
    workflow_service: WorkflowService
    calls: list[str] = field(default_factory=list)
    failures: set[str] = field(default_factory=set)
    gate: asyncio.Event | None = None

    async def fetch_events(self, viewer: Viewer) -> list[Event]:
        return await self._call(
            "fetch_events", lambda: self.event_service.list_events(viewer)
        )

    async def fetch_photos(self, viewer: Viewer, event_id: str) -> list[Photo]:
        return await self._call(
            "fetch_photos", lambda: self.photo_service.list_photos(event_id)
        )

    async def toggle_selection(self, viewer: Viewer, photo_id: str) -> Photo:
        return await self._call(
            "toggle_selection",
            lambda: self.photo_service.toggle_selection(photo_id, viewer),
        )

    async def submit_selections(self, viewer: Viewer, event_id: str) -> Event:
        return await self._call(
            "submit_selections",
            lambda: self.workflow_service.submit_selections(event_id, viewer),
        )

    async def update_workflow(  # noqa: PLR0913
        self,
        viewer: Viewer,
        event_id: str,
        status: SelectionStatus,
        delivery_estimate: date | None = None,
        note: str | None = None,
        confirm_reopen: bool = False,
    ) -> Event:
        return await self._call(
            "update_workflow",
            lambda: self.workflow_service.update_workflow(
                event_id,
                status,
                viewer,
                delivery_estimate=delivery_estimate,
                note=note,
                confirm_reopen=confirm_reopen,
            ),
        )

    async def approve_all_edits(self, viewer: Viewer, event_id: str) -> Event:
        return await self._call(
            "approve_all_edits",
            lambda: self.workflow_service.approve_all_edits(event_id, viewer),
        )

    async def rename_person(
        self, viewer: Viewer, event_id: str, old_name: str, new_name: str
    ) -> int:
        return await self._call(
            "rename_person",
            lambda: self.photo_service.rename_person(event_id, old_name, new_name),
        )

    async def record_payment(
        self, viewer: Viewer, event_id: str, amount: float, paid_on: date | None = None
    ) -> Event:
        return await self._call(
            "record_payment",
            lambda: self.event_service.record_payment(event_id, amount, paid_on),
        )

    async def _call(self, name: str, action: Callable[[], T]) -> T:
        self.calls.append(name)
        if self.gate is not None:
            await self.gate.wait()
        if name in self.failures:
            raise httpx.ConnectError(f"{name} failed")
        try:
            return action()
        except (LookupError, PermissionError, RuntimeError, ValueError) as exc:
            request = httpx.Request("POST", f"http://testserver/{name}")
            response = httpx.Response(409, request=request)
            raise httpx.HTTPStatusError(
                str(exc), request=request, response=response
            ) from exc


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
    )


@pytest.fixture
def event_repository() -> InMemoryEventRepository:
    repository = InMemoryEventRepository()
    repository.add(make_event())
    repository.add(
        make_event(
            id="evt-2",
            name="Birthday",
            date=date(2024, 7, 1),
            photographer_id=OTHER_PHOTOGRAPHER.id,
            assigned_users=("client-2",),
            sub_events=(),
        )
    )
    return repository


@pytest.fixture
def photo_repository() -> InMemoryPhotoRepository:
    repository = InMemoryPhotoRepository()
    repository.add(
        make_photo("p1", people=("Asha", "Ravi"), category="Haldi", is_ai_pick=True),
        make_photo("p2", people=("Ravi",), sub_event_id="se-sangeet"),
        make_photo("p3", people=("Ravi", "Meera"), category="Portraits"),
        make_photo("p4", event_id="evt-2", people=("Asha",), category="Cake"),
    )
    return repository


@pytest.fixture
def audit_repository() -> InMemoryAuditRepository:
    return InMemoryAuditRepository()


@pytest.fixture
def face_client() -> FakeFaceClient:
    return FakeFaceClient()


@pytest.fixture
def audit_service(audit_repository: InMemoryAuditRepository) -> AuditService:
    return AuditService(audit_repository)


@pytest.fixture
def event_service(event_repository: InMemoryEventRepository) -> EventService:
    return EventService(event_repository)


@pytest.fixture
def photo_service(
    photo_repository: InMemoryPhotoRepository,
    event_repository: InMemoryEventRepository,
    face_client: FakeFaceClient,
) -> PhotoService:
    return PhotoService(
        repository=photo_repository,
        event_repository=event_repository,
        face_client=face_client,
    )


@pytest.fixture
def workflow_service(
    event_repository: InMemoryEventRepository,
    photo_repository: InMemoryPhotoRepository,
    audit_service: AuditService,
) -> WorkflowService:
    return WorkflowService(
        event_repository=event_repository,
        photo_repository=photo_repository,
        audit_service=audit_service,
    )


@pytest.fixture
def delivery_api(
    event_service: EventService,
    photo_service: PhotoService,
    workflow_service: WorkflowService,
) -> FakeDeliveryApi:
    return FakeDeliveryApi(
        event_service=event_service,
        photo_service=photo_service,
        workflow_service=workflow_service,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    event_service: EventService,
    photo_service: PhotoService,
    workflow_service: WorkflowService,
    audit_service: AuditService,
    event_repository: InMemoryEventRepository,
    face_client: FakeFaceClient,
) -> AppContainer:
    admin_service = AdminService(
        event_repository=event_repository,
        audit_service=audit_service,
    )

    async def close_resources() -> None:
        await face_client.close()

    return AppContainer(
        settings=settings,
        event_service=event_service,
        photo_service=photo_service,
        workflow_service=workflow_service,
        audit_service=audit_service,
        admin_service=admin_service,
        face_client=face_client,
        close_resources=close_resources,
    )


def set_status(
    repository: InMemoryEventRepository,
    status: SelectionStatus,
    event_id: str = "evt-1",
) -> Event:
    """Force an event into a workflow state."""
    event = repository.events[event_id]
    return repository.add(replace(event, selection_status=status))
