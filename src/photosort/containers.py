"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from photosort.adapters.delivery_api_client import HttpxDeliveryApiClient
from photosort.adapters.face_service_client import (
    FaceGroupingClient,
    HttpxFaceGroupingClient,
)
from photosort.adapters.supabase_audit_repository import SupabaseAuditRepository
from photosort.adapters.supabase_event_repository import SupabaseEventRepository
from photosort.adapters.supabase_photo_repository import SupabasePhotoRepository
from photosort.client.session import GallerySession
from photosort.config import Settings
from photosort.domain.viewers import Viewer
from photosort.services.admin import AdminService
from photosort.services.audit import AuditService
from photosort.services.events import EventService
from photosort.services.photos import PhotoService
from photosort.services.workflow import WorkflowService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    event_service: EventService
    photo_service: PhotoService
    workflow_service: WorkflowService
    audit_service: AuditService
    admin_service: AdminService
    face_client: FaceGroupingClient | None
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    event_repository = SupabaseEventRepository(supabase_client)
    photo_repository = SupabasePhotoRepository(supabase_client)
    audit_repository = SupabaseAuditRepository(supabase_client)
    face_client = (
        HttpxFaceGroupingClient.create(
            resolved_settings.face_service_url,
            timeout_seconds=resolved_settings.request_timeout_seconds,
        )
        if resolved_settings.face_service_url
        else None
    )
    audit_service = AuditService(audit_repository)
    event_service = EventService(event_repository)
    photo_service = PhotoService(
        repository=photo_repository,
        event_repository=event_repository,
        face_client=face_client,
    )
    workflow_service = WorkflowService(
        event_repository=event_repository,
        photo_repository=photo_repository,
        audit_service=audit_service,
    )
    admin_service = AdminService(
        event_repository=event_repository,
        audit_service=audit_service,
    )

    async def close_resources() -> None:
        if face_client is not None:
            await face_client.close()

    return AppContainer(
        settings=resolved_settings,
        event_service=event_service,
        photo_service=photo_service,
        workflow_service=workflow_service,
        audit_service=audit_service,
        admin_service=admin_service,
        face_client=face_client,
        close_resources=close_resources,
    )


def build_gallery_session(
    viewer: Viewer, settings: Settings | None = None
) -> tuple[GallerySession, HttpxDeliveryApiClient]:
    """Create a gallery session talking to the configured API.

    The caller owns the returned client and must close it.
    """
    resolved_settings = settings or Settings()
    api_client = HttpxDeliveryApiClient.create(
        resolved_settings.api_base_url,
        timeout_seconds=resolved_settings.request_timeout_seconds,
    )
    return GallerySession(api=api_client, viewer=viewer), api_client
