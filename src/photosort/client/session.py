"""Client-side application state for browsing and curating an event.

``GallerySession`` owns the snapshot a gallery renders from: the viewer's
events, the active event and its photos. Gallery views are recomputed from
that snapshot on demand. All writes go through the named mutation methods,
which apply a tentative change, send the request, then either reconcile
with the server's copy or restore what was there before.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum

import httpx

from photosort.adapters.delivery_api_client import DeliveryApi
from photosort.domain.events import Event, SelectionStatus, derive_payment_status
from photosort.domain.gallery import (
    GalleryFacets,
    GalleryTab,
    GalleryView,
    build_gallery_view,
    download_url,
    rename_person,
    selection_ids,
)
from photosort.domain.photos import Photo, ReviewStatus
from photosort.domain.viewers import Viewer
from photosort.domain.workflow import check_transition, is_locked
from photosort.errors import InvalidTransitionError

_logger = logging.getLogger(__name__)


class MutationOutcome(str, Enum):
    """Result of a mutation attempted through the session."""

    APPLIED = "applied"
    NOOP = "noop"
    REJECTED = "rejected"
    BUSY = "busy"
    FAILED = "failed"


@dataclass
class GallerySession:
    """State container for one viewer's gallery."""

    api: DeliveryApi
    viewer: Viewer
    my_events: list[Event] = field(default_factory=list)
    active_event: Event | None = None
    photos: list[Photo] = field(default_factory=list)
    _in_flight: set[str] = field(default_factory=set, repr=False)

    @property
    def selected_ids(self) -> frozenset[str]:
        """Ids of selected photos in the loaded collection."""
        return selection_ids(self.photos)

    @property
    def viewer_is_photographer(self) -> bool:
        """Whether the viewer owns the active event."""
        return self.active_event is not None and self.viewer.is_photographer_of(
            self.active_event
        )

    @property
    def is_locked(self) -> bool:
        """Whether the viewer may no longer change the selection."""
        if self.active_event is None:
            return True
        return is_locked(self.active_event, self.viewer_is_photographer)

    async def load_events(self) -> list[Event]:
        """Fetch the viewer's events."""
        self.my_events = await self.api.fetch_events(self.viewer)
        if self.active_event is not None:
            fresh = self._find_event(self.active_event.id)
            self.active_event = fresh
            if fresh is None:
                self.photos = []
        return self.my_events

    async def set_active_event(self, event: Event | None) -> None:
        """Switch events, discarding the previous event's photos and selection."""
        self.active_event = event
        self.photos = []
        if event is None:
            return
        try:
            photos = await self.api.fetch_photos(self.viewer, event.id)
        except httpx.HTTPError as exc:
            _logger.warning(
                "Failed to load photos: event_id=%s error=%s", event.id, exc
            )
            return
        if self.active_event is None or self.active_event.id != event.id:
            return
        self.photos = [photo for photo in photos if photo.event_id == event.id]

    async def refresh_photos(self) -> None:
        """Reload the active event's photos, keeping the snapshot on failure."""
        event = self.active_event
        if event is None:
            return
        try:
            photos = await self.api.fetch_photos(self.viewer, event.id)
        except httpx.HTTPError as exc:
            _logger.warning(
                "Failed to refresh photos: event_id=%s error=%s", event.id, exc
            )
            return
        if self.active_event is not None and self.active_event.id == event.id:
            self.photos = [photo for photo in photos if photo.event_id == event.id]

    def view(self, tab: GalleryTab) -> GalleryView:
        """Compute what the gallery shows for a tab selection."""
        if self.active_event is None:
            return GalleryView(
                photos=(),
                facets=GalleryFacets(),
                selected_ids=frozenset(),
                is_locked=True,
            )
        return build_gallery_view(
            self.photos, self.active_event, tab, self.viewer_is_photographer
        )

    def download_url(self, photo_id: str, tab: GalleryTab) -> str | None:
        """Return the URL to export for a loaded photo."""
        photo = self._find_photo(photo_id)
        return download_url(photo, tab) if photo is not None else None

    async def toggle_photo_selection(self, photo_id: str) -> MutationOutcome:
        """Flip a photo's selection."""
        photo = self._find_photo(photo_id)
        if photo is None or self.is_locked:
            return MutationOutcome.REJECTED
        return await self._commit_photos(
            f"photo:{photo_id}",
            [photo.with_selection(not photo.is_selected)],
            lambda: self._reconcile_photo(
                self.api.toggle_selection(self.viewer, photo_id)
            ),
            lambda current, before: current.with_selection(before.is_selected),
        )

    async def set_photo_selection(
        self, photo_id: str, selected: bool
    ) -> MutationOutcome:
        """Bring a photo's selection to ``selected``; no request if already there."""
        photo = self._find_photo(photo_id)
        if photo is None or self.is_locked:
            return MutationOutcome.REJECTED
        if photo.is_selected == selected:
            return MutationOutcome.NOOP
        return await self.toggle_photo_selection(photo_id)

    async def submit_selections(self) -> MutationOutcome:
        """Submit the selection; already-submitted events are a no-op."""
        event = self.active_event
        if event is None:
            return MutationOutcome.REJECTED
        if event.selection_status == SelectionStatus.SUBMITTED:
            return MutationOutcome.NOOP
        if self.is_locked or not self._can_move(event, SelectionStatus.SUBMITTED):
            return MutationOutcome.REJECTED
        return await self._commit_event(
            event.with_status(SelectionStatus.SUBMITTED),
            lambda: self.api.submit_selections(self.viewer, event.id),
        )

    async def update_event_workflow(
        self,
        status: SelectionStatus,
        delivery_estimate: date | None = None,
        note: str | None = None,
        confirm_reopen: bool = False,
    ) -> MutationOutcome:
        """Move the active event to ``status``."""
        event = self.active_event
        if event is None:
            return MutationOutcome.REJECTED
        if delivery_estimate is not None and not self.viewer_is_photographer:
            return MutationOutcome.REJECTED
        if not self._can_move(event, status, confirm_reopen=confirm_reopen):
            return MutationOutcome.REJECTED
        return await self._commit_event(
            event.with_status(status),
            lambda: self.api.update_workflow(
                self.viewer,
                event.id,
                status,
                delivery_estimate=delivery_estimate,
                note=note,
                confirm_reopen=confirm_reopen,
            ),
        )

    async def approve_all_edits(self) -> MutationOutcome:
        """Approve every edited photo and accept the delivery."""
        event = self.active_event
        if event is None or not self._can_move(event, SelectionStatus.ACCEPTED):
            return MutationOutcome.REJECTED
        edited = {
            photo.id: photo for photo in self.photos if photo.edited_url is not None
        }
        keys = {f"event:{event.id}", *(f"photo:{photo_id}" for photo_id in edited)}
        if keys & self._in_flight:
            return MutationOutcome.BUSY
        self._store_event(event.with_status(SelectionStatus.ACCEPTED))
        self._put_photos(
            photo.with_review_status(ReviewStatus.APPROVED)
            for photo in edited.values()
        )
        self._in_flight |= keys
        stored: Event | None = None
        try:
            stored = await self.api.approve_all_edits(self.viewer, event.id)
        except httpx.HTTPError as exc:
            _logger.warning(
                "Approve-all failed, rolling back: event_id=%s error=%s", event.id, exc
            )
            self._store_event(event)
            self._restore_photos(
                edited,
                lambda current, before: current.with_review_status(
                    before.review_status
                ),
            )
        finally:
            self._in_flight -= keys
        if stored is None:
            # The server may have approved some photos before failing.
            await self.refresh_photos()
            return MutationOutcome.FAILED
        self._store_event(stored)
        await self.refresh_photos()
        return MutationOutcome.APPLIED

    async def rename_person(self, old_name: str, new_name: str) -> MutationOutcome:
        """Rename a person across the active event's photos."""
        event = self.active_event
        if event is None or not new_name.strip():
            return MutationOutcome.REJECTED
        if old_name == new_name:
            return MutationOutcome.NOOP
        renamed = [
            after
            for before, after in zip(
                self.photos,
                rename_person(self.photos, event.id, old_name, new_name),
                strict=True,
            )
            if after is not before
        ]
        if not renamed:
            return MutationOutcome.NOOP

        async def request() -> None:
            await self.api.rename_person(self.viewer, event.id, old_name, new_name)

        return await self._commit_photos(
            f"people:{event.id}",
            renamed,
            request,
            lambda current, before: current.with_people(before.people),
        )

    async def record_payment(
        self, amount: float, paid_on: date | None = None
    ) -> MutationOutcome:
        """Record a payment against the active event."""
        event = self.active_event
        if event is None or amount <= 0:
            return MutationOutcome.REJECTED
        paid_amount = (event.paid_amount or 0) + amount
        tentative = replace(
            event,
            paid_amount=paid_amount,
            payment_status=derive_payment_status(event.price, paid_amount),
        )
        return await self._commit_event(
            tentative,
            lambda: self.api.record_payment(self.viewer, event.id, amount, paid_on),
        )

    def _can_move(
        self, event: Event, target: SelectionStatus, confirm_reopen: bool = False
    ) -> bool:
        try:
            check_transition(
                event.selection_status,
                target,
                is_photographer=self.viewer.is_photographer_of(event),
                confirm_reopen=confirm_reopen,
            )
        except InvalidTransitionError as exc:
            _logger.info("Rejected workflow change locally: %s", exc)
            return False
        return True

    async def _commit_event(
        self, tentative: Event, request: Callable[[], Awaitable[Event]]
    ) -> MutationOutcome:
        key = f"event:{tentative.id}"
        if key in self._in_flight:
            return MutationOutcome.BUSY
        previous = self._find_event(tentative.id) or self.active_event
        self._store_event(tentative)
        self._in_flight.add(key)
        try:
            stored = await request()
        except httpx.HTTPError as exc:
            _logger.warning(
                "Event update failed, rolling back: event_id=%s error=%s",
                tentative.id,
                exc,
            )
            if previous is not None:
                self._store_event(previous)
            return MutationOutcome.FAILED
        finally:
            self._in_flight.discard(key)
        self._store_event(stored)
        return MutationOutcome.APPLIED

    async def _commit_photos(
        self,
        key: str,
        tentative: list[Photo],
        request: Callable[[], Awaitable[None]],
        restore: Callable[[Photo, Photo], Photo],
    ) -> MutationOutcome:
        """Apply ``tentative`` photos, then confirm them with ``request``.

        Every touched photo is held under its ``photo:<id>`` key as well as
        ``key`` until the request settles. On failure ``restore`` puts the
        mutated fields back onto each photo's current value.
        """
        tentative_ids = {photo.id for photo in tentative}
        keys = {key, *(f"photo:{photo_id}" for photo_id in tentative_ids)}
        if keys & self._in_flight:
            return MutationOutcome.BUSY
        previous = {
            photo.id: photo for photo in self.photos if photo.id in tentative_ids
        }
        self._put_photos(tentative)
        self._in_flight |= keys
        try:
            await request()
        except httpx.HTTPError as exc:
            _logger.warning("Photo update failed, rolling back: %s error=%s", key, exc)
            self._restore_photos(previous, restore)
            return MutationOutcome.FAILED
        finally:
            self._in_flight -= keys
        return MutationOutcome.APPLIED

    async def _reconcile_photo(self, pending: Awaitable[Photo]) -> None:
        self._put_photos([await pending])

    def _find_photo(self, photo_id: str) -> Photo | None:
        return next((photo for photo in self.photos if photo.id == photo_id), None)

    def _find_event(self, event_id: str) -> Event | None:
        return next((event for event in self.my_events if event.id == event_id), None)

    def _put_photos(self, updates: Iterable[Photo]) -> None:
        by_id = {photo.id: photo for photo in updates}
        self.photos = [by_id.get(photo.id, photo) for photo in self.photos]

    def _restore_photos(
        self,
        previous: dict[str, Photo],
        restore: Callable[[Photo, Photo], Photo],
    ) -> None:
        self._put_photos(
            restore(photo, previous[photo.id])
            for photo in self.photos
            if photo.id in previous
        )

    def _store_event(self, event: Event) -> None:
        self.my_events = [
            event if existing.id == event.id else existing
            for existing in self.my_events
        ]
        if self.active_event is not None and self.active_event.id == event.id:
            self.active_event = event
