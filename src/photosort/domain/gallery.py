"""Gallery view engine.

Pure functions that turn a flat photo collection into what a gallery shows:
the visible subset for a tab and filter selection, the people/tag/sub-event
facets, and the selection set. Nothing here mutates its inputs; callers
recompute from the latest snapshot whenever photos or the event change.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import assert_never

from photosort.domain.events import Event
from photosort.domain.photos import Photo
from photosort.domain.workflow import is_locked


class SubTab(str, Enum):
    """Secondary views available under the "all" tab."""

    GRID = "grid"
    AI = "ai"
    PEOPLE = "people"
    EVENTS = "events"
    TAGS = "tags"


class FilterKind(str, Enum):
    """Independently toggleable filter sets."""

    PEOPLE = "people"
    EVENTS = "events"
    TAGS = "tags"


@dataclass(frozen=True)
class SelectedFilters:
    """Active person, sub-event and tag filters."""

    people: frozenset[str] = frozenset()
    events: frozenset[str] = frozenset()
    tags: frozenset[str] = frozenset()

    def toggle(self, kind: FilterKind, value: str) -> "SelectedFilters":
        """Return filters with ``value`` flipped in the ``kind`` set."""
        current = self._values(kind)
        updated = current - {value} if value in current else current | {value}
        match kind:
            case FilterKind.PEOPLE:
                return SelectedFilters(updated, self.events, self.tags)
            case FilterKind.EVENTS:
                return SelectedFilters(self.people, updated, self.tags)
            case FilterKind.TAGS:
                return SelectedFilters(self.people, self.events, updated)
            case _:
                assert_never(kind)

    def _values(self, kind: FilterKind) -> frozenset[str]:
        match kind:
            case FilterKind.PEOPLE:
                return self.people
            case FilterKind.EVENTS:
                return self.events
            case FilterKind.TAGS:
                return self.tags
            case _:
                assert_never(kind)


@dataclass(frozen=True)
class AllTab:
    """Every photo of the event, narrowed by sub-tab and filters."""

    sub_tab: SubTab = SubTab.GRID
    filters: SelectedFilters = field(default_factory=SelectedFilters)


@dataclass(frozen=True)
class SelectedTab:
    """Photos the client picked for editing."""


@dataclass(frozen=True)
class EditedTab:
    """Photos with a delivered edited version."""


GalleryTab = AllTab | SelectedTab | EditedTab


@dataclass(frozen=True)
class PersonFacet:
    """A person appearing in the event's photos."""

    name: str
    thumbnail_url: str
    count: int


@dataclass(frozen=True)
class TagFacet:
    """A category value used by the event's photos."""

    name: str
    count: int


@dataclass(frozen=True)
class SubEventFacet:
    """A sub-event of the event with its photo count."""

    id: str
    name: str
    count: int


@dataclass(frozen=True)
class GalleryFacets:
    """Derived facet lists for an event."""

    people: tuple[PersonFacet, ...] = ()
    tags: tuple[TagFacet, ...] = ()
    events: tuple[SubEventFacet, ...] = ()


@dataclass(frozen=True)
class GalleryView:
    """Everything a gallery renders for one tab selection."""

    photos: tuple[Photo, ...]
    facets: GalleryFacets
    selected_ids: frozenset[str]
    is_locked: bool


def event_photos(photos: Iterable[Photo], event: Event) -> list[Photo]:
    """Return the photos that belong to ``event``, preserving order."""
    return [photo for photo in photos if photo.event_id == event.id]


def filter_photos(
    photos: Iterable[Photo], event: Event, tab: GalleryTab
) -> list[Photo]:
    """Return the visible photos for a tab selection."""
    result = event_photos(photos, event)
    match tab:
        case SelectedTab():
            return [photo for photo in result if photo.is_selected]
        case EditedTab():
            return [photo for photo in result if photo.edited_url is not None]
        case AllTab(sub_tab=sub_tab, filters=filters):
            if sub_tab == SubTab.AI:
                result = [photo for photo in result if photo.is_ai_pick]
            if filters.people:
                result = [
                    photo
                    for photo in result
                    if any(person in filters.people for person in photo.people)
                ]
            if filters.events:
                result = [
                    photo
                    for photo in result
                    if _matches_event_filter(photo, event, filters.events)
                ]
            if filters.tags:
                result = [photo for photo in result if photo.category in filters.tags]
            return result
        case _:
            assert_never(tab)


def _matches_event_filter(photo: Photo, event: Event, names: frozenset[str]) -> bool:
    if photo.category in names:
        return True
    return event.sub_event_name(photo.sub_event_id) in names


def compute_facets(photos: Iterable[Photo], event: Event) -> GalleryFacets:
    """Compute people, tag and sub-event facets for the event's photos."""
    scoped = event_photos(photos, event)
    return GalleryFacets(
        people=tuple(_people_facets(scoped)),
        tags=tuple(_tag_facets(scoped)),
        events=tuple(_sub_event_facets(scoped, event)),
    )


def _people_facets(photos: Sequence[Photo]) -> list[PersonFacet]:
    thumbnails: dict[str, str] = {}
    counts: dict[str, int] = {}
    for photo in photos:
        # a name repeated within one photo still counts that photo once
        for name in dict.fromkeys(photo.people):
            if name not in thumbnails:
                thumbnails[name] = photo.url
            counts[name] = counts.get(name, 0) + 1
    facets = [
        PersonFacet(name=name, thumbnail_url=thumbnails[name], count=counts[name])
        for name in thumbnails
    ]
    return sorted(facets, key=lambda facet: facet.count, reverse=True)


def _tag_facets(photos: Sequence[Photo]) -> list[TagFacet]:
    counts: dict[str, int] = {}
    for photo in photos:
        if photo.category:
            counts[photo.category] = counts.get(photo.category, 0) + 1
    return [TagFacet(name=name, count=count) for name, count in counts.items()]


def _sub_event_facets(photos: Sequence[Photo], event: Event) -> list[SubEventFacet]:
    facets = []
    for sub_event in event.sub_events:
        count = sum(
            1
            for photo in photos
            if (
                photo.sub_event_id == sub_event.id
                if photo.sub_event_id is not None
                else photo.category == sub_event.name
            )
        )
        facets.append(SubEventFacet(id=sub_event.id, name=sub_event.name, count=count))
    return facets


def selection_ids(photos: Iterable[Photo]) -> frozenset[str]:
    """Return the ids of selected photos."""
    return frozenset(photo.id for photo in photos if photo.is_selected)


def rename_person(
    photos: Iterable[Photo], event_id: str, old_name: str, new_name: str
) -> list[Photo]:
    """Rename a person in every photo of an event.

    Returns the full collection with affected photos replaced. Other events'
    photos, the order of names and any existing ``new_name`` entries are left
    untouched, so a rename can produce duplicate names within a photo.
    """
    renamed = []
    for photo in photos:
        if photo.event_id == event_id and old_name in photo.people:
            people = tuple(
                new_name if name == old_name else name for name in photo.people
            )
            renamed.append(photo.with_people(people))
        else:
            renamed.append(photo)
    return renamed


def download_url(photo: Photo, tab: GalleryTab) -> str:
    """Return the best URL to export for a photo in the given tab."""
    if isinstance(tab, EditedTab) and photo.edited_url is not None:
        return photo.edited_url
    return photo.url


def build_gallery_view(
    photos: Sequence[Photo],
    event: Event,
    tab: GalleryTab,
    viewer_is_photographer: bool,
) -> GalleryView:
    """Compute the visible photos, facets and selection for one render."""
    scoped = event_photos(photos, event)
    return GalleryView(
        photos=tuple(filter_photos(scoped, event, tab)),
        facets=compute_facets(scoped, event),
        selected_ids=selection_ids(scoped),
        is_locked=is_locked(event, viewer_is_photographer),
    )
