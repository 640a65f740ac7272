"""Matching of bulk edited uploads to original photos."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from photosort.domain.photos import Photo


@dataclass(frozen=True)
class EditedUploadPlan:
    """Outcome of matching uploaded file names to original photos."""

    matches: dict[str, str] = field(default_factory=dict)
    unmatched: tuple[str, ...] = ()
    conflicts: dict[str, tuple[str, ...]] = field(default_factory=dict)


def match_edited_uploads(
    photos: Iterable[Photo], filenames: Iterable[str]
) -> EditedUploadPlan:
    """Match upload names to photos by original filename.

    Matching is case-insensitive and exact. A name that matches several
    photos is a conflict and is not attached to any of them.
    """
    by_name: dict[str, list[str]] = {}
    for photo in photos:
        if photo.original_filename:
            by_name.setdefault(photo.original_filename.casefold(), []).append(photo.id)

    matches: dict[str, str] = {}
    unmatched: list[str] = []
    conflicts: dict[str, tuple[str, ...]] = {}
    for filename in filenames:
        candidates = by_name.get(filename.casefold(), [])
        if not candidates:
            unmatched.append(filename)
        elif len(candidates) > 1:
            conflicts[filename] = tuple(candidates)
        else:
            matches[filename] = candidates[0]
    return EditedUploadPlan(
        matches=matches, unmatched=tuple(unmatched), conflicts=conflicts
    )
