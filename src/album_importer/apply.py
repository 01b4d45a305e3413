"""Write an edited EditSet back onto the extracted track files.

Albums and tracks are matched by position only. Counts and record ids are
checked for the whole batch before the first file is touched, so a
mismatch never leaves a batch half-tagged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from album_importer.archive import Album
from album_importer.edit_set import EditableAlbum, EditSet, album_key
from album_importer.errors import CorrespondenceMismatchError
from album_importer.tagging import DEFAULT_COMMENT_DESCRIPTION, TagFields, write_tags

logger = logging.getLogger(__name__)

PROGRAM_NAME = "album-importer"


@dataclass
class TrackPlan:
    """Tags planned (or written) for one track."""

    path: Path
    fields: TagFields
    written: bool = False


def check_correspondence(edit_set: EditSet, albums: list[Album]) -> None:
    """
    Verify that the EditSet still lines up with the album list.

    A record without an id is matched by position alone. A record with an
    id must carry the id of the album at its position; anything else means
    the record was moved, duplicated or comes from another import.

    Raises:
        CorrespondenceMismatchError: Listing every mismatch found
    """
    if len(edit_set.albums) != len(albums):
        raise CorrespondenceMismatchError(
            [f"document has {len(edit_set.albums)} albums, import has {len(albums)}"]
        )

    problems = []
    expected_keys = {album_key(i, album): i for i, album in enumerate(albums)}
    for i, (edit, album) in enumerate(zip(edit_set.albums, albums, strict=True)):
        if edit.key is not None and edit.key != album_key(i, album):
            moved_from = expected_keys.get(edit.key)
            if moved_from is None:
                problems.append(f"album {i + 1} has unknown id {edit.key!r}")
            else:
                problems.append(
                    f"album {i + 1} holds the record of album {moved_from + 1} "
                    f"({albums[moved_from].original_name})"
                )
            continue
        if len(edit.track_titles) != len(album.tracks):
            problems.append(
                f"album {i + 1} ({album.original_name}) has {len(edit.track_titles)} "
                f"track titles for {len(album.tracks)} tracks"
            )

    if problems:
        raise CorrespondenceMismatchError(problems)


def provenance_comment(original_name: str, when: datetime) -> str:
    """Comment recording where and when a track was imported."""
    return f"Imported by {PROGRAM_NAME} from {original_name} on {when.isoformat(timespec='seconds')}"


def plan_album(
    edit: EditableAlbum,
    album: Album,
    when: datetime,
    comment_description: str = DEFAULT_COMMENT_DESCRIPTION,
) -> list[TrackPlan]:
    """Tag values for every track of one album, in track order."""
    comment = provenance_comment(album.original_name, when)
    return [
        TrackPlan(
            path=track,
            fields=TagFields(
                artist=edit.artist,
                album=edit.album_title,
                genre=edit.genre,
                year=edit.year,
                title=edit.track_titles[j],
                album_artist=edit.artist,
                comment=comment,
                comment_description=comment_description,
            ),
        )
        for j, track in enumerate(album.tracks)
    ]


def apply_edits(
    edit_set: EditSet,
    albums: list[Album],
    *,
    comment_description: str = DEFAULT_COMMENT_DESCRIPTION,
    id3_version: int = 4,
    now: datetime | None = None,
    dry_run: bool = False,
) -> list[TrackPlan]:
    """
    Write the EditSet onto the tracks of ``albums``.

    Args:
        edit_set: Edited metadata, index-aligned with ``albums``
        albums: Extracted albums the EditSet was built from
        comment_description: Description of the provenance comment frame
        id3_version: ID3v2 minor version to save as
        now: Import timestamp; defaults to the current local time
        dry_run: If True, return the plan without writing anything

    Returns:
        One TrackPlan per track, in album and track order

    Raises:
        CorrespondenceMismatchError: Before any write, if counts or ids differ
        TagWriteError: If a track cannot be written; earlier tracks keep
            their new tags
    """
    check_correspondence(edit_set, albums)

    when = now or datetime.now().astimezone()
    plans: list[TrackPlan] = []
    for edit, album in zip(edit_set.albums, albums, strict=True):
        plans.extend(plan_album(edit, album, when, comment_description))

    if dry_run:
        logger.info(f"Dry run: {len(plans)} tracks would be updated")
        return plans

    logger.info(f"Updating tags on {len(plans)} tracks")
    for plan in plans:
        logger.debug(f"Updating tags on {plan.path}")
        write_tags(plan.path, plan.fields, id3_version=id3_version)
        plan.written = True

    return plans
