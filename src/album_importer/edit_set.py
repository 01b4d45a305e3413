"""Editable metadata snapshot of a batch of albums.

An EditSet is index-aligned with the album list it was built from: album
``i`` of the set describes ``albums[i]`` and title ``j`` of that album
belongs to ``albums[i].tracks[j]``. Nothing else links the two.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field

from album_importer.archive import Album
from album_importer.tagging import read_tags

logger = logging.getLogger(__name__)


@dataclass
class EditableAlbum:
    """Album-level tags plus one title per track."""

    artist: str = ""
    album_title: str = ""
    genre: str = ""
    year: str = ""
    track_titles: list[str] = field(default_factory=list)
    # Opaque record id written into the edit document, None when unknown
    key: str | None = None


@dataclass
class EditSet:
    """The whole batch, in the same order as the extracted albums."""

    albums: list[EditableAlbum] = field(default_factory=list)


def album_key(index: int, album: Album, length: int = 8) -> str:
    """
    Stable id for the album at ``index``.

    Derived from position and archive name, so a record that was moved or
    copied in the edit document no longer matches the album it lands on.
    """
    signature = f"{index}:{album.original_name}"
    return hashlib.sha256(signature.encode()).hexdigest()[:length]


def materialize_album(album: Album, index: int = 0) -> EditableAlbum:
    """
    Build the editable view of one album.

    The first track seeds the album-level fields; every track contributes
    its title in track order.

    Raises:
        TagReadError: If any track's tags cannot be read
    """
    logger.info(f"Reading tags for {album.original_name}")
    key = album_key(index, album)
    if not album.tracks:
        return EditableAlbum(key=key)

    first = read_tags(album.tracks[0])
    titles = []
    for track in album.tracks:
        logger.debug(f"Reading track title from {track}")
        titles.append(read_tags(track).title)

    return EditableAlbum(
        artist=first.artist,
        album_title=first.album,
        genre=first.genre,
        year=first.year,
        track_titles=titles,
        key=key,
    )


def materialize(albums: list[Album]) -> EditSet:
    """Build an EditSet for a batch. One unreadable track aborts the batch."""
    return EditSet(albums=[materialize_album(album, i) for i, album in enumerate(albums)])
