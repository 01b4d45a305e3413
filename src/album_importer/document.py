"""TOML edit document: the human-editable form of an EditSet.

The document is a list of ``[[albums]]`` tables, one per imported archive,
in EditSet order. Each table holds four scalar strings and a ``tracks``
array with one title per track, in track order. Values are written as
TOML basic strings, so quotes, backslashes, newlines and other control
characters are escaped and any valid Unicode text survives the round trip.

Decoding checks shape only. Whether the edited values make sense is up to
the person editing them.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from album_importer.edit_set import EditableAlbum, EditSet
from album_importer.errors import DocumentParseError, DocumentWriteError

logger = logging.getLogger(__name__)

HEADER = """\
# Edit the album metadata below, then save and quit to apply it.
#
# Each [[albums]] table belongs to one imported archive and each line of
# `tracks` to one file, in file order. Change values only: adding, removing
# or reordering albums or track lines aborts the import. Leave `id` as is.
#
# Quit with an error status (for example :cq in vim) to cancel the import.

"""


class AlbumRecord(BaseModel):
    """One ``[[albums]]`` table."""

    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    id: str | None = None
    artist: str
    album: str
    genre: str
    year: str
    tracks: list[str]


class Document(BaseModel):
    """Top level of the edit document."""

    model_config = ConfigDict(extra="forbid")

    albums: list[AlbumRecord] = Field(default_factory=list)


def _album_to_table(album: EditableAlbum) -> dict[str, Any]:
    table: dict[str, Any] = {}
    if album.key is not None:
        table["id"] = album.key
    table["artist"] = album.artist
    table["album"] = album.album_title
    table["genre"] = album.genre
    table["year"] = album.year
    table["tracks"] = list(album.track_titles)
    return table


def _record_to_album(record: AlbumRecord) -> EditableAlbum:
    return EditableAlbum(
        artist=record.artist,
        album_title=record.album,
        genre=record.genre,
        year=record.year,
        track_titles=list(record.tracks),
        key=record.id,
    )


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        location = ""
        for part in detail["loc"]:
            location += f"[{part}]" if isinstance(part, int) else f".{part}"
        problems.append(f"{location.lstrip('.') or 'document'}: {detail['msg']}")
    return "; ".join(problems)


def encode(edit_set: EditSet) -> bytes:
    """Serialize an EditSet to a UTF-8 TOML document."""
    document = {"albums": [_album_to_table(album) for album in edit_set.albums]}
    return (HEADER + tomli_w.dumps(document)).encode("utf-8")


def decode(data: bytes) -> EditSet:
    """
    Parse a (possibly hand-edited) document back into an EditSet.

    Albums and titles keep the order they have in the document.

    Raises:
        DocumentParseError: On invalid UTF-8, TOML syntax errors, unknown or
            missing keys, or values of the wrong type
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DocumentParseError(f"Edit document is not valid UTF-8: {e}") from e

    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise DocumentParseError(f"Edit document is not valid TOML: {e}") from e

    try:
        document = Document.model_validate(raw)
    except ValidationError as e:
        raise DocumentParseError(
            f"Edit document has an unexpected structure: {_describe_validation_error(e)}"
        ) from e

    return EditSet(albums=[_record_to_album(record) for record in document.albums])


def write_document(path: Path, edit_set: EditSet) -> None:
    """
    Write the encoded EditSet to ``path``.

    Raises:
        DocumentWriteError: If the file cannot be written
    """
    logger.info(f"Writing edit document {path}")
    try:
        path.write_bytes(encode(edit_set))
    except OSError as e:
        raise DocumentWriteError(f"Cannot write edit document {path}: {e}") from e


def read_document(path: Path) -> EditSet:
    """
    Read and decode an edit document.

    Raises:
        DocumentParseError: If the file cannot be read or decoded
    """
    logger.info(f"Reading edit document {path}")
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DocumentParseError(f"Cannot read edit document {path}: {e}") from e
    return decode(data)
