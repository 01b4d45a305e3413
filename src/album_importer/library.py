"""Copy tagged tracks into the library as Artist/Album/NN - Title.mp3."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from album_importer.archive import TRACK_SUFFIX, Album
from album_importer.edit_set import EditableAlbum, EditSet
from album_importer.errors import LibraryCopyError

logger = logging.getLogger(__name__)

_UNSAFE_CHARACTERS = str.maketrans({"/": "_", "\\": "_", "\x00": "_"})


def path_component(value: str, fallback: str) -> str:
    """Make a tag value usable as a single path component."""
    component = value.translate(_UNSAFE_CHARACTERS).strip()
    if component in ("", ".", ".."):
        return fallback
    return component


def album_directory(root: Path, edit: EditableAlbum) -> Path:
    return (
        root
        / path_component(edit.artist, "Unknown Artist")
        / path_component(edit.album_title, "Unknown Album")
    )


def destination_path(root: Path, edit: EditableAlbum, track_index: int) -> Path:
    """Library path of track ``track_index`` (0-based) of an album."""
    number = f"{track_index + 1:02d}"
    title = path_component(edit.track_titles[track_index], f"Track {number}")
    return album_directory(root, edit) / f"{number} - {title}{TRACK_SUFFIX}"


def copy_album(root: Path, album: Album, edit: EditableAlbum) -> list[Path]:
    """
    Copy one album's tracks into the library.

    Existing files at the destination are overwritten.

    Raises:
        LibraryCopyError: If a directory or file cannot be created
    """
    directory = album_directory(root, edit)
    logger.info(f"Creating destination directory {directory}")
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LibraryCopyError(f"Error creating directory {directory}: {e}") from e

    copied = []
    for j, track in enumerate(album.tracks):
        destination = destination_path(root, edit, j)
        if destination.exists():
            logger.warning(f"Overwriting existing file {destination}")
        try:
            shutil.copyfile(track, destination)
        except OSError as e:
            raise LibraryCopyError(f"Error copying {track} to {destination}: {e}") from e
        copied.append(destination)
    return copied


def copy_albums(root: Path, albums: list[Album], edit_set: EditSet) -> list[Path]:
    """Copy every album; ``edit_set`` must be index-aligned with ``albums``."""
    copied = []
    for album, edit in zip(albums, edit_set.albums, strict=True):
        copied.extend(copy_album(root, album, edit))
    return copied
