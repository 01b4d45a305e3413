"""Archive extraction: turns delivered zip files into Albums."""

from __future__ import annotations

import logging
import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path

from album_importer.errors import ArchiveError

logger = logging.getLogger(__name__)

TRACK_SUFFIX = ".mp3"

# General purpose bit 11: member names are UTF-8 encoded
_UTF8_NAME_FLAG = 0x800


@dataclass(frozen=True)
class Album:
    """
    One extracted archive.

    ``tracks`` is sorted by file name so track order is stable for the
    whole run; every later stage addresses tracks by their position here.
    """

    original_name: str
    working_directory: Path
    tracks: tuple[Path, ...]


def _normalize_member_name(info: zipfile.ZipInfo) -> str:
    """Recover UTF-8 names that were stored without the UTF-8 flag."""
    if info.flag_bits & _UTF8_NAME_FLAG:
        return info.filename
    try:
        return info.filename.encode("cp437").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return info.filename


def collect_tracks(directory: Path) -> tuple[Path, ...]:
    """Top-level MP3 files of a directory, sorted by file name."""
    tracks = [
        path
        for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() == TRACK_SUFFIX
    ]
    return tuple(sorted(tracks, key=lambda path: path.name))


def extract_album(work_dir: Path, archive: Path, index: int = 0) -> Album:
    """
    Extract one archive into its own directory under ``work_dir``.

    The target directory is ``<NN>-<archive stem>`` so two archives with the
    same name from different folders never share a directory. Leftovers of
    an earlier run in that directory are removed first.

    Raises:
        ArchiveError: If the archive is missing, not a zip file, or has no
            MP3 files at its top level
    """
    target = work_dir / f"{index + 1:02d}-{archive.stem}"
    logger.info(f"Extracting {archive} to {target}")

    if not archive.is_file():
        raise ArchiveError(f"Archive not found: {archive}")

    try:
        if target.exists():
            shutil.rmtree(target)
        target.mkdir(parents=True)
    except OSError as e:
        raise ArchiveError(f"Cannot prepare extraction directory {target}: {e}") from e

    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                info.filename = _normalize_member_name(info)
                zf.extract(info, target)
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Not a valid zip archive: {archive}: {e}") from e
    except OSError as e:
        raise ArchiveError(f"Error extracting {archive}: {e}") from e

    tracks = collect_tracks(target)
    if not tracks:
        raise ArchiveError(f"No {TRACK_SUFFIX} tracks found in {archive}")

    logger.debug(f"Found {len(tracks)} tracks in {archive.name}")
    return Album(original_name=archive.name, working_directory=target, tracks=tracks)


def extract_albums(work_dir: Path, archives: list[Path]) -> list[Album]:
    """Extract every archive, preserving the order they were given in."""
    try:
        work_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveError(f"Cannot create work directory {work_dir}: {e}") from e
    return [extract_album(work_dir, archive, index) for index, archive in enumerate(archives)]
