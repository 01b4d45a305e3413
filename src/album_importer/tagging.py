"""Tag access for MP3 track files.

Reads the few ID3 frames the edit pipeline works with and writes them back
together with the album artist and an import provenance comment. Only the
tag block is touched; the audio payload is left as it is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from album_importer.errors import TagReadError, TagWriteError

logger = logging.getLogger(__name__)

# mutagen joins multi-valued text frames with NUL, and some taggers pad
# single values with a trailing NUL.
PAD_CHARACTER = "\x00"

DEFAULT_COMMENT_DESCRIPTION = "album-importer"

# TXXX description holding year text that is not an ID3 timestamp
YEAR_TEXT_DESCRIPTION = "YEAR"


@dataclass(frozen=True)
class TrackTags:
    """Tag values read from one track; absent frames read as ""."""

    artist: str = ""
    album: str = ""
    genre: str = ""
    year: str = ""
    title: str = ""


@dataclass(frozen=True)
class TagFields:
    """Values written to one track."""

    artist: str
    album: str
    genre: str
    year: str
    title: str
    album_artist: str
    comment: str
    comment_description: str = DEFAULT_COMMENT_DESCRIPTION


def strip_trailing_null(value: str) -> str:
    """Remove trailing pad characters. Clean and empty strings pass through."""
    return value.rstrip(PAD_CHARACTER)


class ID3TagAccessor:
    """
    Reads and writes ID3 tags on MP3 files.

    Uses mutagen for low-level tag manipulation. Files are opened through
    ``mutagen.mp3.MP3`` so anything that is not an MPEG audio stream is
    rejected instead of silently gaining an ID3 header.
    """

    CORE_FRAMES = {
        "artist": "TPE1",
        "album": "TALB",
        "genre": "TCON",
        "year": "TDRC",
        "title": "TIT2",
    }

    def read_tags(self, file_path: Path) -> TrackTags:
        """Read the core frames of an MP3 file."""
        from mutagen import MutagenError
        from mutagen.mp3 import MP3

        try:
            audio = MP3(file_path)
        except (MutagenError, OSError) as e:
            raise TagReadError(file_path, str(e)) from e

        if audio.tags is None:
            logger.debug(f"No ID3 tag in {file_path}")
            return TrackTags()

        values = {
            field_name: self._frame_text(audio.tags, frame_id)
            for field_name, frame_id in self.CORE_FRAMES.items()
        }
        if not values["year"]:
            values["year"] = self._frame_text(audio.tags, f"TXXX:{YEAR_TEXT_DESCRIPTION}")
        return TrackTags(**values)

    def write_tags(self, file_path: Path, fields: TagFields, id3_version: int = 4) -> None:
        """
        Write tags to an MP3 file in place.

        Args:
            file_path: Path to the MP3 file
            fields: Values to write; an empty core value removes that frame
            id3_version: ID3v2 minor version to save as (3 or 4)
        """
        from mutagen import MutagenError
        from mutagen.id3 import COMM, TALB, TCON, TDRC, TIT2, TPE1, TPE2, TXXX, ID3TimeStamp
        from mutagen.mp3 import MP3

        try:
            audio = MP3(file_path)
        except (MutagenError, OSError) as e:
            raise TagWriteError(file_path, str(e)) from e

        if audio.tags is None:
            audio.add_tags()
        tags = audio.tags

        def replace_text(frame_cls: Any, value: str) -> None:
            tags.delall(frame_cls.__name__)
            if value:
                tags.add(frame_cls(encoding=3, text=[value]))

        replace_text(TPE1, fields.artist)
        replace_text(TALB, fields.album)
        replace_text(TCON, fields.genre)
        # TDRC holds ID3 timestamps only; any other year text goes to TXXX:YEAR
        tags.delall(f"TXXX:{YEAR_TEXT_DESCRIPTION}")
        if ID3TimeStamp(fields.year).text == fields.year:
            replace_text(TDRC, fields.year)
        else:
            tags.delall("TDRC")
            tags.add(TXXX(encoding=3, desc=YEAR_TEXT_DESCRIPTION, text=[fields.year]))
        replace_text(TIT2, fields.title)

        # Drop every existing album artist frame so the file never ends up with two
        replace_text(TPE2, fields.album_artist)

        # Same description and language replace the comment of an earlier import
        tags.add(
            COMM(
                encoding=3,
                lang="eng",
                desc=fields.comment_description,
                text=[fields.comment],
            )
        )

        try:
            audio.save(v2_version=id3_version)
        except (MutagenError, OSError) as e:
            raise TagWriteError(file_path, str(e)) from e

    def read_comment(self, file_path: Path, description: str = DEFAULT_COMMENT_DESCRIPTION) -> str:
        """Read the comment frame with the given description ("" if absent)."""
        from mutagen import MutagenError
        from mutagen.mp3 import MP3

        try:
            audio = MP3(file_path)
        except (MutagenError, OSError) as e:
            raise TagReadError(file_path, str(e)) from e

        if audio.tags is None:
            return ""
        for frame in audio.tags.getall("COMM"):
            if frame.desc == description:
                return strip_trailing_null(str(frame))
        return ""

    @staticmethod
    def _frame_text(tags: Any, frame_id: str) -> str:
        frame = tags.get(frame_id)
        if frame is None:
            return ""
        if frame_id == "TCON":
            # genres resolves numeric ID3v1 references such as "(17)"
            text = PAD_CHARACTER.join(frame.genres)
        else:
            text = str(frame)
        return strip_trailing_null(text)


_accessor = ID3TagAccessor()


def read_tags(file_path: Path) -> TrackTags:
    """Read artist, album, genre, year and title from a track file."""
    return _accessor.read_tags(file_path)


def write_tags(file_path: Path, fields: TagFields, id3_version: int = 4) -> None:
    """Write tag fields to a track file in place."""
    _accessor.write_tags(file_path, fields, id3_version=id3_version)


def read_comment(file_path: Path, description: str = DEFAULT_COMMENT_DESCRIPTION) -> str:
    """Read the provenance comment written by a previous import."""
    return _accessor.read_comment(file_path, description)
