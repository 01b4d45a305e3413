__all__ = (
    "main",
    "Config",
    # Extraction
    "Album",
    "extract_album",
    "extract_albums",
    # Edit pipeline
    "EditableAlbum",
    "EditSet",
    "materialize",
    "encode",
    "decode",
    "review",
    "apply_edits",
    "check_correspondence",
    # Tags
    "TagFields",
    "TrackTags",
    "read_tags",
    "write_tags",
    "strip_trailing_null",
    # Library
    "copy_albums",
    "run_import",
    # Errors
    "ImporterError",
    "TagReadError",
    "TagWriteError",
    "DocumentParseError",
    "EditorNotFoundError",
    "EditorExitError",
    "CorrespondenceMismatchError",
)

from album_importer.apply import apply_edits, check_correspondence
from album_importer.archive import Album, extract_album, extract_albums
from album_importer.cli import main
from album_importer.config import Config
from album_importer.document import decode, encode
from album_importer.edit_set import EditableAlbum, EditSet, materialize
from album_importer.editor import review
from album_importer.errors import (
    CorrespondenceMismatchError,
    DocumentParseError,
    EditorExitError,
    EditorNotFoundError,
    ImporterError,
    TagReadError,
    TagWriteError,
)
from album_importer.library import copy_albums
from album_importer.pipeline import run_import
from album_importer.tagging import (
    TagFields,
    TrackTags,
    read_tags,
    strip_trailing_null,
    write_tags,
)
