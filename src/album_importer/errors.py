"""Error taxonomy for the import pipeline.

Every error is fatal to the run. Each class carries the process exit code
the CLI uses, so a caller can tell which stage aborted and whether any
files were already modified.
"""

from __future__ import annotations

from pathlib import Path


class ExitCode:
    """Process exit codes, one per pipeline stage."""

    SUCCESS = 0
    ERROR = 1
    ARCHIVE = 2
    TAG_READ = 3
    EDIT = 4
    CORRESPONDENCE = 5
    TAG_WRITE = 6  # some tracks may already carry new tags
    COPY = 7  # all tags written, library copy incomplete
    BUSY = 8


class ImporterError(Exception):
    """Base class for all import errors."""

    exit_code: int = ExitCode.ERROR


class ConfigError(ImporterError):
    """The configuration file or environment overrides are invalid."""


class ArchiveError(ImporterError):
    """An archive could not be extracted or held no tracks."""

    exit_code = ExitCode.ARCHIVE


class TagReadError(ImporterError):
    """Tags of a track file could not be read."""

    exit_code = ExitCode.TAG_READ

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Cannot read tags from {path}: {reason}")
        self.path = path


class TagWriteError(ImporterError):
    """Tags of a track file could not be written."""

    exit_code = ExitCode.TAG_WRITE

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Cannot write tags to {path}: {reason}")
        self.path = path


class DocumentParseError(ImporterError):
    """The edit document is not well-formed."""

    exit_code = ExitCode.EDIT


class DocumentWriteError(ImporterError):
    """The edit document or its directory could not be written."""

    exit_code = ExitCode.EDIT


class EditorError(ImporterError):
    """Base class for editor session failures."""

    exit_code = ExitCode.EDIT


class EditorNotFoundError(EditorError):
    """The editor program is not on PATH."""


class EditorLaunchError(EditorError):
    """The editor program was found but could not be started."""


class EditorExitError(EditorError):
    """The editor exited with a non-zero status."""

    def __init__(self, editor: str, returncode: int, document: Path):
        super().__init__(
            f"Editor {editor} exited with status {returncode}; edits kept in {document}"
        )
        self.returncode = returncode
        self.document = document


class CorrespondenceMismatchError(ImporterError):
    """The edit set no longer lines up with the extracted albums."""

    exit_code = ExitCode.CORRESPONDENCE

    def __init__(self, problems: list[str]):
        super().__init__("Edit document does not match the imported albums: " + "; ".join(problems))
        self.problems = problems


class LibraryCopyError(ImporterError):
    """A track could not be copied into the library."""

    exit_code = ExitCode.COPY


class ScratchDirectoryError(ImporterError):
    """The scratch directory or its lock file cannot be created."""


class ScratchDirectoryBusyError(ScratchDirectoryError):
    """Another import run holds the scratch directory."""

    exit_code = ExitCode.BUSY
