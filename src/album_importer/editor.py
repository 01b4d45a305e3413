"""
External editor session for the edit document.

Hands the encoded EditSet to the user's interactive editor and blocks until
the editor exits. This is the only point where an import run waits, and it
waits without a timeout: the person editing decides when it ends.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from album_importer.document import read_document, write_document
from album_importer.edit_set import EditSet
from album_importer.errors import (
    EditorExitError,
    EditorLaunchError,
    DocumentWriteError,
    EditorNotFoundError,
    ScratchDirectoryBusyError,
    ScratchDirectoryError,
)

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vim"
DEFAULT_DOCUMENT_NAME = "edit.toml"
LOCK_NAME = ".album-importer.lock"


def resolve_editor(preference: str | None = None) -> list[str]:
    """
    Determine the editor command line.

    The explicit preference wins, then ``$EDITOR``, then ``vim``. The value
    may carry arguments (``code --wait``); the program itself must be
    resolvable on PATH.

    Returns:
        Command line with the program replaced by its full path

    Raises:
        EditorNotFoundError: If the program cannot be located
    """
    command = preference or os.environ.get("EDITOR") or DEFAULT_EDITOR
    try:
        argv = shlex.split(command)
    except ValueError as e:
        raise EditorNotFoundError(f"Cannot parse editor command {command!r}: {e}") from e
    if not argv:
        raise EditorNotFoundError("Editor command is empty")

    program = shutil.which(argv[0])
    if program is None:
        raise EditorNotFoundError(f"Editor {argv[0]!r} not found in PATH")
    return [program, *argv[1:]]


def run_editor(argv: list[str], document: Path) -> None:
    """
    Run the editor on ``document`` in the foreground.

    stdin, stdout and stderr are inherited so the editor owns the terminal
    until it exits.

    Raises:
        EditorLaunchError: If the process cannot be started
        EditorExitError: If the editor exits with a non-zero status
    """
    logger.info(f"Invoking editor {argv[0]} on {document}")
    try:
        result = subprocess.run([*argv, str(document)])
    except OSError as e:
        raise EditorLaunchError(f"Error starting editor {argv[0]}: {e}") from e

    if result.returncode != 0:
        raise EditorExitError(argv[0], result.returncode, document)


def review(
    edit_set: EditSet,
    scratch_dir: Path,
    editor: str | None = None,
    document_name: str = DEFAULT_DOCUMENT_NAME,
) -> EditSet:
    """
    Let a human edit an EditSet through the external editor.

    The document is written to ``scratch_dir`` and stays there whatever the
    outcome, so an aborted or failed session never loses saved edits.

    Returns:
        The EditSet decoded from the document after the editor exits. It
        replaces the input; no attempt is made to merge the two.

    Raises:
        EditorNotFoundError, EditorLaunchError, EditorExitError:
            If the editor cannot be run or reports failure
        DocumentWriteError: If the document cannot be written
        DocumentParseError: If the edited document cannot be decoded
    """
    argv = resolve_editor(editor)

    try:
        scratch_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DocumentWriteError(f"Cannot create scratch directory {scratch_dir}: {e}") from e
    document = scratch_dir / document_name
    write_document(document, edit_set)

    run_editor(argv, document)

    return read_document(document)


@contextmanager
def scratch_lock(scratch_dir: Path) -> Iterator[Path]:
    """
    Hold exclusive use of a scratch directory.

    Creates a lock file holding the current PID and removes it on every
    exit path.

    Raises:
        ScratchDirectoryBusyError: If another run holds the directory
        ScratchDirectoryError: If the directory or lock file cannot be created
    """
    lock_path = scratch_dir / LOCK_NAME
    try:
        scratch_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ScratchDirectoryError(f"Cannot create scratch directory {scratch_dir}: {e}") from e

    try:
        fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError as e:
        try:
            holder = lock_path.read_text().strip() or "unknown"
        except OSError:
            holder = "unknown"
        raise ScratchDirectoryBusyError(
            f"Scratch directory {scratch_dir} is in use by process {holder}; "
            f"remove {lock_path} if that run is gone"
        ) from e
    except OSError as e:
        raise ScratchDirectoryError(f"Cannot lock scratch directory {scratch_dir}: {e}") from e

    try:
        with os.fdopen(fd, "w") as f:
            f.write(str(os.getpid()))
    except OSError as e:
        lock_path.unlink(missing_ok=True)
        raise ScratchDirectoryError(f"Cannot write lock file {lock_path}: {e}") from e

    try:
        yield lock_path
    finally:
        lock_path.unlink(missing_ok=True)
