"""Logging setup for album-importer.

Track paths live deep inside the scratch directory, which makes log lines
hard to read. The formatter here shortens paths in log messages and
arguments to ``parent/name`` or to a path relative to a configured root.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

# Absolute POSIX-style paths with at least two components and a file suffix
_PATH_PATTERN = re.compile(r"(?<![\w.])/(?:[^\s/:]+/)+[^\s/:]+\.\w+")

_HANDLER_NAME = "album-importer"


def shorten_path(file_path: Path | str, root: Path | str | None = None) -> str:
    """Convert a path to a short form for logging.

    If root is provided and contains the path, returns the path relative to
    it. Otherwise, returns just the filename with its parent directory.

    Args:
        file_path: Path to convert
        root: Optional root directory

    Returns:
        Relative or minimal path string
    """
    path = Path(file_path)

    if root:
        try:
            return str(path.relative_to(Path(root)))
        except ValueError:
            pass

    if path.parent.name:
        return f"{path.parent.name}/{path.name}"
    return path.name


class PathShorteningFormatter(logging.Formatter):
    """Log formatter that shortens file paths in messages and arguments."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        root: Path | None = None,
    ):
        super().__init__(fmt, datefmt)
        self.root = root

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so other handlers still see the original record
        record = logging.makeLogRecord(record.__dict__)

        if isinstance(record.msg, str):
            record.msg = _PATH_PATTERN.sub(lambda m: shorten_path(m.group(0), self.root), record.msg)

        if record.args:
            record.args = self._shorten_args(record.args)

        return super().format(record)

    def _shorten_args(self, args: tuple[Any, ...] | Mapping[str, Any]) -> Any:
        if isinstance(args, Mapping):
            return {key: self._shorten_value(value) for key, value in args.items()}
        return tuple(self._shorten_value(arg) for arg in args)

    def _shorten_value(self, value: Any) -> Any:
        if isinstance(value, Path):
            return shorten_path(value, self.root)
        return value


def configure_logging(
    level: int = logging.WARNING,
    format_string: str | None = None,
    shorten_paths: bool = True,
    root: Path | None = None,
) -> None:
    """Configure root logging for the CLI.

    Args:
        level: Logging level
        format_string: Optional custom format string
        shorten_paths: Whether to shorten file paths in log output
        root: Directory that paths are made relative to when shortening
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if shorten_paths:
        formatter: logging.Formatter = PathShorteningFormatter(fmt=format_string, root=root)
    else:
        formatter = logging.Formatter(fmt=format_string)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # Replace the handler of an earlier call instead of stacking a second one
    for existing in list(root_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)


## Tests


def test_shorten_path():
    path = Path("/tmp/album-importer/01-record/01 intro.mp3")

    assert shorten_path(path, "/tmp/album-importer") == "01-record/01 intro.mp3"
    assert shorten_path(path) == "01-record/01 intro.mp3"
    assert shorten_path(Path("/elsewhere/a/b.mp3"), "/tmp/album-importer") == "a/b.mp3"


def test_formatter_shortens_message_paths():
    formatter = PathShorteningFormatter(fmt="%(message)s")
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg="Reading tags from /var/tmp/work/01-x/track.mp3 now",
        args=(),
        exc_info=None,
    )

    assert formatter.format(record) == "Reading tags from 01-x/track.mp3 now"


def test_formatter_shortens_path_args():
    formatter = PathShorteningFormatter(fmt="%(message)s", root=Path("/work"))
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg="Copying %s",
        args=(Path("/work/01-x/a.mp3"),),
        exc_info=None,
    )

    assert formatter.format(record) == "Copying 01-x/a.mp3"
