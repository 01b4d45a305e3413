"""Pytest configuration and shared fixtures for album-importer tests."""

from __future__ import annotations

import subprocess
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from album_importer.archive import Album
from tests.mp3_helpers import create_mp3

# =============================================================================
# Albums and archives
# =============================================================================


@pytest.fixture
def make_album(tmp_path: Path) -> Callable[..., Album]:
    """Build an extracted Album with tagged tracks under tmp_path."""

    def _make(
        name: str = "record.zip",
        titles: tuple[str, ...] = ("First", "Second"),
        artist: str = "The Band",
        album: str = "The Record",
        genre: str = "Rock",
        year: str = "1999",
    ) -> Album:
        directory = tmp_path / "work" / Path(name).stem
        tracks = []
        for i, title in enumerate(titles, start=1):
            tracks.append(
                create_mp3(
                    directory / f"{i:02d} {title.lower()}.mp3",
                    artist=artist,
                    album=album,
                    genre=genre,
                    year=year,
                    title=title,
                )
            )
        return Album(original_name=name, working_directory=directory, tracks=tuple(tracks))

    return _make


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Build a zip archive of tagged MP3 files under tmp_path/archives."""

    def _make(
        name: str = "record.zip",
        titles: tuple[str, ...] = ("First", "Second"),
        artist: str = "The Band",
        album: str = "The Record",
        extra_files: dict[str, bytes] | None = None,
    ) -> Path:
        staging = tmp_path / "staging" / Path(name).stem
        archive = tmp_path / "archives" / name
        archive.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive, "w") as zf:
            for i, title in enumerate(titles, start=1):
                track = create_mp3(
                    staging / f"{i:02d} {title.lower()}.mp3",
                    artist=artist,
                    album=album,
                    genre="Rock",
                    year="1999",
                    title=title,
                )
                zf.write(track, track.name)
            for member, data in (extra_files or {}).items():
                zf.writestr(member, data)
        return archive

    return _make


# =============================================================================
# Editor stubbing
# =============================================================================


@pytest.fixture
def fake_editor(monkeypatch: pytest.MonkeyPatch) -> Callable[..., list[list[str]]]:
    """
    Replace the external editor with an in-process edit.

    ``fake_editor(edit, returncode=0)`` makes every editor run apply
    ``edit(text) -> text`` to the document and exit with ``returncode``.
    Returns the list of command lines the editor was started with.
    """

    def _install(
        edit: Callable[[str], str] = lambda text: text,
        returncode: int = 0,
    ) -> list[list[str]]:
        calls: list[list[str]] = []

        def fake_run(argv: list[str], *args: object, **kwargs: object):
            calls.append(list(argv))
            document = Path(argv[-1])
            document.write_text(edit(document.read_text(encoding="utf-8")), encoding="utf-8")
            return subprocess.CompletedProcess(argv, returncode)

        monkeypatch.setattr("album_importer.editor.shutil.which", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr("album_importer.editor.subprocess.run", fake_run)
        return calls

    return _install
