"""Tests for building the editable snapshot of a batch."""

from __future__ import annotations

from pathlib import Path

import pytest

from album_importer.archive import Album
from album_importer.edit_set import EditableAlbum, album_key, materialize, materialize_album
from album_importer.errors import TagReadError
from tests.mp3_helpers import create_mp3


def test_single_album_two_tracks(make_album):
    album = make_album(titles=("Intro", "Outro"), artist="Nina", album="Live", year="1968")

    edit_set = materialize([album])

    assert len(edit_set.albums) == 1
    edit = edit_set.albums[0]
    assert edit.artist == "Nina"
    assert edit.album_title == "Live"
    assert edit.genre == "Rock"
    assert edit.year == "1968"
    assert edit.track_titles == ["Intro", "Outro"]
    assert edit.key == album_key(0, album)


def test_album_fields_come_from_first_track(tmp_path: Path):
    directory = tmp_path / "mixed"
    tracks = (
        create_mp3(directory / "01.mp3", artist="First", album="One", title="A"),
        create_mp3(directory / "02.mp3", artist="Second", album="Two", title="B"),
    )
    album = Album(original_name="mixed.zip", working_directory=directory, tracks=tracks)

    edit = materialize_album(album)

    assert edit.artist == "First"
    assert edit.album_title == "One"
    assert edit.track_titles == ["A", "B"]


def test_untagged_tracks_give_empty_values(tmp_path: Path):
    directory = tmp_path / "bare"
    tracks = (create_mp3(directory / "01.mp3"), create_mp3(directory / "02.mp3"))
    album = Album(original_name="bare.zip", working_directory=directory, tracks=tracks)

    edit = materialize_album(album)

    assert edit.artist == ""
    assert edit.year == ""
    assert edit.track_titles == ["", ""]


def test_index_alignment(make_album):
    albums = [
        make_album(name="a.zip", titles=("1", "2", "3")),
        make_album(name="b.zip", titles=("only",)),
        make_album(name="c.zip", titles=("x", "y")),
    ]

    edit_set = materialize(albums)

    assert len(edit_set.albums) == len(albums)
    for edit, album in zip(edit_set.albums, albums, strict=True):
        assert len(edit.track_titles) == len(album.tracks)
    assert [edit.key for edit in edit_set.albums] == [
        album_key(i, album) for i, album in enumerate(albums)
    ]


def test_album_without_tracks(tmp_path: Path):
    album = Album(original_name="empty.zip", working_directory=tmp_path, tracks=())

    assert materialize_album(album, 3) == EditableAlbum(key=album_key(3, album))


def test_unreadable_track_aborts_batch(make_album, tmp_path: Path):
    good = make_album(name="good.zip")
    broken_dir = tmp_path / "broken"
    broken_dir.mkdir()
    broken_track = broken_dir / "01 broken.mp3"
    broken_track.write_bytes(b"not audio at all")
    broken = Album(original_name="broken.zip", working_directory=broken_dir, tracks=(broken_track,))

    with pytest.raises(TagReadError) as exc_info:
        materialize([good, broken])
    assert exc_info.value.path == broken_track


def test_album_key_depends_on_position_and_name(tmp_path: Path):
    a = Album(original_name="a.zip", working_directory=tmp_path, tracks=())
    b = Album(original_name="b.zip", working_directory=tmp_path, tracks=())

    assert album_key(0, a) == album_key(0, a)
    assert album_key(0, a) != album_key(1, a)
    assert album_key(0, a) != album_key(0, b)
    assert len(album_key(0, a)) == 8
