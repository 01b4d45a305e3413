"""Tests for writing an edited EditSet back onto track files."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest
from mutagen.id3 import ID3

from album_importer.apply import apply_edits, check_correspondence, provenance_comment
from album_importer.document import decode, encode
from album_importer.edit_set import materialize
from album_importer.errors import CorrespondenceMismatchError
from album_importer.tagging import TrackTags, read_comment, read_tags

IMPORT_TIME = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


def test_album_title_edit_is_written_to_every_track(make_album):
    album = make_album(titles=("First", "Second"))
    edit_set = materialize([album])
    edit_set.albums[0].album_title = "The Record (Deluxe)"

    plans = apply_edits(edit_set, [album], now=IMPORT_TIME)

    assert all(plan.written for plan in plans)
    assert [read_tags(track) for track in album.tracks] == [
        TrackTags(
            artist="The Band",
            album="The Record (Deluxe)",
            genre="Rock",
            year="1999",
            title="First",
        ),
        TrackTags(
            artist="The Band",
            album="The Record (Deluxe)",
            genre="Rock",
            year="1999",
            title="Second",
        ),
    ]


def test_deleted_track_line_is_rejected(make_album):
    album = make_album(titles=("First", "Second"))
    text = encode(materialize([album])).decode("utf-8")
    lines = [line for line in text.splitlines() if line.strip() != '"First",']
    edited = decode("\n".join(lines).encode("utf-8"))
    assert edited.albums[0].track_titles == ["Second"]

    with pytest.raises(CorrespondenceMismatchError, match="1 track titles for 2 tracks"):
        apply_edits(edited, [album], now=IMPORT_TIME)

    assert read_tags(album.tracks[0]).title == "First"
    assert read_tags(album.tracks[1]).title == "Second"


def test_album_count_mismatch(make_album):
    albums = [make_album(name="a.zip"), make_album(name="b.zip")]
    edit_set = materialize(albums[:1])

    with pytest.raises(CorrespondenceMismatchError, match="1 albums, import has 2"):
        check_correspondence(edit_set, albums)


def test_reordered_albums_are_detected(make_album):
    albums = [make_album(name="a.zip"), make_album(name="b.zip")]
    edit_set = materialize(albums)
    edit_set.albums.reverse()

    with pytest.raises(CorrespondenceMismatchError) as exc_info:
        check_correspondence(edit_set, albums)

    assert exc_info.value.problems == [
        "album 1 holds the record of album 2 (b.zip)",
        "album 2 holds the record of album 1 (a.zip)",
    ]


def test_unknown_id_is_reported(make_album):
    album = make_album()
    edit_set = materialize([album])
    edit_set.albums[0].key = "deadbeef"

    with pytest.raises(CorrespondenceMismatchError, match="unknown id 'deadbeef'"):
        check_correspondence(edit_set, [album])


def test_record_without_id_is_matched_by_position(make_album):
    album = make_album()
    edit_set = materialize([album])
    edit_set.albums[0].key = None

    check_correspondence(edit_set, [album])


def test_mismatch_in_later_album_writes_nothing(make_album):
    albums = [make_album(name="a.zip", titles=("One",)), make_album(name="b.zip", titles=("x", "y"))]
    edit_set = materialize(albums)
    edit_set.albums[0].artist = "Changed"
    edit_set.albums[1].track_titles.append("extra")

    with pytest.raises(CorrespondenceMismatchError, match="album 2"):
        apply_edits(edit_set, albums, now=IMPORT_TIME)

    assert read_tags(albums[0].tracks[0]).artist == "The Band"


def test_all_problems_are_reported_together(make_album):
    albums = [make_album(name="a.zip"), make_album(name="b.zip")]
    edit_set = materialize(albums)
    for edit in edit_set.albums:
        edit.track_titles.pop()

    with pytest.raises(CorrespondenceMismatchError) as exc_info:
        check_correspondence(edit_set, albums)
    assert len(exc_info.value.problems) == 2


def test_provenance_comment_and_album_artist(make_album):
    album = make_album(name="delivery-42.zip", titles=("Only",))
    edit_set = materialize([album])

    apply_edits(edit_set, [album], comment_description="importer", now=IMPORT_TIME)

    assert provenance_comment("delivery-42.zip", IMPORT_TIME) == (
        "Imported by album-importer from delivery-42.zip on 2024-03-01T12:30:00+00:00"
    )
    assert read_comment(album.tracks[0], "importer") == provenance_comment(
        "delivery-42.zip", IMPORT_TIME
    )

    assert ID3(album.tracks[0]).getall("TPE2")[0].text == ["The Band"]


def test_dry_run_plans_without_writing(make_album):
    album = make_album(titles=("First", "Second"))
    edit_set = materialize([album])
    edit_set.albums[0] = replace(edit_set.albums[0], artist="Someone New")

    plans = apply_edits(edit_set, [album], now=IMPORT_TIME, dry_run=True)

    assert [plan.path for plan in plans] == list(album.tracks)
    assert [plan.fields.title for plan in plans] == ["First", "Second"]
    assert all(plan.fields.artist == "Someone New" for plan in plans)
    assert not any(plan.written for plan in plans)
    assert read_tags(album.tracks[0]).artist == "The Band"


def test_edited_year_text_is_written_verbatim(make_album):
    album = make_album(titles=("First",))
    edit_set = materialize([album])
    edit_set.albums[0].year = "c. 1975"

    apply_edits(edit_set, [album], now=IMPORT_TIME)

    assert read_tags(album.tracks[0]).year == "c. 1975"
