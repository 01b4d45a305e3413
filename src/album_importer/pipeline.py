"""End-to-end import run: extract, edit, tag, copy."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from album_importer.apply import TrackPlan, apply_edits
from album_importer.archive import Album, extract_albums
from album_importer.config import Config
from album_importer.document import read_document
from album_importer.edit_set import EditSet, materialize
from album_importer.editor import review, scratch_lock
from album_importer.errors import ImporterError
from album_importer.library import copy_albums, destination_path

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome of a completed import run."""

    albums: list[Album]
    edit_set: EditSet
    plans: list[TrackPlan] = field(default_factory=list)
    copied: list[Path] = field(default_factory=list)
    dry_run: bool = False


def edit_document_path(config: Config) -> Path:
    """Where the edit document of a run is kept."""
    return config.paths.work_dir / config.editor.document_name


def clean_work_dir(work_dir: Path, albums: list[Album], document: Path) -> None:
    """Remove what this run put into the work directory, then the directory if empty."""
    logger.info(f"Cleaning up work directory {work_dir}")
    for album in albums:
        shutil.rmtree(album.working_directory, ignore_errors=True)
    document.unlink(missing_ok=True)
    try:
        work_dir.rmdir()
    except OSError:
        logger.debug(f"Leaving non-empty work directory {work_dir}")


def planned_destinations(root: Path, edit_set: EditSet) -> list[Path]:
    return [
        destination_path(root, edit, j)
        for edit in edit_set.albums
        for j in range(len(edit.track_titles))
    ]


def run_import(
    archives: list[Path],
    config: Config,
    *,
    resume_from: Path | None = None,
    dry_run: bool = False,
) -> ImportResult:
    """
    Import a batch of archives into the library.

    Args:
        archives: Zip archives, one album each, in the order to present them
        config: Loaded configuration
        resume_from: Edit document of an earlier run to apply instead of
            reading tags and opening the editor again
        dry_run: Plan tag writes and library paths without changing files

    Returns:
        ImportResult describing what was (or would be) written

    Raises:
        ImporterError: On any failure; the work directory and the edit
            document are kept so the run can be resumed
    """
    work_dir = config.paths.work_dir
    document = edit_document_path(config)

    with scratch_lock(work_dir):
        try:
            albums = extract_albums(work_dir, archives)

            if resume_from is not None:
                logger.info(f"Resuming from edit document {resume_from}")
                edit_set = read_document(resume_from)
            else:
                edit_set = review(
                    materialize(albums),
                    work_dir,
                    editor=config.editor.command,
                    document_name=config.editor.document_name,
                )

            plans = apply_edits(
                edit_set,
                albums,
                comment_description=config.tagging.comment_description,
                id3_version=config.tagging.id3_version,
                dry_run=dry_run,
            )

            if dry_run:
                return ImportResult(
                    albums=albums,
                    edit_set=edit_set,
                    plans=plans,
                    copied=planned_destinations(config.paths.library_root, edit_set),
                    dry_run=True,
                )

            copied = copy_albums(config.paths.library_root, albums, edit_set)
        except ImporterError:
            if document.is_file() and resume_from is None:
                logger.error(
                    f"Import aborted; edits kept in {document}. "
                    f"Rerun with --resume-from {document} to apply them."
                )
            raise

    if not config.paths.keep_work_dir:
        clean_work_dir(work_dir, albums, document)

    return ImportResult(albums=albums, edit_set=edit_set, plans=plans, copied=copied)
