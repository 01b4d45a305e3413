from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from album_importer.config import Config
from album_importer.console import print as cprint
from album_importer.console import print_error, print_success
from album_importer.errors import ConfigError, ExitCode, ImporterError
from album_importer.logging_setup import configure_logging
from album_importer.pipeline import ImportResult, run_import


def _report(result: ImportResult) -> None:
    if result.dry_run:
        cprint("[bold]Dry run, no files changed.[/bold]")
        for plan, destination in zip(result.plans, result.copied, strict=True):
            cprint(f"  {plan.path.name} -> {destination}", highlight=False)
        return

    for album in result.edit_set.albums:
        cprint(
            f"  {album.artist} - {album.album_title} ({len(album.track_titles)} tracks)",
            highlight=False,
        )
    print_success(f"Imported {len(result.albums)} albums, {len(result.copied)} tracks")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("archives", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration TOML file",
)
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Library root directory, created if needed",
)
@click.option(
    "--work",
    type=click.Path(file_okay=False, path_type=Path),
    help="Working directory, created if needed and removed after a successful run",
)
@click.option("--editor", help="Editor command (default: $EDITOR, then vim)")
@click.option(
    "--resume-from",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Apply a previously edited document instead of opening the editor",
)
@click.option("--keep-work", is_flag=True, help="Keep the working directory after the run")
@click.option("--id3-version", type=click.Choice(["3", "4"]), help="ID3v2 version to write")
@click.option("--dry-run", is_flag=True, help="Show planned tags and paths without writing")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v for INFO, -vv for DEBUG)")
@click.pass_context
def album_import(
    ctx: click.Context,
    archives: tuple[Path, ...],
    config_path: Path | None,
    root: Path | None,
    work: Path | None,
    editor: str | None,
    resume_from: Path | None,
    keep_work: bool,
    id3_version: str | None,
    dry_run: bool,
    verbose: int,
) -> None:
    """
    Import zip archives of MP3 albums into a music library.

    Extracts each archive, opens the albums' metadata in your editor, rewrites
    the tags from the edited document and copies the tracks to
    ROOT/Artist/Album/NN - Title.mp3.
    """
    if not archives:
        click.echo(ctx.get_help())
        ctx.exit(ExitCode.ERROR)

    logger = logging.getLogger(__name__)

    # Load config (TOML + env vars)
    try:
        cfg = Config.load(config_path)
    except ConfigError as e:
        print_error(str(e))
        sys.exit(e.exit_code)

    # Apply CLI overrides (highest precedence: CLI > Env > Config File > Defaults)
    if root:
        cfg.paths.library_root = root
    if work:
        cfg.paths.work_dir = work
    if keep_work:
        cfg.paths.keep_work_dir = True
    if editor:
        cfg.editor.command = editor
    if id3_version:
        cfg.tagging.id3_version = int(id3_version)

    # Configure logging with CLI > Config precedence
    if verbose > 0:
        log_level = logging.DEBUG if verbose >= 2 else logging.INFO
    else:
        level_str = cfg.logging.level.upper()
        log_level = getattr(logging, level_str, logging.WARNING)

    configure_logging(
        level=log_level,
        format_string=cfg.logging.format,
        shorten_paths=cfg.logging.shorten_paths,
        root=cfg.paths.work_dir,
    )
    if config_path:
        logger.info(f"Loaded config from {config_path}")

    try:
        result = run_import(list(archives), cfg, resume_from=resume_from, dry_run=dry_run)
    except ImporterError as e:
        logger.debug("Import failed", exc_info=True)
        print_error(str(e))
        sys.exit(e.exit_code)

    _report(result)
    sys.exit(ExitCode.SUCCESS)


def main() -> None:
    """Entry point for the album-import CLI."""
    album_import()


if __name__ == "__main__":
    main()
