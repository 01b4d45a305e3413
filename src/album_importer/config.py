from __future__ import annotations

import os
import tempfile
import tomllib
from pathlib import Path
from pydantic import BaseModel, Field, ValidationError

from album_importer.errors import ConfigError


def _default_work_dir() -> Path:
    return Path(tempfile.gettempdir()) / "album-importer"


class PathsConfig(BaseModel):
    """Library and scratch locations."""

    library_root: Path = Field(default=Path("."))
    work_dir: Path = Field(default_factory=_default_work_dir)
    # Keep extracted files and the edit document after a successful run
    keep_work_dir: bool = Field(default=False)


class EditorConfig(BaseModel):
    """External editor configuration."""

    # None falls back to $EDITOR, then vim
    command: str | None = Field(default=None)
    document_name: str = Field(default="edit.toml", min_length=1)


class TaggingConfig(BaseModel):
    """ID3 writing configuration."""

    id3_version: int = Field(default=4, ge=3, le=4)
    comment_description: str = Field(default="album-importer")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING")  # DEBUG, INFO, WARNING, ERROR
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    shorten_paths: bool = Field(default=True)


class Config(BaseModel):
    """
    Main configuration for album-importer.

    Loads from TOML file with optional environment variable overrides.
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    tagging: TaggingConfig = Field(default_factory=TaggingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """
        Load configuration from TOML file with environment variable overrides.

        Environment variables take precedence and follow the pattern:
        ALBUM_IMPORTER_<SECTION>_<KEY> (e.g., ALBUM_IMPORTER_PATHS_WORK_DIR)

        All values are gathered into a single dictionary first, then validated
        by Pydantic to ensure consistent type checking and coercion.

        Raises:
            ConfigError: If the file cannot be read or parsed, or a value
                fails validation
        """
        config_dict: dict[str, object] = {}

        if config_path and config_path.exists():
            try:
                config_dict = tomllib.loads(config_path.read_text())
            except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
                raise ConfigError(f"Cannot load config file {config_path}: {e}") from e

        config_dict = cls._merge_env_overrides(config_dict)
        try:
            return cls.model_validate(config_dict)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def _merge_env_overrides(cls, config_dict: dict[str, object]) -> dict[str, object]:
        """
        Merge environment variable overrides into config dictionary.

        Returns a new dictionary with env vars applied, ready for Pydantic validation.
        """
        env_prefix = "ALBUM_IMPORTER_"

        def section(name: str) -> dict[str, object]:
            value = config_dict.setdefault(name, {})
            if not isinstance(value, dict):
                value = {}
                config_dict[name] = value
            return value

        paths = section("paths")
        if library_root := os.getenv(f"{env_prefix}PATHS_LIBRARY_ROOT"):
            paths["library_root"] = library_root
        if work_dir := os.getenv(f"{env_prefix}PATHS_WORK_DIR"):
            paths["work_dir"] = work_dir
        if keep_work_dir := os.getenv(f"{env_prefix}PATHS_KEEP_WORK_DIR"):
            paths["keep_work_dir"] = keep_work_dir.lower() in ("true", "1", "yes")

        editor = section("editor")
        if editor_command := os.getenv(f"{env_prefix}EDITOR_COMMAND"):
            editor["command"] = editor_command
        if document_name := os.getenv(f"{env_prefix}EDITOR_DOCUMENT_NAME"):
            editor["document_name"] = document_name

        tagging = section("tagging")
        if id3_version := os.getenv(f"{env_prefix}TAGGING_ID3_VERSION"):
            tagging["id3_version"] = id3_version
        if comment_description := os.getenv(f"{env_prefix}TAGGING_COMMENT_DESCRIPTION"):
            tagging["comment_description"] = comment_description

        logging_config = section("logging")
        if log_level := os.getenv(f"{env_prefix}LOGGING_LEVEL"):
            logging_config["level"] = log_level
        if log_format := os.getenv(f"{env_prefix}LOGGING_FORMAT"):
            logging_config["format"] = log_format
        if shorten_paths := os.getenv(f"{env_prefix}LOGGING_SHORTEN_PATHS"):
            logging_config["shorten_paths"] = shorten_paths.lower() in ("true", "1", "yes")

        return config_dict


## Tests


def test_config_defaults():
    config = Config()
    assert config.paths.library_root == Path(".")
    assert config.paths.work_dir == Path(tempfile.gettempdir()) / "album-importer"
    assert config.paths.keep_work_dir is False
    assert config.editor.command is None
    assert config.editor.document_name == "edit.toml"
    assert config.tagging.id3_version == 4


def test_config_from_dict():
    config = Config.model_validate(
        {
            "paths": {"library_root": "/music", "keep_work_dir": True},
            "tagging": {"id3_version": 3},
        }
    )
    assert config.paths.library_root == Path("/music")
    assert config.paths.keep_work_dir is True
    assert config.tagging.id3_version == 3


def test_config_rejects_unsupported_id3_version():
    import pytest

    with pytest.raises(ValidationError):
        Config.model_validate({"tagging": {"id3_version": 2}})


def test_config_env_overrides(
    monkeypatch,  # pyright: ignore[reportMissingParameterType,reportUnknownParameterType]
):
    monkeypatch.setenv("ALBUM_IMPORTER_PATHS_WORK_DIR", "/custom/work")  # pyright: ignore[reportUnknownMemberType]
    monkeypatch.setenv("ALBUM_IMPORTER_EDITOR_COMMAND", "nano")  # pyright: ignore[reportUnknownMemberType]
    monkeypatch.setenv("ALBUM_IMPORTER_TAGGING_ID3_VERSION", "3")  # pyright: ignore[reportUnknownMemberType]
    monkeypatch.setenv("ALBUM_IMPORTER_PATHS_KEEP_WORK_DIR", "yes")  # pyright: ignore[reportUnknownMemberType]

    config = Config.load()
    assert config.paths.work_dir == Path("/custom/work")
    assert config.paths.keep_work_dir is True
    assert config.editor.command == "nano"
    assert config.tagging.id3_version == 3


def test_config_load_nonexistent_file():
    config = Config.load(Path("/nonexistent/config.toml"))
    assert config.editor.document_name == "edit.toml"
    assert config.logging.level == "WARNING"


def test_config_env_rejects_non_numeric_id3_version(
    monkeypatch,  # pyright: ignore[reportMissingParameterType,reportUnknownParameterType]
):
    import pytest

    monkeypatch.setenv("ALBUM_IMPORTER_TAGGING_ID3_VERSION", "three")  # pyright: ignore[reportUnknownMemberType]

    with pytest.raises(ConfigError, match="id3_version"):
        Config.load()


def test_config_load_invalid_toml(
    tmp_path,  # pyright: ignore[reportMissingParameterType,reportUnknownParameterType]
):
    import pytest

    config_path = tmp_path / "config.toml"
    config_path.write_text("[paths\nlibrary_root = 1\n")

    with pytest.raises(ConfigError, match="Cannot load config file"):
        Config.load(config_path)
