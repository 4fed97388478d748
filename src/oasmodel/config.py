"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for oasmodel:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.oasmodel/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Settings** -- A single :class:`Settings` JSON file storing defaults
  for output rendering and document validation.
* **Precedence resolution** -- :func:`resolve_settings` merges CLI flags,
  environment variables, project-local config, and user config into the
  effective settings.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from oasmodel.exceptions import ConfigError
from oasmodel.validation import IssueKind

logger = logging.getLogger(__name__)

_APP_NAME = "oasmodel"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "oasmodel.json"

ENV_FORMAT = "OASMODEL_FORMAT"
ENV_FAIL_ON = "OASMODEL_FAIL_ON"

OUTPUT_FORMATS = ("auto", "json", "plain", "rich")
DOCUMENT_FORMATS = ("yaml", "json")


# --- Settings model ---


class OutputSettings(BaseModel):
    """How results are rendered."""

    format: str = Field(default="auto", description="Output format: auto, json, plain, rich")
    document_format: str = Field(
        default="yaml", description="Default target of 'convert': yaml or json"
    )
    yaml_indent: int = Field(default=2, ge=1, le=8)
    json_indent: int = Field(default=2, ge=0, le=8)

    @field_validator("format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        if value not in OUTPUT_FORMATS:
            raise ValueError(f"must be one of {', '.join(OUTPUT_FORMATS)}")
        return value

    @field_validator("document_format")
    @classmethod
    def _known_document_format(cls, value: str) -> str:
        if value not in DOCUMENT_FORMATS:
            raise ValueError(f"must be one of {', '.join(DOCUMENT_FORMATS)}")
        return value


class ValidationSettings(BaseModel):
    """Options passed to :func:`~oasmodel.validation.validate_document`."""

    allow_external_refs: bool = False
    check_security_names: bool = True
    fail_on: list[IssueKind] = Field(
        default_factory=lambda: list(IssueKind),
        description="Issue kinds that make 'validate' exit non-zero",
    )

    @field_validator("fail_on", mode="before")
    @classmethod
    def _split_kinds(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


class Settings(BaseModel):
    """User-wide settings persisted at ``~/.config/oasmodel/config.json``.

    Loaded and saved by :func:`load_settings` and :func:`save_settings`.
    See :func:`resolve_settings` for the full precedence chain.
    """

    output: OutputSettings = Field(default_factory=OutputSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/oasmodel/`` (default ``~/.config/oasmodel/``).
    On macOS/Windows: ``~/.oasmodel/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/oasmodel/`` (default ``~/.local/share/oasmodel/``).
    On macOS/Windows: ``~/.oasmodel/``, shared with the config file.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the error re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


# --- User settings ---


def settings_path() -> Path:
    """Path to the user settings file."""
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, label: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def _validate(data: dict[str, Any], origin: str) -> Settings:
    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings from {origin}: {exc}") from exc


def load_settings() -> Settings:
    """Load the user settings from the XDG config directory.

    Returns:
        The deserialised :class:`Settings`; defaults if the file does not
        exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            validation.
    """
    path = settings_path()
    if not path.is_file():
        return Settings()
    return _validate(_read_json(path, "settings"), str(path))


def save_settings(settings: Settings) -> None:
    """Persist *settings* atomically to disk."""
    data = settings.model_dump(mode="json")
    _atomic_write(settings_path(), json.dumps(data, indent=2) + "\n")
    logger.debug("Saved settings to %s", settings_path())


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local overrides from ``./oasmodel.json``.

    The file holds a partial settings object, e.g.
    ``{"validation": {"allow_external_refs": true}}``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path, "project config")


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_settings(
    cli_format: Optional[str] = None,
    cli_fail_on: Optional[str] = None,
) -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_format``, ``cli_fail_on``)
        2. Environment variables (``OASMODEL_FORMAT``, ``OASMODEL_FAIL_ON``)
        3. Project config (``./oasmodel.json``)
        4. User config (``~/.config/oasmodel/config.json``)
        5. Defaults

    ``cli_fail_on`` and ``OASMODEL_FAIL_ON`` are comma-separated issue
    kinds, e.g. ``constraint_violation,unresolved_reference``.

    Raises:
        ConfigError: If any layer holds an invalid value.
    """
    data = load_settings().model_dump(mode="json")
    origin = "user config"

    project = load_project_config()
    if project is not None:
        data = _merge(data, project)
        origin = "project config"

    env_format = os.environ.get(ENV_FORMAT)
    if env_format:
        data["output"]["format"] = env_format
        origin = ENV_FORMAT
    env_fail_on = os.environ.get(ENV_FAIL_ON)
    if env_fail_on:
        data["validation"]["fail_on"] = env_fail_on
        origin = ENV_FAIL_ON

    if cli_format is not None:
        data["output"]["format"] = cli_format
        origin = "command line"
    if cli_fail_on is not None:
        data["validation"]["fail_on"] = cli_fail_on
        origin = "command line"

    return _validate(data, origin)
