"""Config commands -- view and modify user settings.

Provides the ``oasmodel config`` sub-command group for reading, updating,
and resetting the user's settings file (:class:`~oasmodel.config.Settings`).
Settings control output rendering and the defaults of ``validate``.
"""

from __future__ import annotations

from typing import Any

import typer

from oasmodel.commands.common import exit_with
from oasmodel.config import (
    Settings,
    get_config_dir,
    load_settings,
    resolve_settings,
    save_settings,
)
from oasmodel.exceptions import ConfigError, InvalidUsageError
from oasmodel.output import format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Show settings after project config and environment overrides.",
    ),
) -> None:
    """Show the current settings.

    Example::

        oasmodel config show
        oasmodel --json config show --effective
    """
    try:
        settings = resolve_settings() if effective else load_settings()
    except ConfigError as exc:
        exit_with(exc)
    info(f"Config directory: {get_config_dir()}")
    format_response(settings.model_dump(mode="json"))


def _coerce(current: Any, value: str, key: str) -> Any:
    """Convert *value* to the type of the setting it replaces."""
    if isinstance(current, bool):
        lowered = value.lower()
        if lowered not in ("true", "false", "1", "0", "yes", "no"):
            raise InvalidUsageError(f"Expected true or false for {key}, got: {value}")
        return lowered in ("true", "1", "yes")
    if isinstance(current, int):
        try:
            return int(value)
        except ValueError:
            raise InvalidUsageError(f"Expected integer for {key}, got: {value}") from None
    if isinstance(current, list):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Setting key (dot notation, e.g. 'output.format')."),
    value: str = typer.Argument(help="Value to set. Lists are comma-separated."),
) -> None:
    """Set a setting.

    The value is coerced to the type of the existing setting and the
    result is validated before it is saved.

    Example::

        oasmodel config set output.format json
        oasmodel config set output.yaml_indent 4
        oasmodel config set validation.fail_on constraint_violation,shape_mismatch
    """
    try:
        data = load_settings().model_dump(mode="json")

        keys = key.split(".")
        target = data
        for k in keys[:-1]:
            if not isinstance(target.get(k), dict):
                raise InvalidUsageError(f"Invalid setting key: {key}")
            target = target[k]

        final_key = keys[-1]
        if final_key not in target or isinstance(target[final_key], dict):
            raise InvalidUsageError(f"Unknown setting key: {key}")

        coerced = _coerce(target[final_key], value, key)
        target[final_key] = coerced

        try:
            new_settings = Settings.model_validate(data)
        except ValueError as exc:
            raise InvalidUsageError(f"Invalid value for {key}: {exc}") from exc

        save_settings(new_settings)
    except (ConfigError, InvalidUsageError) as exc:
        exit_with(exc)

    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Reset all settings to their defaults.

    Example::

        oasmodel config reset --yes
    """
    if not yes:
        confirmed = typer.confirm("Reset all settings to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_settings(Settings())
    success("Settings reset to defaults.")
