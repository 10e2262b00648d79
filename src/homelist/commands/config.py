"""Configuration management commands."""

from typing import Optional

import typer
from pydantic import ValidationError

from homelist.models.exceptions import InvalidInputError
from homelist.services.config_service import get_config_service
from homelist.utils.ui.console import get_console
from homelist.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(help="Configuration management commands")
console = get_console()


def parse_value(value: str) -> str | int | bool | None:
    """Interpret a command-line value: booleans, integers and ``none``."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.lower() in ("none", "null"):
        return None
    if value.isdigit():
        return int(value)
    return value


@app.command("view")
@command_wrapper
def view_config(
    output: str = typer.Option("yaml", "--output", "-o", help="Output format"),
) -> None:
    """View current configuration."""
    config_dict = get_config_service().config.model_dump()
    if config_dict["server"].get("edit_secret"):
        config_dict["server"]["edit_secret"] = "********"
    format_output(config_dict, output)


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., api.endpoint)"),
) -> None:
    """Get a configuration value."""
    value = get_config_service().get(key)
    if value is None:
        raise InvalidInputError(f"Configuration key '{key}' not found")
    console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., list.page_size)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    parsed_value = parse_value(value)
    try:
        get_config_service().set(key, parsed_value)
    except KeyError:
        raise InvalidInputError(f"Unknown configuration key '{key}'") from None
    except ValidationError as e:
        raise InvalidInputError(f"Invalid value for '{key}': {e.errors()[0]['msg']}") from e
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper
def reset_config(
    key: Optional[str] = typer.Argument(None, help="Configuration key to reset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            format_error("Cancelled")
            raise typer.Exit(0)

    try:
        get_config_service().reset(key)
    except (KeyError, AttributeError):
        raise InvalidInputError(f"Unknown configuration key '{key}'") from None

    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")
