"""Config command for viewing and managing lexistore configuration."""

import typer

from ..app import app, console
from ...config import get_config, reset_config, CONFIG_FILE


VALID_KEYS = {
    "build.max_word_length",
    "build.max_definition_links",
    "build.progress_step",
    "defaults.db_path",
}

INT_FIELDS = {
    "max_word_length",
    "max_definition_links",
    "progress_step",
}


@app.command("config")
def config_command(
    action: str = typer.Argument(
        ...,
        help="Action: show, set, reset",
    ),
    key: str | None = typer.Argument(
        None,
        help="Config key (e.g. build.max_word_length, defaults.db_path)",
    ),
    value: str | None = typer.Argument(
        None,
        help="Value to set",
    ),
):
    """View or modify lexistore configuration.

    Examples:
        lexistore config show
        lexistore config set build.max_word_length 8
        lexistore config set defaults.db_path ./storage/csw.db
        lexistore config reset
    """
    if action == "show":
        _show_config()
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage:[/red] lexistore config set <key> <value>")
            console.print()
            console.print("Available keys:")
            for k in sorted(VALID_KEYS):
                console.print(f"  {k}")
            raise typer.Exit(1)
        _set_config(key, value)
    elif action == "reset":
        _reset_config()
    else:
        console.print(f"[red]Unknown action:[/red] {action}")
        console.print("Valid actions: show, set, reset")
        raise typer.Exit(1)


def _show_config():
    """Display current resolved configuration."""
    config = get_config()

    console.print()
    console.print("[bold]Lexistore Configuration[/bold]")
    console.print("─" * 40)

    console.print()
    console.print("[bold cyan]Build[/bold cyan]")
    console.print(f"  max_word_length      = {config.build.max_word_length}")
    console.print(f"  max_definition_links = {config.build.max_definition_links}")
    console.print(f"  progress_step        = {config.build.progress_step}")

    console.print()
    console.print("[bold cyan]Defaults[/bold cyan]")
    console.print(f"  db_path = {config.defaults.db_path}")

    console.print()
    console.print("[bold cyan]Lexicon Styles[/bold cyan]")
    if config.lexicon_styles:
        for style in config.lexicon_styles:
            relation = "in" if style.in_compare_lexicon else "not in"
            console.print(
                f"  {style.lexicon}: {style.symbol!r} when {relation} "
                f"{style.compare_lexicon}",
                markup=False,
            )
    else:
        console.print("  [dim](none)[/dim]")

    console.print()
    if CONFIG_FILE.exists():
        console.print(f"Config file: {CONFIG_FILE}")
    else:
        console.print(f"Config file: [dim]not created yet[/dim] ({CONFIG_FILE})")
    console.print()


def _set_config(key: str, value: str):
    """Set a config value and save."""
    if key not in VALID_KEYS:
        console.print(f"[red]Unknown key:[/red] {key}")
        console.print()
        console.print("Available keys:")
        for k in sorted(VALID_KEYS):
            console.print(f"  {k}")
        raise typer.Exit(1)

    config = get_config()

    zone, field_name = key.split(".", 1)
    target = config.build if zone == "build" else config.defaults

    if field_name in INT_FIELDS:
        try:
            parsed = int(value)
        except ValueError:
            console.print(f"[red]Invalid integer value:[/red] {value}")
            raise typer.Exit(1)
        minimum = 0 if field_name == "max_definition_links" else 1
        if parsed < minimum:
            console.print(f"[red]Value must be >= {minimum}:[/red] {value}")
            raise typer.Exit(1)
        setattr(target, field_name, parsed)
    else:
        setattr(target, field_name, value)

    config.save()
    reset_config()  # Clear cached singleton so next get_config() reloads

    console.print(f"[green]✓[/green] Set {key} = {value}")
    console.print(f"  Saved to {CONFIG_FILE}")


def _reset_config():
    """Reset config to defaults."""
    if CONFIG_FILE.exists():
        CONFIG_FILE.unlink()
        reset_config()
        console.print("[green]✓[/green] Config reset to defaults")
        console.print(f"  Removed {CONFIG_FILE}")
    else:
        console.print("Config already at defaults (no config file exists)")
