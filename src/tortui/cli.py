"""CLI entry point for tortui."""

from pathlib import Path

import click

from tortui import __version__
from tortui.config import (
    build_keybindings,
    get_config_path,
    load_config,
    read_config_file,
)
from tortui.errors import ConfigError, ModeNotFoundError, TortuiError
from tortui.keybindings import KeyMode, format_key_sequence
from tortui.logging import setup_logging


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to config file.",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None) -> None:
    """tortui - Terminal torrent client."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = get_config_path(config)
    ctx.obj["config"] = load_config(config)


def _load_bindings(ctx: click.Context):
    """Build the bindings table or exit with the configuration error.

    The default key mode must be bound, the UI starts in it.
    """
    try:
        bindings = build_keybindings(ctx.obj["config"])
        if KeyMode.default() not in bindings:
            raise ModeNotFoundError(KeyMode.default(), bindings.keys())
        return bindings
    except TortuiError as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise SystemExit(1)


@main.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the terminal UI."""
    import asyncio

    from tortui.app import App
    from tortui.terminal import BlessedInputSource, full_screen

    config = ctx.obj["config"]
    bindings = _load_bindings(ctx)
    setup_logging(config, console=False)

    source = BlessedInputSource()
    app = App(config=config, bindings=bindings, source=source)

    with full_screen(source.term):
        try:
            asyncio.run(app.run())
        except KeyboardInterrupt:
            pass


@main.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Validate the configuration file."""
    try:
        read_config_file(ctx.obj["config_path"])
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise SystemExit(1)

    bindings = _load_bindings(ctx)
    total = sum(1 for root in bindings.values() for _ in root.walk())
    click.echo(f"Configuration OK: {len(bindings)} key modes, {total} bindings")


@main.command()
@click.option(
    "--mode",
    "-m",
    type=click.Choice([m.value for m in KeyMode]),
    default=None,
    help="Only list this key mode.",
)
@click.pass_context
def keys(ctx: click.Context, mode: str | None) -> None:
    """List key bindings."""
    bindings = _load_bindings(ctx)

    for key_mode, root in bindings.items():
        if mode is not None and key_mode.value != mode:
            continue
        click.echo(f"[{key_mode.value}]")
        for chords, node in root.walk():
            sequence = format_key_sequence(chords)
            description = node.description or ""
            click.echo(f"  {sequence:<20} {node.action.value:<12} {description}".rstrip())


@main.command()
def version() -> None:
    """Show version."""
    click.echo(f"tortui version {__version__}")
