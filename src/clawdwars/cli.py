"""CLI entry point for clawdwars."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import typer

from clawdwars.config import ClawdwarsConfig

app = typer.Typer(
    name="clawdwars",
    help="MCP server that lets an AI agent play a text MUD over telnet.",
    no_args_is_help=True,
)


def setup_logging(verbose: bool = False) -> None:
    # stdout carries the MCP protocol; logs must go to stderr
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


@app.command()
def serve(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Run the MCP server on stdio."""
    from clawdwars.server import run_stdio

    setup_logging(verbose)
    config = ClawdwarsConfig.load(config_file)
    asyncio.run(run_stdio(config))


@app.command()
def tools(
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """List the tools the server exposes, with their parameter schemas."""
    from clawdwars.server import build_registry

    config = ClawdwarsConfig.load(config_file)
    registry = build_registry(config)
    for tool in registry:
        typer.echo(f"{tool.name}: {tool.description}")
        properties = tool.input_schema().get("properties", {})
        for param, schema in properties.items():
            typer.echo(f"    {param} ({schema.get('type', 'any')})")


@app.command()
def memory(
    character_name: str = typer.Argument(help="Character whose memory to show."),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
) -> None:
    """Print a character's stored memory as JSON."""
    from clawdwars.memory import MemoryStore

    config = ClawdwarsConfig.load(config_file)
    store = MemoryStore(config.memory_dir)
    try:
        path = store.path_for(character_name)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    if not path.exists():
        typer.echo(f"No memory saved for {character_name} ({path})", err=True)
        raise typer.Exit(1)

    record = asyncio.run(store.load(character_name))
    typer.echo(json.dumps(record.model_dump(), indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
