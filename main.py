#!/usr/bin/env python3
"""
Music MCP - Apple Music control for MCP clients
===============================================

Main entry point for the server.

Usage:
    music-mcp                      # MCP server on stdio
    music-mcp --http --port 8000   # Local HTTP service bus
    music-mcp --list-tools         # Print the tool catalogue
    music-mcp --check              # Print diagnostics and exit
    music-mcp --help               # Show help
"""

from dataclasses import replace
from typing import Optional, Sequence
import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.table import Table

from infra.config import LOG_LEVELS, MusicConfig, load_config, validate_config
from infra.logging import configure_logging, flush_logging
from infra.server import MusicMCPServer
from infra.version import get_version


# stdout carries the protocol; everything human-readable goes to stderr
console = Console(stderr=True)


def setup_logging(config: MusicConfig) -> None:
    configure_logging(
        level=config.logging_level,
        log_file=config.log_file,
        console=config.console_logging,
        file=config.file_logging,
    )


def print_tools(server: MusicMCPServer) -> None:
    """Print the tool catalogue."""
    table = Table(title=f"Music MCP {get_version()} tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Required")
    table.add_column("Description", style="dim")

    for descriptor in server.dispatcher.registry.list_tools():
        table.add_row(
            descriptor.name,
            ", ".join(descriptor.schema.required) or "-",
            descriptor.description,
        )
    console.print(table)


async def run_check(server: MusicMCPServer) -> int:
    """Run the info tool and print its report."""
    envelope = await server.dispatcher.dispatch("info", {})
    data = envelope.data or {}

    table = Table(title="Music MCP diagnostics", show_header=False)
    table.add_column("Check", style="cyan")
    table.add_column("Result")
    table.add_row("Version", str(data.get("version")))
    table.add_row("Music app", _flag(data.get("musicAppAvailable")))
    table.add_row("AppleScript", _flag(data.get("appleScriptAvailable")))
    table.add_row("Log file", f"{data.get('loggerPath')} ({data.get('loggerStatus')})")
    console.print(table)

    issues = data.get("configurationIssues") or []
    if issues:
        console.print("[bold yellow]Configuration issues:[/bold yellow]")
        for issue in issues:
            console.print(f"  - {issue}")
    else:
        console.print("[green]No configuration issues[/green]")
    return 0


def _flag(value) -> str:
    return "[green]available[/green]" if value else "[red]unavailable[/red]"


async def serve(server: MusicMCPServer, args: argparse.Namespace) -> None:
    """Serve until the transport ends or a shutdown signal arrives."""
    if args.http:
        from infra.service_bus import create_app, run_server
        app = create_app(server.dispatcher, server.health)
        console.print(f"[bold green]Music MCP[/bold green] on http://{args.host}:{args.port}")
        main_coro = run_server(app, host=args.host, port=args.port, log_level=server.config.log_level_name)
    else:
        main_coro = server.run()

    task = asyncio.ensure_future(main_coro)
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, task.cancel)
        except (NotImplementedError, RuntimeError):
            pass  # not supported on this platform; KeyboardInterrupt still applies

    try:
        await task
    except asyncio.CancelledError:
        pass


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Music MCP - Apple Music control over the Model Context Protocol"
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to a YAML configuration file"
    )
    parser.add_argument(
        "--log-level", "-l",
        default=None,
        choices=list(LOG_LEVELS),
        help="Logging level (overrides configuration)"
    )
    parser.add_argument(
        "--http",
        action="store_true",
        help="Serve the local HTTP service bus instead of stdio"
    )
    parser.add_argument("--host", default="127.0.0.1", help="HTTP host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="HTTP port to bind to")
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="Print the available tools and exit"
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Print diagnostics and exit"
    )
    parser.add_argument("--version", action="version", version=f"music-mcp {get_version()}")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.log_level:
        config = replace(config, log_level=args.log_level)

    setup_logging(config)
    logger = logging.getLogger("music_mcp.main")

    for issue in validate_config(config):
        logger.warning(f"Configuration issue: {issue}")

    server = MusicMCPServer(config)

    try:
        if args.list_tools:
            print_tools(server)
            return 0
        if args.check:
            return asyncio.run(run_check(server))

        asyncio.run(serve(server, args))
    except KeyboardInterrupt:
        pass
    finally:
        logger.info("Shutting down")
        flush_logging()

    return 0


if __name__ == "__main__":
    sys.exit(main())
