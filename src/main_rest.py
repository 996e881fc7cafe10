#!/usr/bin/env python3
"""
ThreadRest - Thread Border Router REST gateway

Serves the border router REST API over HTTP.

Usage:
    python3 src/main_rest.py --simulate                 # Simulated mesh, localhost:8081
    python3 src/main_rest.py --simulate --port 9000     # Custom port
    python3 src/main_rest.py --simulate --host 0.0.0.0  # Listen on all interfaces
    python3 src/main_rest.py --show-config              # Print effective settings
"""

import argparse
import logging
import os
import sys
from dataclasses import fields
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.table import Table

from __version__ import __version__
from mesh.simulator import SimulatedMeshController
from rest.config import ENV_HOST, ENV_LOG_LEVEL, ENV_PORT, RestConfig
from rest.server import RestServer
from utils.logging_config import setup_logging
from web.app import create_app

logger = logging.getLogger(__name__)

console = Console()

ENV_FIELDS = {'host': ENV_HOST, 'port': ENV_PORT, 'log_level': ENV_LOG_LEVEL}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='ThreadRest - Thread Border Router REST gateway',
        epilog='''
Examples:
  python3 src/main_rest.py --simulate                  # Localhost only (secure)
  python3 src/main_rest.py --simulate --host 0.0.0.0   # Network access
  python3 src/main_rest.py --show-config               # Show effective settings

Environment variables:
  THREADREST_HOST=0.0.0.0      # Set bind address
  THREADREST_PORT=9000         # Set port
  THREADREST_LOG_LEVEL=DEBUG   # Set log level
''',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--host', help='Host to bind to (default: 127.0.0.1, env: THREADREST_HOST)')
    parser.add_argument('--port', '-p', type=int, help='Port to listen on (default: 8081, env: THREADREST_PORT)')
    parser.add_argument('--config', '-c', type=Path, help='Config file (default: ~/.config/threadrest/rest.json)')
    parser.add_argument('--simulate', action='store_true', help='Use the simulated Thread mesh')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', help='Also log to this file (rotated)')
    parser.add_argument('--show-config', action='store_true', help='Print effective settings and exit')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def apply_args(config: RestConfig, args) -> dict:
    """Apply command line overrides. Returns {field: source} for display."""
    sources = {f.name: 'default' for f in fields(config)}
    defaults = RestConfig()
    for name in sources:
        if getattr(config, name) != getattr(defaults, name):
            sources[name] = 'file'
    for name, env_name in ENV_FIELDS.items():
        if os.environ.get(env_name):
            sources[name] = 'env'

    overrides = {
        'host': args.host,
        'port': args.port,
        'log_file': args.log_file,
        'simulate': True if args.simulate else None,
        'log_level': 'DEBUG' if args.debug else None,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)
            sources[name] = 'cli'
    return sources


def show_config(config: RestConfig, sources: dict) -> None:
    """Display effective configuration"""
    table = Table(title="ThreadRest Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source", style="yellow")

    for name, value in config.to_dict().items():
        table.add_row(name, str(value) if value != "" else "-", sources.get(name, 'default'))

    console.print(table)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = RestConfig.load(args.config)
    sources = apply_args(config, args)

    if args.show_config:
        show_config(config, sources)
        return 0

    setup_logging(level=config.log_level, log_file=config.log_file or None)

    try:
        config.validate()
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        return 2

    if not config.simulate:
        console.print("[red]No Thread stack binding available; run with --simulate[/red]")
        return 1

    controller = SimulatedMeshController()
    server = RestServer(controller, config)
    app = create_app(server, config)

    logger.info(f"ThreadRest {__version__} listening on http://{config.host}:{config.port}/")
    console.print(f"[bold]ThreadRest[/bold] {__version__} on http://{config.host}:{config.port}/ "
                  f"[dim](simulated mesh, Ctrl+C to stop)[/dim]")

    app.run(
        host=config.host,
        port=config.port,
        debug=False,
        threaded=False,  # RestServer is single-threaded
        use_reloader=False,
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
