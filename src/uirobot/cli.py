"""Command-line interface for uirobot.

Provides the main entry point for serving a session API in front of a
UIRobot agent, and one-shot commands that drive a running API.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="uirobot",
        description="Remote command session for the UIRobot agent",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/uirobot.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Connect to the agent and serve the session API")
    serve_parser.add_argument("--robot-host", type=str, default=None, help="Override the agent host")

    keys_parser = subparsers.add_parser("keys", help="Press a key combo, e.g. control+s")
    keys_parser.add_argument("combo", type=str)

    launch_parser = subparsers.add_parser("launch", help="Launch a program (EXE|DIR|ARGS...)")
    launch_parser.add_argument("program", type=str, help="Pipe-separated program, '' to terminate")

    power_parser = subparsers.add_parser("power", help="Wake or shut down the peer")
    power_parser.add_argument("state", choices=["on", "off"])

    move_parser = subparsers.add_parser("move", help="Move the mouse by a distance")
    move_parser.add_argument("x", type=int)
    move_parser.add_argument("y", type=int)

    subparsers.add_parser("status", help="Show connection state and properties")

    return parser.parse_args(argv)


async def _run_client_command(settings, args) -> None:
    """Send one command to a running session API."""
    from uirobot.client import HttpSessionClient

    async with HttpSessionClient(
        base_url=settings.client.base_url,
        timeout=settings.client.timeout,
    ) as client:
        if args.command == "keys":
            await client.send_keys(args.combo)
        elif args.command == "launch":
            await client.launch(args.program)
        elif args.command == "power":
            await client.set_power(args.state == "on")
        elif args.command == "move":
            await client.move_mouse(args.x, args.y)
        elif args.command == "status":
            health = await client.health()
            print(f"Peer:      {health['peer']}")
            print(f"Connected: {health['connected']}")
            print(f"Power:     {health['power']}")
            for name in ("program", "key_down", "left_down", "right_down"):
                print(f"{name + ':':<11}{await client.get_property(name)!r}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the uirobot CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from uirobot.config.settings import load_settings
    from uirobot.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        from uirobot.server import create_app
        import uvicorn

        if args.robot_host:
            settings.robot.host = args.robot_host
        logger.info("Starting session API for %s:%d", settings.robot.host, settings.robot.port)
        app = create_app(robot=settings.robot, session_config=settings.session)
        uvicorn.run(
            app,
            host=settings.server.host,
            port=settings.server.port,
        )
    else:
        asyncio.run(_run_client_command(settings, args))


if __name__ == "__main__":
    main()
