"""Tests for command-line parsing and dispatch."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from uirobot.cli import _run_client_command, parse_args
from uirobot.config.settings import Settings


class TestParseArgs:
    def test_keys(self) -> None:
        args = parse_args(["keys", "control+s"])
        assert args.command == "keys"
        assert args.combo == "control+s"

    def test_move_accepts_negative(self) -> None:
        args = parse_args(["move", "-5", "10"])
        assert (args.x, args.y) == (-5, 10)

    def test_power_choices(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["power", "maybe"])

    def test_serve_with_config(self) -> None:
        args = parse_args(["-c", "robot.yaml", "-v", "serve", "--robot-host", "10.0.0.5"])
        assert str(args.config) == "robot.yaml"
        assert args.verbose
        assert args.robot_host == "10.0.0.5"


class TestClientCommands:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("argv", "method", "expected"),
        [
            (["keys", "alt+F4"], "send_keys", ("alt+F4",)),
            (["launch", "C:/app.exe|C:/"], "launch", ("C:/app.exe|C:/",)),
            (["power", "off"], "set_power", (False,)),
            (["move", "3", "4"], "move_mouse", (3, 4)),
        ],
    )
    async def test_dispatch(self, argv: list[str], method: str, expected: tuple) -> None:
        client = AsyncMock()
        with patch("uirobot.client.HttpSessionClient") as client_cls:
            client_cls.return_value.__aenter__.return_value = client
            await _run_client_command(Settings(), parse_args(argv))
        getattr(client, method).assert_awaited_once_with(*expected)
