from __future__ import annotations

import asyncio

import discord
import pytest
from typer.testing import CliRunner

import dadbot.config
import dadbot.main
from dadbot.cli import main as cli

runner = CliRunner()


class _RejectedProvider:
    def __init__(self, *, config, inbound_handler) -> None:
        self.self_id = None
        self.error: Exception | None = None
        self._closed = asyncio.Event()

    async def start(self) -> None:
        self.error = discord.PrivilegedIntentsRequired(None)
        self._closed.set()

    async def stop(self) -> None:
        return None

    async def wait_closed(self) -> None:
        await self._closed.wait()


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("DADBOT_CONFIG_PATH", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)
    monkeypatch.delenv("DADBOT_DISCORD_TOKEN", raising=False)
    monkeypatch.setattr(dadbot.config, "_config", None)


def test_say_prints_dad_reply() -> None:
    result = runner.invoke(cli.app, ["say", "I'm Batman"])

    assert result.exit_code == 0
    assert "Hi Batman, I'm Dad!" in result.output
    assert "dad_joke" in result.output


def test_say_runs_messages_in_order_through_one_dispatcher() -> None:
    result = runner.invoke(cli.app, ["say", "--seed", "3", "cigarettes", "I'm Batman"])

    assert result.exit_code == 0
    assert "gonna go grab some cigarettes" in result.output
    assert "no reply: paused" in result.output
    assert "Hi Batman" not in result.output


def test_say_as_the_bot_itself_is_ignored() -> None:
    result = runner.invoke(cli.app, ["say", "--author", cli.LOCAL_BOT_ID, "I'm Batman"])

    assert result.exit_code == 0
    assert "no reply: self_authored" in result.output


def test_rules_lists_table_in_priority_order() -> None:
    result = runner.invoke(cli.app, ["rules"])

    assert result.exit_code == 0
    names = ["pause", "dad", "frustration", "goodnight", "thermostat", "budget", "joke"]
    positions = [result.output.index(name) for name in names]
    assert positions == sorted(positions)


def test_run_without_token_exits_with_error(monkeypatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda **_: None)

    result = runner.invoke(cli.app, ["run"])

    assert result.exit_code == 1


def test_run_exits_with_error_when_gateway_fails(monkeypatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda **_: None)
    monkeypatch.setattr(dadbot.main, "DiscordChannelProvider", _RejectedProvider)

    result = runner.invoke(cli.app, ["run", "--token", "abc"])

    assert result.exit_code == 1


def test_run_with_disabled_channel_exits_with_error(monkeypatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda **_: None)
    monkeypatch.setattr(dadbot.main, "DiscordChannelProvider", _RejectedProvider)
    monkeypatch.setenv("DADBOT_DISCORD_ENABLED", "false")

    result = runner.invoke(cli.app, ["run", "--token", "abc"])

    assert result.exit_code == 1
