"""CLI smoke tests."""

from typer.testing import CliRunner

from unosync.cli import app

runner = CliRunner()


def test_play_with_bots() -> None:
    result = runner.invoke(app, ["play", "--agents", "random,random", "--seed", "3"])
    assert result.exit_code == 0
    assert "Winner: player_" in result.output


def test_tournament_with_bots() -> None:
    result = runner.invoke(app, ["tournament", "--agents", "random,random", "--games", "2", "--seed", "5"])
    assert result.exit_code == 0
    assert "Tournament results:" in result.output


def test_unknown_agent() -> None:
    result = runner.invoke(app, ["play", "--agents", "random,llm"])
    assert result.exit_code != 0
