"""CLI entry point."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import typer
from dotenv import load_dotenv

if TYPE_CHECKING:
    from unosync.agent.protocol import AgentProtocol

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(help="Authoritative UNO rooms, driven by bots or a human at the terminal")


def _parse_agents(agent_specs: str, seed: Optional[int], forget_uno: float) -> dict[str, "AgentProtocol"]:
    from unosync.agents.human_agent import HumanAgent
    from unosync.agents.random_agent import RandomAgent

    parts = [s.strip().lower() for s in agent_specs.split(",") if s.strip()]
    agents: dict[str, AgentProtocol] = {}
    for i, kind in enumerate(parts):
        pid = f"player_{i}"
        if kind == "random":
            agent_seed = None if seed is None else seed + i
            agents[pid] = RandomAgent(name=f"Bot_{i}", seed=agent_seed, forget_uno=forget_uno)
        elif kind == "human":
            agents[pid] = HumanAgent(name=f"Human_{i}")
        else:
            raise typer.BadParameter(f"Unknown agent type: {kind}. Use 'random' or 'human'.")
    if len(agents) < 2:
        raise typer.BadParameter("Need at least 2 agents")
    return agents


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def play(
    agents: str = typer.Option(
        "random,random,human",
        "--agents",
        "-a",
        help="Comma-separated: random or human (e.g. random,human,random)",
    ),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    forget_uno: float = typer.Option(
        0.0, "--forget-uno", help="Chance a bot forgets to call UNO (0-1)"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """Run a single UNO game."""
    from unosync.config import Settings
    from unosync.orchestration.game_runner import GameRunner

    _setup_logging(log_level)
    agent_map = _parse_agents(agents, seed, forget_uno)
    runner = GameRunner(agent_map, seed=seed, settings=Settings.from_env())
    result = runner.run()
    typer.echo(f"Winner: {result.winner or 'None (turn limit)'}")
    typer.echo(f"Turns: {result.num_turns}")
    typer.echo(f"Final state version: {result.final_version}")


@app.command()
def tournament(
    agents: str = typer.Option(
        "random,random",
        "--agents",
        "-a",
        help="Comma-separated agent types",
    ),
    games: int = typer.Option(100, "--games", "-g", help="Number of games"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Random seed"),
    forget_uno: float = typer.Option(
        0.0, "--forget-uno", help="Chance a bot forgets to call UNO (0-1)"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """Run a tournament."""
    from unosync.config import Settings
    from unosync.orchestration.tournament import run_tournament

    _setup_logging(log_level)
    agent_map = _parse_agents(agents, seed, forget_uno)
    wins = run_tournament(agent_map, num_games=games, seed=seed, settings=Settings.from_env())
    typer.echo("Tournament results:")
    for pid, w in sorted(wins.items(), key=lambda x: -x[1]):
        typer.echo(f"  {pid}: {w} wins")


if __name__ == "__main__":
    app()
