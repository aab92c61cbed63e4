"""Built-in agents."""

from unosync.agents.human_agent import HumanAgent
from unosync.agents.random_agent import RandomAgent

__all__ = ["HumanAgent", "RandomAgent"]
