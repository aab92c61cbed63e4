"""Simulate a game with random agents and print how it went."""

from unosync.agents.random_agent import RandomAgent
from unosync.orchestration.game_runner import GameRunner


def main():
    agents = {
        "p1": RandomAgent("Bot1", seed=1, forget_uno=0.3),
        "p2": RandomAgent("Bot2", seed=2, forget_uno=0.3),
        "p3": RandomAgent("Bot3", seed=3, forget_uno=0.3),
        "p4": RandomAgent("Bot4", seed=4, forget_uno=0.3),
    }

    runner = GameRunner(agents, seed=42)
    result = runner.run()

    room = runner.service.store.get(runner.room_code)
    if room is not None and room.game is not None:
        for line in room.game.history:
            print(f"> {line}")

    print(f"Game finished! Winner: {result.winner}")
    print(f"Turns: {result.num_turns}")
    print(f"State version: {result.final_version}")


if __name__ == "__main__":
    main()
