"""Human agent - reads actions from terminal."""

from unosync.engine import Action, CallUno, DrawCard, PassTurn, PlayCard


def describe(action: Action) -> str:
    if isinstance(action, DrawCard):
        return "DRAW"
    if isinstance(action, PassTurn):
        return "PASS"
    if isinstance(action, CallUno):
        return "CALL UNO"
    extra = f" (choose color: {action.chosen_color.value})" if action.chosen_color else ""
    return f"PLAY {action.card}{extra}"


class HumanAgent:
    """Agent that prompts the human for input via terminal."""

    def __init__(self, name: str = "human"):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def get_action(
        self,
        player_view,
        legal_actions: list[Action],
        player_id: str,
    ) -> Action | None:
        if not legal_actions:
            return None

        print("\n--- Your turn ---" if player_view.current_player == player_id else "\n--- Off turn ---")
        print("Your hand:", " ".join(str(c) for c in player_view.my_hand))
        print("Top discard:", player_view.top_discard, f"(color: {player_view.active_color.value})")
        if player_view.pending_draws:
            print(f"Pending draws: {player_view.pending_draws}")
        print("\nLegal actions:")
        for i, a in enumerate(legal_actions):
            print(f"  {i}: {describe(a)}")

        while True:
            try:
                raw = input("Enter number (blank to skip): ").strip()
                if not raw:
                    return None
                idx = int(raw)
                if 0 <= idx < len(legal_actions):
                    return legal_actions[idx]
            except (ValueError, EOFError):
                pass
            print("Invalid. Try again.")
