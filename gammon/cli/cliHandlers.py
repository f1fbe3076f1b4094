# =========================================================
# --- cli_cliHandlers.py ---
# =========================================================

from typing import Any, Dict, Callable

from gammon.core.board import BAR

from .boardDisplay import BoardDisplay, player_label

# =========================================================

class CLIHandlers:
    """
    Handles engine events for terminal visualization.

    Attributes:
        display (BoardDisplay): Board renderer shared by all handlers.
        use_color (bool): Whether to use colored output.
    """

    def __init__(self, display: BoardDisplay, use_color: bool = True):
        self.display: BoardDisplay = display
        self.use_color: bool = use_color

    def _player(self, player: int) -> str:
        return player_label(player, self.use_color)

    # ---------------- Event Handlers ----------------
    def handle_game_start(self, event: Dict[str, Any]) -> None:
        """
        Handle a new game: display board and starting player.

        Args:
            event (dict): Event data with 'state' and 'turn'.
        """
        self.display.state = event["state"]
        self.display.draw_all()
        print(f"\nNew game. {self._player(event['turn'])} starts.")

    def handle_roll_dice(self, event: Dict[str, Any]) -> None:
        """
        Handle dice roll event: display dice and resulting pool.

        Args:
            event (dict): Event data with 'dice', 'pool' and 'turn'.
        """
        print(f"\n{self._player(event['turn'])} rolled " + "🎲" * len(event['dice']) + f": {list(event['dice'])}")
        if len(event['pool']) == 4:
            print("Doubles! Four moves to play.")

    def handle_select(self, event: Dict[str, Any]) -> None:
        """
        Handle selection event: highlight source and move options.

        Args:
            event (dict): Event data with 'turn', 'source' and 'candidates'.
        """
        source = event["source"]
        targets = {move.target for move in event["candidates"] if not move.bear_off}
        self.display.draw_all(from_points=set() if source == BAR else {source}, to_points=targets)

        if not event["candidates"]:
            print(f"\nNo moves from {source}.")
            return
        print(f"\nMoves from {source}:")
        for move in event["candidates"]:
            print(f"  {move}")

    def handle_deselect(self, event: Dict[str, Any]) -> None:
        """
        Handle deselection event.

        Args:
            event (dict): Event data with 'source'.
        """
        self.display.draw_all()
        print(f"\nReleased {event['source']}.")

    def handle_apply_move(self, event: Dict[str, Any]) -> None:
        """
        Handle event when a move is applied to the board.

        Args:
            event (dict): Event data with 'state', 'move' and 'pool'.
        """
        self.display.state = event["state"]
        self.display.draw_all()
        print(f"\nApply move: {event['move']}")
        if event["pool"]:
            print(f"Dice left: {list(event['pool'])}")

    def handle_capture(self, event: Dict[str, Any]) -> None:
        """
        Handle event when a chip is hit.

        Args:
            event (dict): Event data with 'player' and 'point'.
        """
        print(f"Hit! {self._player(event['player'])} chip on {event['point']} goes to the bar.")

    def handle_bear_off(self, event: Dict[str, Any]) -> None:
        """
        Handle event when a chip is borne off.

        Args:
            event (dict): Event data with 'player' and 'home_count'.
        """
        print(f"{self._player(event['player'])} bears off ({event['home_count']} home).")

    def handle_no_moves(self, event: Dict[str, Any]) -> None:
        """
        Handle event when no legal moves are available for a player.

        Args:
            event (dict): Event data with 'turn' and 'pool'.
        """
        print(f"\nNo legal moves available for {list(event['pool'])}!")

    def handle_turn_end(self, event: Dict[str, Any]) -> None:
        """
        Handle event when a turn ends.

        Args:
            event (dict): Event data with 'next_turn'.
        """
        print(f"\nTurn ended. Next player: {self._player(event['next_turn'])}")

    def handle_game_over(self, event: Dict[str, Any]) -> None:
        """
        Handle game over event: display winner.

        Args:
            event (dict): Event data with 'state' and 'winner'.
        """
        self.display.state = event["state"]
        self.display.draw_all()
        print(f"\nGame Over! Winner: {self._player(event['winner'])}\n")

    # ---------------- Handler Mapping ----------------
    @property
    def handlers(self) -> Dict[str, Callable[[Dict[str, Any]], None]]:
        """
        Returns a dictionary mapping event types to their handler functions.

        Returns:
            dict: Mapping of event type strings to handler methods.
        """
        return {
            "game_start": self.handle_game_start,
            "roll_dice": self.handle_roll_dice,
            "select": self.handle_select,
            "deselect": self.handle_deselect,
            "apply_move": self.handle_apply_move,
            "capture": self.handle_capture,
            "bear_off": self.handle_bear_off,
            "no_moves": self.handle_no_moves,
            "turn_end": self.handle_turn_end,
            "game_over": self.handle_game_over,
        }

    def dispatch(self, event: Dict[str, Any]) -> None:
        """Route an engine event to its handler; unknown types are ignored."""
        handler = self.handlers.get(event["type"])
        if handler:
            handler(event)
