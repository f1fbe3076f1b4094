# =========================================================
# --- cli_boardDisplay.py ---
# =========================================================

import os
from typing import Optional, Set, Iterable

from gammon.core.board import BOARD_START, BOARD_END, HOME, HOME_START, HOME_END
from gammon.core.chips import Player
from gammon.core.state import BackgammonState

# =========================================================

class TColor:
    """ANSI escape codes used by the board renderer."""
    BLUE: str    = "\033[94m"   # Player One chips
    RED: str     = "\033[91m"   # Player Two chips
    GREEN: str   = "\033[92m"   # point of the selected chip
    YELLOW: str  = "\033[93m"   # move option targets
    RESET: str   = "\033[0m"
    BOLD: str    = "\033[1m"


#: Per-player (color, board tag, display name)
PLAYER_STYLE = (
    (TColor.BLUE, "B", "(B)lue"),
    (TColor.RED, "R", "(R)ed"),
)


def player_label(player: Player, use_color: bool = True) -> str:
    """Display name of a player, colored or plain."""
    color, _, name = PLAYER_STYLE[player]
    return f"{color}{name}{TColor.RESET}" if use_color else name


def clear_terminal() -> None:
    """Clear the terminal ('cls' on Windows, 'clear' elsewhere)."""
    os.system('cls' if os.name == 'nt' else 'clear')

class BoardDisplay:
    """
    Class for displaying the board in the terminal.

    Attributes:
        state (BackgammonState): The current board state.
        clear_screen (bool): Whether to clear the screen before drawing.
        field_size (int): Width of a board point for formatting.
        use_color (bool): Whether to use colored output.
    """

    def __init__(self, state: BackgammonState, clear_screen: bool = True, use_color: bool = True) -> None:
        self.state: BackgammonState = state
        self.clear_screen: bool = clear_screen
        self.field_size: int = 3  # Width of each board point for alignment
        self.use_color: bool = use_color

    def _paint(self, color: str, text: str) -> str:
        """Wrap text in a color code when colors are enabled."""
        return f"{color}{text}{TColor.RESET}" if self.use_color else text

    def _tagged(self, player: Player, text: str) -> str:
        """Prefix text with the player's board tag and paint it in the player's color."""
        color, tag, _ = PLAYER_STYLE[player]
        return self._paint(color, f"{tag}{text}")

    def _home_label(self, player: Player, width: int) -> str:
        """Right-aligned caption naming the player's home quadrant."""
        color, tag, _ = PLAYER_STYLE[player]
        return self._paint(color, f"HOME {tag} ({HOME_START[player]}-{HOME_END[player]})".rjust(width))

    def _point_str(self, point: int) -> str:
        """
        Returns a formatted string representing a board point, including colored chips.

        Args:
            point (int): The board point index.

        Returns:
            str: Formatted string for the point.
        """
        for player in Player:
            count = self.state.num_of_chips(point, player)
            if count:
                color, tag, _ = PLAYER_STYLE[player]
                return self._paint(color, f"{tag}{count}".rjust(self.field_size))
        return "..."  # Empty point

    def _color_index(
        self,
        point: int,
        from_points: Iterable[int],
        to_points: Iterable[int],
    ) -> str:
        """
        Returns a formatted point index with color coding for the current selection.

        - GREEN: point holds the selected chip
        - YELLOW: point is a move option target
        - Default: no highlight
        """
        s = f"{point}".rjust(self.field_size)
        if point in from_points:
            return self._paint(TColor.GREEN, s)
        if point in to_points:
            return self._paint(TColor.YELLOW, s)
        return s

    def draw_points(self, from_points: Optional[Set[int]] = None, to_points: Optional[Set[int]] = None) -> None:
        """
        Draws all board points including selection highlights.

        The board is split into upper and lower halves. Each half shows:
        - Index row (point numbers with highlights)
        - Chip row (number of chips at each point)

        Args:
            from_points (Optional[Set[int]]): Points holding the selected chip.
            to_points (Optional[Set[int]]): Move option targets.
        """
        from_points = from_points or set()
        to_points = to_points or set()

        half = (BOARD_END - BOARD_START + 1) // 2
        sep = " "
        home_format = (half - 1) * len(sep) + half * self.field_size

        # Upper half (Blue home on the right)
        upper_range = range(half, BOARD_END + 1)
        upper_idx = sep.join(self._color_index(p, from_points, to_points) for p in upper_range)
        upper_points = sep.join(self._point_str(p) for p in upper_range)
        print(self._home_label(Player.ONE, home_format))
        print(upper_idx)    # Index row with highlights
        print(upper_points) # Chip count row

        # Lower half (Red home on the right, reversed order)
        lower_range = range(half - 1, BOARD_START - 1, -1)
        lower_points = sep.join(self._point_str(p) for p in lower_range)
        lower_idx = sep.join(self._color_index(p, from_points, to_points) for p in lower_range)
        print(lower_points)
        print(lower_idx)
        print(self._home_label(Player.TWO, home_format))

    def draw_bar(self) -> None:
        """
        Draws the bar (captured chips) for both players.
        """
        parts = [self._tagged(player, f":{len(self.state.bar(player))}") for player in Player]
        print(f"Bar  {parts[0]} | {parts[1]}")

    def draw_home(self) -> None:
        """
        Draws the home area (borne-off chips) for both players.
        A trailing '+' marks a pending bear-off option.
        """
        parts = []
        for player in Player:
            pending = any(move.owner == player for move in self.state.candidates_at(HOME))
            parts.append(self._tagged(player, f":{len(self.state.home(player))}" + ("+" if pending else "")))
        print(f"Home {parts[0]} | {parts[1]}")

    def draw_all(self, from_points: Optional[Set[int]] = None, to_points: Optional[Set[int]] = None) -> None:
        """
        Draws the entire board, including points, bar, and home areas.

        Args:
            from_points (Optional[Set[int]]): Points holding the selected chip.
            to_points (Optional[Set[int]]): Move option targets.
        """
        if self.clear_screen:
            clear_terminal()
        print(self._paint(TColor.BOLD, "--- Board ---"))
        self.draw_points(from_points, to_points)
        self.draw_bar()
        self.draw_home()
