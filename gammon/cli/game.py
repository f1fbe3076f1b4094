# =========================================================
# --- cli_game.py ---
# =========================================================

import argparse
import random
import sys
from typing import List, Optional, Tuple

from loguru import logger

from gammon.core.board import BAR, HOME
from gammon.core.chips import Location
from gammon.core.config import GameConfig
from gammon.core.engine import GameEngine

from .boardDisplay import BoardDisplay, player_label
from .cliHandlers import CLIHandlers

# =========================================================

HELP = """Commands:
  r        roll the dice
  s N      select / release the chip on point N
  b        select / release the chip on the bar
  m N      move the selected chip to point N
  m h      bear the selected chip off
  p        pass (only when no move is possible)
  d        redraw the board
  h        show this help
  q        quit"""

#: Command letter -> engine action name
COMMANDS = {
    "r": "roll",
    "s": "select",
    "b": "bar",
    "m": "move",
    "p": "pass",
    "d": "board",
    "h": "help",
    "?": "help",
}


#: Inputs that end the session
QUIT_WORDS = ("q", "quit", "exit")


class ExitGame(Exception):
    """Raised when the user leaves the game (quit command, Ctrl+C or end of input)."""


def read_command(prompt: str) -> str:
    """
    Read one command line from the terminal.

    Raises:
        ExitGame: On a quit word, Ctrl+C or Ctrl+D.

    Returns:
        str: The line without surrounding whitespace.
    """
    try:
        line = input(prompt).strip()
    except (KeyboardInterrupt, EOFError):
        raise ExitGame()
    if line.lower() in QUIT_WORDS:
        raise ExitGame()
    return line


def parse_command(line: str) -> Tuple[str, Optional[Location]]:
    """
    Parse one line of user input.

    Args:
        line (str): Raw input, e.g. "s 11" or "m h".

    Returns:
        Tuple[str, Optional[Location]]: Action name and its argument.

    Raises:
        ValueError: If the command or its argument is malformed.
    """
    parts = line.strip().lower().split()
    if not parts or parts[0] not in COMMANDS:
        raise ValueError(f"Unknown command: {line!r}")

    action = COMMANDS[parts[0]]
    if action not in ("select", "move"):
        if len(parts) != 1:
            raise ValueError(f"'{parts[0]}' takes no argument")
        return action, None

    if len(parts) != 2:
        raise ValueError(f"'{parts[0]}' needs a point")
    arg = parts[1]
    if action == "move" and arg in ("h", "home"):
        return action, HOME
    if action == "select" and arg == "bar":
        return action, BAR
    if not arg.isdigit():
        raise ValueError(f"Not a point: {arg!r}")
    return action, int(arg)


class BackgammonCLI:
    """
    Command-line front end: reads commands, calls the engine, and lets the
    event handlers draw the result.
    """

    def __init__(self, engine: GameEngine, use_color: bool = True, clear_screen: bool = True):
        """
        Initialize the CLI.

        Args:
            engine (GameEngine): The configured game engine.
            use_color (bool): Whether to use colored output.
            clear_screen (bool): Whether to clear the screen before each board.
        """
        self.engine: GameEngine = engine
        self.use_color: bool = use_color
        self.display = BoardDisplay(engine.state, clear_screen=clear_screen, use_color=use_color)
        self.handlers = CLIHandlers(self.display, use_color)
        engine.subscribe(self.handlers.dispatch)

    def prompt(self) -> str:
        """Prompt text showing the active player and the dice left to play."""
        who = player_label(self.engine.active_player, self.use_color)
        if self.engine.roll_available:
            return f"\n{who} to roll > "
        return f"\n{who} {list(self.engine.dice_pool)} > "

    def execute(self, action: str, arg: Optional[Location] = None) -> bool:
        """
        Run one parsed command against the engine.

        Returns:
            bool: False if the engine rejected the action.
        """
        engine = self.engine
        if action == "roll":
            return engine.roll_dice()
        if action == "select":
            return engine.select_or_deselect(arg)
        if action == "bar":
            return engine.reenter_from_bar(engine.active_player)
        if action == "move":
            return engine.apply_move(arg)
        if action == "pass":
            return engine.pass_turn()
        if action == "board":
            self.display.draw_all()
            return True
        if action == "help":
            print(HELP)
            return True
        raise ValueError(f"Unknown action: {action}")

    def play_game(self) -> None:
        """
        Run the command loop until the game is won.

        Raises:
            ExitGame: If the user exits the game intentionally.
        """
        self.engine.start_game()
        print(HELP)
        while self.engine.winner is None:
            line = read_command(self.prompt())
            try:
                action, arg = parse_command(line)
                accepted = self.execute(action, arg)
            except (ValueError, IndexError) as exc:
                print(f"Invalid input: {exc}")
                continue
            if not accepted:
                print("Not allowed.")
            elif self.engine.turn.rolled and not self.engine.has_legal_move():
                print("No legal move left, enter 'p' to pass.")

    def run(self) -> None:
        """
        Start the CLI application and run a complete game session.
        """
        try:
            self.play_game()
        except ExitGame:
            print("\nGame exited by player.")


def build_parser() -> argparse.ArgumentParser:
    """Command line arguments of the `gammon` script."""
    parser = argparse.ArgumentParser(description="Play two-player backgammon in the terminal.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the dice")
    parser.add_argument("--debug", action="store_true", help="Check board invariants after every change")
    parser.add_argument("--log-level", default="WARNING", help="Log level for engine messages on stderr")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    parser.add_argument("--no-clear", action="store_true", help="Do not clear the screen between boards")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the `gammon` console script."""
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())

    engine = GameEngine(
        config=GameConfig(debug=args.debug),
        rng=random.Random(args.seed),
    )
    cli = BackgammonCLI(engine, use_color=not args.no_color, clear_screen=not args.no_clear)
    cli.run()
    return 0


# ---------------- Main ----------------
if __name__ == "__main__":
    sys.exit(main())
