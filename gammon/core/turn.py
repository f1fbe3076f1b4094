# =========================================================
# --- core_turn.py ---
# =========================================================

from dataclasses import dataclass, replace
from typing import Tuple

from .chips import Player, CandidateMove
from .rules import BackgammonRules

# =========================================================

@dataclass(frozen=True)
class TurnState:
    """
    Immutable turn state. Every transition below returns a new instance.

    Attributes:
        active (Player): Player whose turn it is.
        pool (Tuple[int, ...]): Die values not yet consumed this turn.
        doubles (bool): True if the turn was rolled as doubles.
        roll_available (bool): True while the active player still has to roll.
        dice (Tuple[int, ...]): Faces of the roll that started the turn.
    """
    active: Player = Player.ONE
    pool: Tuple[int, ...] = ()
    doubles: bool = False
    roll_available: bool = True
    dice: Tuple[int, ...] = ()

    @property
    def rolled(self) -> bool:
        """True once the dice are rolled and values remain to be played."""
        return not self.roll_available and len(self.pool) > 0


def new_turn(player: Player) -> TurnState:
    """State of a turn that has not been rolled yet."""
    return TurnState(active=player)


def apply_roll(turn: TurnState, faces: Tuple[int, int], rules: BackgammonRules) -> TurnState:
    """
    Load a roll into the turn.

    Args:
        turn: Current turn state; must have the roll available.
        faces: The two rolled faces.
        rules: Rules engine (expands doubles).

    Returns:
        TurnState: The rolled turn, or the given turn unchanged if rolling is not allowed.
    """
    if not turn.roll_available:
        return turn
    return replace(
        turn,
        pool=rules.process_dice(faces),
        doubles=faces[0] == faces[1],
        roll_available=False,
        dice=tuple(faces),
    )


def consume(turn: TurnState, move: CandidateMove) -> TurnState:
    """
    Remove the die values a move uses from the pool.

    On a doubles turn a prefix of length value / first value is removed.
    Otherwise the exact value is removed, or the whole pool when the value
    equals the sum of the remaining values.

    Returns:
        TurnState: The turn with the reduced pool.
    """
    pool = list(turn.pool)
    if not pool:
        return turn

    if turn.doubles:
        pool = pool[move.value // pool[0]:]
    elif move.value in pool:
        pool.remove(move.value)
    elif move.value == sum(pool):
        pool = []

    return replace(turn, pool=tuple(pool))


def switch_player(turn: TurnState) -> TurnState:
    """Hand the turn to the opponent with an empty pool and the roll enabled."""
    return new_turn(turn.active.opponent)


def finish(turn: TurnState) -> TurnState:
    """Freeze the turn once the game is decided: no pool, no roll."""
    return replace(turn, pool=(), roll_available=False)
