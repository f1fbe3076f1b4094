"""Shared fixtures: scripted dice and board layouts."""

from typing import Iterable, List, Optional, Sequence, Tuple

import pytest

from gammon.core.board import HOME, NUM_OF_ALL_CHIPS
from gammon.core.chips import Player
from gammon.core.config import GameConfig
from gammon.core.engine import GameEngine
from gammon.core.state import BackgammonState


class ScriptedRng:
    """Stand-in for random.Random that returns scripted die faces."""

    def __init__(self, faces: Iterable[int]):
        self.faces: List[int] = list(faces)

    def randint(self, a: int, b: int) -> int:
        face = self.faces.pop(0)
        assert a <= face <= b
        return face


def layout(one: Sequence[Tuple[object, int]], two: Sequence[Tuple[object, int]]):
    """Position list with every chip not placed explicitly parked in home."""
    positions = []
    for player, placed in ((Player.ONE, one), (Player.TWO, two)):
        placed = list(placed)
        rest = NUM_OF_ALL_CHIPS[player] - sum(count for _, count in placed)
        if rest:
            placed.append((HOME, rest))
        positions.append(placed)
    return positions


@pytest.fixture
def make_state():
    """Factory for a debug-mode board state; no arguments gives the opening layout."""
    def _make(one=None, two=None) -> BackgammonState:
        positions = None if one is None else layout(one, two or [])
        return BackgammonState(positions, debug=True)
    return _make


@pytest.fixture
def make_engine(make_state):
    """Factory for a debug-mode engine with scripted dice."""
    def _make(
        one=None,
        two=None,
        rolls: Iterable[int] = (),
        start_player: Player = Player.ONE,
        combined_requires_single: bool = True,
        rng: Optional[object] = None,
    ) -> GameEngine:
        config = GameConfig(
            start_player=start_player,
            debug=True,
            combined_requires_single=combined_requires_single,
        )
        return GameEngine(
            state=make_state(one, two),
            config=config,
            rng=rng if rng is not None else ScriptedRng(rolls),
        )
    return _make


def targets(moves) -> List[object]:
    """Destinations of a list of candidate moves, in generation order."""
    return [move.target for move in moves]


@pytest.fixture
def dests():
    return targets
