# =========================================================
# --- core_generator.py ---
# =========================================================

from typing import List, Optional, Sequence

from .board import HOME
from .chips import Player, CandidateMove
from .state import BackgammonState
from .rules import BackgammonRules

from gammon.utils.bitmask import is_bit_set

# =========================================================

class MoveGenerator:
    """
    Computes the legal destinations of one chip for the remaining dice.

    Two strategies are used:
        - independent: every remaining die value is tried on its own, plus
          the sum of all remaining values as one combined hop.
        - chain: on a doubles turn with more than one value left, the
          cumulative sums v, 2v, 3v, ... are tried in order and the chain
          stops at the first blocked point or accepted bear-off.

    At most one bear-off candidate is produced per call.
    """

    def __init__(self, rules: BackgammonRules) -> None:
        self.rules: BackgammonRules = rules

    def compute_destinations(
        self,
        state: BackgammonState,
        source: int,
        player: Player,
        pool: Sequence[int],
        doubles: bool,
    ) -> List[CandidateMove]:
        """
        Generate all legal candidate moves from a source.

        Args:
            state: Current board state.
            source: Source point index, or the player's virtual bar index.
            player: Moving player.
            pool: Unconsumed die values of the current turn.
            doubles: True if the turn was rolled as doubles.

        Returns:
            List of CandidateMove instances, in generation order.
        """
        if not pool:
            return []

        if (len(set(pool)) > 1 and not doubles) or len(pool) == 1:
            return self._independent_moves(state, source, player, pool)
        return self._chained_moves(state, source, player, pool)

    def _independent_moves(
        self, state: BackgammonState, source: int, player: Player, pool: Sequence[int]
    ) -> List[CandidateMove]:
        """Single-die hops for each value, then one combined hop for the sum."""
        moves: List[CandidateMove] = []

        for value in pool:
            move = self._hop(state, source, player, value, 1, moves)
            if move is not None:
                moves.append(move)

        if len(pool) > 1 and self.rules.combined_allowed(moves):
            move = self._hop(state, source, player, sum(pool), len(pool), moves)
            if move is not None:
                moves.append(move)

        return moves

    def _chained_moves(
        self, state: BackgammonState, source: int, player: Player, pool: Sequence[int]
    ) -> List[CandidateMove]:
        """Cumulative hops for a doubles turn; legality is a prefix property."""
        moves: List[CandidateMove] = []
        value = pool[0]

        for steps in range(1, len(pool) + 1):
            target = source + value * steps * player.direction
            move = self._hop(state, source, player, value * steps, steps, moves)
            if move is None:
                break
            moves.append(move)
            if not state.is_on_board(target):
                # bear-off ends the chain
                break

        return moves

    def _hop(
        self,
        state: BackgammonState,
        source: int,
        player: Player,
        distance: int,
        steps: int,
        pending: Sequence[CandidateMove],
    ) -> Optional[CandidateMove]:
        """
        Evaluate one hop of a given distance.

        Args:
            state: Current board state.
            source: Source index.
            player: Moving player.
            distance: Pips to move.
            steps: Pool entries the hop consumes.
            pending: Candidates already produced by this call.

        Returns:
            A CandidateMove if the hop is legal, otherwise None.
        """
        target = source + distance * player.direction

        if state.is_on_board(target):
            if is_bit_set(target, self.rules.legal_landing_mask(state, player)):
                return CandidateMove(player, source, target, distance, steps)
            return None

        # Off the board: only a bear-off can be legal
        if any(move.bear_off for move in pending):
            return None
        if not self.rules.reached_base(state, player):
            return None
        if self.rules.bear_off_target(state, player, source, target):
            return CandidateMove(player, source, HOME, distance, steps)
        return None

    def legal_sources(
        self, state: BackgammonState, player: Player, pool: Sequence[int], doubles: bool
    ) -> List[int]:
        """
        Return every allowed source from which at least one move exists.

        Args:
            state: Current board state.
            player: Player to move.
            pool: Unconsumed die values.
            doubles: True on a doubles turn.

        Returns:
            Source indices (the virtual bar index if the bar must be emptied first).
        """
        return [
            source for source in self.rules.allowed_sources(state, player)
            if self.compute_destinations(state, source, player, pool, doubles)
        ]

    def any_move_left(
        self, state: BackgammonState, player: Player, pool: Sequence[int], doubles: bool
    ) -> bool:
        """Check if any legal move is possible for the player with the remaining dice."""
        if len(pool) == 0:
            return False
        return any(
            self.compute_destinations(state, source, player, pool, doubles)
            for source in self.rules.allowed_sources(state, player)
        )
