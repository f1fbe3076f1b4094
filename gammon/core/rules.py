# =========================================================
# --- core_rules.py ---
# =========================================================

from typing import List, Optional, Sequence, Tuple, Union

from .board import BOARD_START, BOARD_END, OUTSIDE_HOME_MASK, FULL_BOARD_MASK, NUM_OF_ALL_CHIPS
from .chips import Player, CandidateMove
from .state import BackgammonState

from gammon.utils.bitmask import indices_from_bits, remove_from_mask, set_all_bits

# =========================================================

class Rule:
    """Base class for Backgammon rules."""

    def __init__(self, rule_id: str, description: str) -> None:
        """
        Initialize a rule.

        Args:
            rule_id: Unique identifier for the rule.
            description: Human-readable description.
        """
        self.id: str = rule_id
        self.description: str = description

    def check(self, state: BackgammonState, **kwargs) -> Union[bool, int, List[int], Tuple[int, ...], None]:
        """
        Evaluate the rule on the given state.

        Args:
            state: Current board state.
            kwargs: Additional parameters required by the rule.

        Returns:
            The result of the rule (mask, boolean, or other value).

        Raises:
            NotImplementedError: Must be implemented in subclasses.
        """
        raise NotImplementedError


# --- Specific Rules ---

class BarPriorityRule(Rule):
    """R1: Player must re-enter chips from the bar first."""

    def __init__(self) -> None:
        super().__init__("R1", "Player must re-enter chips from the bar before moving any other chip.")

    def check(self, state: BackgammonState, player: Player, **kwargs) -> List[int]:
        """
        Return the source indices the player may move from.

        Args:
            state: Current board state.
            player: Player to move.

        Returns:
            [bar index] if the player has chips on the bar; otherwise every
            point the player occupies.
        """
        if state.bar(player):
            return [player.bar_index]
        return indices_from_bits(state.occupied_mask(player))


class ReachedBaseRule(Rule):
    """R2: Player may bear off only if all chips are in their home quadrant."""

    def __init__(self) -> None:
        super().__init__("R2", "Player may bear off only if no chip is on the bar or outside the home quadrant.")

    def check(self, state: BackgammonState, player: Player, **kwargs) -> bool:
        """
        Check if all remaining chips are inside the home quadrant.

        Returns:
            True if bearing off is allowed, False otherwise.
        """
        if state.bar(player):
            return False
        return (OUTSIDE_HOME_MASK[player] & state.occupied_mask(player)) == 0


class BearOffTargetRule(Rule):
    """R3: Checks if a move past the last point can bear off, including overshoot."""

    def __init__(self) -> None:
        super().__init__("R3", "Checks if a move can bear off including overshoot logic.")

    def _no_chip_behind(self, start: int, state: BackgammonState, player: Player) -> bool:
        """Check if the player has no chips further from home than start."""
        if player == Player.ONE:
            mask_behind = set_all_bits(BOARD_START, start - 1)
        else:
            mask_behind = set_all_bits(start + 1, BOARD_END)
        return (state.occupied_mask(player) & mask_behind) == 0

    def check(self, state: BackgammonState, player: Player, start: int, target: int, **kwargs) -> bool:
        """
        Determine if a chip can legally bear off.

        An exact landing on the bear-off anchor is always accepted; an
        overshoot only if no chip of the player is behind the start point.

        Args:
            state: Current board state.
            player: Moving player.
            start: Starting point of the move.
            target: Computed target of the move (off the board).

        Returns:
            True if the move can bear off, False otherwise.
        """
        anchor = player.bear_off_anchor
        if target == anchor:
            return True

        overshoot = (target - anchor) * player.direction > 0
        return overshoot and self._no_chip_behind(start, state, player)


class SingleHitRule(Rule):
    """R4: Target with exactly one opposing chip may be hit."""

    def __init__(self) -> None:
        super().__init__("R4", "Target point with exactly one opposing chip may be hit.")

    def check(self, state: BackgammonState, player: Player, point: int, **kwargs) -> bool:
        """
        Check if the target point can be hit.

        Returns:
            True if the point can be hit, False otherwise.
        """
        return state.is_capturable(point, player)


class OpenPointRule(Rule):
    """R5: A chip may land only on a point holding fewer than two opposing chips."""

    def __init__(self) -> None:
        super().__init__("R5", "Generate mask of points the player may land on.")

    def check(self, state: BackgammonState, player: Player, **kwargs) -> int:
        """
        Return the bitmask of legal landing points for a player.
        """
        return remove_from_mask(FULL_BOARD_MASK, state.blocked_mask(player))


class DiceHelperRule(Rule):
    """R6: Process dice (expand doubles)."""

    def __init__(self) -> None:
        super().__init__("R6", "Process dice, expand doubles to four moves.")

    def check(self, state: Optional[BackgammonState], dice: Sequence[int], **kwargs) -> Tuple[int, ...]:
        """
        Expand doubles to four dice values.

        Args:
            state: Not used here, included for interface consistency.
            dice: Current dice rolled.

        Returns:
            Tuple of dice values (expanded if double).
        """
        if len(dice) == 2 and dice[0] == dice[1]:
            return (dice[0],) * 4
        return tuple(dice)


class CombinedMoveRule(Rule):
    """R7: A combined hop needs a legal single-die hop from the same source."""

    def __init__(self, requires_single: bool = True) -> None:
        super().__init__("R7", "Offer a combined two-die hop only if one of its single hops is legal.")
        self.requires_single: bool = requires_single

    def check(self, state: Optional[BackgammonState], singles: Sequence[CandidateMove], **kwargs) -> bool:
        """
        Args:
            state: Not used here, included for interface consistency.
            singles: Legal single-die candidates already generated from the source.

        Returns:
            True if the combined hop may be evaluated.
        """
        return bool(singles) or not self.requires_single


class GameOverRule(Rule):
    """R8: The first player with every chip in home wins."""

    def __init__(self) -> None:
        super().__init__("R8", "Check if the game is over and return the winner if so.")

    def check(self, state: BackgammonState, **kwargs) -> Optional[Player]:
        """
        Returns:
            The winning player, or None while the game is running.
        """
        for player in Player:
            if len(state.home(player)) == NUM_OF_ALL_CHIPS[player]:
                return player
        return None


class BackgammonRules:
    """Aggregates all rules and provides a convenient interface for game logic."""

    def __init__(self, combined_requires_single: bool = True) -> None:
        """
        Initialize all rule instances.

        Args:
            combined_requires_single: Policy for R7.
        """
        self.R1 = BarPriorityRule()
        self.R2 = ReachedBaseRule()
        self.R3 = BearOffTargetRule()
        self.R4 = SingleHitRule()
        self.R5 = OpenPointRule()
        self.R6 = DiceHelperRule()
        self.R7 = CombinedMoveRule(combined_requires_single)
        self.R8 = GameOverRule()

        self.rules = [self.R1, self.R2, self.R3, self.R4, self.R5, self.R6, self.R7, self.R8]

    def allowed_sources(self, state: BackgammonState, player: Player) -> List[int]:
        """Return the allowed source indices (Bar priority)."""
        return self.R1.check(state, player=player)

    def must_enter_from_bar(self, state: BackgammonState, player: Player) -> bool:
        """Return True if the player has chips waiting on the bar."""
        return len(state.bar(player)) > 0

    def reached_base(self, state: BackgammonState, player: Player) -> bool:
        """Return True if the player may bear off."""
        return self.R2.check(state, player=player)

    def bear_off_target(self, state: BackgammonState, player: Player, start: int, target: int) -> bool:
        """Return True if a move past the last point can bear off."""
        return self.R3.check(state, player=player, start=start, target=target)

    def hittable_target(self, state: BackgammonState, player: Player, point: int) -> bool:
        """Return True if the target point may be hit."""
        return self.R4.check(state, player=player, point=point)

    def legal_landing_mask(self, state: BackgammonState, player: Player) -> int:
        """Return bitmask of points the player may land on."""
        return self.R5.check(state, player=player)

    def process_dice(self, dice: Sequence[int]) -> Tuple[int, ...]:
        """Process dice roll and expand doubles."""
        return self.R6.check(None, dice=dice)

    def combined_allowed(self, singles: Sequence[CandidateMove]) -> bool:
        """Return True if a combined hop may be offered next to these singles."""
        return self.R7.check(None, singles=singles)

    def game_over(self, state: BackgammonState) -> Optional[Player]:
        """Return the winner, or None if the game is still running."""
        return self.R8.check(state)

