# =========================================================
# --- core_state.py ---
# =========================================================

import numpy as np
from typing import Iterable, List, Optional, Tuple

from .board import (
    BOARD_START, BOARD_END, NUM_POINTS, BAR, HOME, SIGN, BLOCKING_CHIPS,
    NUM_OF_ALL_CHIPS, DEFAULT_POSITIONS,
)
from .chips import Player, RealChip, CandidateMove, Location
from .state_invariants import assert_state_invariant

from gammon.utils.bitmask import set_bit, clear_bit, is_bit_set

# =========================================================

#: Serialized layout: per player a list of (location, number_of_chips)
Positions = List[List[Tuple[Location, int]]]


class ChipTransferMixin:
    """
    Mixin class providing all chip-moving operations.

    Every operation is an ownership transfer between two containers
    (point, bar or home). A chip is never in two containers at once.
    """

    def move_chip(self, chip: RealChip, target: Location) -> None:
        """Move a chip from its current container into the target container."""
        source = chip.location
        self._container(source, chip.owner).remove(chip)
        self._container(target, chip.owner).append(chip)
        chip.location = target
        chip.selected = False
        self._update_masks(source)
        self._update_masks(target)
        self._assert("move_chip")

    def hit_chip(self, chip: RealChip, target: int) -> RealChip:
        """
        Send the lone opposing chip on target to its owner's bar and move chip there.

        Returns:
            RealChip: The captured chip.
        """
        opp = chip.owner.opponent
        victim = self.top_chip(target, opp)
        self.move_chip(victim, BAR)
        self.move_chip(chip, target)
        return victim

    def bear_off(self, chip: RealChip) -> None:
        """Move a chip from the board into its owner's home."""
        self.move_chip(chip, HOME)

    def apply_move(self, move: CandidateMove, hit: bool = False) -> Optional[RealChip]:
        """
        Apply a candidate move to the board.

        Args:
            move (CandidateMove): The move to apply.
            hit (bool): The destination holds a lone opposing chip to send to the bar.

        Returns:
            Optional[RealChip]: The captured opposing chip, if the move hit one.

        Raises:
            ValueError: If the move's source holds no chip of its owner.
        """
        chip = self._source_chip(move)
        if chip is None:
            raise ValueError(f"No chip of {move.owner} at source of {move}")

        if move.bear_off:
            self.bear_off(chip)
            return None
        if hit:
            return self.hit_chip(chip, move.target)
        self.move_chip(chip, move.target)
        return None

    def _source_chip(self, move: CandidateMove) -> Optional[RealChip]:
        """Return the chip a move starts from, preferring the selected one."""
        container = self._bar[move.owner] if move.from_bar else self._points[move.source]
        own = [chip for chip in container if chip.owner == move.owner]
        for chip in reversed(own):
            if chip.selected:
                return chip
        return own[-1] if own else None


class BackgammonState(ChipTransferMixin):
    """
    Represents the complete mutable board: points, bars, homes and the
    candidate moves currently on display.

    Attributes:
        _points (List[List[RealChip]]): Chips on each of the 24 points.
        _bar (Tuple[List[RealChip], List[RealChip]]): Captured chips per player.
        _home (Tuple[List[RealChip], List[RealChip]]): Borne-off chips per player.
        _candidates (List[CandidateMove]): Move options of the current selection.
        _occ_mask (List[int]): Occupancy masks for each player.
        _blocked_mask (List[int]): Blocked masks for each player.
        debug (bool): Enable state invariant assertions.
    """

    def __init__(self, positions: Optional[Positions] = None, debug: bool = False):
        self.debug: bool = debug

        self._points: List[List[RealChip]] = [[] for _ in range(NUM_POINTS)]
        self._bar: Tuple[List[RealChip], List[RealChip]] = ([], [])
        self._home: Tuple[List[RealChip], List[RealChip]] = ([], [])
        self._candidates: List[CandidateMove] = []

        self._occ_mask: List[int] = [0, 0]
        self._blocked_mask: List[int] = [0, 0]

        self.start_game(positions)

    def __repr__(self) -> str:
        return f"<BackgammonState {self.state_to_list()}>"

    # ---------- Setup ----------
    def reset_board(self) -> None:
        """Empty every container and reset the masks."""
        for chips in self._points:
            chips.clear()
        for player in Player:
            self._bar[player].clear()
            self._home[player].clear()
        self._candidates.clear()
        self._occ_mask[:] = [0, 0]
        self._blocked_mask[:] = [0, 0]

    def start_game(self, positions: Optional[Positions] = None) -> None:
        """Reset the board and lay out the given (or the default) positions."""
        self.reset_board()
        if positions is None:
            positions = DEFAULT_POSITIONS
        self.place_chips_from_list(positions)

    def place_chips_from_list(self, positions: Positions) -> None:
        """
        Place chips on an empty board from a serialized position list.

        Args:
            positions: Per player a list of (location, count); location is a
                point index, BAR or HOME.

        Raises:
            ValueError: If a player does not total 15 chips or a point would
                hold chips of both players.
            IndexError: If a point index is off the board.
        """
        for player in Player:
            total = 0
            for location, count in positions[player]:
                if location not in (BAR, HOME):
                    self._check_index(location)
                    if self.num_of_chips(location, player.opponent) > 0:
                        raise ValueError(f"Point {location} already holds chips of {player.opponent}")
                container = self._container(location, player)
                container.extend(RealChip(player, location) for _ in range(count))
                total += count
            if total != NUM_OF_ALL_CHIPS[player]:
                raise ValueError(f"Invalid number of chips for {player}: {total}")
        self._recompute_masks()
        self._assert("place_chips_from_list")

    def state_to_list(self) -> Positions:
        """Serialize the board into a list of positions per player."""
        positions: Positions = [[], []]
        for point, chips in enumerate(self._points):
            for player in Player:
                count = self.num_of_chips(point, player)
                if count:
                    positions[player].append((point, count))
        for player in Player:
            if self._bar[player]:
                positions[player].append((BAR, len(self._bar[player])))
            if self._home[player]:
                positions[player].append((HOME, len(self._home[player])))
        return positions

    # ---------- Read access ----------
    def is_on_board(self, point: int) -> bool:
        """Check if a point index is on the board."""
        return BOARD_START <= point <= BOARD_END

    def _check_index(self, point: int) -> None:
        """Raise IndexError for anything that is not a board point index."""
        if isinstance(point, bool) or not isinstance(point, (int, np.integer)) or not self.is_on_board(point):
            raise IndexError(f"Point index {point!r} out of range {BOARD_START}-{BOARD_END}")

    def point(self, index: int) -> Tuple[RealChip, ...]:
        """
        Return the chips on a board point.

        Raises:
            IndexError: If index is not in 0-23.
        """
        self._check_index(index)
        return tuple(self._points[index])

    @property
    def points(self) -> Tuple[Tuple[RealChip, ...], ...]:
        """Chips on every point, in board order."""
        return tuple(tuple(chips) for chips in self._points)

    def bar(self, player: Player) -> Tuple[RealChip, ...]:
        """Chips of the player waiting on the bar."""
        return tuple(self._bar[player])

    def home(self, player: Player) -> Tuple[RealChip, ...]:
        """Chips the player has borne off."""
        return tuple(self._home[player])

    def num_of_chips(self, point: int, player: Player) -> int:
        """Return the number of chips a player has on a given point."""
        return sum(1 for chip in self._points[point] if chip.owner == player)

    def top_chip(self, point: int, player: Player) -> Optional[RealChip]:
        """Return the last-placed chip of a player on a point, if any."""
        for chip in reversed(self._points[point]):
            if chip.owner == player:
                return chip
        return None

    def occupied_mask(self, player: Player) -> int:
        """Points holding at least one chip of the player."""
        return self._occ_mask[player]

    def blocked_mask(self, player: Player) -> int:
        """Points the player may not land on."""
        return self._blocked_mask[player]

    def is_blocked(self, point: int, player: Player) -> bool:
        """True if the opponent holds two or more chips on the point."""
        return is_bit_set(point, self._blocked_mask[player])

    def is_capturable(self, point: int, player: Player) -> bool:
        """True if the point holds exactly one opposing chip."""
        return self.is_on_board(point) and self.num_of_chips(point, player.opponent) == 1

    def to_array(self) -> np.ndarray:
        """Signed chip counts per point (Player One positive, Player Two negative)."""
        counts = np.zeros(NUM_POINTS, dtype=np.int8)
        for point, chips in enumerate(self._points):
            for chip in chips:
                counts[point] += SIGN[chip.owner]
        return counts

    # ---------- Candidates ----------
    @property
    def candidates(self) -> Tuple[CandidateMove, ...]:
        """All move options currently on display."""
        return tuple(self._candidates)

    def candidates_at(self, location: Location) -> Tuple[CandidateMove, ...]:
        """Move options whose destination is the given point or HOME."""
        return tuple(move for move in self._candidates if move.target == location)

    def add_candidates(self, moves: Iterable[CandidateMove]) -> None:
        """Attach move options to their destinations."""
        self._candidates.extend(moves)
        self._assert("add_candidates")

    def clear_candidates(self, player: Player) -> None:
        """Drop every move option of the player. The opponent's options are kept."""
        self._candidates[:] = [move for move in self._candidates if move.owner != player]

    # ---------- Selection ----------
    def selected_chips(self, player: Optional[Player] = None) -> List[RealChip]:
        """Selected chips on the board and bars, optionally of one player only."""
        chips = [chip for point in self._points for chip in point]
        chips += self._bar[Player.ONE] + self._bar[Player.TWO]
        return [chip for chip in chips if chip.selected and (player is None or chip.owner == player)]

    def clear_selection(self, player: Player) -> None:
        """Deselect the player's chips and drop the player's move options."""
        for chip in self.selected_chips(player):
            chip.selected = False
        self.clear_candidates(player)

    # ---------- Containers / Masks ----------
    def _container(self, location: Location, player: Player) -> List[RealChip]:
        """Return the list that owns chips at a location."""
        if location == BAR:
            return self._bar[player]
        if location == HOME:
            return self._home[player]
        self._check_index(location)
        return self._points[location]

    def _update_masks(self, location: Location) -> None:
        """Update occupancy and blocked bits for a board point."""
        if location in (BAR, HOME):
            return
        for player in Player:
            if self.num_of_chips(location, player) > 0:
                self._occ_mask[player] = set_bit(location, self._occ_mask[player])
            else:
                self._occ_mask[player] = clear_bit(location, self._occ_mask[player])

            if self.num_of_chips(location, player.opponent) >= BLOCKING_CHIPS:
                self._blocked_mask[player] = set_bit(location, self._blocked_mask[player])
            else:
                self._blocked_mask[player] = clear_bit(location, self._blocked_mask[player])

    def _recompute_masks(self) -> None:
        """Recompute all occupancy and blocked masks for both players."""
        self._occ_mask[:] = [0, 0]
        self._blocked_mask[:] = [0, 0]
        for point in range(NUM_POINTS):
            self._update_masks(point)

    # ---------- Debug / Assertions ----------
    def _assert(self, where: str = "") -> None:
        """Assert state invariants if debug mode is active."""
        if self.debug:
            assert_state_invariant(self, where)
