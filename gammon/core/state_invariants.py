# =========================================================
# --- core_state_invariants.py ---
# =========================================================

import numpy as np
from typing import Any

from .board import BAR, HOME, NUM_POINTS, SIGN, BLOCKING_CHIPS, NUM_OF_ALL_CHIPS
from gammon.utils.bitmask import bits_from_indices

# =========================================================

def assert_chip_invariant(state: Any, where: str = "") -> None:
    """
    Check that the total number of chips for each player is consistent.

    This includes chips on the board, on the bar, and in home.

    Args:
        state: The BackgammonState object to check.
        where: Optional description of where the check is performed (for debugging).

    Raises:
        AssertionError: If the total chips for a player do not equal NUM_OF_ALL_CHIPS.
    """
    for p in (0, 1):
        board = sum(state.num_of_chips(i, p) for i in range(NUM_POINTS))
        bar = len(state._bar[p])
        home = len(state._home[p])
        total = board + bar + home

        if total != NUM_OF_ALL_CHIPS[p]:
            raise AssertionError(
                f"[CHIP LOST] Player {p}: {total}/{NUM_OF_ALL_CHIPS[p]} at {where}\n"
                f"Board={board}, Bar={bar}, Home={home}"
            )


def assert_location_invariant(state: Any, where: str = "") -> None:
    """
    Check that every chip's location field matches the container holding it,
    and that no point holds chips of both players.

    Raises:
        AssertionError: On the first mismatch found.
    """
    for point, chips in enumerate(state._points):
        owners = {chip.owner for chip in chips}
        if len(owners) > 1:
            raise AssertionError(f"[MIXED POINT] point {point} holds both players at {where}")
        for chip in chips:
            if chip.location != point:
                raise AssertionError(f"[LOCATION] {chip!r} found on point {point} at {where}")

    for p in (0, 1):
        for token, container in ((BAR, state._bar[p]), (HOME, state._home[p])):
            for chip in container:
                if chip.location != token or chip.owner != p:
                    raise AssertionError(f"[LOCATION] {chip!r} found in {token} of player {p} at {where}")


def assert_mask_invariant(state: Any, where: str = "") -> None:
    """
    Check that the occupancy and blocked masks are consistent with the board.

    Raises:
        AssertionError: If any occupancy or blocked mask does not match the board.
    """
    counts = state.to_array()
    for p in (0, 1):
        occ = bits_from_indices(np.flatnonzero(counts * SIGN[p] > 0))
        if state._occ_mask[p] != occ:
            raise AssertionError(
                f"[MASK DESYNC] occupied mask mismatch at {where}\n"
                f"Player={p}\n"
                f"Current ={bin(state._occ_mask[p])}\n"
                f"Expected={bin(occ)}"
            )

        opp = 1 - p
        blocked = bits_from_indices(np.flatnonzero(counts * SIGN[opp] >= BLOCKING_CHIPS))
        if state._blocked_mask[p] != blocked:
            raise AssertionError(
                f"[MASK DESYNC] blocked mask mismatch at {where}\n"
                f"Player={p}"
            )


def assert_candidate_invariant(state: Any, where: str = "") -> None:
    """
    Check that no move option targets a point blocked for its owner.

    Raises:
        AssertionError: If a candidate lands on two or more opposing chips.
    """
    for move in state._candidates:
        if move.target == HOME:
            continue
        if state.is_blocked(move.target, move.owner):
            raise AssertionError(f"[BLOCKED CANDIDATE] {move} at {where}")


def assert_state_invariant(state: Any, where: str = "") -> None:
    """
    Perform full invariant check for a board state.

    This includes:
    - Chip count consistency
    - Chip location and single-owner points
    - Occupancy and blocked mask consistency
    - Candidates never on blocked points

    Args:
        state: The BackgammonState object to check.
        where: Optional description of where the check is performed (for debugging).

    Raises:
        AssertionError: If any invariant fails.
    """
    assert_chip_invariant(state, where)
    assert_location_invariant(state, where)
    assert_mask_invariant(state, where)
    assert_candidate_invariant(state, where)
