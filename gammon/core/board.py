# =========================================================
# --- core_board.py ---
# =========================================================

from gammon.utils.bitmask import set_all_bits

# =========================================================

"""
Board-related constants and the opening layout.

This module defines:
- Board points and the off-board location tokens (bar, home)
- Virtual re-entry indices and bear-off anchors
- Home quadrant ranges
- Bitmasks for board regions
- Movement directions and count signs
- Default starting positions

Tables indexed by player use 0 for Player One and 1 for Player Two.
"""

#: Board point range (0-23 are the playable points)
BOARD_START = 0
BOARD_END = 23
NUM_POINTS = BOARD_END - BOARD_START + 1

#: Location tokens for chips that are not on a board point
BAR = "bar"
HOME = "home"

#: Virtual source index used when re-entering from the bar
#: Player One enters "from" -1, Player Two "from" 24
BAR_INDEX = (-1, 24)

#: Exact bear-off target for each player (one step past the last point)
BEAR_OFF_ANCHOR = (24, -1)

#: Home quadrant for each player
#: Player One: points 18-23, Player Two: points 0-5
HOME_START = (18, 0)
HOME_END = (23, 5)

#: Bitmask representing all playable points
FULL_BOARD_MASK = set_all_bits(BOARD_START, BOARD_END)

#: Bitmasks for each player's home quadrant
HOME_MASK = (
    set_all_bits(HOME_START[0], HOME_END[0]),  # Player One home mask
    set_all_bits(HOME_START[1], HOME_END[1]),  # Player Two home mask
)

#: Bitmasks for the points outside each home quadrant
OUTSIDE_HOME_MASK = (
    HOME_MASK[0] ^ FULL_BOARD_MASK,
    HOME_MASK[1] ^ FULL_BOARD_MASK,
)

#: Total number of chips per player
NUM_OF_ALL_CHIPS = (15, 15)

#: Chips of one player on a point needed to block the other
BLOCKING_CHIPS = 2

#: Sign used in the compact count array
#: Positive for Player One, negative for Player Two
SIGN = (1, -1)

#: Movement directions per player
#: Player One moves "up" (+1), Player Two moves "down" (-1)
DIRECTION = (1, -1)

#: Default starting positions
#: Each entry: list of (point, number_of_chips) for that player
#: Player One: 2 on 0, 5 on 11, 3 on 16, 5 on 18
#: Player Two: 2 on 23, 5 on 12, 3 on 7, 5 on 5
DEFAULT_POSITIONS = [
    [(0, 2), (11, 5), (16, 3), (18, 5)],
    [(23, 2), (12, 5), (7, 3), (5, 5)],
]
