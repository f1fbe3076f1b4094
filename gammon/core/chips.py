# =========================================================
# --- core_chips.py ---
# =========================================================

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from .board import BAR, HOME, DIRECTION, BAR_INDEX, BEAR_OFF_ANCHOR

# =========================================================

#: A chip location: a point index (0-23), BAR or HOME
Location = Union[int, str]


class Player(IntEnum):
    """
    The two player identities.

    The integer value doubles as index into the per-player tables of
    `core.board` (0 = Player One, 1 = Player Two).
    """
    ONE = 0
    TWO = 1

    @property
    def opponent(self) -> "Player":
        """Return the other player."""
        return Player(1 - self)

    @property
    def direction(self) -> int:
        """Signed forward direction (+1 or -1)."""
        return DIRECTION[self]

    @property
    def bar_index(self) -> int:
        """Virtual source index used for re-entry from the bar."""
        return BAR_INDEX[self]

    @property
    def bear_off_anchor(self) -> int:
        """Index one step past the last point in the forward direction."""
        return BEAR_OFF_ANCHOR[self]

    def __str__(self) -> str:
        return f"Player {self.name.capitalize()}"


@dataclass(eq=False)
class RealChip:
    """
    A playing chip.

    Chips compare by identity: two chips of the same player on the same
    point are still two different chips.

    Attributes:
        owner (Player): Owning player. Never reassigned after creation.
        location (Location): Point index, BAR or HOME.
        selected (bool): Transient selection flag for the presentation layer.
    """
    owner: Player
    location: Location
    selected: bool = False

    def __repr__(self) -> str:
        mark = "*" if self.selected else ""
        return f"RealChip({self.owner.name}@{self.location}{mark})"


@dataclass(frozen=True)
class CandidateMove:
    """
    A transient move option for the currently selected chip.

    Attributes:
        owner (Player): Player the option belongs to.
        source (int): Source point index, or the player's virtual bar index.
        target (Location): Destination point index, or HOME for a bear-off.
        value (int): Pip distance covered, i.e. the die value(s) consumed.
        steps (int): Number of die-pool entries the move consumes.
    """
    owner: Player
    source: int
    target: Location
    value: int
    steps: int = 1

    @property
    def bear_off(self) -> bool:
        """True if the option moves the chip into Home."""
        return self.target == HOME

    @property
    def from_bar(self) -> bool:
        """True if the option re-enters a chip from the bar."""
        return self.source == BAR_INDEX[self.owner]

    def __str__(self) -> str:
        start = BAR if self.from_bar else self.source
        return f"{start}".rjust(4) + " > " + f"{self.target}".rjust(4) + f" ({self.value})"

    def __repr__(self) -> str:
        return str(self)
