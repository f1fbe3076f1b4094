# =========================================================
# --- core_config.py ---
# =========================================================

from dataclasses import dataclass

from .chips import Player

# =========================================================

@dataclass(frozen=True)
class GameConfig:
    """
    Engine configuration.

    Attributes:
        start_player (Player): Player who moves first after start_game().
        debug (bool): Run the state invariant checks after every mutation.
        combined_requires_single (bool): Offer a combined two-die hop only if
            at least one of the single-die hops from the same source is legal.
    """
    start_player: Player = Player.ONE
    debug: bool = False
    combined_requires_single: bool = True
