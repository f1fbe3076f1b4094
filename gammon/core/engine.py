# =========================================================
# --- core_engine.py ---
# =========================================================

import random
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import numpy as np
from loguru import logger

from .board import BAR, HOME
from .chips import Player, RealChip, CandidateMove, Location
from .config import GameConfig
from .dice import DicePair
from .generator import MoveGenerator
from .rules import BackgammonRules
from .state import BackgammonState, Positions
from .turn import TurnState, new_turn, apply_roll, consume, switch_player, finish

# ========================================================

Event = Dict[str, Any]
EventHandler = Callable[[Event], None]


class EngineEvents:
    """
    Event factory for game engine events.
    Returns structured dictionaries for UI or logging.
    """

    def game_start(self, turn: Player, state: BackgammonState) -> Event:
        """Event: The board was reset to a starting layout."""
        return {
            "type": "game_start",
            "turn": turn,
            "state": state,
        }

    def roll_dice(self, dice: Tuple[int, ...], pool: Tuple[int, ...], turn: Player) -> Event:
        """Event: Dice have been rolled."""
        return {
            "type": "roll_dice",
            "dice": dice,
            "pool": pool,
            "turn": turn,
        }

    def select(self, turn: Player, source: Location, candidates: List[CandidateMove]) -> Event:
        """Event: A chip was selected and its move options computed."""
        return {
            "type": "select",
            "turn": turn,
            "source": source,
            "candidates": candidates,
        }

    def deselect(self, turn: Player, source: Location) -> Event:
        """Event: The selected chip was released."""
        return {
            "type": "deselect",
            "turn": turn,
            "source": source,
        }

    def apply_move(self, move: CandidateMove, pool: Tuple[int, ...], state: BackgammonState) -> Event:
        """Event: A move has been applied to the board."""
        return {
            "type": "apply_move",
            "move": move,
            "pool": pool,
            "state": state,
        }

    def capture(self, player: Player, point: int) -> Event:
        """Event: A chip of player was hit on point and sent to the bar."""
        return {
            "type": "capture",
            "player": player,
            "point": point,
        }

    def bear_off(self, player: Player, home_count: int) -> Event:
        """Event: A chip was borne off."""
        return {
            "type": "bear_off",
            "player": player,
            "home_count": home_count,
        }

    def no_moves(self, turn: Player, pool: Tuple[int, ...]) -> Event:
        """Event: The player had no legal move and forfeited the remaining dice."""
        return {
            "type": "no_moves",
            "turn": turn,
            "pool": pool,
        }

    def turn_end(self, turn: Player, next_turn: Player) -> Event:
        """Event: The current turn has ended."""
        return {
            "type": "turn_end",
            "turn": turn,
            "next_turn": next_turn,
        }

    def game_over(self, winner: Player, state: BackgammonState) -> Event:
        """Event: The game has ended."""
        return {
            "type": "game_over",
            "winner": winner,
            "state": state,
        }


class GameEngine:
    """
    Turn controller for one live game.

    Illegal actions are rejected as no-ops: the operation returns False and
    leaves every piece of state untouched. Only an out-of-range point index
    raises (IndexError), as that is a caller bug rather than a game move.

    Attributes:
        config (GameConfig): Engine configuration.
        state (BackgammonState): Board, bars, homes and candidates.
        rules (BackgammonRules): Rules engine.
        generator (MoveGenerator): Destination generator.
        dice_pair (DicePair): Dice with an injectable random source.
        turn (TurnState): Immutable turn state, replaced on every transition.
        events (EngineEvents): Event factory.
    """

    def __init__(
        self,
        state: Optional[BackgammonState] = None,
        rules: Optional[BackgammonRules] = None,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config: GameConfig = config or GameConfig()
        self.state: BackgammonState = state or BackgammonState(debug=self.config.debug)
        self.state.debug = self.state.debug or self.config.debug
        self.rules: BackgammonRules = rules or BackgammonRules(self.config.combined_requires_single)
        self.generator: MoveGenerator = MoveGenerator(self.rules)
        self.dice_pair: DicePair = DicePair(rng)
        self.turn: TurnState = new_turn(self.config.start_player)
        self.events: EngineEvents = EngineEvents()

        self._listeners: List[EventHandler] = []
        self._reached_base: List[bool] = [False, False]
        self._update_reached_base()

    # ---------- Properties ----------
    @property
    def active_player(self) -> Player:
        """Player whose turn it is."""
        return self.turn.active

    @property
    def dice_pool(self) -> Tuple[int, ...]:
        """Die values not yet consumed this turn."""
        return self.turn.pool

    @property
    def dice(self) -> Tuple[int, ...]:
        """Faces of the roll that started the current turn."""
        return self.turn.dice

    @property
    def doubles(self) -> bool:
        return self.turn.doubles

    @property
    def roll_available(self) -> bool:
        """True while the active player may roll."""
        return self.turn.roll_available and self.winner is None

    @property
    def winner(self) -> Optional[Player]:
        """Player with every chip in home, or None."""
        return self.rules.game_over(self.state)

    @property
    def candidates(self) -> Tuple[CandidateMove, ...]:
        return self.state.candidates

    @property
    def selected(self) -> Optional[RealChip]:
        """The selected chip of the active player, if any."""
        chips = self.state.selected_chips(self.active_player)
        return chips[0] if chips else None

    def reached_base(self, player: Player) -> bool:
        """True if the player has every remaining chip in the home quadrant."""
        return self._reached_base[player]

    # ---------- Board read access ----------
    def point(self, index: int) -> Tuple[RealChip, ...]:
        return self.state.point(index)

    @property
    def points(self) -> Tuple[Tuple[RealChip, ...], ...]:
        return self.state.points

    def bar(self, player: Player) -> Tuple[RealChip, ...]:
        return self.state.bar(player)

    def home(self, player: Player) -> Tuple[RealChip, ...]:
        return self.state.home(player)

    def candidates_at(self, location: Location) -> Tuple[CandidateMove, ...]:
        return self.state.candidates_at(location)

    def to_array(self) -> np.ndarray:
        return self.state.to_array()

    # ---------- Event Emission ----------
    def subscribe(self, handler: EventHandler) -> EventHandler:
        """Register an event handler. Handlers run synchronously in registration order."""
        self._listeners.append(handler)
        return handler

    def emit(self, event: Event) -> None:
        """Deliver an event to every registered handler."""
        logger.debug(f"event {event['type']}")
        for handler in self._listeners:
            handler(event)

    # ---------- Game Setup ----------
    def start_game(self, positions: Optional[Positions] = None) -> None:
        """
        Reset to the opening layout (or the given positions) with the
        configured start player to roll.
        """
        self.state.start_game(positions)
        self.turn = new_turn(self.config.start_player)
        self.dice_pair.values = ()
        self._update_reached_base()
        logger.info(f"New game, {self.active_player} to roll")
        self.emit(self.events.game_start(self.active_player, self.state))

    # ---------- Dice ----------
    def roll_dice(self) -> bool:
        """
        Roll the dice for the active player.

        Returns:
            bool: False if the roll is not available (pool not exhausted or game over).
        """
        if not self.roll_available:
            return self._reject("roll_dice", "roll not available")

        faces = self.dice_pair.roll()
        self.turn = apply_roll(self.turn, faces, self.rules)
        logger.debug(f"{self.active_player} rolled {faces}, pool {self.turn.pool}")
        self.emit(self.events.roll_dice(self.turn.dice, self.turn.pool, self.active_player))
        return True

    # ---------- Selection ----------
    def select_or_deselect(self, target: Location) -> bool:
        """
        Toggle the selection of the active player's chip on a point.

        Selecting computes the chip's move options; deselecting (or selecting
        another point) discards them. BAR routes to reenter_from_bar().

        Args:
            target: Point index (0-23) or BAR.

        Returns:
            bool: True if the selection changed.

        Raises:
            IndexError: If target is neither BAR nor a board point index.
        """
        if target == BAR:
            return self.reenter_from_bar(self.active_player)

        self.state.point(target)
        player = self.active_player

        chip = self.state.top_chip(target, player)
        if chip is None:
            return self._reject("select_or_deselect", f"no chip of {player} on point {target}")
        if not self.turn.rolled or self.winner is not None:
            return self._reject("select_or_deselect", "no dice to play")
        if self.rules.must_enter_from_bar(self.state, player):
            return self._reject("select_or_deselect", f"{player} must re-enter from the bar first")

        return self._toggle_selection(chip, target)

    def reenter_from_bar(self, player: Player) -> bool:
        """
        Toggle the selection of the player's bar chip.

        The chip stays on the bar until one of its move options is applied.

        Returns:
            bool: True if the selection changed.
        """
        if player != self.active_player:
            return self._reject("reenter_from_bar", f"{player} is not active")
        if not self.turn.rolled or self.winner is not None:
            return self._reject("reenter_from_bar", "no dice to play")
        bar = self.state.bar(player)
        if not bar:
            return self._reject("reenter_from_bar", f"bar of {player} is empty")

        return self._toggle_selection(bar[-1], player.bar_index)

    def _toggle_selection(self, chip: RealChip, source: int) -> bool:
        """Select chip and materialise its options, or release it if already selected."""
        player = chip.owner
        location = BAR if source == player.bar_index else source
        container = self.state.bar(player) if location == BAR else self.state.point(source)
        already_selected = any(c.selected for c in container)

        self.state.clear_selection(player)
        if already_selected:
            self.emit(self.events.deselect(player, location))
            return True

        chip.selected = True
        moves = self.generator.compute_destinations(
            self.state, source, player, self.turn.pool, self.turn.doubles
        )
        self.state.add_candidates(moves)
        logger.debug(f"{player} selected {location}: {moves}")
        self.emit(self.events.select(player, location, moves))
        return True

    # ---------- Moves ----------
    def apply_move(self, target: Union[CandidateMove, Location]) -> bool:
        """
        Commit one of the currently offered move options.

        Consumes the die values the option stands for, hits a lone opposing
        chip on the destination, bears off into home when the option targets
        HOME, and hands the turn over once the pool is empty.

        Args:
            target: The CandidateMove itself, or its destination (point index or HOME).

        Returns:
            bool: True if a move was applied.

        Raises:
            IndexError: If target is a point index outside 0-23.
        """
        move = self._resolve_candidate(target)
        if move is None:
            return self._reject("apply_move", f"no option of {self.active_player} at {target}")
        if move.owner != self.active_player:
            return self._reject("apply_move", f"option {move} belongs to {move.owner}")
        if not self.turn.rolled or self.winner is not None:
            return self._reject("apply_move", "no dice to play")

        player = move.owner
        hit = not move.bear_off and self.rules.hittable_target(self.state, player, move.target)
        self.turn = consume(self.turn, move)
        self.state.clear_selection(player)
        captured = self.state.apply_move(move, hit=hit)

        logger.debug(f"{player} moved {move}, pool {self.turn.pool}")
        self.emit(self.events.apply_move(move, self.turn.pool, self.state))
        if captured is not None:
            logger.debug(f"{player} hit {captured.owner} on {move.target}")
            self.emit(self.events.capture(captured.owner, move.target))
        if move.bear_off:
            self.emit(self.events.bear_off(player, len(self.state.home(player))))

        self._update_reached_base()

        winner = self.winner
        if winner is not None:
            self.turn = finish(self.turn)
            logger.info(f"Game over, {winner} wins")
            self.emit(self.events.game_over(winner, self.state))
        elif not self.turn.pool:
            self._end_turn()
        return True

    def _resolve_candidate(self, target: Union[CandidateMove, Location]) -> Optional[CandidateMove]:
        """Map an option or a destination onto a current option of the active player."""
        if isinstance(target, CandidateMove):
            return target if target in self.state.candidates else None
        if target != HOME:
            self.state.point(target)
        for move in self.state.candidates_at(target):
            if move.owner == self.active_player:
                return move
        return None

    # ---------- Turn Management ----------
    def legal_sources(self) -> List[Location]:
        """Points (or BAR) the active player can move a chip from with the current pool."""
        if not self.turn.rolled:
            return []
        player = self.active_player
        sources = self.generator.legal_sources(self.state, player, self.turn.pool, self.turn.doubles)
        return [BAR if source == player.bar_index else source for source in sources]

    def has_legal_move(self) -> bool:
        """True if the active player can play at least one of the remaining dice."""
        if not self.turn.rolled:
            return False
        return self.generator.any_move_left(self.state, self.active_player, self.turn.pool, self.turn.doubles)

    def pass_turn(self) -> bool:
        """
        Forfeit the remaining dice when none of them can be played.

        Returns:
            bool: True if the turn was handed over.
        """
        if not self.turn.rolled or self.winner is not None:
            return self._reject("pass_turn", "no dice to play")
        if self.has_legal_move():
            return self._reject("pass_turn", f"{self.active_player} still has a legal move")

        logger.debug(f"{self.active_player} cannot play {self.turn.pool}")
        self.emit(self.events.no_moves(self.active_player, self.turn.pool))
        self._end_turn()
        return True

    def _end_turn(self) -> None:
        """Switch the active player and re-enable the roll."""
        previous = self.active_player
        self.state.clear_selection(previous)
        self.turn = switch_player(self.turn)
        logger.info(f"Turn ended, {self.active_player} to roll")
        self.emit(self.events.turn_end(previous, self.active_player))

    def _update_reached_base(self) -> None:
        """Recompute the bear-off eligibility of both players."""
        for player in Player:
            self._reached_base[player] = self.rules.reached_base(self.state, player)

    def _reject(self, operation: str, reason: str) -> bool:
        """Log a rejected action and report it as a no-op."""
        logger.debug(f"{operation} rejected: {reason}")
        return False
