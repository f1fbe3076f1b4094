"""Tests for the game engine: turn flow, selection, moves, hits, bear-off and events."""

import random

import pytest

from gammon.core.board import BAR, HOME
from gammon.core.chips import Player, CandidateMove
from gammon.core.engine import GameEngine
from gammon.core.state_invariants import assert_state_invariant


def recorder(engine):
    events = []
    engine.subscribe(events.append)
    return events


def kinds(events):
    return [event["type"] for event in events]


class TestRolling:
    def test_roll_fills_pool(self, make_engine):
        engine = make_engine(rolls=[3, 5])
        assert engine.roll_available
        assert engine.roll_dice()
        assert engine.dice == (3, 5)
        assert engine.dice_pool == (3, 5)
        assert not engine.doubles
        assert not engine.roll_available

    def test_doubles_give_four_values(self, make_engine):
        engine = make_engine(rolls=[4, 4])
        engine.roll_dice()
        assert engine.dice_pool == (4, 4, 4, 4)
        assert engine.doubles

    def test_reroll_rejected(self, make_engine):
        engine = make_engine(rolls=[3, 5, 6, 6])
        engine.roll_dice()
        assert not engine.roll_dice()
        assert engine.dice_pool == (3, 5)
        assert engine.active_player == Player.ONE

    def test_start_game_resets_layout(self, make_engine):
        engine = make_engine(one=[(0, 2)], two=[(20, 2)], start_player=Player.TWO)
        events = recorder(engine)
        engine.start_game()
        assert kinds(events) == ["game_start"]
        assert events[0]["turn"] == Player.TWO
        assert engine.active_player == Player.TWO
        assert len(engine.point(11)) == 5
        assert engine.roll_available

    def test_default_engine_plays_opening(self):
        engine = GameEngine(rng=random.Random(1))
        engine.start_game()
        assert engine.roll_dice()
        assert len(engine.dice_pool) in (2, 4)


class TestSelection:
    def test_select_opening_chip(self, make_engine, dests):
        engine = make_engine(rolls=[3, 5])
        engine.roll_dice()
        assert engine.select_or_deselect(0)
        assert dests(engine.candidates) == [3, 8]
        assert engine.selected is not None and engine.selected.location == 0

    def test_select_player_two(self, make_engine, dests):
        engine = make_engine(rolls=[3, 5], start_player=Player.TWO)
        engine.roll_dice()
        assert engine.select_or_deselect(23)
        assert dests(engine.candidates) == [20, 15]

    def test_select_before_roll_is_noop(self, make_engine):
        engine = make_engine(rolls=[3, 5])
        assert not engine.select_or_deselect(0)
        assert engine.candidates == ()
        assert engine.selected is None

    def test_select_empty_or_opponent_point(self, make_engine):
        engine = make_engine(rolls=[3, 5])
        engine.roll_dice()
        assert not engine.select_or_deselect(3)
        assert not engine.select_or_deselect(23)
        assert engine.candidates == ()

    def test_only_one_chip_selected(self, make_engine, dests):
        engine = make_engine(rolls=[3, 5])
        engine.roll_dice()
        engine.select_or_deselect(0)
        engine.select_or_deselect(11)
        assert len(engine.state.selected_chips()) == 1
        assert engine.selected.location == 11
        assert {move.source for move in engine.candidates} == {11}
        assert dests(engine.candidates) == [14, 16, 19]

    def test_toggle_restores_state(self, make_engine):
        engine = make_engine(rolls=[3, 5])
        engine.roll_dice()
        counts = engine.to_array().copy()
        positions = engine.state.state_to_list()
        events = recorder(engine)

        assert engine.select_or_deselect(0)
        assert engine.select_or_deselect(0)

        assert kinds(events) == ["select", "deselect"]
        assert engine.candidates == ()
        assert engine.selected is None
        assert (engine.to_array() == counts).all()
        assert engine.state.state_to_list() == positions
        assert engine.dice_pool == (3, 5)

    @pytest.mark.parametrize("index", [-1, 24, 99])
    def test_select_off_board_raises(self, make_engine, index):
        engine = make_engine(rolls=[3, 5])
        engine.roll_dice()
        with pytest.raises(IndexError):
            engine.select_or_deselect(index)

    def test_bar_of_inactive_player_rejected(self, make_engine):
        engine = make_engine(one=[(0, 2)], two=[(BAR, 1), (20, 2)], rolls=[3, 5])
        engine.roll_dice()
        assert not engine.reenter_from_bar(Player.TWO)
        assert not engine.select_or_deselect(BAR)


class TestMoves:
    def test_two_dice_scenario(self, make_engine, dests):
        engine = make_engine(one=[(0, 2)], two=[(20, 2)], rolls=[3, 5])
        engine.roll_dice()
        engine.select_or_deselect(0)
        assert dests(engine.candidates) == [3, 5, 8]
        assert [move.steps for move in engine.candidates] == [1, 1, 2]

        assert engine.apply_move(8)
        assert engine.state.num_of_chips(8, Player.ONE) == 1
        assert engine.dice_pool == ()
        assert engine.active_player == Player.TWO
        assert engine.roll_available
        assert engine.candidates == ()

    def test_single_die_keeps_turn(self, make_engine, dests):
        engine = make_engine(one=[(0, 2)], two=[(20, 2)], rolls=[3, 5])
        engine.roll_dice()
        engine.select_or_deselect(0)
        assert engine.apply_move(3)
        assert engine.dice_pool == (5,)
        assert engine.active_player == Player.ONE
        assert engine.candidates == ()
        assert engine.selected is None

        engine.select_or_deselect(3)
        assert dests(engine.candidates) == [8]

    def test_apply_candidate_object(self, make_engine):
        engine = make_engine(one=[(0, 2)], two=[(20, 2)], rolls=[3, 5])
        engine.roll_dice()
        engine.select_or_deselect(0)
        move = engine.candidates[1]
        assert engine.apply_move(move)
        assert engine.dice_pool == (3,)

    def test_apply_without_option_is_noop(self, make_engine):
        engine = make_engine(rolls=[3, 5])
        engine.roll_dice()
        engine.select_or_deselect(0)
        before = engine.to_array().copy()
        assert not engine.apply_move(4)
        assert not engine.apply_move(HOME)
        assert not engine.apply_move(CandidateMove(Player.ONE, 0, 4, 4))
        assert (engine.to_array() == before).all()
        assert engine.dice_pool == (3, 5)

    @pytest.mark.parametrize("index", [-1, 24])
    def test_apply_off_board_raises(self, make_engine, index):
        engine = make_engine(rolls=[3, 5])
        engine.roll_dice()
        with pytest.raises(IndexError):
            engine.apply_move(index)

    def test_doubles_scenario(self, make_engine, dests):
        engine = make_engine(rolls=[4, 4])
        engine.roll_dice()
        engine.select_or_deselect(0)
        assert dests(engine.candidates) == [4, 8]

        engine.apply_move(8)
        assert engine.dice_pool == (4, 4)
        assert engine.active_player == Player.ONE

        engine.select_or_deselect(0)
        assert dests(engine.candidates) == [4, 8]
        engine.apply_move(4)
        assert engine.dice_pool == (4,)

        engine.select_or_deselect(4)
        assert dests(engine.candidates) == [8]
        engine.apply_move(8)
        assert engine.active_player == Player.TWO
        assert engine.state.num_of_chips(8, Player.ONE) == 2

    def test_relaxed_combined_policy(self, make_engine, dests):
        engine = make_engine(
            one=[(0, 2)], two=[(3, 2), (5, 2)], rolls=[3, 5], combined_requires_single=False
        )
        engine.roll_dice()
        engine.select_or_deselect(0)
        assert dests(engine.candidates) == [8]


class TestHitAndReentry:
    def test_hit_then_bar_priority(self, make_engine, dests):
        engine = make_engine(one=[(0, 2)], two=[(3, 1), (20, 2)], rolls=[3, 5, 6, 2])
        events = recorder(engine)
        engine.roll_dice()
        engine.select_or_deselect(0)
        assert dests(engine.candidates) == [3, 5, 8]

        engine.apply_move(3)
        assert len(engine.bar(Player.TWO)) == 1
        assert [chip.owner for chip in engine.point(3)] == [Player.ONE]
        capture = [event for event in events if event["type"] == "capture"]
        assert capture[0]["player"] == Player.TWO and capture[0]["point"] == 3

        engine.select_or_deselect(0)
        engine.apply_move(5)
        assert engine.active_player == Player.TWO

        engine.roll_dice()
        assert engine.legal_sources() == [BAR]
        assert not engine.select_or_deselect(20)
        assert engine.candidates == ()

        assert engine.select_or_deselect(BAR)
        assert dests(engine.candidates) == [18, 22, 16]
        assert all(move.from_bar for move in engine.candidates)

        engine.apply_move(18)
        assert engine.bar(Player.TWO) == ()
        assert engine.dice_pool == (2,)
        assert engine.legal_sources() == [18, 20]

    def test_hit_from_bar(self, make_engine):
        engine = make_engine(one=[(BAR, 1), (10, 2)], two=[(2, 1), (20, 2)], rolls=[3, 4])
        engine.roll_dice()
        engine.reenter_from_bar(Player.ONE)
        engine.apply_move(2)
        assert engine.bar(Player.ONE) == ()
        assert len(engine.bar(Player.TWO)) == 1

    def test_capture_decided_by_rules(self, make_engine, monkeypatch):
        engine = make_engine(one=[(0, 2)], two=[(3, 1), (20, 2)], rolls=[3, 5])
        asked = []
        hittable = engine.rules.hittable_target

        def spy(state, player, point):
            asked.append((player, point))
            return hittable(state, player, point)

        monkeypatch.setattr(engine.rules, "hittable_target", spy)
        engine.roll_dice()
        engine.select_or_deselect(0)
        engine.apply_move(3)
        assert asked == [(Player.ONE, 3)]
        assert len(engine.bar(Player.TWO)) == 1

        engine.select_or_deselect(0)
        engine.apply_move(5)
        assert asked[-1] == (Player.ONE, 5)
        assert engine.bar(Player.ONE) == ()


class TestBearOff:
    def test_bear_off_then_single(self, make_engine, dests):
        engine = make_engine(one=[(20, 2), (22, 1)], two=[(5, 2), (10, 1)], rolls=[6, 1])
        events = recorder(engine)
        assert engine.reached_base(Player.ONE)
        assert not engine.reached_base(Player.TWO)
        engine.roll_dice()

        engine.select_or_deselect(22)
        assert dests(engine.candidates) == [23]

        engine.select_or_deselect(20)
        assert dests(engine.candidates) == [HOME, 21]
        assert engine.candidates_at(HOME)[0].value == 6

        engine.apply_move(HOME)
        assert len(engine.home(Player.ONE)) == 13
        assert engine.dice_pool == (1,)
        bear_off = [event for event in events if event["type"] == "bear_off"]
        assert bear_off[0]["home_count"] == 13

    def test_winning_move(self, make_engine):
        engine = make_engine(one=[(23, 1)], two=[(5, 2)], rolls=[1, 2])
        events = recorder(engine)
        engine.roll_dice()
        engine.select_or_deselect(23)
        assert engine.apply_move(HOME)

        assert engine.winner == Player.ONE
        assert engine.dice_pool == ()
        assert not engine.roll_available
        assert kinds(events)[-1] == "game_over"
        assert events[-1]["winner"] == Player.ONE
        assert "turn_end" not in kinds(events)

        assert not engine.roll_dice()
        assert not engine.pass_turn()


class TestPass:
    @pytest.fixture
    def blocked(self, make_engine):
        closed = [(point, 2) for point in range(18, 24)]
        return make_engine(
            one=closed, two=[(BAR, 1), (5, 2)], rolls=[3, 4], start_player=Player.TWO
        )

    def test_pass_without_moves(self, blocked):
        events = recorder(blocked)
        assert not blocked.pass_turn()
        blocked.roll_dice()
        assert not blocked.has_legal_move()
        assert blocked.legal_sources() == []
        assert not blocked.select_or_deselect(5)

        assert blocked.pass_turn()
        assert kinds(events) == ["roll_dice", "no_moves", "turn_end"]
        assert blocked.active_player == Player.ONE
        assert blocked.roll_available

    def test_pass_rejected_with_moves(self, make_engine):
        engine = make_engine(rolls=[3, 5])
        engine.roll_dice()
        assert engine.has_legal_move()
        assert not engine.pass_turn()
        assert engine.active_player == Player.ONE


class TestEvents:
    def test_event_sequence_of_a_turn(self, make_engine):
        engine = make_engine(one=[(0, 2)], two=[(20, 2)], rolls=[3, 5])
        events = recorder(engine)
        engine.roll_dice()
        engine.select_or_deselect(0)
        engine.apply_move(8)
        assert kinds(events) == ["roll_dice", "select", "apply_move", "turn_end"]
        assert events[0]["dice"] == (3, 5)
        assert events[2]["pool"] == ()
        assert events[3]["turn"] == Player.ONE and events[3]["next_turn"] == Player.TWO

    def test_rejections_emit_nothing(self, make_engine):
        engine = make_engine(rolls=[3, 5])
        events = recorder(engine)
        engine.select_or_deselect(0)
        engine.apply_move(3)
        engine.pass_turn()
        assert events == []


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_random_games_keep_turns_consistent(make_engine, seed):
    engine = make_engine(rng=random.Random(seed))
    engine.start_game()
    events = recorder(engine)
    picker = random.Random(seed + 100)

    for _ in range(4000):
        if engine.winner is not None:
            break
        player = engine.active_player
        if engine.roll_available:
            assert engine.roll_dice()
            continue

        sources = engine.legal_sources()
        if not sources:
            assert engine.pass_turn()
            assert engine.active_player == player.opponent
            continue

        assert engine.select_or_deselect(picker.choice(sources))
        assert engine.candidates
        assert engine.apply_move(picker.choice(engine.candidates))
        if engine.dice_pool:
            assert engine.active_player == player
        elif engine.winner is None:
            assert engine.active_player == player.opponent

    turn_ends = [event for event in events if event["type"] == "turn_end"]
    for event in turn_ends:
        assert event["next_turn"] == event["turn"].opponent
    for current, following in zip(turn_ends, turn_ends[1:]):
        assert following["turn"] == current["next_turn"]
    assert_state_invariant(engine.state, "random game")
