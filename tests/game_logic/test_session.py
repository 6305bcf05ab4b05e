"""
Kotoba - Game Session Tests

Turn state machine, scoring commit, exchange, passes, end conditions and the
final rack adjustment.
"""

import itertools

import pytest

from conftest import make_tile
from kotoba import errors
from kotoba.game_logic.constants import ALL_TILES_BONUS, CENTER, RACK_SIZE, TOTAL_TILES
from kotoba.game_logic.session import FINISHED, PLAYING, WAITING, GameSession
from kotoba.game_logic.validator import Placement


class RecordingDeadline:
    def __init__(self):
        self.armed = []
        self.cancelled = 0

    def arm(self, seconds, turn_serial):
        self.armed.append((seconds, turn_serial))

    def cancel(self):
        self.cancelled += 1


@pytest.fixture
def deadline():
    return RecordingDeadline()


@pytest.fixture
def session(oracle, deadline):
    return GameSession(oracle, deadline=deadline, turn_seconds=60, clock=lambda: 1000.0)


@pytest.fixture
def started(session):
    session.add_participant('a', 'Aki')
    session.add_participant('b', 'Ben')
    session.start()
    return session


_ids = itertools.count(1001)


def give(session, player_id, *specs):
    """Replace a rack with fresh tiles given as (char, points) pairs."""
    tiles = []
    for char, points in specs:
        tiles.append(make_tile(next(_ids), char, points, blank=char == ''))
    session.get(player_id).rack = {t.id: t for t in tiles}
    return tiles


def state_of(session):
    return (
        [(r, c, t) for r, c, t in session.board.tiles()],
        {p.id: dict(p.rack) for p in session.participants},
        {p.id: p.score for p in session.participants},
        session.pool.remaining(),
        session.current_idx,
        session.consecutive_passes,
        len(session.history),
    )


# === Seating ===


class TestSeating:
    def test_starts_waiting(self, session):
        assert session.phase == WAITING
        assert session.current_player is None

    def test_add_and_remove_while_waiting(self, session):
        session.add_participant('a', 'Aki')
        session.add_participant('b', 'Ben')
        assert session.remove_participant('a')
        assert [p.id for p in session.participants] == ['b']

    def test_max_four(self, session):
        for pid in 'abcd':
            session.add_participant(pid, pid)
        with pytest.raises(errors.RoomFullError):
            session.add_participant('e', 'e')

    def test_duplicate_rejected(self, session):
        session.add_participant('a', 'Aki')
        with pytest.raises(errors.AlreadySeatedError):
            session.add_participant('a', 'Aki')

    def test_start_needs_two(self, session):
        session.add_participant('a', 'Aki')
        with pytest.raises(errors.NotEnoughPlayersError):
            session.start()
        assert session.phase == WAITING

    def test_no_joining_after_start(self, started):
        with pytest.raises(errors.RoomAlreadyStartedError):
            started.add_participant('c', 'Cy')

    def test_seat_kept_after_start(self, started):
        assert not started.remove_participant('a')
        assert started.get('a') is not None

    def test_start_twice(self, started):
        with pytest.raises(errors.WrongPhaseError):
            started.start()


# === Start ===


class TestStart:
    def test_racks_filled(self, started):
        assert started.phase == PLAYING
        assert all(len(p.rack) == RACK_SIZE for p in started.participants)
        assert started.pool.remaining() == TOTAL_TILES - 2 * RACK_SIZE

    def test_deadline_armed(self, started, deadline):
        assert deadline.armed == [(60, 0)]
        assert started.turn_deadline == 1060.0

    def test_first_player_has_turn(self, started):
        assert started.current_player_id == 'a'


# === Turn ownership ===


class TestTurnOwnership:
    def test_action_before_start_rejected(self, session):
        session.add_participant('a', 'Aki')
        with pytest.raises(errors.WrongPhaseError):
            session.pass_turn('a')

    def test_out_of_turn_play(self, started):
        before = state_of(started)
        with pytest.raises(errors.NotYourTurnError):
            started.play('b', [Placement(1, CENTER, CENTER)])
        assert state_of(started) == before

    def test_out_of_turn_pass_and_exchange(self, started):
        with pytest.raises(errors.NotYourTurnError):
            started.pass_turn('b')
        with pytest.raises(errors.NotYourTurnError):
            started.exchange('b', list(started.get('b').rack)[:1])

    def test_unknown_participant(self, started):
        with pytest.raises(errors.NotYourTurnError):
            started.pass_turn('nobody')


# === Play ===


class TestPlay:
    def test_commit(self, started, deadline):
        ne, ko, *_ = give(started, 'a', ('ね', 4), ('こ', 1), ('い', 1), ('い', 1), ('い', 1), ('い', 1), ('い', 1))
        pool_before = started.pool.remaining()
        turn = started.play('a', [Placement(ne.id, CENTER, CENTER), Placement(ko.id, CENTER, CENTER + 1)])

        assert turn.total == (4 + 1) * 2
        assert started.get('a').score == 10
        assert started.board.get(CENTER, CENTER).id == ne.id
        assert ne.id not in started.get('a').rack
        assert len(started.get('a').rack) == RACK_SIZE
        assert started.pool.remaining() == pool_before - 2
        assert not started.is_first_move
        assert started.current_player_id == 'b'
        assert deadline.armed[-1] == (60, 1)

        record = started.history[-1]
        assert record.action == 'play'
        assert record.player_id == 'a'
        assert [(w.word, w.score) for w in record.words] == [('ねこ', 10)]
        assert record.total_score == 10

    def test_invalid_play_changes_nothing(self, started):
        nu, ne, *_ = give(started, 'a', ('ぬ', 4), ('ね', 4), ('い', 1))
        before = state_of(started)
        with pytest.raises(errors.UnknownWordError):
            started.play('a', [Placement(nu.id, CENTER, CENTER), Placement(ne.id, CENTER, CENTER + 1)])
        assert state_of(started) == before
        assert started.is_first_move

    @pytest.mark.parametrize("placements", [
        [],
        [Placement(424242, CENTER, CENTER)],
    ])
    def test_rejected_intents_change_nothing(self, started, placements):
        before = state_of(started)
        with pytest.raises(errors.GameError):
            started.play('a', placements)
        assert state_of(started) == before

    def test_player_may_retry_after_error(self, started):
        ne, ko = give(started, 'a', ('ね', 4), ('こ', 1))
        with pytest.raises(errors.CenterNotCoveredError):
            started.play('a', [Placement(ne.id, 0, 0), Placement(ko.id, 0, 1)])
        started.play('a', [Placement(ne.id, CENTER, CENTER), Placement(ko.id, CENTER, CENTER + 1)])
        assert started.get('a').score == 10

    def test_all_tiles_bonus(self, started):
        tiles = give(started, 'a', *[(ch, 1) for ch in 'あいうえおかき'])
        placements = [Placement(t.id, CENTER, CENTER - 3 + i) for i, t in enumerate(tiles)]
        turn = started.play('a', placements)
        assert turn.all_tiles_bonus == ALL_TILES_BONUS
        assert turn.total == 7 * 2 + ALL_TILES_BONUS

    def test_play_resets_pass_streak(self, started):
        started.pass_turn('a')
        ne, ko = give(started, 'b', ('ね', 4), ('こ', 1))
        started.play('b', [Placement(ne.id, CENTER, CENTER), Placement(ko.id, CENTER, CENTER + 1)])
        assert started.consecutive_passes == 0

    def test_second_move_extends_first(self, started):
        ne, ko = give(started, 'a', ('ね', 4), ('こ', 1))
        started.play('a', [Placement(ne.id, CENTER, CENTER), Placement(ko.id, CENTER, CENTER + 1)])
        (i,) = give(started, 'b', ('い', 2))
        turn = started.play('b', [Placement(i.id, CENTER + 1, CENTER + 1)])
        bonus = started.bonus_layout[CENTER + 1][CENTER + 1]
        assert [w.word for w in turn.words] == ['こい']
        assert turn.total == (1 + 2 * bonus.letter_multiplier) * bonus.word_multiplier
        assert started.get('b').score == turn.total


# === Exchange ===


class TestExchange:
    def test_exchange_swaps_and_advances(self, started):
        rack_before = set(started.get('a').rack)
        swap = list(rack_before)[:3]
        pool_before = started.pool.remaining()
        drawn = started.exchange('a', swap)
        rack_after = set(started.get('a').rack)
        assert len(rack_after) == RACK_SIZE
        assert not rack_after & set(swap)
        assert {t.id for t in drawn} <= rack_after
        assert started.pool.remaining() == pool_before
        assert started.current_player_id == 'b'
        assert started.history[-1].action == 'exchange'
        assert started.history[-1].total_score == 0

    def test_exchange_keeps_pass_streak(self, started):
        started.pass_turn('a')
        started.exchange('b', list(started.get('b').rack)[:1])
        assert started.consecutive_passes == 1

    def test_empty_exchange(self, started):
        with pytest.raises(errors.EmptyExchangeError):
            started.exchange('a', [])

    def test_exchange_unknown_tile(self, started):
        before = state_of(started)
        with pytest.raises(errors.TileNotInRackError):
            started.exchange('a', [list(started.get('a').rack)[0], 424242])
        assert state_of(started) == before

    def test_exchange_larger_than_pool(self, started):
        started.pool.draw(started.pool.remaining() - 2)
        before = state_of(started)
        with pytest.raises(errors.InsufficientPoolError):
            started.exchange('a', list(started.get('a').rack)[:3])
        assert state_of(started) == before


# === Passing and end condition A ===


class TestPasses:
    def test_pass_advances_and_counts(self, started):
        started.pass_turn('a')
        assert started.consecutive_passes == 1
        assert started.current_player_id == 'b'
        assert started.history[-1].action == 'pass'

    def test_two_rounds_of_passes_end_game(self, started, deadline):
        for pid in ['a', 'b', 'a']:
            started.pass_turn(pid)
        assert started.phase == PLAYING
        started.pass_turn('b')
        assert started.phase == FINISHED
        assert deadline.cancelled == 1
        assert started.turn_deadline == 0.0

    def test_three_players_need_six_passes(self, session):
        for pid in 'abc':
            session.add_participant(pid, pid)
        session.start()
        for pid in 'abcab':
            session.pass_turn(pid)
        assert session.phase == PLAYING
        session.pass_turn('c')
        assert session.phase == FINISHED

    def test_no_actions_after_finish(self, started):
        for pid in 'abab':
            started.pass_turn(pid)
        with pytest.raises(errors.WrongPhaseError):
            started.pass_turn('a')


# === End condition B and final adjustment ===


class TestGameEnd:
    def test_emptied_rack_with_empty_pool_ends_game(self, started):
        started.pool.draw(started.pool.remaining())
        ne, ko = give(started, 'a', ('ね', 4), ('こ', 1))
        give(started, 'b', ('い', 1), ('ぬ', 4))
        started.play('a', [Placement(ne.id, CENTER, CENTER), Placement(ko.id, CENTER, CENTER + 1)])
        assert started.phase == FINISHED
        assert started.get('a').rack == {}
        assert started.get('a').score == 10
        assert started.get('b').score == -5
        assert started.winner().id == 'a'

    def test_emptied_rack_with_tiles_left_continues(self, started):
        ne, ko = give(started, 'a', ('ね', 4), ('こ', 1))
        started.play('a', [Placement(ne.id, CENTER, CENTER), Placement(ko.id, CENTER, CENTER + 1)])
        assert started.phase == PLAYING
        assert len(started.get('a').rack) == RACK_SIZE

    def test_final_adjustment_subtracts_base_points(self, started):
        give(started, 'a', ('ね', 4), ('', 0), ('こ', 1))
        give(started, 'b', ('は', 1))
        for pid in 'abab':
            started.pass_turn(pid)
        assert started.get('a').score == -5
        assert started.get('b').score == -1

    def test_tie_reports_all_top_scorers(self, started):
        give(started, 'a', ('い', 1))
        give(started, 'b', ('う', 1))
        for pid in 'abab':
            started.pass_turn(pid)
        assert [p.id for p in started.winners()] == ['a', 'b']
        assert started.winner().id == 'a'

    def test_no_winner_before_finish(self, started):
        assert started.winners() == []
        assert started.winner() is None


# === Deadline expiry ===


class TestExpireTurn:
    def test_forced_pass(self, started):
        assert started.expire_turn(0)
        assert started.current_player_id == 'b'
        assert started.consecutive_passes == 1
        assert started.history[-1].forced

    def test_at_most_once(self, started):
        assert started.expire_turn(0)
        before = state_of(started)
        assert not started.expire_turn(0)
        assert state_of(started) == before

    def test_stale_deadline_after_player_acted(self, started):
        started.pass_turn('a')
        before = state_of(started)
        assert not started.expire_turn(0)
        assert state_of(started) == before

    def test_noop_when_not_playing(self, session):
        assert not session.expire_turn(0)

    def test_forced_passes_can_end_game(self, started):
        for serial in range(4):
            started.expire_turn(serial)
        assert started.phase == FINISHED


# === Conservation and snapshots ===


class TestConservation:
    def test_tiles_conserved_across_draws_and_exchanges(self, session):
        for pid in 'abc':
            session.add_participant(pid, pid)
        session.start()
        assert session.tile_count() == TOTAL_TILES
        for pid in 'abc':
            session.exchange(pid, list(session.get(pid).rack)[:4])
            assert session.tile_count() == TOTAL_TILES
        session.pass_turn('a')
        assert session.tile_count() == TOTAL_TILES


class TestSnapshot:
    def test_rack_is_private(self, started):
        state = started.state_for('a')
        assert {t.id for t in state.rack} == set(started.get('a').rack)
        assert not {t.id for t in state.rack} & set(started.get('b').rack)

    def test_shared_fields(self, started):
        state = started.state_for('b')
        assert state.phase == 'playing'
        assert state.currentPlayerId == 'a'
        assert state.tilesRemaining == started.pool.remaining()
        assert state.turnDeadline == 1060000
        assert state.bonusLayout[CENTER][CENTER] == 'START'
        assert [p.tileCount for p in state.players] == [RACK_SIZE, RACK_SIZE]
        assert len(state.board) == 15
