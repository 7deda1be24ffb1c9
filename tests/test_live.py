"""Unit tests for live-feed helpers."""

import logging

from pgc.live import (
    apply_live_feed,
    apply_live_stats,
    are_all_players_finished,
    infer_par_from_live_stats,
    is_player_finished,
    is_round_running,
    normalize_player_name,
    parse_position_number,
    parse_thru,
    position_change,
)
from pgc.schemas import LiveStatsEntry


def entry(**kwargs) -> LiveStatsEntry:
    kwargs.setdefault('dg_id', 1)
    return LiveStatsEntry.model_validate(kwargs)


class TestNames:
    """Tests for player name normalization."""

    def test_last_first(self):
        """Test 'Last, First' becomes 'First Last'."""
        assert normalize_player_name('Scheffler, Scottie') == 'Scottie Scheffler'

    def test_plain_name_whitespace(self):
        """Test names without commas only collapse whitespace."""
        assert normalize_player_name('  Rory   McIlroy ') == 'Rory McIlroy'

    def test_dangling_comma(self):
        """Test a name with an empty part is left as written."""
        assert normalize_player_name('Tiger,') == 'Tiger,'


class TestPositions:
    """Tests for thru and position parsing."""

    def test_parse_thru(self):
        """Test holes completed from the feed's thru value."""
        assert parse_thru('F') == 18
        assert parse_thru('12') == 12
        assert parse_thru(7) == 7
        assert parse_thru('') is None
        assert parse_thru(None) is None
        assert parse_thru('-') is None

    def test_parse_position_number(self):
        """Test numeric places from outright and tied positions."""
        assert parse_position_number('T3') == 3
        assert parse_position_number('12') == 12
        assert parse_position_number('CUT') is None
        assert parse_position_number(None) is None

    def test_position_change(self):
        """Test moving from T5 to 2 gains three places."""
        assert position_change('T5', '2') == 3
        assert position_change('2', 'T5') == -3
        assert position_change(None, '1') == 0


class TestRoundStatus:
    """Tests for finished / running detection."""

    def test_terminal_codes_finished(self):
        """Test WD and CUT golfers count as finished."""
        assert is_player_finished(entry(current_pos='WD'))
        assert is_player_finished(entry(current_pos='CUT', thru='9'))

    def test_thru_f_finished(self):
        """Test thru 'F' means the round is done."""
        assert is_player_finished(entry(current_pos='T4', thru='F'))

    def test_end_hole_finished(self):
        """Test end_hole 18 means the round is done."""
        assert is_player_finished(entry(end_hole=18))

    def test_mid_round_not_finished(self):
        """Test a golfer on hole 9 is still playing."""
        assert not is_player_finished(entry(current_pos='T4', thru=9))

    def test_round_running(self):
        """Test one golfer mid-round makes the round running."""
        assert is_round_running([entry(thru='F'), entry(dg_id=2, thru='9')])
        assert not is_round_running([entry(thru='F'), entry(dg_id=2, thru='0')])

    def test_all_finished(self):
        """Test an empty feed never counts as finished."""
        assert not are_all_players_finished([])
        assert are_all_players_finished([entry(thru='F'), entry(dg_id=2, current_pos='WD')])

    def test_integer_positions_coerced(self):
        """Test outright places sent as ints become strings."""
        assert entry(current_pos=3).current_pos == '3'


class TestInferPar:
    """Tests for par inference from the live feed."""

    def test_majority_par(self):
        """Test golfers with two rounds vote for the course par."""
        entries = [
            entry(dg_id=1, R1=70, R2=72, current_score=-2),
            entry(dg_id=2, R1=75, R2=71, current_score=2),
            entry(dg_id=3, R1=68, current_score=-4),
        ]
        assert infer_par_from_live_stats(entries) == (72, 2)

    def test_no_votes(self):
        """Test no usable rows gives (None, 0)."""
        assert infer_par_from_live_stats([entry(R1=70, current_score=-2)]) == (None, 0)


class TestApplyLiveStats:
    """Tests for updating snapshots from the live feed."""

    def test_updates_live_fields(self, make_golfer):
        """Test live values overwrite and recorded rounds are kept."""
        golfer = make_golfer(5, round_one=70.0, position='T10', score=-2.0)
        updated = apply_live_stats(
            golfer,
            entry(dg_id=5, current_pos='T4', thru='F', today=-3, current_score=-5, R2=69),
        )
        assert updated.position == 'T4'
        assert updated.thru == 18
        assert updated.today == -3
        assert updated.score == -5
        assert updated.round_one == 70.0
        assert updated.round_two == 69
        assert golfer.round_two is None  # original untouched


class TestApplyLiveFeed:
    """Tests for refreshing a cycle's inputs from the in-play feed."""

    def test_golfers_and_live_flag(self, make_golfer, make_context):
        """Test matched golfers update and live play follows the feed."""
        golfers = [make_golfer(1, round_one=70.0), make_golfer(2, round_one=71.0)]
        entries = [entry(dg_id=1, current_pos='T3', thru='9', today=-2)]
        context, updated = apply_live_feed(make_context(current_round=2), golfers, entries)

        assert context.live_play
        assert updated[0].today == -2
        assert updated[0].thru == 9
        assert updated[1] is golfers[1]

    def test_finished_round_not_live(self, make_golfer, make_context):
        """Test a feed where everyone is done turns live play off."""
        ctx = make_context(current_round=2, live_play=True)
        context, _ = apply_live_feed(ctx, [make_golfer(1)], [entry(dg_id=1, thru='F')])
        assert not context.live_play
        assert ctx.live_play

    def test_par_mismatch_logged(self, make_golfer, make_context, caplog):
        """Test a feed implying a different par is reported, not applied."""
        entries = [
            entry(dg_id=1, R1=70, R2=72, current_score=0),
            entry(dg_id=2, R1=71, R2=71, current_score=0),
        ]
        with caplog.at_level(logging.WARNING, logger='pgc.live'):
            context, _ = apply_live_feed(make_context(par=72), [make_golfer(1)], entries)
        assert context.par == 72
        assert 'par 71' in caplog.text
