"""Unit tests for round and team score aggregation."""

import pytest

from pgc.models import RoundCategories, RoundResult
from pgc.rounds import categorize_round
from pgc.schemas import ScoringRules
from pgc.scoring import (
    aggregate_team_score,
    bonus_strokes,
    penalty_round,
    score_round,
    seeded_bonus_strokes,
    team_tee_time,
)


class TestScoreRound:
    """Tests for single-round aggregation."""

    def test_completed_round(self, make_golfer):
        """Test completed rounds average over-par and strokes of the active set."""
        active = [make_golfer(1, round_one=70.0), make_golfer(2, round_one=72.0)]
        cats = RoundCategories(round_number=1, round_state='completed', required=2, active=active)
        result = score_round(cats, 72)
        assert result.over_par == -1.0
        assert result.strokes == 71.0
        assert result.thru == 18.0
        assert result.today is None
        assert result.active_ids == [1, 2]

    def test_alternates_ignored(self, make_golfer):
        """Test only active golfers count."""
        cats = RoundCategories(
            round_number=3,
            round_state='completed',
            required=1,
            active=[make_golfer(1, round_three=68.0)],
            alternates=[make_golfer(2, round_three=80.0)],
        )
        assert score_round(cats, 72).over_par == -4.0

    def test_completed_round_without_posted_strokes(self, make_golfer):
        """Test a round finished live falls back to today values."""
        active = [make_golfer(1, today=-3.0, thru=18), make_golfer(2, today=-1.0, thru=18)]
        cats = RoundCategories(round_number=2, round_state='completed', required=2, active=active)
        result = score_round(cats, 72, live_round=True)
        assert result.over_par == -2.0
        assert result.strokes == 70.0

    def test_past_round_ignores_live_today(self, make_golfer, rules):
        """Test a late-posting golfer does not pull the next round's today into a past round."""
        golfers = [make_golfer(i, round_two=70.0, today=0.0, thru=5) for i in range(1, 10)]
        golfers.append(make_golfer(10, today=-6.0, thru=12))
        cats = categorize_round(golfers, 2, 0, True, 3, 72, rules)
        assert cats.round_state == 'completed'
        result = score_round(cats, 72)
        assert result.over_par == -2.0
        assert result.strokes == 70.0

    def test_active_round(self, make_golfer):
        """Test active rounds average live today and thru."""
        active = [make_golfer(1, today=-2.0, thru=9), make_golfer(2, today=-4.0, thru=11)]
        cats = RoundCategories(round_number=2, round_state='active', required=2, active=active)
        result = score_round(cats, 72)
        assert result.today == -3.0
        assert result.thru == 10.0
        assert result.over_par is None

    @pytest.mark.parametrize('state', ['upcoming', 'cut'])
    def test_undefined_rounds(self, make_golfer, state):
        """Test upcoming and cut rounds contribute nothing by themselves."""
        cats = RoundCategories(round_number=3, round_state=state, required=1, active=[make_golfer(1)])
        result = score_round(cats, 72)
        assert result.over_par is None
        assert result.today is None
        assert result.strokes is None


class TestPenaltyRound:
    """Tests for filling short-handed rounds from peers."""

    def test_worst_completed_peer(self):
        """Test the worst completed contribution is charged."""
        peers = [
            RoundResult(1, 'completed', over_par=-2.0),
            RoundResult(1, 'completed', over_par=3.0),
            RoundResult(1, 'completed', over_par=1.0),
        ]
        result = penalty_round(1, peers, 72)
        assert result.penalty
        assert result.over_par == 3.0
        assert result.strokes == 75.0

    def test_never_below_even_par(self):
        """Test the charge is at least even par."""
        peers = [RoundResult(1, 'completed', over_par=-2.0)]
        assert penalty_round(1, peers, 72).over_par == 0.0

    def test_live_peers(self):
        """Test live peer values are used while the round is in progress."""
        peers = [
            RoundResult(2, 'active', today=1.5, thru=9.0),
            RoundResult(2, 'active', today=-1.0, thru=12.0),
        ]
        result = penalty_round(2, peers, 72)
        assert result.today == 1.5
        assert result.thru == 9.0
        assert result.over_par is None

    def test_no_peers(self):
        """Test nothing is charged before peers have played."""
        result = penalty_round(3, [RoundResult(3, 'upcoming')], 72)
        assert result.over_par is None
        assert result.today is None


class TestAggregateTeamScore:
    """Tests for team totals."""

    def test_total(self):
        """Test completed rounds, live today and bonus strokes add up."""
        rounds = [
            RoundResult(1, 'completed', over_par=-1.0),
            RoundResult(2, 'completed', over_par=-2.0),
            RoundResult(3, 'active', today=-1.0),
            RoundResult(4, 'upcoming'),
        ]
        assert aggregate_team_score(rounds, bonus=-3.0) == -7.0

    def test_empty(self):
        """Test a team with nothing played scores its bonus."""
        assert aggregate_team_score([RoundResult(1, 'upcoming')], bonus=-2.5) == -2.5


class TestBonusStrokes:
    """Tests for playoff starting strokes."""

    def test_non_playoff(self):
        """Test regular events have no bonus."""
        assert bonus_strokes(0, 'card-1', 500.0, [500.0, 100.0]) == 0.0

    def test_interpolation_small_bracket(self, rules):
        """Test seeds interpolate between the best and the last team."""
        seeds = [300.0, 200.0, 100.0]
        assert seeded_bonus_strokes(300.0, seeds, rules) == -10.0
        assert seeded_bonus_strokes(200.0, seeds, rules) == -5.0
        assert seeded_bonus_strokes(100.0, seeds, rules) == 0.0

    def test_reference_rank(self, rules):
        """Test teams beyond the 35th seed are clamped to 0."""
        seeds = [float(s) for s in range(360, 0, -10)]  # 36 teams: 360 .. 10
        assert seeded_bonus_strokes(20.0, seeds, rules) == 0.0
        assert seeded_bonus_strokes(10.0, seeds, rules) == 0.0
        assert seeded_bonus_strokes(360.0, seeds, rules) == -10.0

    def test_bonus_range(self, rules):
        """Test every bonus lies within [floor, 0]."""
        seeds = [812.0, 640.5, 610.0, 402.0, 95.0]
        for seed in seeds:
            assert -10.0 <= seeded_bonus_strokes(seed, seeds, rules) <= 0.0

    def test_equal_seeds(self, rules):
        """Test a bracket of equal seeds gives everyone the full bonus."""
        assert seeded_bonus_strokes(50.0, [50.0, 50.0], rules) == -10.0

    def test_custom_floor(self):
        """Test the floor comes from the rules."""
        rules = ScoringRules(bonus_strokes_floor=-6.0)
        assert seeded_bonus_strokes(300.0, [300.0, 100.0], rules) == -6.0

    def test_event_one_uses_seeds(self, rules):
        """Test event 1 dispatches to seed interpolation."""
        assert bonus_strokes(1, 'card-1', 300.0, [300.0, 100.0], rules=rules) == -10.0

    def test_carry_in(self):
        """Test events 2-3 carry in the prior event total."""
        calls = []

        def lookup(entrant_id, prior_event_id):
            calls.append((entrant_id, prior_event_id))
            return -12.4

        assert bonus_strokes(2, 'card-1', 0.0, [], 'event-1', lookup) == -12.4
        assert calls == [('card-1', 'event-1')]

    def test_carry_in_unknown(self):
        """Test an unknown prior total carries in 0."""
        assert bonus_strokes(3, 'card-1', 0.0, [], 'event-2', lambda e, p: None) == 0.0
        assert bonus_strokes(3, 'card-1', 0.0, [], 'event-2', None) == 0.0


class TestTeamTeeTime:
    """Tests for team tee times."""

    def test_earliest(self):
        """Test the earliest ISO tee time is chosen."""
        times = ['2025-04-10T13:20:00', '2025-04-10T08:05:00', None, '  ']
        assert team_tee_time(times) == '2025-04-10T08:05:00'

    def test_nth_earliest(self):
        """Test weekend tee time uses the 6th earliest golfer."""
        times = [f'2025-04-12T{h:02d}:00:00' for h in range(15, 5, -1)]
        assert team_tee_time(times, 6) == '2025-04-12T11:00:00'

    def test_timezones(self):
        """Test aware timestamps compare chronologically."""
        times = ['2025-04-10T09:00:00-04:00', '2025-04-10T12:30:00Z']
        assert team_tee_time(times) == '2025-04-10T12:30:00Z'

    def test_unparseable_falls_back_to_text(self):
        """Test non-ISO values are compared as strings."""
        assert team_tee_time(['9:10', '10:40', '8:50']) == '10:40'

    def test_none(self):
        """Test no tee times gives None."""
        assert team_tee_time([None, '']) is None
        assert team_tee_time(['2025-04-10T08:00:00'], 6) is None
