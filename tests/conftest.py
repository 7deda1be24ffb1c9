"""Shared builders for PGC scoring tests."""

import pytest

from pgc.models import GolferSnapshot, TeamRoster, TournamentContext
from pgc.schemas import ScoringRules


@pytest.fixture
def rules():
    """Default scoring rules, independent of the packaged rules file."""
    return ScoringRules()


@pytest.fixture
def make_golfer():
    """Factory for GolferSnapshot with sensible defaults."""

    def _make(golfer_id, **kwargs):
        kwargs.setdefault('name', f'Golfer {golfer_id}')
        return GolferSnapshot(golfer_id=golfer_id, **kwargs)

    return _make


@pytest.fixture
def make_team():
    """Factory for TeamRoster in a single-tour tournament."""

    def _make(team_id, golfer_ids, **kwargs):
        kwargs.setdefault('entrant_id', f'card-{team_id}')
        kwargs.setdefault('tournament_id', 'tourney-1')
        kwargs.setdefault('tour_id', 'pga')
        return TeamRoster(team_id=team_id, golfer_ids=list(golfer_ids), **kwargs)

    return _make


@pytest.fixture
def make_context():
    """Factory for TournamentContext (non-playoff, par 72, round 2)."""

    def _make(**kwargs):
        kwargs.setdefault('tournament_id', 'tourney-1')
        kwargs.setdefault('current_round', 2)
        kwargs.setdefault('par', 72)
        return TournamentContext(**kwargs)

    return _make
