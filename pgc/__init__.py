from .models import (
    GolferSnapshot,
    TeamRoster,
    TournamentContext,
    TeamResult,
    RecomputeResult,
    GroupAssignment,
    GolferIdentity,
)
from .rating import normalize_skill_estimate
from .event_matcher import EventNameMatch, match_event_names
from .grouping import rank_field, determine_group_index, group_field, build_groups
from .rounds import categorize_round
from .replacement import top_up_one_group, fill_roster
from .scoring import score_round, bonus_strokes, aggregate_team_score
from .standings import rank_peer_group, allocate_award
from .tiebreak import break_first_place_tie, earnings_fetcher_for
from .data_fetcher import DataGolfFetcher, FeedUnavailableError
from .live import apply_live_feed
from .validators import InvalidTeamError, InvalidContextError
from .scorer import TournamentScorer, recompute
from .snapshot import load_snapshot, recompute_from_json, save_results

__all__ = [
    # Models
    'GolferSnapshot',
    'TeamRoster',
    'TournamentContext',
    'TeamResult',
    'RecomputeResult',
    'GroupAssignment',
    'GolferIdentity',
    # Pre-tournament
    'normalize_skill_estimate',
    'EventNameMatch',
    'match_event_names',
    'rank_field',
    'determine_group_index',
    'group_field',
    'build_groups',
    # Per-cycle scoring
    'categorize_round',
    'top_up_one_group',
    'fill_roster',
    'score_round',
    'bonus_strokes',
    'aggregate_team_score',
    'rank_peer_group',
    'allocate_award',
    'break_first_place_tie',
    'earnings_fetcher_for',
    'TournamentScorer',
    'recompute',
    # Feeds
    'apply_live_feed',
    'DataGolfFetcher',
    'FeedUnavailableError',
    # Errors
    'InvalidTeamError',
    'InvalidContextError',
    # JSON snapshots
    'load_snapshot',
    'recompute_from_json',
    'save_results',
]
