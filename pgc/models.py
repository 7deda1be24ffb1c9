"""Data models for the PGC scoring engine."""

from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, List, Optional

# (entrant_id, prior_event_id) -> that entrant's total score in the prior event
PriorEventScoreLookup = Callable[[str, Optional[str]], Optional[float]]


@dataclass
class GolferSnapshot:
    """One golfer's live/final state in a tournament."""
    golfer_id: int
    name: str = ''
    position: Optional[str] = None
    score: Optional[float] = None  # cumulative, relative to par
    today: Optional[float] = None
    thru: Optional[int] = None
    group: Optional[int] = None
    world_rank: Optional[int] = None
    round_one: Optional[float] = None
    round_two: Optional[float] = None
    round_three: Optional[float] = None
    round_four: Optional[float] = None
    round_one_tee_time: Optional[str] = None
    round_two_tee_time: Optional[str] = None
    round_three_tee_time: Optional[str] = None
    round_four_tee_time: Optional[str] = None


@dataclass
class TeamRoster:
    """A fantasy team's golfer picks for one tournament."""
    team_id: str
    entrant_id: str  # tour card
    tournament_id: str
    golfer_ids: List[int] = field(default_factory=list)
    tour_id: str = ''
    playoff_bracket: Optional[str] = None  # 'gold' / 'silver' in playoff events
    seed_points: float = 0.0
    position: Optional[str] = None  # last cycle's position


@dataclass(frozen=True)
class TournamentContext:
    """Immutable per-cycle tournament state."""
    tournament_id: str
    current_round: int  # 0 = not started, 1-4 in progress, 5 = finished
    par: int
    live_play: bool = False
    tier_points: tuple = ()
    tier_payouts: tuple = ()
    is_playoff: bool = False
    event_index: int = 0  # 0 outside playoffs, 1-3 = playoff leg
    prior_event_id: Optional[str] = None
    external_event_id: Optional[int] = None
    year: Optional[int] = None

    @property
    def is_finished(self) -> bool:
        """Round 4 is over for everyone (current_round 5)."""
        return self.current_round >= 5


@dataclass
class RoundCategories:
    """Roster split for one team and one round."""
    round_number: int
    round_state: str
    required: int
    active: List[GolferSnapshot] = field(default_factory=list)
    alternates: List[GolferSnapshot] = field(default_factory=list)
    inactive: List[GolferSnapshot] = field(default_factory=list)

    @property
    def active_ids(self) -> List[int]:
        return [g.golfer_id for g in self.active]


@dataclass
class RoundResult:
    """A team's scoring for one round."""
    round_number: int
    state: str
    active_ids: List[int] = field(default_factory=list)
    over_par: Optional[float] = None  # counted contribution once completed
    strokes: Optional[float] = None  # average strokes of the counted golfers
    today: Optional[float] = None  # live averages while the round is active
    thru: Optional[float] = None
    penalty: bool = False  # filled from the worst eligible peer


@dataclass
class TeamResult:
    """Recomputed output record for a TeamRoster."""
    team_id: str
    entrant_id: str
    peer_group: str
    round: int = 1
    round_one: Optional[float] = None
    round_two: Optional[float] = None
    round_three: Optional[float] = None
    round_four: Optional[float] = None
    today: Optional[float] = None
    thru: Optional[float] = None
    score: Optional[float] = None
    raw_score: Optional[float] = None  # full precision, used for ranking
    bonus_strokes: float = 0.0
    position: Optional[str] = None
    past_position: Optional[str] = None
    position_change: int = 0  # places gained since past_position
    points: float = 0.0
    earnings: float = 0.0
    win: int = 0
    top_ten: int = 0
    make_cut: int = 1
    round_one_tee_time: Optional[str] = None
    round_two_tee_time: Optional[str] = None
    round_three_tee_time: Optional[str] = None
    round_four_tee_time: Optional[str] = None
    round_states: Dict[int, str] = field(default_factory=dict)
    rounds: Dict[int, RoundResult] = field(default_factory=dict)
    golfer_ids: List[int] = field(default_factory=list)  # after replacement

    @property
    def is_cut(self) -> bool:
        return self.make_cut == 0

    def final_active_ids(self) -> List[int]:
        """Golfers counted in the last scored round."""
        for round_number in (4, 3, 2, 1):
            result = self.rounds.get(round_number)
            if result and result.active_ids:
                return list(result.active_ids)
        return []

    def to_record(self) -> dict:
        """Plain dict for persistence collaborators."""
        record = asdict(self)
        record.pop('rounds')
        record.pop('raw_score')
        return record


@dataclass
class GroupAssignment:
    """Golfers drafted into one skill group."""
    group_number: int
    golfer_ids: List[int] = field(default_factory=list)


@dataclass
class GolferIdentity:
    """A golfer resolved from the field feed, ready to persist."""
    golfer_id: int
    player_name: str
    group: int
    world_rank: int
    rating: float
    country: Optional[str] = None
    skill_estimate: Optional[float] = None
    round_one_tee_time: Optional[str] = None
    round_two_tee_time: Optional[str] = None


@dataclass
class SkippedTeam:
    """A team left out of a recompute cycle."""
    team_id: str
    reason: str


@dataclass
class RecomputeResult:
    """Full batch result for one tournament cycle."""
    tournament_id: str
    results: List[TeamResult] = field(default_factory=list)
    skipped: List[SkippedTeam] = field(default_factory=list)
    tie_resolved: bool = False

    def by_team(self) -> Dict[str, TeamResult]:
        return {r.team_id: r for r in self.results}
