"""Pydantic schemas for feed payloads, snapshot files and scoring rules."""

from pydantic import BaseModel, Field, field_validator, model_validator


class FieldEntry(BaseModel):
    """Golfer in a tournament field feed."""

    external_id: int = Field(..., alias='dg_id')
    player_name: str = Field(..., min_length=1)
    country: str | None = None
    world_rank: int | None = Field(None, alias='owgr_rank', ge=1)
    skill_estimate: float | None = Field(None, alias='dg_skill_estimate')
    r1_teetime: str | None = None
    r2_teetime: str | None = None

    class Config:
        extra = 'ignore'
        populate_by_name = True


class RankingEntry(BaseModel):
    """Golfer in the skill rankings feed, joined to the field by external id."""

    external_id: int = Field(..., alias='dg_id')
    own_rank: int | None = Field(None, alias='datagolf_rank')
    world_rank: int | None = Field(None, alias='owgr_rank')
    player_name: str = ''
    country: str | None = None
    skill_estimate: float | None = Field(None, alias='dg_skill_estimate')

    class Config:
        extra = 'ignore'
        populate_by_name = True


class LiveStatsEntry(BaseModel):
    """One golfer's row in the live scoring feed."""

    external_id: int = Field(..., alias='dg_id')
    player_name: str = ''
    current_pos: str | None = None
    thru: str | int | None = None
    end_hole: int | None = None
    today: float | None = None
    current_score: float | None = None
    round_one: float | None = Field(None, alias='R1')
    round_two: float | None = Field(None, alias='R2')
    round_three: float | None = Field(None, alias='R3')
    round_four: float | None = Field(None, alias='R4')

    @field_validator('current_pos', mode='before')
    @classmethod
    def coerce_position(cls, v):
        """Positions arrive as ints for outright places."""
        if v is None:
            return None
        return str(v).strip() or None

    class Config:
        extra = 'ignore'
        populate_by_name = True


class HistoricalEventStat(BaseModel):
    """Per-golfer result in a historical event payload."""

    external_id: int = Field(..., alias='dg_id')
    earnings: float | None = 0.0
    player_name: str = ''
    fin_text: str | None = None

    class Config:
        extra = 'ignore'
        populate_by_name = True


class HistoricalEventResponse(BaseModel):
    """Historical event data for one event/year."""

    event_id: str | int | None = None
    event_name: str | None = None
    year: int | None = None
    event_stats: list[HistoricalEventStat]

    class Config:
        extra = 'ignore'


class GroupLimit(BaseModel):
    """Size thresholds for one of the first four draft groups."""

    percentage: float = Field(..., gt=0, le=1)
    max_count: int = Field(..., ge=0)

    class Config:
        extra = 'forbid'


class ScoringRules(BaseModel):
    """Competition-format settings for the scoring engine."""

    # event_index -> active golfers counted in rounds 1..4
    selection_counts: dict[int, list[int]] = Field(
        default_factory=lambda: {
            0: [10, 10, 5, 5],
            1: [10, 10, 5, 5],
            2: [5, 5, 5, 5],
            3: [3, 3, 3, 3],
        }
    )
    group_limits: list[GroupLimit] = Field(
        default_factory=lambda: [
            GroupLimit(percentage=0.1, max_count=10),
            GroupLimit(percentage=0.175, max_count=16),
            GroupLimit(percentage=0.225, max_count=22),
            GroupLimit(percentage=0.25, max_count=30),
        ]
    )
    team_size: int = Field(10, ge=1, le=50)
    min_per_group: int = Field(2, ge=1, le=10)
    max_top_up_iterations: int = Field(25, ge=1)
    missing_round_over_par: float = 8.0
    default_skill_estimate: float = -1.875
    unranked_skill_estimate: float = -50.0
    default_world_rank: int = Field(501, ge=1)
    bonus_strokes_floor: float = Field(-10.0, le=0)
    bonus_reference_rank: int = Field(35, ge=2)
    cut_round: int = Field(3, ge=1, le=4)
    weekend_tee_time_rank: int = Field(6, ge=1)
    playoff_payout_offsets: dict[str, int] = Field(
        default_factory=lambda: {'gold': 0, 'silver': 75}
    )
    excluded_golfer_ids: list[int] = Field(default_factory=list)

    @field_validator('selection_counts')
    @classmethod
    def validate_selection_counts(cls, v):
        """Every event index needs a positive count for each of the four rounds."""
        for event_index in (0, 1, 2, 3):
            if event_index not in v:
                raise ValueError(f'Missing selection counts for event index {event_index}')
        for event_index, counts in v.items():
            if len(counts) != 4:
                raise ValueError(
                    f'Event index {event_index} needs 4 round counts, got {len(counts)}'
                )
            if any(c < 1 for c in counts):
                raise ValueError(f'Selection counts must be positive: {counts}')
        return v

    @field_validator('group_limits')
    @classmethod
    def validate_group_limits(cls, v):
        """Groups 1-4 are bounded; group 5 takes the remainder."""
        if len(v) != 4:
            raise ValueError(f'Expected limits for 4 groups, got {len(v)}')
        return v

    class Config:
        extra = 'forbid'


class SnapshotGolfer(BaseModel):
    """Golfer row in a tournament snapshot file."""

    golfer_id: int
    name: str = ''
    position: str | None = None
    score: float | None = None
    today: float | None = None
    thru: int | None = Field(None, ge=0, le=18)
    group: int | None = Field(None, ge=1, le=5)
    world_rank: int | None = None
    round_one: float | None = None
    round_two: float | None = None
    round_three: float | None = None
    round_four: float | None = None
    round_one_tee_time: str | None = None
    round_two_tee_time: str | None = None
    round_three_tee_time: str | None = None
    round_four_tee_time: str | None = None

    class Config:
        extra = 'forbid'


class SnapshotTeam(BaseModel):
    """Team row in a tournament snapshot file."""

    team_id: str = Field(..., min_length=1)
    entrant_id: str = Field(..., min_length=1)
    golfer_ids: list[int]
    tour_id: str = ''
    playoff_bracket: str | None = None
    seed_points: float = 0.0
    position: str | None = None

    class Config:
        extra = 'forbid'


class SnapshotContext(BaseModel):
    """Tournament-level context in a snapshot file."""

    tournament_id: str = Field(..., min_length=1)
    current_round: int = Field(..., ge=0, le=5)
    live_play: bool = False
    par: int = Field(..., ge=60, le=80)
    tier_points: list[float] = Field(default_factory=list)
    tier_payouts: list[float] = Field(default_factory=list)
    is_playoff: bool = False
    event_index: int = Field(0, ge=0, le=3)
    prior_event_id: str | None = None
    external_event_id: int | None = None
    year: int | None = None

    @model_validator(mode='after')
    def check_playoff_index(self):
        """Playoff events carry a 1-based leg index; others carry 0."""
        if self.is_playoff and self.event_index == 0:
            raise ValueError('Playoff tournaments need an event_index of 1-3')
        if not self.is_playoff and self.event_index != 0:
            raise ValueError('Non-playoff tournaments must use event_index 0')
        return self

    class Config:
        extra = 'forbid'


class SnapshotFile(BaseModel):
    """Complete tournament snapshot file."""

    context: SnapshotContext
    golfers: list[SnapshotGolfer]
    teams: list[SnapshotTeam]
    prior_event_scores: dict[str, float] = Field(default_factory=dict)

    class Config:
        extra = 'forbid'
