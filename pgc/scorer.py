"""Tournament recompute cycle: team scoring, standings and awards."""

import logging
from collections import defaultdict
from typing import Optional, Sequence

from .config import get_config
from .constants import (
    CUT_POSITION,
    FINAL_ROUND,
    PRE_TOURNAMENT_ROUND,
    ROUND_COMPLETED,
    ROUND_CUT,
    ROUND_FIELDS,
    TEE_TIME_FIELDS,
    TOURNAMENT_FINISHED,
)
from .models import (
    GolferSnapshot,
    PriorEventScoreLookup,
    RecomputeResult,
    RoundResult,
    SkippedTeam,
    TeamResult,
    TeamRoster,
    TournamentContext,
)
from .live import position_change
from .replacement import fill_roster
from .rounds import categorize_round
from .schemas import ScoringRules
from .scoring import aggregate_team_score, bonus_strokes, penalty_round, score_round, team_tee_time
from .standings import Standing, allocate_award, rank_peer_group
from .tiebreak import EarningsFetcher, break_first_place_tie, should_break_tie
from .utils import round_decimal
from .validators import (
    InvalidContextError,
    InvalidTeamError,
    validate_all_results,
    validate_context,
    validate_team_roster,
)

logger = logging.getLogger('pgc.scorer')

# Decimal places kept when comparing team totals
RANKING_PRECISION = 6


class TournamentScorer:
    """
    Recomputes every team in a tournament from one golfer snapshot.

    All teams are scored before any ranking happens; the batch result is
    returned whole.
    """

    def __init__(
        self,
        context: TournamentContext,
        golfers: Sequence[GolferSnapshot],
        rules: Optional[ScoringRules] = None,
        prior_event_score: Optional[PriorEventScoreLookup] = None,
        event_earnings: Optional[EarningsFetcher] = None,
    ):
        """
        Initialize scorer.

        Args:
            context: Tournament state for this cycle
            golfers: Every golfer in the tournament field
            rules: Scoring rules (default from config)
            prior_event_score: Lookup of an entrant's total in the previous
                playoff event (playoff events 2-3)
            event_earnings: Callable returning golfer id -> real earnings,
                used to break first-place ties

        Raises:
            InvalidContextError: If the tournament context is unusable
        """
        errors = validate_context(context)
        if errors:
            raise InvalidContextError('; '.join(errors))

        self.context = context
        self.rules = rules or get_config()
        self.pool = list(golfers)
        self.golfers = {g.golfer_id: g for g in self.pool}
        self.prior_event_score = prior_event_score
        self.event_earnings = event_earnings
        self._earnings_cache: Optional[dict[int, float]] = None

    def peer_group(self, team: TeamRoster) -> str:
        """Teams compete within their playoff bracket, otherwise their tour."""
        if self.context.is_playoff:
            return team.playoff_bracket or ''
        return team.tour_id

    def build_team_golfers(self, team: TeamRoster) -> list[GolferSnapshot]:
        """Resolve a roster against the field and add replacement golfers."""
        roster = []
        missing = []
        for golfer_id in team.golfer_ids:
            golfer = self.golfers.get(golfer_id)
            if golfer is None:
                missing.append(golfer_id)
            else:
                roster.append(golfer)

        if missing:
            logger.warning(f'Team {team.team_id}: golfers {missing} not in tournament field')

        filled = fill_roster(roster, self.pool, rules=self.rules)
        if len(filled) > len(roster):
            added = [g.golfer_id for g in filled[len(roster):]]
            logger.info(f'Team {team.team_id}: added replacements {added}')
        return filled

    def is_cut(self, round_states: dict[int, str]) -> bool:
        """Outside playoffs, a team too short-handed after the cut is eliminated."""
        ctx = self.context
        if ctx.is_playoff or ctx.current_round < self.rules.cut_round:
            return False
        return any(
            round_states.get(r) == ROUND_CUT for r in range(self.rules.cut_round, FINAL_ROUND + 1)
        )

    def score_team(self, team: TeamRoster) -> TeamResult:
        """
        Score one team's rounds without bonus strokes or standings.

        Raises:
            InvalidTeamError: If the roster cannot be scored
        """
        errors = validate_team_roster(team)
        if errors:
            raise InvalidTeamError(team.team_id, errors)

        ctx = self.context
        golfers = self.build_team_golfers(team)

        result = TeamResult(
            team_id=team.team_id,
            entrant_id=team.entrant_id,
            peer_group=self.peer_group(team),
            round=min(TOURNAMENT_FINISHED, max(1, ctx.current_round)),
            past_position=team.position,
            golfer_ids=[g.golfer_id for g in golfers],
        )

        for round_number in range(PRE_TOURNAMENT_ROUND, TOURNAMENT_FINISHED + 1):
            categories = categorize_round(
                golfers,
                round_number,
                ctx.event_index,
                ctx.live_play,
                ctx.current_round,
                ctx.par,
                self.rules,
            )
            result.round_states[round_number] = categories.round_state
            if round_number in ROUND_FIELDS:
                live_round = ctx.live_play and ctx.current_round == round_number
                result.rounds[round_number] = score_round(categories, ctx.par, live_round)

        for round_number, attr in TEE_TIME_FIELDS.items():
            times = [getattr(g, attr) for g in golfers]
            if round_number <= 2:
                value = team_tee_time(times, 1)
            elif ctx.current_round >= round_number:
                value = team_tee_time(times, self.rules.weekend_tee_time_rank)
            else:
                value = None
            setattr(result, attr, value)

        result.make_cut = 0 if self.is_cut(result.round_states) else 1
        return result

    def score_teams(self, teams: Sequence[TeamRoster]) -> RecomputeResult:
        """
        Run a full recompute cycle.

        Args:
            teams: Every team entered in the tournament

        Returns:
            RecomputeResult with one TeamResult per valid team (input order)
            and the teams that were skipped
        """
        ctx = self.context
        batch = RecomputeResult(tournament_id=ctx.tournament_id)
        scored: list[tuple[TeamRoster, TeamResult]] = []

        for team in teams:
            try:
                scored.append((team, self.score_team(team)))
            except InvalidTeamError as e:
                logger.warning(f'Skipping team: {e}')
                batch.skipped.append(SkippedTeam(team_id=team.team_id, reason='; '.join(e.errors)))

        self._fill_penalty_rounds([result for _, result in scored])
        self._apply_totals(scored)

        by_group: dict[str, list[TeamResult]] = defaultdict(list)
        for _, result in scored:
            by_group[result.peer_group].append(result)

        for group, results in by_group.items():
            standings = self._rank_group(results)
            if self._resolve_first_place_tie(group, results, standings):
                batch.tie_resolved = True

        batch.results = [result for _, result in scored]

        for warnings in validate_all_results(batch.results).values():
            for warning in warnings:
                logger.warning(f'Result check: {warning}')

        logger.info(
            f'Recomputed {len(batch.results)} teams for {ctx.tournament_id} '
            f'(round {ctx.current_round}, skipped {len(batch.skipped)})'
        )
        return batch

    def _fill_penalty_rounds(self, results: list[TeamResult]) -> None:
        """Charge short-handed rounds the worst contribution among eligible peers."""
        by_group: dict[str, list[TeamResult]] = defaultdict(list)
        for result in results:
            by_group[result.peer_group].append(result)

        for peers in by_group.values():
            for round_number in ROUND_FIELDS:
                eligible = [
                    p.rounds[round_number] for p in peers if p.rounds[round_number].state != ROUND_CUT
                ]
                for result in peers:
                    if result.rounds[round_number].state != ROUND_CUT:
                        continue
                    if result.is_cut and round_number >= self.rules.cut_round:
                        continue
                    result.rounds[round_number] = penalty_round(round_number, eligible, self.context.par)

    def _apply_totals(self, scored: list[tuple[TeamRoster, TeamResult]]) -> None:
        """Bonus strokes, totals and display values."""
        ctx = self.context
        bracket_seeds: dict[Optional[str], list[float]] = defaultdict(list)
        for team, _ in scored:
            bracket_seeds[team.playoff_bracket].append(team.seed_points)

        for team, result in scored:
            bonus = bonus_strokes(
                ctx.event_index,
                team.entrant_id,
                team.seed_points,
                bracket_seeds[team.playoff_bracket],
                prior_event_id=ctx.prior_event_id,
                prior_event_score=self.prior_event_score,
                rules=self.rules,
            )
            rounds = [result.rounds[r] for r in ROUND_FIELDS]

            result.bonus_strokes = round_decimal(bonus)
            result.raw_score = aggregate_team_score(rounds, bonus)
            result.score = round_decimal(result.raw_score)
            for round_number, attr in ROUND_FIELDS.items():
                setattr(result, attr, round_decimal(result.rounds[round_number].strokes))

            today, thru = _today_and_thru(rounds)
            result.today = round_decimal(today)
            result.thru = round_decimal(thru)

    def _award_tables(self, peer_group: str) -> tuple[Sequence[float], Sequence[float]]:
        """Tier points and payouts that apply to a peer group."""
        ctx = self.context
        if not ctx.is_playoff:
            return ctx.tier_points, ctx.tier_payouts

        if ctx.event_index == 3 and ctx.is_finished:
            offset = self.rules.playoff_payout_offsets.get(peer_group, 0)
            return (), ctx.tier_payouts[offset:]
        return (), ()

    def _apply_standing(self, result: TeamResult, standing: Standing) -> None:
        points, payouts = self._award_tables(result.peer_group)
        result.position = standing.position
        result.position_change = position_change(result.past_position, standing.position)
        result.win = standing.win
        result.top_ten = standing.top_ten
        result.points = allocate_award(points, standing.better, standing.tied)
        result.earnings = allocate_award(payouts, standing.better, standing.tied)

    def _rank_group(self, results: list[TeamResult]) -> dict[str, Standing]:
        """Rank one peer group; eliminated teams are marked CUT and left out."""
        ranked = {}
        for result in results:
            if result.is_cut:
                result.position = CUT_POSITION
                result.win = 0
                result.top_ten = 0
                result.points = 0.0
                result.earnings = 0.0
            else:
                ranked[result.team_id] = round(result.raw_score, RANKING_PRECISION)

        standings = rank_peer_group(ranked)
        for result in results:
            if result.team_id in standings:
                self._apply_standing(result, standings[result.team_id])
        return standings

    def _resolve_first_place_tie(
        self,
        group: str,
        results: list[TeamResult],
        standings: dict[str, Standing],
    ) -> bool:
        """Break a shared first place by real-event earnings, if possible."""
        tied = [
            r for r in results
            if r.team_id in standings and standings[r.team_id].better == 0
            and standings[r.team_id].tied > 1
        ]
        if not should_break_tie(self.context, tied):
            return False
        if any(r.round_states.get(FINAL_ROUND) != ROUND_COMPLETED for r in tied):
            return False
        if self.event_earnings is None:
            logger.info(f'{len(tied)} teams tied for first in {group!r}; no earnings source')
            return False

        winner = break_first_place_tie(tied, self._fetch_earnings_once)
        if winner is None:
            return False

        others = len(tied) - 1
        for result in tied:
            if result is winner:
                self._apply_standing(result, Standing(position='1', better=0, tied=1))
            else:
                self._apply_standing(result, Standing(position='T2', better=1, tied=others))
        return True

    def _fetch_earnings_once(self) -> dict[int, float]:
        if self._earnings_cache is None:
            self._earnings_cache = self.event_earnings()
        return self._earnings_cache


def _today_and_thru(rounds: Sequence[RoundResult]) -> tuple[Optional[float], Optional[float]]:
    """
    Live values for the round in progress, else the last finished round's
    over-par with 18 holes.
    """
    for result in rounds:
        if result.today is not None and result.over_par is None:
            return result.today, result.thru

    for result in reversed(rounds):
        if result.over_par is not None:
            return result.over_par, result.thru
    return None, None


def recompute(
    context: TournamentContext,
    golfers: Sequence[GolferSnapshot],
    teams: Sequence[TeamRoster],
    rules: Optional[ScoringRules] = None,
    prior_event_score: Optional[PriorEventScoreLookup] = None,
    event_earnings: Optional[EarningsFetcher] = None,
) -> RecomputeResult:
    """Score, rank and award every team for one cycle."""
    scorer = TournamentScorer(
        context,
        golfers,
        rules=rules,
        prior_event_score=prior_event_score,
        event_earnings=event_earnings,
    )
    return scorer.score_teams(teams)
