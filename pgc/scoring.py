"""Round and team score aggregation."""

from datetime import datetime, timezone
from typing import Optional, Sequence

from .config import get_config
from .constants import HOLES_PER_ROUND, ROUND_ACTIVE, ROUND_COMPLETED, ROUND_CUT
from .models import GolferSnapshot, PriorEventScoreLookup, RoundCategories, RoundResult
from .rounds import get_round_score
from .schemas import ScoringRules
from .utils import finite_average, is_finite


def golfer_over_par(
    golfer: GolferSnapshot,
    round_number: int,
    par: int,
    live_round: bool = False,
) -> Optional[float]:
    """
    A golfer's round relative to par.

    On the round being played live, falls back to ``today`` while the
    strokes have not been posted yet. ``today`` always belongs to the live
    round, so earlier rounds never read it.
    """
    strokes = get_round_score(golfer, round_number)
    if strokes is not None:
        return strokes - par
    if live_round and is_finite(golfer.today):
        return float(golfer.today)
    return None


def score_round(categories: RoundCategories, par: int, live_round: bool = False) -> RoundResult:
    """
    Aggregate a team's counted golfers for one round (1-4).

    Completed rounds yield the average over-par and average strokes of the
    active set. Active rounds yield live averages of ``today`` and ``thru``.
    Upcoming and cut rounds contribute nothing.

    ``live_round`` marks the round currently in play; only then do golfers
    without posted strokes count their ``today`` value.
    """
    round_number = categories.round_number
    result = RoundResult(
        round_number=round_number,
        state=categories.round_state,
        active_ids=categories.active_ids,
    )
    active = categories.active

    if categories.round_state == ROUND_COMPLETED:
        result.over_par = finite_average(
            golfer_over_par(g, round_number, par, live_round) for g in active
        )
        result.strokes = finite_average(get_round_score(g, round_number) for g in active)
        if result.strokes is None and result.over_par is not None:
            result.strokes = result.over_par + par
        result.thru = float(HOLES_PER_ROUND)
    elif categories.round_state == ROUND_ACTIVE:
        result.today = finite_average(g.today for g in active)
        result.thru = finite_average(g.thru for g in active)

    return result


def penalty_round(round_number: int, peers: Sequence[RoundResult], par: int) -> RoundResult:
    """
    Fill a team's cut round with the worst contribution among eligible peers.

    Completed peer rounds take precedence over live ones. The charge never
    drops below even par.
    """
    result = RoundResult(round_number=round_number, state=ROUND_CUT, penalty=True)

    completed = [p.over_par for p in peers if p.state == ROUND_COMPLETED and p.over_par is not None]
    if completed:
        result.over_par = max([0.0] + completed)
        result.strokes = result.over_par + par
        result.thru = float(HOLES_PER_ROUND)
        return result

    live = [p for p in peers if p.state == ROUND_ACTIVE and p.today is not None]
    if live:
        worst = max(live, key=lambda p: p.today)
        result.today = max(0.0, worst.today)
        result.thru = worst.thru

    return result


def round_contribution(result: RoundResult) -> float:
    """Strokes a round adds to the team total."""
    if result.over_par is not None:
        return result.over_par
    if result.today is not None:
        return result.today
    return 0.0


def aggregate_team_score(rounds: Sequence[RoundResult], bonus: float = 0.0) -> float:
    """
    Team total relative to par: completed contributions, live averages and
    bonus strokes.
    """
    return bonus + sum(round_contribution(r) for r in rounds)


def seeded_bonus_strokes(
    seed_points: float,
    bracket_seed_points: Sequence[float],
    rules: Optional[ScoringRules] = None,
) -> float:
    """
    Starting strokes for the first playoff event.

    Seed points are mapped linearly from [reference, best] onto
    [0, floor], where best is the bracket's top seed and reference the
    35th-best (or the last when the bracket is smaller). Values outside
    that range are clamped.

    Args:
        seed_points: This team's season points
        bracket_seed_points: Season points of every team in the bracket
        rules: Scoring rules (default from config)

    Returns:
        Bonus strokes in [floor, 0] (e.g. -10 for the top seed)
    """
    rules = rules or get_config()
    floor = rules.bonus_strokes_floor
    seeds = sorted((s for s in bracket_seed_points if is_finite(s)), reverse=True)
    if not seeds or not is_finite(seed_points):
        return 0.0

    best = seeds[0]
    reference = seeds[min(rules.bonus_reference_rank, len(seeds)) - 1]
    if best == reference:
        return floor if seed_points >= best else 0.0

    fraction = (seed_points - reference) / (best - reference)
    fraction = min(1.0, max(0.0, fraction))
    return floor * fraction


def bonus_strokes(
    event_index: int,
    entrant_id: str,
    seed_points: float,
    bracket_seed_points: Sequence[float],
    prior_event_id: Optional[str] = None,
    prior_event_score: Optional[PriorEventScoreLookup] = None,
    rules: Optional[ScoringRules] = None,
) -> float:
    """
    Strokes a team starts a playoff event with.

    0 outside playoffs. Event 1 uses seed points; events 2-3 carry in the
    entrant's total from the preceding playoff event (0 if unknown).
    """
    if event_index <= 0:
        return 0.0
    if event_index == 1:
        return seeded_bonus_strokes(seed_points, bracket_seed_points, rules)
    if prior_event_score is None:
        return 0.0
    carried = prior_event_score(entrant_id, prior_event_id)
    return float(carried) if is_finite(carried) else 0.0


def team_tee_time(times: Sequence[Optional[str]], rank: int = 1) -> Optional[str]:
    """
    The ``rank``-th earliest tee time among a team's golfers.

    ISO timestamps are compared chronologically; if any value fails to
    parse, all values are compared as strings.
    """
    valid = [t.strip() for t in times if t and t.strip()]
    if not valid:
        return None
    rank = max(1, rank)

    try:
        ordered = sorted(valid, key=_parse_tee_time)
    except ValueError:
        ordered = sorted(valid)

    if rank > len(ordered):
        return None
    return ordered[rank - 1]


def _parse_tee_time(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    # Aware values compare in UTC against naive ones
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
