"""Per-round roster categorization and round-state inference."""

from typing import Optional, Sequence

from .config import get_config, selection_count
from .constants import (
    FINAL_ROUND,
    HOLES_PER_ROUND,
    PRE_TOURNAMENT_ROUND,
    ROUND_ACTIVE,
    ROUND_COMPLETED,
    ROUND_CUT,
    ROUND_FIELDS,
    ROUND_UPCOMING,
    TERMINAL_POSITIONS,
    TOURNAMENT_FINISHED,
)
from .models import GolferSnapshot, RoundCategories
from .schemas import ScoringRules
from .utils import is_finite


def get_round_score(golfer: GolferSnapshot, round_number: int) -> Optional[float]:
    """Recorded strokes for a round (1-4), or None."""
    attr = ROUND_FIELDS.get(round_number)
    if attr is None:
        return None
    value = getattr(golfer, attr)
    return float(value) if is_finite(value) else None


def is_terminal(golfer: GolferSnapshot) -> bool:
    """True if the golfer has been cut, withdrawn or disqualified."""
    position = (golfer.position or '').strip().upper()
    return any(code in position for code in TERMINAL_POSITIONS)


def scoring_round_for(round_number: int) -> int:
    """Round whose scores drive a round index (0 -> 1, 5 -> 4)."""
    return min(FINAL_ROUND, max(1, round_number))


def round_sort_key(
    golfer: GolferSnapshot,
    round_number: int,
    live_mode: bool,
    par: int,
    missing_over_par: float,
) -> tuple:
    """Best golfer first: round score, then cumulative score, then id."""
    cumulative = float(golfer.score) if is_finite(golfer.score) else 0.0

    if round_number == PRE_TOURNAMENT_ROUND:
        primary = cumulative
    elif live_mode:
        primary = float(golfer.today) if is_finite(golfer.today) else 0.0
    else:
        strokes = get_round_score(golfer, scoring_round_for(round_number))
        primary = strokes - par if strokes is not None else missing_over_par

    return (primary, cumulative, golfer.golfer_id)


def infer_round_state(
    round_number: int,
    eligible: Sequence[GolferSnapshot],
    active: Sequence[GolferSnapshot],
    required: int,
    live_play: bool,
    current_round: int,
) -> str:
    """
    Infer a round's state from partial live data.

    Args:
        round_number: 0-5 (0 = pre-tournament, 5 = tournament final)
        eligible: Golfers able to count for the round
        active: Golfers counted for the round
        required: Selection count for the round
        live_play: Whether play is live right now
        current_round: Tournament's current round

    Returns:
        One of completed / active / upcoming / cut
    """
    if len(eligible) < required:
        return ROUND_CUT

    if round_number == PRE_TOURNAMENT_ROUND:
        return ROUND_COMPLETED

    if round_number == TOURNAMENT_FINISHED:
        final_state = infer_round_state(
            FINAL_ROUND, eligible, active, required, live_play, current_round
        )
        return ROUND_COMPLETED if final_state == ROUND_COMPLETED else ROUND_UPCOMING

    if eligible and all(get_round_score(g, round_number) is not None for g in eligible):
        return ROUND_COMPLETED

    live_on_round = live_play and current_round == round_number
    if live_on_round and active and all((g.thru or 0) == HOLES_PER_ROUND for g in active):
        return ROUND_COMPLETED

    if current_round > round_number:
        return ROUND_COMPLETED

    if live_on_round and any((g.thru or 0) > 0 for g in active):
        return ROUND_ACTIVE

    return ROUND_UPCOMING


def categorize_round(
    golfers: Sequence[GolferSnapshot],
    round_number: int,
    event_index: int,
    live_play: bool,
    current_round: int,
    par: int,
    rules: Optional[ScoringRules] = None,
) -> RoundCategories:
    """
    Split a team's golfers into active, alternate and inactive for a round.

    CUT, WD and DQ golfers are inactive in every round, including rounds
    they finished before leaving the event.

    Args:
        golfers: Team golfers after replacement
        round_number: 0-5
        event_index: 0 outside playoffs, 1-3 for playoff legs
        live_play: Whether play is live right now
        current_round: Tournament's current round
        par: Course par
        rules: Scoring rules (default from config)

    Returns:
        RoundCategories with the inferred round state
    """
    rules = rules or get_config()
    required = selection_count(rules, event_index, round_number)
    live_mode = (
        live_play
        and PRE_TOURNAMENT_ROUND < round_number < TOURNAMENT_FINISHED
        and current_round == round_number
    )

    eligible = []
    inactive = []
    for golfer in golfers:
        if is_terminal(golfer):
            inactive.append(golfer)
        else:
            eligible.append(golfer)

    ranked = sorted(
        eligible,
        key=lambda g: round_sort_key(
            g, round_number, live_mode, par, rules.missing_round_over_par
        ),
    )
    active = ranked[:required]
    alternates = ranked[required:]

    state = infer_round_state(
        round_number, eligible, active, required, live_play, current_round
    )

    return RoundCategories(
        round_number=round_number,
        round_state=state,
        required=required,
        active=active,
        alternates=alternates,
        inactive=sorted(inactive, key=lambda g: g.golfer_id),
    )
