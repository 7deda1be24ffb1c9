"""Replacement golfers for teams missing coverage in a skill group."""

import logging
from collections import Counter
from typing import Optional, Sequence

from .config import get_config
from .constants import NUM_GROUPS
from .models import GolferSnapshot
from .rounds import get_round_score, is_terminal
from .schemas import ScoringRules

logger = logging.getLogger('pgc.replacement')


def holds_roster_spot(golfer: GolferSnapshot) -> bool:
    """
    Whether a golfer still fills a roster spot.

    Golfers who left the event without recording a round (pre-tournament
    withdrawals) do not; they stay listed but are replaced.
    """
    if not is_terminal(golfer):
        return True
    return any(get_round_score(golfer, n) is not None for n in (1, 2, 3, 4))


def group_counts(roster: Sequence[GolferSnapshot]) -> Counter:
    """Number of spot-holding team golfers per group."""
    return Counter(g.group for g in roster if g.group and holds_roster_spot(g))


def roster_size(roster: Sequence[GolferSnapshot]) -> int:
    return sum(1 for g in roster if holds_roster_spot(g))


def top_up_one_group(
    roster: Sequence[GolferSnapshot],
    pool: Sequence[GolferSnapshot],
    rules: Optional[ScoringRules] = None,
    max_additions: Optional[int] = None,
) -> list[GolferSnapshot]:
    """
    Bring the first under-covered group back to the minimum per group.

    Groups are scanned 1 through 5. The first group holding fewer than
    ``rules.min_per_group`` golfers that the pool can still supply receives
    the best available pool golfers (lowest world rank) not already on the
    team. Only one group is topped up per call.

    Args:
        roster: Current team golfers
        pool: Every golfer in the tournament field
        rules: Scoring rules (default from config)
        max_additions: Upper bound on golfers added by this call

    Returns:
        New roster list (unchanged contents if no group could be topped up)
    """
    rules = rules or get_config()
    on_team = {g.golfer_id for g in roster}
    counts = group_counts(roster)

    for group in range(1, NUM_GROUPS + 1):
        missing = rules.min_per_group - counts.get(group, 0)
        if missing <= 0:
            continue

        candidates = sorted(
            (
                g
                for g in pool
                if g.group == group and g.golfer_id not in on_team and not is_terminal(g)
            ),
            key=lambda g: (
                g.world_rank if g.world_rank is not None else rules.default_world_rank,
                g.golfer_id,
            ),
        )
        if not candidates:
            continue

        if max_additions is not None:
            missing = min(missing, max_additions)
        if missing <= 0:
            break
        return list(roster) + candidates[:missing]

    return list(roster)


def fill_roster(
    roster: Sequence[GolferSnapshot],
    pool: Sequence[GolferSnapshot],
    target_size: Optional[int] = None,
    rules: Optional[ScoringRules] = None,
) -> list[GolferSnapshot]:
    """
    Call top_up_one_group() until the roster reaches ``target_size``.

    Stops early when a pass adds nothing or after
    ``rules.max_top_up_iterations`` passes.
    """
    rules = rules or get_config()
    target = target_size if target_size is not None else rules.team_size
    current = list(roster)

    for _ in range(rules.max_top_up_iterations):
        size = roster_size(current)
        if size >= target:
            break
        updated = top_up_one_group(current, pool, rules, max_additions=target - size)
        if len(updated) == len(current):
            break
        added = [g.golfer_id for g in updated[len(current):]]
        logger.debug(f'Added replacement golfers {added}')
        current = updated

    return current
