"""Scoring rule configuration management."""

from functools import lru_cache
from pathlib import Path

from .schemas import GroupLimit, ScoringRules
from .utils import load_json

RULES_PATH = Path(__file__).parent / 'data' / 'scoring_rules.json'


@lru_cache(maxsize=1)
def get_config() -> ScoringRules:
    """
    Load scoring rules from pgc/data/scoring_rules.json.

    Configuration is cached after first load.

    Returns:
        ScoringRules object with validated settings

    Raises:
        FileNotFoundError: If scoring_rules.json doesn't exist
        ValueError: If config file has invalid structure

    Example:
        from pgc.config import get_config
        rules = get_config()
        print(f"Team size: {rules.team_size}")
    """
    return load_json(RULES_PATH, schema=ScoringRules)


def get_selection_count(event_index: int, round_number: int) -> int:
    """Get the number of counted golfers for a playoff leg and round."""
    return selection_count(get_config(), event_index, round_number)


def selection_count(rules: ScoringRules, event_index: int, round_number: int) -> int:
    """
    Look up the active-golfer count in a rules object.

    Round 0 uses the round-1 count and round 5 the round-4 count.
    Event indexes above the table use the last playoff leg.
    """
    counts = rules.selection_counts.get(event_index)
    if counts is None:
        counts = rules.selection_counts[max(rules.selection_counts)]
    index = min(4, max(1, round_number)) - 1
    return counts[index]


def get_group_limits() -> list[GroupLimit]:
    """Get size thresholds for draft groups 1-4."""
    return get_config().group_limits


def get_team_size() -> int:
    """Get the roster size replacement tops teams up to."""
    return get_config().team_size


def get_playoff_payout_offsets() -> dict[str, int]:
    """Get tier payout offsets per playoff bracket."""
    return get_config().playoff_payout_offsets


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the rules file is modified during runtime.
    """
    get_config.cache_clear()
