"""Leaderboard ranking within peer groups and tier award allocation."""

from dataclasses import dataclass
from typing import Hashable, Mapping, Sequence

TOP_TEN = 10


@dataclass
class Standing:
    """A team's place within its peer group."""
    position: str
    better: int
    tied: int

    @property
    def win(self) -> int:
        return 1 if self.better == 0 else 0

    @property
    def top_ten(self) -> int:
        return 1 if self.better < TOP_TEN else 0


def format_position(better: int, tied: int) -> str:
    """'3' for an outright third, 'T3' when shared."""
    return f'{"T" if tied > 1 else ""}{better + 1}'


def rank_peer_group(scores: Mapping[Hashable, float]) -> dict[Hashable, Standing]:
    """
    Rank teams that compete against each other.

    ``better`` counts peers with a strictly lower score; ``tied`` counts
    peers with an equal score, the team itself included.

    Args:
        scores: Team key -> ranking score (lower is better)

    Returns:
        Team key -> Standing
    """
    standings = {}
    values = list(scores.values())
    for key, score in scores.items():
        better = sum(1 for other in values if other < score)
        tied = sum(1 for other in values if other == score)
        standings[key] = Standing(
            position=format_position(better, tied),
            better=better,
            tied=tied,
        )
    return standings


def allocate_award(values: Sequence[float], better: int, tied: int) -> float:
    """
    Split the awards of the tied places evenly.

    Averages ``values[better:better + tied]``; places beyond the table are
    worth 0.

    Example:
        allocate_award([100, 50, 25], better=0, tied=2) -> 75.0
    """
    if tied <= 0:
        return 0.0
    total = 0.0
    for index in range(better, better + tied):
        if 0 <= index < len(values) and values[index] is not None:
            total += values[index]
    return total / tied
