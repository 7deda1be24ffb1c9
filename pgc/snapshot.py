"""JSON snapshot files: load a tournament cycle and save recomputed results.

A snapshot holds the tournament context, every golfer in the field and every
team entered. It lets a full recompute run without the live data store.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .models import (
    GolferSnapshot,
    PriorEventScoreLookup,
    RecomputeResult,
    TeamRoster,
    TournamentContext,
)
from .schemas import SnapshotFile
from .scorer import recompute
from .tiebreak import EarningsFetcher
from .utils import load_json


@dataclass
class TournamentSnapshot:
    """Everything one recompute cycle needs."""
    context: TournamentContext
    golfers: list[GolferSnapshot] = field(default_factory=list)
    teams: list[TeamRoster] = field(default_factory=list)
    prior_event_scores: dict[str, float] = field(default_factory=dict)

    def prior_event_score(self, entrant_id: str, prior_event_id: Optional[str]) -> Optional[float]:
        """Carry-in lookup backed by the snapshot's prior event totals."""
        return self.prior_event_scores.get(entrant_id)


def load_snapshot(path: str | Path) -> TournamentSnapshot:
    """
    Load and validate a snapshot file.

    Args:
        path: Path to the snapshot JSON

    Returns:
        TournamentSnapshot ready for TournamentScorer

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file doesn't match the snapshot schema
    """
    data = load_json(path, schema=SnapshotFile)
    ctx = data.context

    context = TournamentContext(
        tournament_id=ctx.tournament_id,
        current_round=ctx.current_round,
        par=ctx.par,
        live_play=ctx.live_play,
        tier_points=tuple(ctx.tier_points),
        tier_payouts=tuple(ctx.tier_payouts),
        is_playoff=ctx.is_playoff,
        event_index=ctx.event_index,
        prior_event_id=ctx.prior_event_id,
        external_event_id=ctx.external_event_id,
        year=ctx.year,
    )
    golfers = [GolferSnapshot(**g.model_dump()) for g in data.golfers]
    teams = [
        TeamRoster(tournament_id=ctx.tournament_id, **t.model_dump())
        for t in data.teams
    ]

    return TournamentSnapshot(
        context=context,
        golfers=golfers,
        teams=teams,
        prior_event_scores=dict(data.prior_event_scores),
    )


def results_to_records(batch: RecomputeResult) -> list[dict[str, Any]]:
    """Flatten a batch into plain dicts (round_states keyed by str for JSON)."""
    records = []
    for result in batch.results:
        record = result.to_record()
        record['round_states'] = {str(k): v for k, v in record['round_states'].items()}
        records.append(record)
    return records


def recompute_from_json(
    path: str | Path,
    event_earnings: Optional[EarningsFetcher] = None,
    prior_event_score: Optional[PriorEventScoreLookup] = None,
) -> list[dict[str, Any]]:
    """
    Run one recompute cycle from a snapshot file.

    Args:
        path: Path to the snapshot JSON
        event_earnings: Optional earnings source for first-place tie-breaks
        prior_event_score: Carry-in lookup (default: the snapshot's
            prior_event_scores)

    Returns:
        One record per scored team
    """
    snapshot = load_snapshot(path)
    batch = recompute(
        snapshot.context,
        snapshot.golfers,
        snapshot.teams,
        prior_event_score=prior_event_score or snapshot.prior_event_score,
        event_earnings=event_earnings,
    )
    return results_to_records(batch)


def save_results(output_path: str | Path, batch: RecomputeResult) -> None:
    """
    Save a recompute batch to JSON.

    Args:
        output_path: Path to output JSON file
        batch: Result of TournamentScorer.score_teams()
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        'tournament_id': batch.tournament_id,
        'scored_at': datetime.now(timezone.utc).isoformat(),
        'teams': results_to_records(batch),
        'skipped': [{'team_id': s.team_id, 'reason': s.reason} for s in batch.skipped],
        'tie_resolved': batch.tie_resolved,
    }

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
