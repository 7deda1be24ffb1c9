"""Validation functions for rosters, tournament context, and scoring results."""

from typing import Sequence

from .constants import TOURNAMENT_FINISHED
from .models import TeamResult, TeamRoster, TournamentContext

# Team totals outside this range are almost certainly bad input
MIN_PLAUSIBLE_SCORE = -100.0
MAX_PLAUSIBLE_SCORE = 150.0


class InvalidTeamError(ValueError):
    """A team roster that cannot be scored."""

    def __init__(self, team_id: str, errors: list[str]):
        self.team_id = team_id
        self.errors = errors
        super().__init__(f'Team {team_id or "<missing>"}: {"; ".join(errors)}')


class InvalidContextError(ValueError):
    """Tournament context that makes scoring impossible."""


def validate_team_roster(team: TeamRoster) -> list[str]:
    """
    Validate that a team roster can be scored.

    Checks:
    - Team and entrant ids present
    - At least one golfer
    - No duplicate golfers

    Args:
        team: TeamRoster to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if not team.team_id or not str(team.team_id).strip():
        errors.append('Missing team id')
    if not team.entrant_id or not str(team.entrant_id).strip():
        errors.append('Missing entrant id')

    if not team.golfer_ids:
        errors.append('Roster has no golfers')

    seen = set()
    duplicates = set()
    for golfer_id in team.golfer_ids:
        if golfer_id in seen:
            duplicates.add(golfer_id)
        seen.add(golfer_id)
    if duplicates:
        errors.append(f'Duplicate golfers: {", ".join(str(g) for g in sorted(duplicates))}')

    return errors


def validate_context(context: TournamentContext) -> list[str]:
    """
    Validate tournament-level context.

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if context is None:
        return ['Missing tournament context']

    if not context.tournament_id:
        errors.append('Missing tournament id')
    if not 0 <= context.current_round <= TOURNAMENT_FINISHED:
        errors.append(f'current_round must be 0-5, got {context.current_round}')
    if not isinstance(context.par, int) or not 60 <= context.par <= 80:
        errors.append(f'Implausible par: {context.par}')
    if not 0 <= context.event_index <= 3:
        errors.append(f'event_index must be 0-3, got {context.event_index}')
    if context.is_playoff and context.event_index == 0:
        errors.append('Playoff tournament without a playoff event index')
    if not context.is_playoff and context.event_index != 0:
        errors.append(f'Non-playoff tournament with event_index {context.event_index}')

    return errors


def validate_team_result(result: TeamResult) -> list[str]:
    """
    Sanity-check a recomputed team result.

    Returns:
        List of warning messages (empty if everything looks plausible)
    """
    warnings = []
    label = result.team_id

    if result.score is not None and not MIN_PLAUSIBLE_SCORE <= result.score <= MAX_PLAUSIBLE_SCORE:
        warnings.append(f'{label}: implausible score {result.score}')

    if result.points < 0:
        warnings.append(f'{label}: negative points {result.points}')
    if result.earnings < 0:
        warnings.append(f'{label}: negative earnings {result.earnings}')

    if result.thru is not None and not 0 <= result.thru <= 18:
        warnings.append(f'{label}: thru out of range ({result.thru})')

    if result.is_cut:
        if result.win or result.top_ten:
            warnings.append(f'{label}: cut team flagged as win/top ten')
        if result.points or result.earnings:
            warnings.append(f'{label}: cut team has awards')
    elif result.win and not (result.position or '').lstrip('T') == '1':
        warnings.append(f'{label}: win flag with position {result.position}')

    return warnings


def validate_all_results(results: Sequence[TeamResult]) -> dict[str, list[str]]:
    """
    Run validate_team_result() across a batch.

    Returns:
        Dict mapping team id to its warnings (teams without warnings omitted)
    """
    report = {}
    for result in results:
        warnings = validate_team_result(result)
        if warnings:
            report[result.team_id] = warnings

    team_ids = [r.team_id for r in results]
    duplicates = {t for t in team_ids if team_ids.count(t) > 1}
    for team_id in sorted(duplicates):
        report.setdefault(team_id, []).append(f'{team_id}: appears more than once in results')

    return report
