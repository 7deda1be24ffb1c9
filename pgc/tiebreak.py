"""First-place tie resolution by final-round golfer earnings."""

import logging
from typing import Callable, Optional, Sequence

import requests

from .data_fetcher import DataGolfFetcher, FeedUnavailableError
from .models import TeamResult, TournamentContext

logger = logging.getLogger('pgc.tiebreak')

EarningsFetcher = Callable[[], dict[int, float]]


def earnings_fetcher_for(fetcher: DataGolfFetcher, context: TournamentContext) -> EarningsFetcher:
    """Bind a DataGolf fetcher to the tournament's external event id and year."""

    def fetch() -> dict[int, float]:
        if context.external_event_id is None or context.year is None:
            raise FeedUnavailableError(
                f'Tournament {context.tournament_id} has no external event id/year'
            )
        return fetcher.fetch_event_earnings(context.external_event_id, context.year)

    return fetch


def should_break_tie(context: TournamentContext, tied: Sequence[TeamResult]) -> bool:
    """Tie-breaks only apply once the final round is over and play has stopped."""
    return context.current_round >= 4 and not context.live_play and len(tied) > 1


def team_earnings(result: TeamResult, earnings: dict[int, float]) -> float:
    """Sum earnings of the golfers a team counted in its final round."""
    total = 0.0
    for golfer_id in result.final_active_ids():
        if golfer_id not in earnings:
            logger.warning(f'No earnings for golfer {golfer_id} (team {result.team_id}); counting 0')
            continue
        total += earnings[golfer_id]
    return total


def break_first_place_tie(
    tied: Sequence[TeamResult],
    fetch_earnings: EarningsFetcher,
) -> Optional[TeamResult]:
    """
    Pick the winner among teams tied for first.

    The team whose final-round golfers earned the most in the real event
    wins outright. If the feed is unavailable or the top total is shared,
    no winner is returned and the tie stands.

    Args:
        tied: Teams sharing first place in one peer group
        fetch_earnings: Callable returning golfer id -> earnings

    Returns:
        The winning TeamResult, or None if the tie stands
    """
    if len(tied) < 2:
        return None

    try:
        earnings = fetch_earnings()
    except (FeedUnavailableError, requests.RequestException) as e:
        logger.warning(f'Earnings feed unavailable, leaving first-place tie unresolved: {e}')
        return None

    totals = [(team_earnings(result, earnings), result) for result in tied]
    best = max(total for total, _ in totals)
    leaders = [result for total, result in totals if total == best]
    if len(leaders) != 1:
        logger.info(f'First-place tie stands: {len(leaders)} teams share {best:.2f} in earnings')
        return None

    winner = leaders[0]
    logger.info(f'Team {winner.team_id} wins first-place tie-break with {best:.2f} in earnings')
    return winner
