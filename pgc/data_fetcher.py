"""DataGolf feed fetching using requests."""

import logging
import os
import time
from typing import Any, Optional

import polars as pl
import requests
from pydantic import ValidationError

from .constants import DATAGOLF_API_KEY_ENV, DATAGOLF_BASE_URL
from .grouping import RankedGolfer, field_frame, rank_field
from .schemas import FieldEntry, HistoricalEventResponse, LiveStatsEntry, RankingEntry

logger = logging.getLogger('pgc.data_fetcher')

RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


class FeedUnavailableError(RuntimeError):
    """Raised when a feed cannot be fetched or parsed."""


class DataGolfFetcher:
    """Fetches and caches DataGolf feeds for one tour."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        tour: str = 'pga',
        timeout: float = 30.0,
        retries: int = 3,
        retry_delay: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize fetcher.

        Args:
            api_key: DataGolf API key (default: DATAGOLF_API_KEY env var)
            tour: Tour code passed to the feeds
            timeout: Seconds before a request is abandoned
            retries: Retries after the first attempt on 429/5xx/network errors
            retry_delay: Base backoff in seconds, doubled per attempt
            session: Optional requests session (for connection reuse or tests)
        """
        self.api_key = api_key or os.environ.get(DATAGOLF_API_KEY_ENV)
        self.tour = tour
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self._field: Optional[list[FieldEntry]] = None
        self._rankings: Optional[list[RankingEntry]] = None
        self._event_name: Optional[str] = None

    def _get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        """GET a feed endpoint and return its JSON payload, retrying transient failures."""
        if not self.api_key:
            raise FeedUnavailableError(f'No DataGolf API key (set {DATAGOLF_API_KEY_ENV})')

        url = f'{DATAGOLF_BASE_URL}{endpoint}'
        query = {'file_format': 'json', **(params or {}), 'key': self.api_key}
        last_error = ''

        for attempt in range(self.retries + 1):
            try:
                response = self.session.get(url, params=query, timeout=self.timeout)
            except requests.RequestException as e:
                last_error = f'Request failed: {e}'
                logger.warning(f'{endpoint}: {last_error} (attempt {attempt + 1}/{self.retries + 1})')
                self._backoff(attempt)
                continue

            if response.status_code in RETRY_STATUS_CODES:
                last_error = f'HTTP {response.status_code}'
                logger.warning(f'{endpoint}: {last_error} (attempt {attempt + 1}/{self.retries + 1})')
                self._backoff(attempt, response.headers.get('Retry-After'))
                continue

            if not response.ok:
                raise FeedUnavailableError(
                    f'{endpoint}: HTTP {response.status_code} - {response.text[:200]}'
                )

            try:
                return response.json()
            except ValueError as e:
                last_error = f'Invalid JSON response: {e}'
                logger.warning(f'{endpoint}: {last_error}')
                self._backoff(attempt)

        raise FeedUnavailableError(f'{endpoint}: {last_error} after {self.retries + 1} attempts')

    def _backoff(self, attempt: int, retry_after: Optional[str] = None) -> None:
        if attempt >= self.retries:
            return
        delay = self.retry_delay * 2**attempt
        if retry_after and retry_after.isdigit():
            delay = float(retry_after)
        time.sleep(delay)

    @property
    def field(self) -> list[FieldEntry]:
        """Lazy load the current tournament field."""
        if self._field is None:
            data = self._get('/field-updates', {'tour': self.tour})
            if not isinstance(data, dict) or 'field' not in data:
                raise FeedUnavailableError("No 'field' data found in field-updates response")
            self._event_name = data.get('event_name')
            self._field = _parse_rows(data['field'], FieldEntry, 'field-updates')
            logger.info(f'Loaded {len(self._field)} golfers for {self._event_name}')
        return self._field

    @property
    def rankings(self) -> list[RankingEntry]:
        """Lazy load the skill rankings."""
        if self._rankings is None:
            data = self._get('/preds/get-dg-rankings')
            if not isinstance(data, dict) or 'rankings' not in data:
                raise FeedUnavailableError("No 'rankings' data found in rankings response")
            self._rankings = _parse_rows(data['rankings'], RankingEntry, 'get-dg-rankings')
        return self._rankings

    @property
    def event_name(self) -> Optional[str]:
        """Event name reported by the field feed."""
        if self._event_name is None:
            _ = self.field
        return self._event_name

    def field_frame(self) -> pl.DataFrame:
        """Current field as a polars frame."""
        return field_frame(self.field)

    def ranked_field(self, excluded_ids: Optional[list[int]] = None) -> list[RankedGolfer]:
        """Field joined with the rankings, best golfer first."""
        return rank_field(self.field, self.rankings, excluded_ids=excluded_ids)

    def fetch_live_stats(self) -> list[LiveStatsEntry]:
        """Fetch the in-play feed (not cached; it changes every cycle)."""
        data = self._get(
            '/preds/in-play',
            {'tour': self.tour, 'dead_heat': 'no', 'odds_format': 'percent'},
        )
        if not isinstance(data, dict) or 'data' not in data:
            raise FeedUnavailableError("No 'data' found in in-play response")
        return _parse_rows(data['data'], LiveStatsEntry, 'in-play')

    def fetch_event_earnings(self, event_id: int, year: int) -> dict[int, float]:
        """
        Fetch per-golfer earnings for a completed event.

        Args:
            event_id: DataGolf event id
            year: Calendar year of the event

        Returns:
            Dict mapping golfer id to earnings
        """
        data = self._get(
            '/historical-event-data/events',
            {'tour': self.tour, 'event_id': event_id, 'year': year},
        )
        try:
            event = HistoricalEventResponse.model_validate(data)
        except ValidationError as e:
            raise FeedUnavailableError(f'Invalid historical event payload: {e}') from e

        earnings = {stat.external_id: float(stat.earnings or 0.0) for stat in event.event_stats}
        logger.info(f'Loaded earnings for {len(earnings)} golfers (event {event_id}, {year})')
        return earnings


def _parse_rows(rows: Any, schema, feed: str) -> list:
    """Validate feed rows, dropping (and logging) malformed ones."""
    if not isinstance(rows, list):
        raise FeedUnavailableError(f'{feed}: expected a list of rows')

    parsed = []
    for row in rows:
        try:
            parsed.append(schema.model_validate(row))
        except ValidationError as e:
            logger.warning(f'{feed}: skipping malformed row: {e.error_count()} errors')
    return parsed
