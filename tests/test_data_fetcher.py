"""Unit tests for the DataGolf fetcher (HTTP stubbed)."""

from unittest.mock import Mock, patch

import pytest
import requests

from pgc.data_fetcher import DataGolfFetcher, FeedUnavailableError


def response(status_code=200, payload=None, headers=None):
    """Build a stand-in for requests.Response."""
    resp = Mock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.headers = headers or {}
    resp.text = '' if payload is None else str(payload)
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


def fetcher_with(*responses, **kwargs):
    session = Mock(spec=requests.Session)
    session.get.side_effect = list(responses)
    kwargs.setdefault('retry_delay', 0)
    return DataGolfFetcher(api_key='test-key', session=session, **kwargs), session


FIELD_PAYLOAD = {
    'event_name': 'Masters Tournament',
    'field': [
        {'dg_id': 10, 'player_name': 'Scheffler, Scottie', 'country': 'USA', 'dg_skill_estimate': 2.9},
        {'dg_id': 20, 'player_name': 'McIlroy, Rory', 'country': 'NIR'},
        {'dg_id': 30, 'player_name': 'Amateur, An', 'dg_skill_estimate': -2.0},
        {'player_name': 'No Id'},
    ],
}

RANKINGS_PAYLOAD = {
    'rankings': [
        {'dg_id': 20, 'datagolf_rank': 2, 'owgr_rank': 3, 'dg_skill_estimate': 2.1},
        {'dg_id': 10, 'datagolf_rank': 1, 'owgr_rank': 1, 'dg_skill_estimate': 3.0},
    ],
}


class TestRequests:
    """Tests for retry and error handling."""

    @patch('pgc.data_fetcher.time.sleep')
    def test_retry_on_server_error(self, mock_sleep):
        """Test a 503 is retried and the next success returned."""
        fetcher, session = fetcher_with(response(503), response(200, FIELD_PAYLOAD))
        assert len(fetcher.field) == 3
        assert session.get.call_count == 2

    @patch('pgc.data_fetcher.time.sleep')
    def test_rate_limit_honors_retry_after(self, mock_sleep):
        """Test a 429 waits for Retry-After before retrying."""
        fetcher, _ = fetcher_with(
            response(429, headers={'Retry-After': '7'}),
            response(200, RANKINGS_PAYLOAD),
        )
        assert len(fetcher.rankings) == 2
        mock_sleep.assert_called_once_with(7.0)

    @patch('pgc.data_fetcher.time.sleep')
    def test_gives_up_after_retries(self, mock_sleep):
        """Test persistent 5xx raises FeedUnavailableError."""
        fetcher, session = fetcher_with(*[response(500)] * 3, retries=2)
        with pytest.raises(FeedUnavailableError, match='HTTP 500'):
            fetcher.fetch_live_stats()
        assert session.get.call_count == 3

    def test_client_error_not_retried(self):
        """Test a 4xx fails immediately."""
        fetcher, session = fetcher_with(response(403, {'error': 'bad key'}))
        with pytest.raises(FeedUnavailableError, match='403'):
            fetcher.fetch_live_stats()
        assert session.get.call_count == 1

    @patch('pgc.data_fetcher.time.sleep')
    def test_network_error_retried(self, mock_sleep):
        """Test connection errors are retried."""
        fetcher, session = fetcher_with(
            requests.ConnectionError('refused'),
            response(200, {'data': []}),
        )
        assert fetcher.fetch_live_stats() == []
        assert session.get.call_count == 2

    def test_missing_api_key(self, monkeypatch):
        """Test requests without a key fail before any HTTP call."""
        monkeypatch.delenv('DATAGOLF_API_KEY', raising=False)
        session = Mock(spec=requests.Session)
        fetcher = DataGolfFetcher(session=session)
        with pytest.raises(FeedUnavailableError, match='API key'):
            fetcher.fetch_live_stats()
        session.get.assert_not_called()

    def test_api_key_from_env(self, monkeypatch):
        """Test the key is read from DATAGOLF_API_KEY."""
        monkeypatch.setenv('DATAGOLF_API_KEY', 'env-key')
        assert DataGolfFetcher(session=Mock()).api_key == 'env-key'

    def test_query_parameters(self):
        """Test the key, format and timeout are sent with each request."""
        fetcher, session = fetcher_with(response(200, {'data': []}), timeout=5.0)
        fetcher.fetch_live_stats()
        args, kwargs = session.get.call_args
        assert args[0] == 'https://feeds.datagolf.com/preds/in-play'
        assert kwargs['params']['key'] == 'test-key'
        assert kwargs['params']['file_format'] == 'json'
        assert kwargs['timeout'] == 5.0


class TestFeeds:
    """Tests for feed parsing."""

    def test_field_cached(self):
        """Test the field feed is fetched once and malformed rows dropped."""
        fetcher, session = fetcher_with(response(200, FIELD_PAYLOAD))
        assert [e.external_id for e in fetcher.field] == [10, 20, 30]
        assert fetcher.event_name == 'Masters Tournament'
        assert session.get.call_count == 1

    def test_field_frame(self):
        """Test the field is available as a polars frame."""
        fetcher, _ = fetcher_with(response(200, FIELD_PAYLOAD))
        frame = fetcher.field_frame()
        assert frame.height == 3
        assert frame['external_id'].to_list() == [10, 20, 30]

    def test_ranked_field(self):
        """Test the field joins with rankings in skill order."""
        fetcher, _ = fetcher_with(response(200, FIELD_PAYLOAD), response(200, RANKINGS_PAYLOAD))
        ranked = fetcher.ranked_field(excluded_ids=[])
        assert [g.external_id for g in ranked] == [10, 20, 30]
        assert ranked[1].world_rank == 3
        assert ranked[1].skill_estimate == 2.1

    def test_missing_field_key(self):
        """Test a payload without 'field' is a feed failure."""
        fetcher, _ = fetcher_with(response(200, {'event_name': 'x'}))
        with pytest.raises(FeedUnavailableError):
            _ = fetcher.field

    def test_live_stats(self):
        """Test in-play rows parse into LiveStatsEntry."""
        payload = {'data': [{'dg_id': 10, 'current_pos': 1, 'thru': 'F', 'R1': 66, 'today': -6}]}
        fetcher, _ = fetcher_with(response(200, payload))
        entries = fetcher.fetch_live_stats()
        assert entries[0].current_pos == '1'
        assert entries[0].round_one == 66

    def test_event_earnings(self):
        """Test historical event payloads map golfer id to earnings."""
        payload = {
            'event_id': 14,
            'year': 2025,
            'event_stats': [
                {'dg_id': 10, 'earnings': 4200000, 'fin_text': '1'},
                {'dg_id': 20, 'earnings': None, 'fin_text': 'CUT'},
            ],
        }
        fetcher, session = fetcher_with(response(200, payload))
        earnings = fetcher.fetch_event_earnings(14, 2025)
        assert earnings == {10: 4200000.0, 20: 0.0}
        params = session.get.call_args.kwargs['params']
        assert params['event_id'] == 14
        assert params['year'] == 2025

    def test_event_earnings_invalid(self):
        """Test a malformed historical payload is a feed failure."""
        fetcher, _ = fetcher_with(response(200, {'unexpected': True}))
        with pytest.raises(FeedUnavailableError):
            fetcher.fetch_event_earnings(14, 2025)
