"""
Tests for the HTTP GET unsubscribe dispatcher.

Test Coverage Areas:
- No link: no network activity
- Any response, whatever the status code, counts as followed
- Transport failures are converted to LinkFailed and never raised
- Timeout and headers passed to the request
- Real local endpoints: one that answers, one that never answers
"""

import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, HTTPServer
from unittest.mock import Mock

import pytest
import requests

from src.unsubscribe.dispatcher import UnsubscribeDispatcher
from src.unsubscribe.types import LinkFailed, LinkFollowed, NoLinkFound


@pytest.fixture
def http_session():
    return Mock(spec=requests.Session)


def make_response(status_code):
    response = Mock()
    response.status_code = status_code
    return response


class TestDispatchWithoutLink:
    """Test dispatch when extraction found nothing."""

    @pytest.mark.parametrize('link', [None, ''])
    def test_no_link_returns_no_link_found(self, http_session, link):
        dispatcher = UnsubscribeDispatcher(http_session=http_session)

        outcome = dispatcher.dispatch(link)

        assert outcome == NoLinkFound()
        assert outcome.link_found is False
        http_session.get.assert_not_called()


class TestDispatchResponses:
    """Test that any response counts as followed."""

    @pytest.mark.parametrize('status_code', [200, 204, 302, 404, 500, 503])
    def test_any_status_is_followed(self, http_session, status_code):
        http_session.get.return_value = make_response(status_code)
        dispatcher = UnsubscribeDispatcher(http_session=http_session)

        outcome = dispatcher.dispatch('https://news.test/unsub?id=1')

        assert isinstance(outcome, LinkFollowed)
        assert outcome.url == 'https://news.test/unsub?id=1'
        assert outcome.status_code == status_code
        assert outcome.link_found is True

    def test_exactly_one_get_request(self, http_session):
        http_session.get.return_value = make_response(200)
        dispatcher = UnsubscribeDispatcher(timeout=7, user_agent='TestAgent/2.0', http_session=http_session)

        dispatcher.dispatch('https://news.test/unsub')

        http_session.get.assert_called_once()
        args, kwargs = http_session.get.call_args
        assert args[0] == 'https://news.test/unsub'
        assert kwargs['timeout'] == 7
        assert kwargs['headers']['User-Agent'] == 'TestAgent/2.0'
        assert kwargs['allow_redirects'] is True
        assert kwargs['stream'] is True

    def test_response_body_is_not_read(self, http_session):
        response = make_response(200)
        http_session.get.return_value = response
        dispatcher = UnsubscribeDispatcher(http_session=http_session)

        dispatcher.dispatch('https://news.test/unsub')

        response.close.assert_called_once()
        response.iter_content.assert_not_called()

    def test_default_timeout(self, http_session):
        http_session.get.return_value = make_response(200)
        dispatcher = UnsubscribeDispatcher(http_session=http_session)

        dispatcher.dispatch('https://news.test/unsub')

        assert http_session.get.call_args[1]['timeout'] == 25


class TestDispatchFailures:
    """Test transport failures are converted, not raised."""

    def test_timeout(self, http_session):
        http_session.get.side_effect = requests.exceptions.Timeout('read timed out')
        dispatcher = UnsubscribeDispatcher(timeout=3, http_session=http_session)

        outcome = dispatcher.dispatch('https://slow.test/unsub')

        assert isinstance(outcome, LinkFailed)
        assert 'timed out after 3 seconds' in outcome.reason
        assert outcome.link_found is True

    def test_connection_error(self, http_session):
        http_session.get.side_effect = requests.exceptions.ConnectionError('Name or service not known')
        dispatcher = UnsubscribeDispatcher(http_session=http_session)

        outcome = dispatcher.dispatch('https://nowhere.invalid/unsub')

        assert isinstance(outcome, LinkFailed)
        assert outcome.reason.startswith('Connection error')
        assert 'Name or service not known' in outcome.reason

    def test_malformed_url(self):
        dispatcher = UnsubscribeDispatcher()

        outcome = dispatcher.dispatch('not a url at all')

        assert isinstance(outcome, LinkFailed)
        assert outcome.reason.startswith('Request failed')

    def test_unexpected_error(self, http_session):
        http_session.get.side_effect = RuntimeError('boom')
        dispatcher = UnsubscribeDispatcher(http_session=http_session)

        outcome = dispatcher.dispatch('https://news.test/unsub')

        assert outcome == LinkFailed(url='https://news.test/unsub', reason='Unexpected error: boom')

    def test_failures_are_counted(self, http_session):
        http_session.get.side_effect = [
            make_response(200),
            requests.exceptions.Timeout(),
        ]
        dispatcher = UnsubscribeDispatcher(http_session=http_session)

        dispatcher.dispatch('https://a.test/unsub')
        dispatcher.dispatch('https://b.test/unsub')

        stats = dispatcher.logger.get_operation_stats()['dispatch']
        assert stats == {'total': 2, 'success': 1, 'failure': 1}


class _StatusHandler(BaseHTTPRequestHandler):
    def do_GET(self):
        self.send_response(500)
        self.end_headers()
        self.wfile.write(b'server error')

    def log_message(self, format, *args):
        pass


class TestDispatchAgainstLocalEndpoints:
    """Exercise the real requests stack against local sockets."""

    def test_error_status_endpoint_is_followed(self):
        server = HTTPServer(('127.0.0.1', 0), _StatusHandler)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        try:
            url = f'http://127.0.0.1:{server.server_port}/unsubscribe?id=1'
            outcome = UnsubscribeDispatcher(timeout=5).dispatch(url)
        finally:
            server.shutdown()
            server.server_close()

        assert outcome == LinkFollowed(url=url, status_code=500)

    def test_silent_endpoint_fails_within_timeout(self):
        # Accepts connections (kernel backlog) but never answers
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(('127.0.0.1', 0))
        listener.listen(1)
        try:
            url = f'http://127.0.0.1:{listener.getsockname()[1]}/unsubscribe'
            started = time.monotonic()
            outcome = UnsubscribeDispatcher(timeout=0.5).dispatch(url)
            elapsed = time.monotonic() - started
        finally:
            listener.close()

        assert isinstance(outcome, LinkFailed)
        assert 'timed out' in outcome.reason
        assert elapsed < 5

    def test_slow_body_does_not_delay_outcome(self):
        # Headers arrive at once, then the body trickles in one byte at a time
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.bind(('127.0.0.1', 0))
        listener.listen(1)

        def serve():
            conn, _ = listener.accept()
            try:
                conn.recv(4096)
                conn.sendall(b'HTTP/1.1 200 OK\r\nContent-Length: 1000\r\n\r\n')
                for _ in range(50):
                    conn.sendall(b'x')
                    time.sleep(0.2)
            except OSError:
                pass
            finally:
                conn.close()

        thread = threading.Thread(target=serve, daemon=True)
        thread.start()
        try:
            url = f'http://127.0.0.1:{listener.getsockname()[1]}/unsubscribe'
            started = time.monotonic()
            outcome = UnsubscribeDispatcher(timeout=0.5).dispatch(url)
            elapsed = time.monotonic() - started
        finally:
            listener.close()

        assert outcome == LinkFollowed(url=url, status_code=200)
        assert elapsed < 1.5
