"""
Unit tests for the remote reporter.
"""

import logging
from unittest.mock import Mock, patch

import pytest
import requests

from stat_agent.errors import TransportError, UnexpectedStatus
from stat_agent.reporter import RemoteReporter


PAYLOAD = '{"CPUUtilizationPercentage":42.5}'
URL = 'http://collector:3010/system-data'


class TestRemoteReporterSend:
    """Test the single blocking send"""

    def test_posts_json_payload(self):
        """Should POST the payload once with a JSON content type"""
        mock_response = Mock(status_code=200)

        with patch('stat_agent.reporter.requests.post', return_value=mock_response) as post:
            status = RemoteReporter(URL).send(PAYLOAD)

        assert status == 200
        post.assert_called_once()
        args, kwargs = post.call_args
        assert args == (URL,)
        assert kwargs['data'] == PAYLOAD.encode('utf-8')
        assert kwargs['headers'] == {'Content-Type': 'application/json'}
        assert kwargs['timeout'] is None
        mock_response.close.assert_called_once()

    def test_passes_configured_timeout(self):
        """Should forward the configured timeout to the transport"""
        with patch('stat_agent.reporter.requests.post', return_value=Mock(status_code=200)) as post:
            RemoteReporter(URL, timeout=2.5).send(PAYLOAD)

        assert post.call_args.kwargs['timeout'] == 2.5

    def test_non_200_raises_unexpected_status(self):
        """Should treat any status other than 200 as a failure"""
        with patch('stat_agent.reporter.requests.post', return_value=Mock(status_code=201)):
            with pytest.raises(UnexpectedStatus) as exc_info:
                RemoteReporter(URL).send(PAYLOAD)

        assert exc_info.value.status_code == 201

    def test_connection_error_raises_transport_error(self):
        """Should wrap requests failures in TransportError"""
        with patch('stat_agent.reporter.requests.post',
                   side_effect=requests.exceptions.ConnectionError('Connection refused')):
            with pytest.raises(TransportError) as exc_info:
                RemoteReporter(URL).send(PAYLOAD)

        assert 'Connection refused' in str(exc_info.value)


class TestRemoteReporterReport:
    """Test fire-and-forget reporting"""

    def test_no_destination_makes_no_call(self, caplog):
        """Should log and skip the network entirely"""
        with patch('stat_agent.reporter.requests.post') as post:
            with caplog.at_level(logging.WARNING, logger='stat_agent'):
                thread = RemoteReporter(None).report(PAYLOAD)

        assert thread is None
        post.assert_not_called()
        assert 'PLOT_KEY environment variable not found' in caplog.text

    def test_empty_destination_is_disabled(self):
        """Should treat an empty URL as not configured"""
        reporter = RemoteReporter('', destination_env='COLLECTOR_URL')

        assert reporter.enabled is False

    def test_report_runs_in_daemon_thread(self):
        """Should send on a background daemon thread"""
        with patch('stat_agent.reporter.requests.post', return_value=Mock(status_code=200)) as post:
            thread = RemoteReporter(URL).report(PAYLOAD)
            assert thread is not None
            assert thread.daemon is True
            thread.join(timeout=5)

        post.assert_called_once()

    def test_unexpected_status_is_logged(self, caplog):
        """Should log non-200 status without raising"""
        with patch('stat_agent.reporter.requests.post', return_value=Mock(status_code=500)):
            with caplog.at_level(logging.ERROR, logger='stat_agent'):
                RemoteReporter(URL).report(PAYLOAD).join(timeout=5)

        assert 'Error sending data to dashboard. Status code: 500' in caplog.text

    def test_transport_error_is_logged(self, caplog):
        """Should log transport failures without raising"""
        with patch('stat_agent.reporter.requests.post', side_effect=requests.exceptions.Timeout('timed out')):
            with caplog.at_level(logging.ERROR, logger='stat_agent'):
                RemoteReporter(URL).report(PAYLOAD).join(timeout=5)

        assert 'Error sending data to dashboard: timed out' in caplog.text

    def test_single_attempt_only(self):
        """Should never retry a failed send"""
        with patch('stat_agent.reporter.requests.post',
                   side_effect=requests.exceptions.ConnectionError('refused')) as post:
            RemoteReporter(URL).report(PAYLOAD).join(timeout=5)

        assert post.call_count == 1
