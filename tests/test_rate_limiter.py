# tests/test_rate_limiter.py

"""
Tests for the in-memory rate limiter.
"""

from unittest.mock import Mock, patch

from core.rate_limiter import check_rate_limit, get_rate_limit_identifier


def test_allows_up_to_limit():
    results = [check_rate_limit("ip:1.2.3.4", max_requests=3, window_seconds=60) for _ in range(4)]

    assert results == [(True, 2), (True, 1), (True, 0), (False, 0)]


def test_window_expires():
    with patch("core.rate_limiter.time.time", return_value=1000.0):
        assert check_rate_limit("ip:5.6.7.8", max_requests=1, window_seconds=60) == (True, 0)
        assert check_rate_limit("ip:5.6.7.8", max_requests=1, window_seconds=60) == (False, 0)

    with patch("core.rate_limiter.time.time", return_value=1061.0):
        assert check_rate_limit("ip:5.6.7.8", max_requests=1, window_seconds=60) == (True, 0)


def test_identifier_uses_client_ip():
    request = Mock(client=Mock(host="10.0.0.7"), headers={})

    assert get_rate_limit_identifier(request) == "ip:10.0.0.7"


def test_identifier_prefers_first_forwarded_address():
    request = Mock(client=Mock(host="10.0.0.7"), headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})

    assert get_rate_limit_identifier(request) == "ip:203.0.113.9"
