"""Tests for the HTTP probe and host validation."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest
import requests

from linkpulse.probe.http import HttpProber, build_url, is_valid_host
from linkpulse.session.models import NetworkType


def run_async(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


class TestBuildUrl:
    def test_defaults_to_https(self):
        assert build_url("example.com") == "https://example.com"

    def test_keeps_scheme(self):
        assert build_url("http://example.com/ping") == "http://example.com/ping"
        assert build_url("HTTPS://example.com") == "HTTPS://example.com"

    def test_strips_whitespace(self):
        assert build_url("  8.8.8.8 \n") == "https://8.8.8.8"

    def test_empty(self):
        assert build_url("") is None
        assert build_url("   ") is None


class TestIsValidHost:
    @pytest.mark.parametrize(
        "host",
        ["example.com", "8.8.8.8", "https://example.com/path", " google.com ", "localhost"],
    )
    def test_valid(self, host):
        assert is_valid_host(host)

    @pytest.mark.parametrize("host", ["", "   ", "exa mple.com", "http://", "https://"])
    def test_invalid(self, host):
        assert not is_valid_host(host)


def _response(status: int) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    return response


class TestHttpProber:
    def test_success_records_latency(self):
        http = MagicMock()
        http.head.return_value = _response(204)
        prober = HttpProber(session=http)

        sample = prober.probe("example.com", 5.0, NetworkType.WIFI)

        assert sample.succeeded
        assert sample.latency is not None and sample.latency >= 0
        assert sample.host == "example.com"
        assert sample.network_type is NetworkType.WIFI

        args, kwargs = http.head.call_args
        assert args[0] == "https://example.com"
        assert kwargs["timeout"] == 5.0
        assert kwargs["allow_redirects"] is False
        assert "no-cache" in kwargs["headers"]["Cache-Control"]

    @pytest.mark.parametrize("status", [199, 301, 404, 500])
    def test_non_2xx_is_failure(self, status):
        http = MagicMock()
        http.head.return_value = _response(status)
        sample = HttpProber(session=http).probe("example.com", 5.0, NetworkType.WIRED)
        assert not sample.succeeded
        assert sample.latency is None

    @pytest.mark.parametrize(
        "exc",
        [requests.Timeout("slow"), requests.ConnectionError("refused")],
    )
    def test_transport_error_is_failure(self, exc):
        http = MagicMock()
        http.head.side_effect = exc
        sample = HttpProber(session=http).probe("example.com", 1.0, NetworkType.CELLULAR)
        assert not sample.succeeded
        assert sample.is_timeout

    def test_unbuildable_host_is_failure_without_request(self):
        http = MagicMock()
        sample = HttpProber(session=http).probe("  ", 1.0, NetworkType.WIFI)
        assert not sample.succeeded
        http.head.assert_not_called()

    def test_aprobe_runs_probe(self):
        http = MagicMock()
        http.head.return_value = _response(200)
        sample = run_async(
            HttpProber(session=http).aprobe("example.com", 2.0, NetworkType.WIFI)
        )
        assert sample.succeeded
        http.head.assert_called_once()
