"""HTTP reachability probe: times a single HEAD request against the target."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from urllib.parse import urlsplit

import requests

from linkpulse.session.models import NetworkType, Sample

logger = logging.getLogger(__name__)

_SCHEMES = ("http://", "https://")
_DEFAULT_SCHEME = "https://"
_IPV4_PATTERN = re.compile(r"^(\d{1,3}\.){3}\d{1,3}$")

# Ask every cache between us and the target to revalidate.
_NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store",
    "Pragma": "no-cache",
}


def build_url(host: str) -> str | None:
    """Turn a raw host string into a request URL, defaulting to HTTPS."""
    clean = host.strip()
    if not clean:
        return None
    if clean.lower().startswith(_SCHEMES):
        return clean
    return f"{_DEFAULT_SCHEME}{clean}"


def is_valid_host(host: str) -> bool:
    """Accept a URL/hostname with a parseable host part, or a dotted-quad IPv4."""
    clean = host.strip()
    if not clean or any(ch.isspace() for ch in clean):
        return False

    url = build_url(clean)
    if url is not None:
        try:
            if urlsplit(url).hostname:
                return True
        except ValueError:
            pass

    return _IPV4_PATTERN.match(clean) is not None


class HttpProber:
    """Measures round-trip time of an HTTP HEAD request.

    Success means a 2xx response within the timeout. Timeouts, transport
    errors and any other status all yield a failed sample without latency.
    Redirects are not followed, so a 3xx counts as a failure.
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        self._http = session or requests.Session()

    def probe(
        self,
        host: str,
        timeout: float,
        network_type: NetworkType,
    ) -> Sample:
        url = build_url(host)
        if url is None:
            logger.debug("Cannot build a probe URL from %r", host)
            return Sample(host=host, network_type=network_type, succeeded=False)

        timestamp = time.time()
        start = time.perf_counter()
        try:
            response = self._http.head(
                url,
                timeout=timeout,
                headers=_NO_CACHE_HEADERS,
                allow_redirects=False,
            )
        except requests.RequestException as exc:
            logger.debug("Probe to %s failed: %s", url, exc)
            return Sample(
                host=host,
                network_type=network_type,
                succeeded=False,
                timestamp=timestamp,
            )
        elapsed_ms = (time.perf_counter() - start) * 1000

        if not 200 <= response.status_code <= 299:
            logger.debug("Probe to %s returned HTTP %d", url, response.status_code)
            return Sample(
                host=host,
                network_type=network_type,
                succeeded=False,
                timestamp=timestamp,
            )

        return Sample(
            host=host,
            network_type=network_type,
            succeeded=True,
            latency=elapsed_ms,
            timestamp=timestamp,
        )

    async def aprobe(
        self,
        host: str,
        timeout: float,
        network_type: NetworkType,
    ) -> Sample:
        """Run :meth:`probe` in a worker thread."""
        return await asyncio.to_thread(self.probe, host, timeout, network_type)
