# ============================================================================
# PROBE TRANSPORT
# ============================================================================
# STATUS: Infrastructure - Thin HTTP and TCP probe helpers
# PURPOSE: Network side effects used by checks, aggregator and gate
# CREATED: 03 OCT 2026
# ============================================================================
"""
Probe Transport

Thin wrappers around httpx (sync client) and the socket module. These are
the only functions in the package that touch the network; everything above
them works on status codes, errno values and booleans.

Functions here may raise (httpx.HTTPError, OSError). Conversion to health
status happens in the callers.
"""

import socket
from typing import Tuple

import httpx

from core.logging import get_logger
from health.core import HealthStatus

logger = get_logger(__name__)

DEFAULT_TCP_PORT = 80


def http_get(url: str, timeout_s: float) -> httpx.Response:
    """GET url with a single overall timeout. Redirects are not followed."""
    with httpx.Client(timeout=timeout_s, follow_redirects=False) as client:
        return client.get(url)


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split "host:port" into its parts.

    Anything that is not exactly one host/port pair (no colon, several
    colons) is treated as a bare host on port 80.

    Raises:
        ValueError: two-part address whose port is not a valid TCP port
    """
    parts = address.split(":")
    if len(parts) != 2:
        return address, DEFAULT_TCP_PORT

    host, raw_port = parts
    try:
        port = int(raw_port)
    except ValueError:
        raise ValueError(f"Invalid port in address {address!r}") from None
    if not 1 <= port <= 65535:
        raise ValueError(f"Port out of range in address {address!r}")
    return host, port


def tcp_connect(host: str, port: int, timeout_s: float) -> int:
    """
    Attempt a TCP connect.

    Returns:
        0 on success, otherwise the errno of the failed connect

    Raises:
        TimeoutError: no answer within timeout_s
        socket.gaierror: host name does not resolve
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(timeout_s)
        try:
            sock.connect((host, port))
        except (TimeoutError, socket.gaierror):
            raise
        except OSError as e:
            if e.errno is None:
                raise
            return e.errno
        return 0


def probe_service_url(url: str, timeout_s: float) -> Tuple[HealthStatus, str]:
    """
    Probe a downstream service's health URL.

    2xx is healthy, unless the body is a JSON object reporting
    "status": "degraded". Any other code is unhealthy.
    """
    response = http_get(url, timeout_s)
    if not 200 <= response.status_code < 300:
        return HealthStatus.UNHEALTHY, f"HTTP {response.status_code}"

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("status") == HealthStatus.DEGRADED.value:
        return HealthStatus.DEGRADED, "Service reports degraded"
    return HealthStatus.HEALTHY, ""


def probe_dependency(target: str, timeout_s: float) -> bool:
    """
    Check a startup dependency.

    http:// and https:// targets succeed on a 2xx response; anything else
    is a "host:port" TCP address and succeeds on connect.
    """
    if target.startswith(("http://", "https://")):
        response = http_get(target, timeout_s)
        return 200 <= response.status_code < 300

    host, port = parse_address(target)
    return tcp_connect(host, port, timeout_s) == 0


__all__ = [
    "DEFAULT_TCP_PORT",
    "http_get",
    "parse_address",
    "tcp_connect",
    "probe_service_url",
    "probe_dependency",
]
