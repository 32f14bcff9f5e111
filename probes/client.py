"""
HTTP client construction for trace probes.

The session is built once per run by the runner and passed explicitly to the
prober; nothing here is a process-wide singleton.
"""

import logging
import ssl
from typing import Optional

import aiohttp

from configuration import MAX_IDLE_CONNECTIONS, REQUEST_TIMEOUT_SECONDS
from probes.recorder import build_trace_config

logger = logging.getLogger(__name__)


def create_ssl_context() -> ssl.SSLContext:
    """Default verifying client context; the prober installs its TLS observer on it."""
    context = ssl.create_default_context()
    context.set_alpn_protocols(["http/1.1"])
    return context


def create_timeout(timeout_seconds: Optional[float]) -> aiohttp.ClientTimeout:
    """Map a timeout in seconds to aiohttp's timeout (0 or None = unbounded)."""
    if not timeout_seconds:
        return aiohttp.ClientTimeout(total=None)
    return aiohttp.ClientTimeout(total=timeout_seconds)


def create_session(
    ssl_context: ssl.SSLContext = None,
    max_idle_connections: int = MAX_IDLE_CONNECTIONS,
    timeout_seconds: Optional[float] = REQUEST_TIMEOUT_SECONDS,
) -> aiohttp.ClientSession:
    """
    Create a pooled client session wired to the lifecycle recorders.

    Args:
        ssl_context: Context used for https connections
        max_idle_connections: Connections kept per host in the pool
        timeout_seconds: Total request timeout (0 or None = unbounded)

    Returns:
        A ClientSession; the caller owns it and must close it
    """
    connector = aiohttp.TCPConnector(
        limit_per_host=max_idle_connections,
        ssl=ssl_context if ssl_context is not None else create_ssl_context(),
    )

    session = aiohttp.ClientSession(
        connector=connector,
        timeout=create_timeout(timeout_seconds),
        trace_configs=[build_trace_config()],
        # Body bytes are counted as they arrive on the wire
        auto_decompress=False,
    )

    logger.info(
        f"Configured client session: {max_idle_connections} connections per host, "
        f"timeout={'unbounded' if not timeout_seconds else f'{timeout_seconds}s'}"
    )
    return session
