"""
TCP round-trip-time probe: times bare TCP connection establishment.
"""

import asyncio
import logging
import socket
import time
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from common.errors import DispatchError
from configuration import MS_PER_SECOND, TCP_RTT_PORT

logger = logging.getLogger(__name__)


async def resolve_address(host: str, port: int) -> Tuple[str, int]:
    """Resolve host to the first TCP address returned by the resolver."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    if not infos:
        raise OSError(f"No addresses found for {host}")
    sockaddr = infos[0][4]
    return sockaddr[0], sockaddr[1]


async def _open(address: str, port: int, timeout: Optional[float]) -> asyncio.StreamWriter:
    _, writer = await asyncio.wait_for(asyncio.open_connection(address, port), timeout=timeout)
    return writer


async def _close(writer: asyncio.StreamWriter) -> None:
    writer.close()
    try:
        await writer.wait_closed()
    except OSError as e:
        logger.debug(f"Error closing probe connection: {e}")


async def measure_tcp_rtt(
    url: str,
    iterations: int,
    port: int = TCP_RTT_PORT,
    timeout: Optional[float] = None,
) -> List[float]:
    """
    Measure TCP connection establishment time to the host of url.

    The host is resolved once and one untimed connection is made first, so
    neither DNS nor first-contact effects land in the measurements.

    Args:
        url: URL whose host is probed (scheme and path are ignored)
        iterations: Number of timed connections
        port: TCP port to connect to
        timeout: Per-connection timeout in seconds (None = unbounded)

    Returns:
        Connection times in milliseconds, in trial order

    Raises:
        ValueError: If url has no host
        DispatchError: On the first resolution or connection failure
    """
    host = urlparse(url).hostname
    if not host:
        raise ValueError(f"No host in URL: {url!r}")

    try:
        address, port = await resolve_address(host, port)
        await _close(await _open(address, port, timeout))
    except (OSError, asyncio.TimeoutError) as e:
        raise DispatchError(url, e) from e

    results = []
    for i in range(iterations):
        start = time.perf_counter()
        try:
            writer = await _open(address, port, timeout)
        except (OSError, asyncio.TimeoutError) as e:
            raise DispatchError(url, e) from e
        rtt_ms = (time.perf_counter() - start) * MS_PER_SECOND
        await _close(writer)
        results.append(rtt_ms)
        logger.info(f"TCP RTT [#{i}] - {address}:{port} - {rtt_ms:.2f} ms")

    return results
