"""
Single-trial HTTP prober: one traced request with a streaming body drain.
"""

import asyncio
import logging
import ssl
import time
from typing import Callable

import aiohttp

from common.alt_svc import parse_alt_svc
from common.errors import DispatchError, StreamError
from common.record import TraceRecord
from configuration import ACCEPT_ENCODING, READ_BUFFER_SIZE
from probes.recorder import LifecycleRecorder, observe_tls_handshake

logger = logging.getLogger(__name__)

# Errors raised by aiohttp for failed connections, TLS failures and timeouts
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


class HttpProber:
    """Runs single traced GET requests over a shared pooled session."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        ssl_context: ssl.SSLContext = None,
        read_buffer_size: int = READ_BUFFER_SIZE,
        accept_encoding: str = ACCEPT_ENCODING,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.session = session
        self.ssl_context = ssl_context
        self.read_buffer_size = read_buffer_size
        self.accept_encoding = accept_encoding or "identity"
        self._clock = clock

    async def probe(self, url: str) -> TraceRecord:
        """Execute one request against url and return its completed trace record.

        Args:
            url: Target URL

        Returns:
            TraceRecord with first_byte and last_byte set

        Raises:
            DispatchError: If no response was received
            StreamError: If draining the body failed
        """
        recorder = LifecycleRecorder(TraceRecord(), clock=self._clock)
        record = recorder.record
        if self.ssl_context is not None:
            observe_tls_handshake(self.ssl_context, recorder)

        # Setting Accept-Encoding ourselves keeps aiohttp from negotiating
        # (and decoding) compression behind our back
        headers = {"Accept-Encoding": self.accept_encoding}

        try:
            response = await self.session.get(url, headers=headers, trace_request_ctx=recorder)
        except TRANSPORT_ERRORS as e:
            raise DispatchError(url, e) from e

        if record.first_byte is None:
            recorder.first_response_byte()

        try:
            record.body_size = await self._drain(url, response)
            recorder.last_response_byte()
        finally:
            # Returns the connection to the pool; the session stays open
            response.release()

        record.http_status = f"{response.status} {response.reason or ''}".strip()
        record.http_version = f"HTTP/{response.version.major}.{response.version.minor}"
        alt_svc = response.headers.get("Alt-Svc", "")
        if alt_svc:
            record.quic_support = parse_alt_svc(alt_svc)

        return record

    async def _drain(self, url: str, response: aiohttp.ClientResponse) -> int:
        """Read and discard the body through a fixed-size buffer, counting bytes."""
        size = 0
        try:
            while True:
                chunk = await response.content.read(self.read_buffer_size)
                if not chunk:
                    break
                size += len(chunk)
        except TRANSPORT_ERRORS as e:
            raise StreamError(url, e, size) from e
        return size
