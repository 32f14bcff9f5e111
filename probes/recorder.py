"""
Lifecycle recorder: correlates transport lifecycle events with a trace record.

The recorder exposes one hook per lifecycle point. The aiohttp binding in
build_trace_config() fires them from the session's trace signals, and
observe_tls_handshake() fires the TLS hooks from the SSL layer. Hooks run on
the event loop inside aiohttp, not necessarily where the request was awaited,
so the record must not be read until the prober's awaited call returns.
"""

import logging
import ssl
import time
from typing import Callable, Optional

import aiohttp

from common.record import TraceRecord

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"

# Protocol names reported by ssl.SSLObject.version()
TLS_VERSION_NAMES = {
    "SSLv3": "SSL/3.0",
    "TLSv1": "TLS/1.0",
    "TLSv1.1": "TLS/1.1",
    "TLSv1.2": "TLS/1.2",
    "TLSv1.3": "TLS/1.3",
}

# OpenSSL cipher names (as reported by ssl.SSLObject.cipher()) to IANA names
TLS_CIPHER_SUITE_NAMES = {
    # TLS 1.0 - 1.2 cipher suites
    "RC4-SHA": "TLS_RSA_WITH_RC4_128_SHA",
    "DES-CBC3-SHA": "TLS_RSA_WITH_3DES_EDE_CBC_SHA",
    "AES128-SHA": "TLS_RSA_WITH_AES_128_CBC_SHA",
    "AES256-SHA": "TLS_RSA_WITH_AES_256_CBC_SHA",
    "AES128-SHA256": "TLS_RSA_WITH_AES_128_CBC_SHA256",
    "AES128-GCM-SHA256": "TLS_RSA_WITH_AES_128_GCM_SHA256",
    "AES256-GCM-SHA384": "TLS_RSA_WITH_AES_256_GCM_SHA384",
    "ECDHE-ECDSA-RC4-SHA": "TLS_ECDHE_ECDSA_WITH_RC4_128_SHA",
    "ECDHE-ECDSA-AES128-SHA": "TLS_ECDHE_ECDSA_WITH_AES_128_CBC_SHA",
    "ECDHE-ECDSA-AES256-SHA": "TLS_ECDHE_ECDSA_WITH_AES_256_CBC_SHA",
    "ECDHE-RSA-RC4-SHA": "TLS_ECDHE_RSA_WITH_RC4_128_SHA",
    "ECDHE-RSA-DES-CBC3-SHA": "TLS_ECDHE_RSA_WITH_3DES_EDE_CBC_SHA",
    "ECDHE-RSA-AES128-SHA": "TLS_ECDHE_RSA_WITH_AES_128_CBC_SHA",
    "ECDHE-RSA-AES256-SHA": "TLS_ECDHE_RSA_WITH_AES_256_CBC_SHA",
    "ECDHE-ECDSA-AES128-SHA256": "TLS_ECDHE_ECDSA_WITH_AES_128_CBC_SHA256",
    "ECDHE-RSA-AES128-SHA256": "TLS_ECDHE_RSA_WITH_AES_128_CBC_SHA256",
    "ECDHE-RSA-AES128-GCM-SHA256": "TLS_ECDHE_RSA_WITH_AES_128_GCM_SHA256",
    "ECDHE-ECDSA-AES128-GCM-SHA256": "TLS_ECDHE_ECDSA_WITH_AES_128_GCM_SHA256",
    "ECDHE-RSA-AES256-GCM-SHA384": "TLS_ECDHE_RSA_WITH_AES_256_GCM_SHA384",
    "ECDHE-ECDSA-AES256-GCM-SHA384": "TLS_ECDHE_ECDSA_WITH_AES_256_GCM_SHA384",
    "ECDHE-RSA-CHACHA20-POLY1305": "TLS_ECDHE_RSA_WITH_CHACHA20_POLY1305_SHA256",
    "ECDHE-ECDSA-CHACHA20-POLY1305": "TLS_ECDHE_ECDSA_WITH_CHACHA20_POLY1305_SHA256",
    # TLS 1.3 cipher suites (OpenSSL already uses the IANA names)
    "TLS_AES_128_GCM_SHA256": "TLS_AES_128_GCM_SHA256",
    "TLS_AES_256_GCM_SHA384": "TLS_AES_256_GCM_SHA384",
    "TLS_CHACHA20_POLY1305_SHA256": "TLS_CHACHA20_POLY1305_SHA256",
}


def tls_version_name(version: Optional[str]) -> str:
    return TLS_VERSION_NAMES.get(version, UNKNOWN)


def tls_cipher_suite_name(cipher: Optional[str]) -> str:
    return TLS_CIPHER_SUITE_NAMES.get(cipher, UNKNOWN)


class LifecycleRecorder:
    """Writes lifecycle instants of a single in-flight request into its record."""

    def __init__(self, record: TraceRecord = None, clock: Callable[[], float] = time.perf_counter):
        self.record = record if record is not None else TraceRecord()
        self._clock = clock

    def connection_acquire_start(self):
        self.record.start = self._clock()

    def dns_start(self):
        self.record.dns_start = self._clock()

    def dns_done(self):
        self.record.dns_done = self._clock()

    def tls_handshake_start(self):
        self.record.tls_start = self._clock()
        # The TCP dial has completed once the handshake begins
        if self.record.connect_start is not None and self.record.connect_done is None:
            self.record.connect_done = self.record.tls_start

    def tls_handshake_done(self, version: Optional[str], cipher: Optional[str]):
        self.record.tls_done = self._clock()
        self.record.tls_version = tls_version_name(version)
        self.record.tls_cipher_suite = tls_cipher_suite_name(cipher)

    def connect_start(self):
        self.record.connect_start = self._clock()
        self.record.connect_done = None

    def connect_done(self):
        self.record.connect_done = self._clock()

    def connection_created(self):
        """New connection is ready; closes the connect span unless TLS already did."""
        if self.record.connect_done is None:
            self.connect_done()
        self.connection_acquired(False)

    def connection_acquired(self, reused: bool):
        self.record.connect_reused = reused

    def first_response_byte(self):
        self.record.first_byte = self._clock()

    def last_response_byte(self):
        self.record.last_byte = self._clock()


def _recorder(trace_config_ctx) -> Optional[LifecycleRecorder]:
    recorder = trace_config_ctx.trace_request_ctx
    return recorder if isinstance(recorder, LifecycleRecorder) else None


def build_trace_config() -> aiohttp.TraceConfig:
    """
    Build the aiohttp trace config that forwards session signals to recorders.

    Each request passes its own LifecycleRecorder as ``trace_request_ctx``;
    requests without one are ignored.
    """
    trace = aiohttp.TraceConfig()

    async def on_request_start(session, ctx, params):
        recorder = _recorder(ctx)
        if recorder is not None:
            recorder.connection_acquire_start()

    async def on_dns_resolvehost_start(session, ctx, params):
        recorder = _recorder(ctx)
        if recorder is not None:
            recorder.dns_start()

    # aiohttp's connection-create span also covers name resolution and the
    # TLS handshake. The connect span restarts once the address is known.
    async def on_dns_resolvehost_end(session, ctx, params):
        recorder = _recorder(ctx)
        if recorder is not None:
            recorder.dns_done()
            recorder.connect_start()

    async def on_dns_cache_hit(session, ctx, params):
        recorder = _recorder(ctx)
        if recorder is not None:
            recorder.connect_start()

    async def on_connection_create_start(session, ctx, params):
        recorder = _recorder(ctx)
        if recorder is not None:
            recorder.connect_start()

    async def on_connection_create_end(session, ctx, params):
        recorder = _recorder(ctx)
        if recorder is not None:
            recorder.connection_created()

    async def on_connection_reuseconn(session, ctx, params):
        recorder = _recorder(ctx)
        if recorder is not None:
            recorder.connection_acquired(True)

    async def on_request_end(session, ctx, params):
        # Fired once the status line and headers have been read
        recorder = _recorder(ctx)
        if recorder is not None:
            recorder.first_response_byte()

    trace.on_request_start.append(on_request_start)
    trace.on_dns_resolvehost_start.append(on_dns_resolvehost_start)
    trace.on_dns_resolvehost_end.append(on_dns_resolvehost_end)
    trace.on_dns_cache_hit.append(on_dns_cache_hit)
    trace.on_connection_create_start.append(on_connection_create_start)
    trace.on_connection_create_end.append(on_connection_create_end)
    trace.on_connection_reuseconn.append(on_connection_reuseconn)
    trace.on_request_end.append(on_request_end)

    return trace


def observe_tls_handshake(ssl_context: ssl.SSLContext, recorder: LifecycleRecorder) -> None:
    """
    Route TLS handshakes performed with ssl_context to recorder.

    aiohttp has no TLS trace signals, so the SSL objects created by the
    context report handshake start and completion themselves. The observer
    is replaced for every trial; only one trial is in flight at a time.
    """

    class ObservedSSLObject(ssl.SSLObject):
        def do_handshake(self):
            if not getattr(self, "_handshake_started", False):
                self._handshake_started = True
                recorder.tls_handshake_start()
            # Raises SSLWantReadError until the handshake has completed
            super().do_handshake()
            cipher = self.cipher()
            recorder.tls_handshake_done(self.version(), cipher[0] if cipher else None)
            logger.debug(f"TLS handshake done: {recorder.record.tls_version} {recorder.record.tls_cipher_suite}")

    ssl_context.sslobject_class = ObservedSSLObject
