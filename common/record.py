"""
Data structures for per-trial trace records.
"""

from dataclasses import dataclass
from typing import Optional

from configuration import MS_PER_SECOND


def interval_ms(begin: Optional[float], end: Optional[float]) -> Optional[float]:
    """Milliseconds between two instants, or None if either one is unset."""
    if begin is None or end is None:
        return None
    return (end - begin) * MS_PER_SECOND


@dataclass
class TraceRecord:
    """Timestamps and protocol metadata captured during one trial.

    Instants are seconds on the recorder's monotonic clock. Instants for
    events that did not happen (DNS on a reused connection, TLS on plain
    HTTP) stay None.
    """

    start: Optional[float] = None
    dns_start: Optional[float] = None
    dns_done: Optional[float] = None
    tls_start: Optional[float] = None
    tls_done: Optional[float] = None
    connect_start: Optional[float] = None
    connect_done: Optional[float] = None
    first_byte: Optional[float] = None
    last_byte: Optional[float] = None

    # False when a new connection was established
    connect_reused: bool = False
    body_size: int = 0

    tls_version: str = ""
    tls_cipher_suite: str = ""
    http_version: str = ""
    http_status: str = ""
    quic_support: str = ""

    @property
    def ttfb_ms(self) -> Optional[float]:
        return interval_ms(self.start, self.first_byte)

    @property
    def ttlb_ms(self) -> Optional[float]:
        return interval_ms(self.start, self.last_byte)

    @property
    def dns_ms(self) -> Optional[float]:
        return interval_ms(self.dns_start, self.dns_done)

    @property
    def connect_ms(self) -> Optional[float]:
        return interval_ms(self.connect_start, self.connect_done)

    @property
    def tls_ms(self) -> Optional[float]:
        return interval_ms(self.tls_start, self.tls_done)
