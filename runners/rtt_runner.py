"""
TCP round-trip-time benchmark runner.
"""

import logging
from typing import Any, Dict, Optional

from common.metrics_utils import summarize
from common.report import format_rtt_summary
from configuration import TCP_RTT_PORT
from probes.tcp_rtt import measure_tcp_rtt

logger = logging.getLogger(__name__)


class RttRunner:
    """Runs the TCP connect probe and summarizes it."""

    def __init__(self, url: str, iterations: int, port: int = TCP_RTT_PORT, timeout_seconds: Optional[float] = None):
        if iterations < 1:
            raise ValueError(f"iterations must be a positive integer, got {iterations}")
        self.url = url
        self.iterations = iterations
        self.port = port
        self.timeout_seconds = timeout_seconds or None

    async def run_benchmark(self) -> Dict[str, Any]:
        logger.info(f"Measuring TCP RTT to {self.url} port {self.port} ({self.iterations} connections)")
        rtts = await measure_tcp_rtt(self.url, self.iterations, self.port, self.timeout_seconds)
        stats = summarize(rtts)
        return {
            "rtt_ms": rtts,
            "summary": stats,
            "report": format_rtt_summary(self.url, self.iterations, stats),
        }
