"""
HTTP trace benchmark: builds the client, runs the trials, reports percentiles.
"""

import logging
from typing import Any, Dict, Optional

from algorithms.trial_runner import TrialConfig, TrialRunner
from common.metrics_utils import summarize_series
from common.report import format_trace_summary
from configuration import ACCEPT_ENCODING, MAX_IDLE_CONNECTIONS, REQUEST_TIMEOUT_SECONDS
from probes.client import create_session, create_ssl_context
from probes.http_probe import HttpProber

logger = logging.getLogger(__name__)


class TraceRunner:
    """Trace benchmark runner for one target URL."""

    def __init__(
        self,
        config: TrialConfig,
        max_idle_connections: int = MAX_IDLE_CONNECTIONS,
        timeout_seconds: Optional[float] = REQUEST_TIMEOUT_SECONDS,
        accept_encoding: str = ACCEPT_ENCODING,
    ):
        self.config = config
        self.max_idle_connections = max_idle_connections
        self.timeout_seconds = timeout_seconds
        self.accept_encoding = accept_encoding

        logger.info(
            f"Initialized trace runner: {config.url}, {config.iterations} iterations, "
            f"warm-up {'on' if config.warm_up else 'off'}"
        )

    async def run_benchmark(self) -> Dict[str, Any]:
        """Execute all trials and summarize them.

        Returns:
            Dictionary with the first record, the metric series, the
            summaries and the rendered report
        """
        ssl_context = create_ssl_context()
        session = create_session(ssl_context, self.max_idle_connections, self.timeout_seconds)

        async with session:
            prober = HttpProber(session, ssl_context, accept_encoding=self.accept_encoding)
            result = await TrialRunner(prober, self.config).run()

        summaries = summarize_series(result.series.as_dict())
        report = format_trace_summary(self.config.url, result.first_record, summaries)

        return {
            "first_record": result.first_record,
            "series": result.series,
            "summaries": summaries,
            "report": report,
        }
