"""
Sequential trial orchestration for the trace benchmark.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from algorithms.warm_up import WarmUp
from common.errors import TraceBenchError
from common.record import TraceRecord
from configuration import BYTES_PER_KIB

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrialConfig:
    """Parameters of one benchmark run."""

    url: str
    iterations: int
    warm_up: bool = False

    def __post_init__(self):
        if self.iterations < 1:
            raise ValueError(f"iterations must be a positive integer, got {self.iterations}")


@dataclass
class MetricSeries:
    """Per-trial metrics; index i of every list belongs to trial i."""

    ttfb_ms: List[float] = field(default_factory=list)
    ttlb_ms: List[float] = field(default_factory=list)
    body_size: List[float] = field(default_factory=list)

    def append(self, record: TraceRecord) -> None:
        self.ttfb_ms.append(record.ttfb_ms)
        self.ttlb_ms.append(record.ttlb_ms)
        self.body_size.append(float(record.body_size))

    def as_dict(self) -> Dict[str, List[float]]:
        return {
            "ttfb_ms": self.ttfb_ms,
            "ttlb_ms": self.ttlb_ms,
            "body_size": self.body_size,
        }

    def __len__(self) -> int:
        return len(self.ttfb_ms)


@dataclass
class TrialResult:
    first_record: TraceRecord
    series: MetricSeries


def _format_ms(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.2f} ms"


class TrialRunner:
    """Runs trials one after another and collects their interval metrics.

    Trials never overlap. The first failing trial aborts the run and its
    error propagates unchanged.
    """

    def __init__(self, prober, config: TrialConfig):
        self.prober = prober
        self.config = config

    async def run(self) -> TrialResult:
        """Execute the configured trials.

        Returns:
            TrialResult with the first timed trial's record and the series

        Raises:
            DispatchError, StreamError: From the first failing trial
        """
        if self.config.warm_up:
            await WarmUp(self.prober, self.config.url).execute()

        series = MetricSeries()
        first_record = None

        for i in range(self.config.iterations):
            try:
                record = await self.prober.probe(self.config.url)
            except TraceBenchError as e:
                logger.error(f"Trial #{i + 1} of {self.config.iterations} failed: {e}")
                raise
            if first_record is None:
                first_record = record

            series.append(record)
            self._log_trial(i, record)

        logger.info(f"Completed {len(series)} trials against {self.config.url}")
        return TrialResult(first_record=first_record, series=series)

    def _log_trial(self, index: int, record: TraceRecord) -> None:
        logger.info(
            f"Trial #{index + 1}: reused={record.connect_reused} "
            f"status={record.http_status or 'n/a'} "
            f"body={record.body_size // BYTES_PER_KIB} KiB "
            f"ttfb={_format_ms(record.ttfb_ms)} "
            f"ttlb={_format_ms(record.ttlb_ms)} "
            f"connect={_format_ms(record.connect_ms)} "
            f"quic={record.quic_support or 'n/a'}"
        )
