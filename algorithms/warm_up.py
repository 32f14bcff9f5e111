"""
Warm-up step for trace benchmarks: one untimed request to prime the pool.
"""

import logging

from common.record import TraceRecord

logger = logging.getLogger(__name__)


class WarmUp:
    """Single untimed probe so the first timed trial can reuse a pooled connection."""

    def __init__(self, prober, url: str):
        self.prober = prober
        self.url = url

    async def execute(self) -> TraceRecord:
        """Run the warm-up probe; errors propagate and abort the run."""
        logger.info(f"Starting warm-up request to {self.url}...")
        record = await self.prober.probe(self.url)
        logger.info(
            f"Warm-up completed: {record.http_status}, {record.body_size} bytes, "
            f"new connection={'no' if record.connect_reused else 'yes'}"
        )
        return record
