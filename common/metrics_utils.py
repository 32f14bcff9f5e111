"""
Shared utilities for latency statistics: percentiles over trial metric series.
"""

import logging
from typing import Dict, Iterable, Mapping, Sequence

import pandas as pd

from common.errors import AggregationError

logger = logging.getLogger(__name__)

# Quantiles reported for every series
SUMMARY_QUANTILES: Dict[str, float] = {
    "median": 0.50,
    "p95": 0.95,
    "p99": 0.99,
}


def summarize(values: Iterable[float]) -> Dict[str, float]:
    """
    Calculate median, 95th and 99th percentile of a series.

    Percentiles use linear interpolation between closest ranks: for quantile
    q over n sorted values the position is q * (n - 1), interpolated between
    the two bounding values. This is pandas' default quantile method.

    Args:
        values: Metric values, in any order

    Returns:
        Dictionary with median, p95 and p99

    Raises:
        AggregationError: If the series is empty
    """
    series = pd.Series(list(values), dtype="float64")
    if series.empty:
        raise AggregationError("Cannot compute percentiles over an empty series")

    return {
        name: float(series.quantile(q, interpolation="linear"))
        for name, q in SUMMARY_QUANTILES.items()
    }


def summarize_series(series: Mapping[str, Sequence[float]]) -> Dict[str, Dict[str, float]]:
    """
    Summarize several named metric series independently.

    Args:
        series: Mapping of metric name to its values

    Returns:
        Mapping of metric name to its summary (see summarize)
    """
    summaries = {}
    for name, values in series.items():
        summaries[name] = summarize(values)
        logger.debug(f"Summary for {name}: {summaries[name]}")
    return summaries
