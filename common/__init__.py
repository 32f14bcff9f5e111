"""
Common utilities for the HTTP trace benchmark.
"""

from .errors import AggregationError, DispatchError, StreamError, TraceBenchError
from .record import TraceRecord

__all__ = ['AggregationError', 'DispatchError', 'StreamError', 'TraceBenchError', 'TraceRecord']
