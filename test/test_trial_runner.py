"""Test suite for sequential trial orchestration."""

import sys
import os
import asyncio
import dataclasses
import logging

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from algorithms.trial_runner import MetricSeries, TrialConfig, TrialRunner
from algorithms.warm_up import WarmUp
from common.errors import DispatchError, StreamError
from common.metrics_utils import summarize
from common.record import TraceRecord
from probes.client import create_session
from probes.http_probe import HttpProber
from trace_servers import BODY_SIZE, FIRST_BYTE_DELAY, LAST_BYTE_DELAY, start_test_server

TIMER_SLACK_MS = 1.0


class FakeProber:
    """Prober returning fixed-latency records, optionally failing on one call."""

    def __init__(self, ttfb_s=0.050, ttlb_s=0.070, body_size=BODY_SIZE, fail_on_call=None, error=None):
        self.ttfb_s = ttfb_s
        self.ttlb_s = ttlb_s
        self.body_size = body_size
        self.fail_on_call = fail_on_call
        self.error = error
        self.calls = 0
        self.active = 0
        self.max_active = 0

    async def probe(self, url):
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0)
            if self.calls == self.fail_on_call:
                raise self.error or DispatchError(url, ConnectionRefusedError("refused"))
            start = float(self.calls)
            return TraceRecord(
                start=start,
                first_byte=start + self.ttfb_s,
                last_byte=start + self.ttlb_s,
                connect_reused=self.calls > 1,
                body_size=self.body_size,
                http_status="200 OK",
                http_version="HTTP/1.1",
            )
        finally:
            self.active -= 1


class TestTrialConfig:
    """Test cases for run configuration."""

    def test_defaults(self):
        config = TrialConfig(url="http://example.com/", iterations=3)
        assert config.warm_up is False

    def test_rejects_non_positive_iterations(self):
        with pytest.raises(ValueError):
            TrialConfig(url="http://example.com/", iterations=0)

    def test_immutable(self):
        config = TrialConfig(url="http://example.com/", iterations=3)
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.iterations = 5


class TestTrialRunner:
    """Test cases for trial sequencing and metric extraction."""

    def test_series_lengths_and_values(self):
        prober = FakeProber()
        result = asyncio.run(TrialRunner(prober, TrialConfig("http://t/", 5)).run())

        assert len(result.series) == 5
        assert result.series.ttfb_ms == pytest.approx([50.0] * 5)
        assert result.series.ttlb_ms == pytest.approx([70.0] * 5)
        assert result.series.body_size == [10240.0] * 5
        assert all(isinstance(v, float) for v in result.series.body_size)

        stats = summarize(result.series.ttfb_ms)
        assert stats["median"] == pytest.approx(50.0)
        assert stats["p95"] == pytest.approx(50.0)
        assert stats["p99"] == pytest.approx(50.0)

    def test_first_record_retained(self):
        prober = FakeProber()
        result = asyncio.run(TrialRunner(prober, TrialConfig("http://t/", 3)).run())
        assert result.first_record.start == 1.0
        assert result.first_record.connect_reused is False

    def test_trials_are_sequential(self):
        prober = FakeProber()
        asyncio.run(TrialRunner(prober, TrialConfig("http://t/", 10)).run())
        assert prober.max_active == 1
        assert prober.calls == 10

    def test_warm_up_is_untimed(self):
        prober = FakeProber()
        result = asyncio.run(TrialRunner(prober, TrialConfig("http://t/", 4, warm_up=True)).run())
        assert prober.calls == 5
        assert len(result.series) == 4
        # Warm-up record (call 1) is not the retained one
        assert result.first_record.start == 2.0

    def test_dispatch_error_aborts_run(self, caplog):
        """Refusal on trial 3 of 5 fails after exactly two successful trials."""
        prober = FakeProber(fail_on_call=3)
        with caplog.at_level(logging.INFO, logger="algorithms.trial_runner"):
            with pytest.raises(DispatchError):
                asyncio.run(TrialRunner(prober, TrialConfig("http://t/", 5)).run())

        assert prober.calls == 3
        trial_lines = [r for r in caplog.records
                       if r.levelno == logging.INFO and r.getMessage().startswith("Trial #")]
        assert len(trial_lines) == 2

    def test_stream_error_propagates(self):
        error = StreamError("http://t/", ConnectionResetError("reset"), 100)
        prober = FakeProber(fail_on_call=1, error=error)
        with pytest.raises(StreamError) as excinfo:
            asyncio.run(TrialRunner(prober, TrialConfig("http://t/", 2)).run())
        assert excinfo.value is error
        assert prober.calls == 1

    def test_warm_up_failure_aborts_run(self):
        prober = FakeProber(fail_on_call=1)
        with pytest.raises(DispatchError):
            asyncio.run(TrialRunner(prober, TrialConfig("http://t/", 3, warm_up=True)).run())
        assert prober.calls == 1


class TestWarmUp:
    def test_execute_returns_record(self):
        prober = FakeProber()
        record = asyncio.run(WarmUp(prober, "http://t/").execute())
        assert record.body_size == BODY_SIZE
        assert prober.calls == 1


class TestMetricSeries:
    def test_as_dict(self):
        series = MetricSeries()
        series.append(TraceRecord(start=0.0, first_byte=0.01, last_byte=0.02, body_size=3))
        data = series.as_dict()
        assert set(data) == {"ttfb_ms", "ttlb_ms", "body_size"}
        assert data["body_size"] == [3.0]
        assert len(series) == 1


class TestEndToEnd:
    """Real requests against a local server with fixed delays."""

    def test_five_trials_against_delayed_server(self):
        async def scenario():
            server = await start_test_server()
            try:
                async with create_session(timeout_seconds=10) as session:
                    config = TrialConfig(str(server.make_url("/delayed")), 5)
                    return await TrialRunner(HttpProber(session), config).run()
            finally:
                await server.close()

        result = asyncio.run(scenario())
        series = result.series

        assert len(series.ttfb_ms) == len(series.ttlb_ms) == len(series.body_size) == 5
        assert series.body_size == [float(BODY_SIZE)] * 5
        for ttfb, ttlb in zip(series.ttfb_ms, series.ttlb_ms):
            assert ttfb >= FIRST_BYTE_DELAY * 1000 - TIMER_SLACK_MS
            assert ttlb >= (FIRST_BYTE_DELAY + LAST_BYTE_DELAY) * 1000 - TIMER_SLACK_MS
            assert ttlb >= ttfb

        stats = summarize(series.ttfb_ms)
        assert stats["median"] <= stats["p95"] <= stats["p99"]
        assert result.first_record.http_status == "200 OK"
        assert result.first_record.connect_reused is False
