"""
Text summaries for trace and TCP RTT runs.
"""

from typing import Dict, List

from common.record import TraceRecord
from configuration import BYTES_PER_KIB


def _latency_block(title: str, stats: Dict[str, float]) -> List[str]:
    return [
        f"    {title}:",
        f"        Median: {stats['median']:.2f} ms",
        f"        95th: {stats['p95']:.2f} ms",
        f"        99th: {stats['p99']:.2f} ms",
    ]


def format_trace_summary(url: str, first_record: TraceRecord, summaries: Dict[str, Dict[str, float]]) -> str:
    """
    Build the end-of-run report.

    Args:
        url: Target URL
        first_record: Record of the first timed trial (protocol metadata)
        summaries: Output of summarize_series for ttfb_ms, ttlb_ms, body_size

    Returns:
        Multi-line report text
    """
    lines = [
        "Statistics:",
        f"    URL: {url}",
        f"    BodySize: {summaries['body_size']['median'] / BYTES_PER_KIB:.0f} KiB",
    ]
    if first_record.tls_version:
        lines.append(f"    TLS: {first_record.tls_cipher_suite} ({first_record.tls_version})")
    if first_record.quic_support:
        lines.append(f"    QUIC: {first_record.quic_support}")
    lines.append(f"    HTTP: {first_record.http_version} {first_record.http_status}")
    lines.append("")
    lines.extend(_latency_block("Time to First Byte", summaries["ttfb_ms"]))
    lines.append("")
    lines.extend(_latency_block("Time to Last Byte", summaries["ttlb_ms"]))
    return "\n".join(lines)


def format_rtt_summary(url: str, iterations: int, stats: Dict[str, float]) -> str:
    lines = [
        "TCP RTT Statistics:",
        f"    URL: {url}",
        f"    Connections: {iterations}",
    ]
    lines.extend(_latency_block("Connect", stats))
    return "\n".join(lines)
