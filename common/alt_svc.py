"""
Alt-Svc header parsing for QUIC advertisement reporting.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

QUIC_PREFIX = "quic="
VERSIONS_PREFIX = "v="


def _unquote(value: str) -> str:
    """Strip surrounding quotes; an unterminated quote takes the rest of the token."""
    value = value.strip()
    if value.startswith('"'):
        end = value.find('"', 1)
        return value[1:] if end == -1 else value[1:end]
    return value.strip('"')


def parse_alt_svc(value: Optional[str]) -> str:
    """
    Turn an Alt-Svc header value into a human readable QUIC support string.

    The first semicolon-separated segment holds comma-separated service
    tokens; a ``quic="host:port"`` token gives the advertised location. A
    ``v="..."`` segment anywhere in the value gives the version list. When a
    token repeats, the last one wins. Malformed input never raises.

    Args:
        value: Raw Alt-Svc header value (may be empty or None)

    Returns:
        "" for no header, "No" when no QUIC location is advertised, otherwise
        "Yes, at <location>" optionally followed by " with versions: <list>"
    """
    if not value:
        return ""

    segments = value.split(";")

    location = ""
    for token in segments[0].split(","):
        token = token.strip()
        if token.startswith(QUIC_PREFIX):
            location = _unquote(token[len(QUIC_PREFIX):])

    versions = ""
    for segment in segments:
        segment = segment.strip()
        if segment.startswith(VERSIONS_PREFIX):
            versions = _unquote(segment[len(VERSIONS_PREFIX):])

    if not location:
        logger.debug(f"No QUIC location in Alt-Svc: {value!r}")
        return "No"

    result = f"Yes, at {location}"
    if versions:
        result += f" with versions: {versions}"
    return result
