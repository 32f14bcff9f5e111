"""
Configuration constants for the HTTP trace benchmark.

This module contains all configuration parameters including:
- HTTP client pool and timeout settings
- Trial defaults (iterations, warm-up)
- Body drain buffer and content negotiation
- TCP round-trip-time probe settings
- Logging and unit conversion constants
"""

import os

# =============================================================================
# UNIT CONSTANTS
# =============================================================================

BYTES_PER_KIB: int = 1024
BYTES_PER_MIB: int = 1024 * BYTES_PER_KIB
MS_PER_SECOND: int = 1000

# =============================================================================
# HTTP CLIENT CONFIGURATION
# =============================================================================

# Maximum pooled connections kept per host
MAX_IDLE_CONNECTIONS: int = int(os.getenv("MAX_IDLE_CONNECTIONS", "10"))

# Request timeout in seconds (0 = unbounded)
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "0"))

# Explicit Accept-Encoding so the byte count reflects the wire size
ACCEPT_ENCODING: str = os.getenv("ACCEPT_ENCODING", "gzip")

# =============================================================================
# TRIAL CONFIGURATION
# =============================================================================

DEFAULT_ITERATIONS: int = 100
DEFAULT_WARM_UP: bool = os.getenv("WARM_UP", "").lower() in ("1", "true", "yes")

# Body is drained through a fixed buffer and discarded
READ_BUFFER_SIZE: int = BYTES_PER_MIB

# =============================================================================
# TCP RTT PROBE
# =============================================================================

TCP_RTT_PORT: int = 80
TCP_RTT_DEFAULT_ITERATIONS: int = 10

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = "%(asctime)s - %(levelname)s - %(message)s"
