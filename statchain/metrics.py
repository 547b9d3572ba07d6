"""
metrics.py - Prometheus metrics for the statchain package.
"""

from prometheus_client import Counter, Histogram, Gauge, start_http_server

BLOCKS_APPENDED = Counter(
    'statchain_blocks_appended_total', 'Total number of blocks appended to a chain'
)
APPENDS_REJECTED = Counter(
    'statchain_appends_rejected_total', 'Total number of batches rejected before append'
)
APPEND_LATENCY = Histogram(
    'statchain_append_latency_seconds', 'Time spent appending one block, statistics included'
)
CHAIN_LENGTH = Gauge(
    'statchain_chain_length', 'Number of blocks in the most recently updated chain'
)
OUTLIER_BLOCKS = Gauge(
    'statchain_outlier_blocks', 'Blocks carrying the outlier sentinel after the last re-scan'
)
LOG_WRITE_FAILURES = Counter(
    'statchain_log_write_failures_total', 'Block records that could not be written to the log'
)
LOG_BREAKER_STATE = Gauge(
    'statchain_log_breaker_state',
    'Block log circuit breaker state: 0 closed, 1 open'
)

def start_metrics_server(port: int = 8000, addr: str = '0.0.0.0') -> None:
    """
    Start an HTTP server to expose Prometheus metrics on /metrics.
    """
    start_http_server(port, addr=addr)
