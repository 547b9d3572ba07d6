"""
statchain - Append-only chain of numeric sample batches.

Each block carries its batch, the batch's mean, median, two-standard-deviation
band and outliers, and a SHA-256 fingerprint linking it to its predecessor.
"""

from .blocks import SENTINEL_FINGERPRINT, Block, format_block
from .chain import BlockChain, new_chain, validate_batch
from .exceptions import StatChainError, InvalidInput, IOFailure, ChainClosed
from .generator import SampleGenerator
from .importer import read_batches
from .metrics import start_metrics_server
from .persistence import BlockLogWriter
from .stats import mean, median, two_sd_range, outliers

__all__ = [
    "Block",
    "BlockChain",
    "new_chain",
    "format_block",
    "SENTINEL_FINGERPRINT",
    "StatChainError",
    "InvalidInput",
    "IOFailure",
    "ChainClosed",
    "validate_batch",
    "SampleGenerator",
    "BlockLogWriter",
    "read_batches",
    "start_metrics_server",
    # Statistics
    "mean", "median", "two_sd_range", "outliers",
]

__version__ = "0.1.0"
