"""
blocks.py - Block definition for the statchain ledger.
"""
import hashlib
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Sequence

# Written over the fingerprint of any block whose outlier set is non-empty.
SENTINEL_FINGERPRINT = "OUTLIER_BLOCK_HASH"


def _format_sequence(values: Iterable[float]) -> str:
    return "[" + " ".join(repr(float(v)) for v in values) + "]"


class Block:
    """
    One batch of samples with its derived statistics, linked to its
    predecessor via a SHA-256 fingerprint.
    """
    def __init__(
        self,
        index: int,
        values: Sequence[float],
        prev_fingerprint: str = "",
        timestamp: Optional[datetime] = None,
    ):
        self.index = index
        self.timestamp = timestamp or datetime.now(timezone.utc)
        self.values = tuple(float(v) for v in values)
        self.prev_fingerprint = prev_fingerprint
        self.mean = 0.0
        self.median = 0.0
        self.two_sd_lower = 0.0
        self.two_sd_upper = 0.0
        self.outliers: tuple = ()
        self.fingerprint = ""

    @property
    def has_outliers(self) -> bool:
        return len(self.outliers) > 0

    def compute_fingerprint(self) -> str:
        """
        Compute the SHA-256 hex digest over the block's content fields.

        Fields are concatenated in a fixed order; statistics use fixed
        6-decimal formatting so equal blocks always hash identically.
        """
        block_content = (
            f"{self.index}"
            f"{int(self.timestamp.timestamp())}"
            f"{_format_sequence(self.values)}"
            f"{self.prev_fingerprint}"
            f"{self.mean:.6f}"
            f"{self.median:.6f}"
            f"{self.two_sd_lower:.6f}"
            f"{self.two_sd_upper:.6f}"
            f"{_format_sequence(self.outliers)}"
        )
        return hashlib.sha256(block_content.encode("utf-8")).hexdigest()

    def to_record(self) -> Dict[str, Any]:
        """
        Field-name keyed representation written to the block log.
        """
        return {
            "index": self.index,
            "timestamp": self.timestamp.isoformat(),
            "values": list(self.values),
            "fingerprint": self.fingerprint,
            "prev_fingerprint": self.prev_fingerprint,
            "mean": self.mean,
            "median": self.median,
            "two_sd_lower": self.two_sd_lower,
            "two_sd_upper": self.two_sd_upper,
            "outliers": list(self.outliers),
        }

    def __repr__(self) -> str:
        return f"Block(index={self.index}, fingerprint={self.fingerprint!r}, outliers={len(self.outliers)})"


def format_block(block: Block) -> str:
    """Render a block's metadata and samples for terminal display."""
    lines = [
        "Block metadata:",
        f"Index: {block.index}",
        f"Timestamp: {block.timestamp.isoformat()}",
        f"Fingerprint: {block.fingerprint}",
        f"Previous fingerprint: {block.prev_fingerprint}",
        f"Mean: {block.mean:.2f}",
        f"Median: {block.median:.2f}",
        f"2-SD range: {block.two_sd_lower:.2f} - {block.two_sd_upper:.2f}",
        "Outliers:",
        " ".join(f"{v:.2f}" for v in block.outliers),
        "Values in block:",
        " ".join(f"{v:.2f}" for v in block.values),
    ]
    return "\n".join(lines)
