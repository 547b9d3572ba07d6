"""
chain.py - Chain management for statchain.
"""

import copy
import logging
import math
import numbers
import time
from concurrent.futures import ThreadPoolExecutor, wait
from threading import Lock
from typing import Callable, Iterable, List, Optional

from . import stats
from .blocks import SENTINEL_FINGERPRINT, Block
from .exceptions import ChainClosed, InvalidInput
from .metrics import (
    APPEND_LATENCY,
    APPENDS_REJECTED,
    BLOCKS_APPENDED,
    CHAIN_LENGTH,
    OUTLIER_BLOCKS,
)

logger = logging.getLogger(__name__)

BlockListener = Callable[[Block], None]


def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


def validate_batch(values: Iterable[float]) -> List[float]:
    """
    Check a batch and return it as a list of floats.

    Raises:
        InvalidInput: If the batch is empty, not a sequence, or holds a
            non-numeric or non-finite sample.
    """
    if isinstance(values, (str, bytes, dict)):
        raise InvalidInput(f"Batch must be a sequence of numbers, got {type(values).__name__}.")
    try:
        batch = list(values)
    except TypeError:
        raise InvalidInput(f"Batch must be a sequence of numbers, got {type(values).__name__}.") from None
    if not batch:
        raise InvalidInput("Batch is empty.")
    for pos, value in enumerate(batch):
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidInput(f"Sample {pos} is not a number: {value!r}")
        if not _is_finite(value):
            raise InvalidInput(f"Sample {pos} is not finite: {value!r}")
    return [float(v) for v in batch]


class BlockChain:
    """
    Owns an append-only sequence of Blocks starting at a genesis block.

    All mutation goes through append(), which holds the chain lock for the
    whole statistics / fingerprint / re-marking cycle. Readers receive
    snapshots taken under the same lock.

    Args:
        stats_workers: Size of the thread pool running per-block statistics.
    """

    def __init__(self, stats_workers: int = 4) -> None:
        self.lock = Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=stats_workers, thread_name_prefix="statchain-stats"
        )
        self._listeners: List[BlockListener] = []
        self._closed = False
        genesis = Block(index=0, values=())
        genesis.fingerprint = genesis.compute_fingerprint()
        self._blocks: List[Block] = [genesis]
        CHAIN_LENGTH.set(1)
        logger.debug(f"Created chain with genesis fingerprint {genesis.fingerprint}")

    def __enter__(self) -> "BlockChain":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __len__(self) -> int:
        with self.lock:
            return len(self._blocks)

    def close(self) -> None:
        """Shut down the statistics worker pool. Later appends raise ChainClosed."""
        with self.lock:
            self._closed = True
        self._executor.shutdown(wait=True)

    def subscribe(self, listener: BlockListener) -> None:
        """
        Register a callable notified with a snapshot of every finalized block.

        Listeners run in append order while the chain lock is held, so they
        should only hand the block off (e.g. put it on a queue).
        """
        with self.lock:
            self._listeners.append(listener)

    def append(self, values: Iterable[float]) -> Block:
        """
        Fold a batch of samples into the chain as a new block.

        Raises:
            InvalidInput: If the batch is empty or holds a non-numeric or
                non-finite sample. The chain is left unchanged.
            ChainClosed: If close() has already been called.

        Returns:
            A snapshot of the appended block.
        """
        try:
            batch = validate_batch(values)
        except InvalidInput as e:
            APPENDS_REJECTED.inc()
            logger.warning(f"Rejected batch: {e}")
            raise

        start = time.perf_counter()
        with self.lock:
            if self._closed:
                raise ChainClosed("Cannot append to a closed chain.")
            prev = self._blocks[-1]
            block = Block(index=prev.index + 1, values=batch, prev_fingerprint=prev.fingerprint)
            self._compute_stats(block)
            block.fingerprint = block.compute_fingerprint()
            self._blocks.append(block)
            # re-scan runs after the append so the new block is marked too
            marked = self._mark_blocks_with_outliers()
            snapshot = copy.copy(block)
            length = len(self._blocks)
            self._notify(snapshot)

        APPEND_LATENCY.observe(time.perf_counter() - start)
        BLOCKS_APPENDED.inc()
        CHAIN_LENGTH.set(length)
        OUTLIER_BLOCKS.set(marked)
        logger.info(
            f"Appended block {snapshot.index} ({len(batch)} samples, "
            f"{len(snapshot.outliers)} outliers, {marked} marked blocks)"
        )
        return snapshot

    def _compute_stats(self, block: Block) -> None:
        values = block.values
        mean_future = self._executor.submit(stats.mean, values)
        median_future = self._executor.submit(stats.median, values)
        band_future = self._executor.submit(stats.two_sd_range, values)
        # outliers consume the finished band
        lower, upper = band_future.result()
        outliers_future = self._executor.submit(stats.outliers, values, lower, upper)
        wait([mean_future, median_future, outliers_future])

        block.mean = mean_future.result()
        block.median = median_future.result()
        block.two_sd_lower, block.two_sd_upper = lower, upper
        block.outliers = tuple(outliers_future.result())

    def _mark_blocks_with_outliers(self) -> int:
        marked = 0
        for block in self._blocks:
            if block.has_outliers:
                block.fingerprint = SENTINEL_FINGERPRINT
                marked += 1
        return marked

    def _notify(self, block: Block) -> None:
        for listener in self._listeners:
            try:
                listener(block)
            except Exception:
                logger.exception(f"Block listener {listener!r} failed for block {block.index}")

    def last_block(self) -> Block:
        """Snapshot of the most recent block."""
        with self.lock:
            return copy.copy(self._blocks[-1])

    def all_blocks(self) -> List[Block]:
        """Snapshot of every block, genesis first."""
        with self.lock:
            return [copy.copy(b) for b in self._blocks]

    def blocks_with_outliers(self) -> List[Block]:
        """Snapshot of the blocks whose outlier set is non-empty."""
        with self.lock:
            return [copy.copy(b) for b in self._blocks if b.has_outliers]

    def validate_chain(self) -> bool:
        """
        Check linkage and content fingerprints across the chain.

        Blocks carrying the outlier sentinel cannot be re-hashed; for those
        only the presence of outliers is checked.
        """
        with self.lock:
            for i, curr in enumerate(self._blocks):
                if curr.fingerprint == SENTINEL_FINGERPRINT:
                    if not curr.has_outliers:
                        return False
                elif curr.fingerprint != curr.compute_fingerprint():
                    return False
                if i > 0 and curr.prev_fingerprint != self._blocks[i - 1].fingerprint:
                    return False
        return True


def new_chain(stats_workers: Optional[int] = None) -> BlockChain:
    """
    Create a chain holding only its genesis block.
    """
    if stats_workers is None:
        return BlockChain()
    return BlockChain(stats_workers=stats_workers)
