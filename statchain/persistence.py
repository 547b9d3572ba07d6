"""
persistence.py - Background writer appending finalized blocks to a JSON-lines log.
"""

import json
import logging
import queue
import threading
from pathlib import Path, PurePath
from typing import Optional, Union

from pybreaker import CircuitBreaker, CircuitBreakerError
from tenacity import Retrying

from .blocks import Block
from .exceptions import IOFailure
from .metrics import LOG_WRITE_FAILURES
from .utils import make_circuit_breaker, make_retrying

logger = logging.getLogger(__name__)

_STOP = object()


class BlockLogWriter:
    """
    Consume block-finalized events from a queue and append one JSON record
    per block to a log file.

    Subscribe enqueue() to a chain so appends only pay for a queue put; the
    worker thread owns retries and failure handling and never reports back.

    Usage:
        writer = BlockLogWriter("blocks.log")
        writer.start()
        chain.subscribe(writer.enqueue)
        ...
        writer.stop()
    """

    def __init__(
        self,
        path: Union[str, PurePath],
        retrying: Optional[Retrying] = None,
        breaker: Optional[CircuitBreaker] = None,
    ) -> None:
        self.path = Path(path)
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._retrying = retrying or make_retrying()
        self._breaker = breaker or make_circuit_breaker()
        self._thread: Optional[threading.Thread] = None
        self.written = 0
        self.failures = 0

    def __enter__(self) -> "BlockLogWriter":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        """Start the writer thread."""
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name="statchain-log-writer", daemon=True)
        self._thread.start()
        logger.info(f"Block log writer started, writing to '{self.path}'")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Drain pending records and stop the writer thread."""
        if not self._thread:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout)
        self._thread = None
        logger.info(f"Block log writer stopped ({self.written} written, {self.failures} failed)")

    def enqueue(self, block: Block) -> None:
        """Queue a finalized block for writing."""
        self._queue.put_nowait(block)

    def flush(self) -> None:
        """Block until every queued record has been handled."""
        self._queue.join()

    def write_block(self, block: Block) -> None:
        """
        Append a block record to the log synchronously.

        Raises:
            IOFailure: If the record could not be written after retries, or
                the circuit breaker is open.
        """
        line = json.dumps(block.to_record())
        try:
            self._breaker.call(self._retrying, self._write_line, line)
        except (OSError, CircuitBreakerError) as e:
            raise IOFailure(f"Could not write block {block.index} to '{self.path}': {e}") from e
        self.written += 1

    def _write_line(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                try:
                    self.write_block(item)
                except IOFailure as e:
                    self.failures += 1
                    LOG_WRITE_FAILURES.inc()
                    logger.error(str(e))
            finally:
                self._queue.task_done()
