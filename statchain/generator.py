import logging
import threading
from typing import Callable, List, Optional

import numpy as np

from .exceptions import StatChainError

logger = logging.getLogger(__name__)


class SampleGenerator:
    """
    Periodically emit a batch of uniform [0, 1) samples into a sink.

    Usage:
        generator = SampleGenerator(chain.append, interval=5.0, batch_size=100)
        generator.start()
        ...
        generator.stop()
    """

    def __init__(
        self,
        sink: Callable[[List[float]], object],
        interval: float = 5.0,
        batch_size: int = 100,
        seed: Optional[int] = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.sink = sink
        self.interval = interval
        self.batch_size = batch_size
        self._rng = np.random.default_rng(seed)
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start emitting batches on a background thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="statchain-generator", daemon=True)
        self._thread.start()
        logger.info(f"Sample generator started (interval={self.interval}s, batch_size={self.batch_size})")

    def stop(self, timeout: Optional[float] = None):
        """Stop the generator thread."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Sample generator stopped")

    def generate(self) -> List[float]:
        return self._rng.random(self.batch_size).tolist()

    def tick(self):
        """Emit a single batch into the sink."""
        try:
            self.sink(self.generate())
        except StatChainError as e:
            logger.error(f"Generated batch was rejected: {e}")

    def _run_loop(self):
        # wait() doubles as the cadence timer and the stop signal
        while not self._stop_event.wait(self.interval):
            self.tick()
