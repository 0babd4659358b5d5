"""
Key generation worker.

Each worker owns one seed stream and runs in its own thread:
1. Seed is drawn once from the CSPRNG, then only incremented
2. Every iteration derives a keypair, its address and both scores
3. A candidate is pushed to the result channel only when it beats the
   worker's previously published candidate

The worker never blocks: publishing is an unbounded push and the stop event is
only polled. On exit the seed is zeroed in place and the worker drops its
reference to its best candidate. PyNaCl returns keys as immutable `bytes`,
which Python cannot zero, so published secret keys live on only in the
candidates the coordinator keeps.
"""

import logging
import threading
from enum import Enum
from typing import Optional, Tuple

from .channel import ResultChannel
from .errors import GenkeysError
from .keys import Seed, derive_keypair
from .scoring import Candidate
from .settings import Settings

logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """Lifecycle of a worker."""
    RUNNING = "running"
    STOP_REQUESTED = "stop_requested"
    STOPPED = "stopped"


class Worker:
    """Generates keys from one seed stream and publishes local improvements."""

    def __init__(self, worker_id: int, settings: Settings, channel: ResultChannel,
                 stop_event: threading.Event, seed: Optional[Seed] = None):
        self.worker_id = worker_id
        self.settings = settings
        self.channel = channel
        self.stop_event = stop_event
        self.state = WorkerState.RUNNING
        self.generated = 0
        self.published = 0
        self.error: Optional[BaseException] = None
        self._seed = seed
        self._first_step = True
        self._best: Optional[Candidate] = None
        self.best_score: Optional[Tuple[int, int]] = None  # (zero_bits, zero_blocks)
        self._thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()

    @property
    def best(self) -> Optional[Candidate]:
        """Last candidate this worker published, None once stopped."""
        return self._best

    @property
    def stopping(self) -> bool:
        return self.stop_event.is_set() or self.state is not WorkerState.RUNNING

    def step(self) -> Candidate:
        """Run a single iteration and return the candidate it produced."""
        if self._first_step:
            if self._seed is None:
                self._seed = Seed.random()
            self._first_step = False
        else:
            self._seed.increment()

        keys = derive_keypair(self._seed)
        candidate = Candidate.from_keys(keys)
        self.generated += 1

        if candidate.is_better(self._best, self.settings.ipv6_nice):
            self._best = candidate
            self.best_score = (candidate.zero_bits, candidate.zero_blocks)
            self.published += 1
            self.channel.push(candidate)
            logger.debug(f"Worker {self.worker_id}: new local best "
                         f"(zero bits {candidate.zero_bits}, zero blocks {candidate.zero_blocks})")
        return candidate

    def run(self):
        """Generate keys until a stop is requested."""
        logger.debug(f"Worker {self.worker_id}: started")
        try:
            while not self.stopping:
                self.step()
        except GenkeysError as e:
            self.error = e
            logger.exception(f"Worker {self.worker_id}: key generation failed: {e}")
        finally:
            self._wipe()
            with self._state_lock:
                self.state = WorkerState.STOPPED
            logger.debug(f"Worker {self.worker_id}: stopped after {self.generated:,} keys")

    def start(self) -> threading.Thread:
        """Run the worker in a daemon thread."""
        self._thread = threading.Thread(
            target=self.run, name=f"genkeys-worker-{self.worker_id}", daemon=True
        )
        self._thread.start()
        return self._thread

    def request_stop(self):
        """Ask the worker to finish its current iteration and exit."""
        with self._state_lock:
            if self.state is WorkerState.RUNNING:
                self.state = WorkerState.STOP_REQUESTED

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker thread; True if it has exited."""
        if self._thread is None:
            return self.state is WorkerState.STOPPED
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _wipe(self):
        if self._seed is not None:
            self._seed.wipe()
        self._best = None
