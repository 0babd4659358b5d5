"""
Search coordinator.

Owns the worker pool and the global best candidate. The main loop runs on the
calling thread:
1. Start one worker thread per configured worker
2. Every POLL_PERIOD, take at most one candidate from the result channel and
   keep it if it beats the global best
3. Stop on cancellation, every worker failing, the time limit or reaching
   the target zero bits
4. Signal the workers, give them SHUTDOWN_GRACE to exit, merge anything still
   queued and return the final snapshot
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from .channel import ResultChannel
from .scoring import Candidate
from .settings import Settings
from .worker import Worker, WorkerState

logger = logging.getLogger(__name__)

POLL_PERIOD = 0.1  # seconds between channel polls
SHUTDOWN_GRACE = 0.5  # seconds to wait for workers on shutdown


@dataclass(frozen=True)
class SearchSnapshot:
    """Point-in-time view of a search for reporting."""
    best: Optional[Candidate]
    generated: int
    elapsed: float

    @property
    def rate(self) -> float:
        return self.generated / self.elapsed if self.elapsed > 0 else 0.0


class Coordinator:
    """Runs workers and merges their results into one global best."""

    def __init__(self, settings: Settings,
                 on_best: Optional[Callable[[SearchSnapshot], None]] = None,
                 stop_event: Optional[threading.Event] = None):
        self.settings = settings
        self.on_best = on_best
        self.stop_event = stop_event or threading.Event()
        self.channel = ResultChannel()
        self.workers: List[Worker] = []
        self.global_best: Optional[Candidate] = None
        self.stop_reason: Optional[str] = None
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    def start(self) -> SearchSnapshot:
        """Run the search until a stop condition fires; return the final snapshot."""
        num_workers = self.settings.worker_count
        logger.info(f"Starting key search with {num_workers} workers")

        self._start_time = time.monotonic()
        self._end_time = None
        self._run_workers(num_workers)

        try:
            while True:
                self.stop_event.wait(POLL_PERIOD)
                self.poll()
                reason = self.check_stop()
                if reason:
                    self.stop_reason = reason
                    break
        finally:
            self._stop_workers()

        self._end_time = time.monotonic()
        snapshot = self.snapshot()
        logger.info(f"Key search stopped ({self.stop_reason}): "
                    f"{snapshot.generated:,} keys in {snapshot.elapsed:.1f}s")
        return snapshot

    def request_stop(self):
        """Request shutdown. Safe from any thread or a signal handler."""
        self.stop_event.set()

    def poll(self) -> bool:
        """Take at most one candidate from the channel; True if it became the new best."""
        candidate = self.channel.try_pop()
        if candidate is None:
            return False
        return self._offer(candidate)

    def check_stop(self) -> Optional[str]:
        """Return why the search should stop, or None to keep going."""
        if self.stop_event.is_set():
            return "cancelled"

        if self.workers and all(worker.state is WorkerState.STOPPED and worker.error is not None
                                for worker in self.workers):
            return "all workers failed"

        if self.settings.max_duration and self.elapsed > self.settings.max_duration:
            return "time limit reached"

        target = self.settings.target_leading_zeros
        if target and self.global_best is not None and self.global_best.zero_bits >= target:
            return "target reached"

        return None

    @property
    def elapsed(self) -> float:
        if self._start_time is None:
            return 0.0
        end = self._end_time if self._end_time is not None else time.monotonic()
        return end - self._start_time

    @property
    def generated(self) -> int:
        return sum(worker.generated for worker in self.workers)

    def snapshot(self) -> SearchSnapshot:
        return SearchSnapshot(best=self.global_best, generated=self.generated, elapsed=self.elapsed)

    def _offer(self, candidate: Candidate) -> bool:
        if not candidate.is_better(self.global_best, self.settings.ipv6_nice):
            return False
        self.global_best = candidate
        if self.on_best:
            self.on_best(self.snapshot())
        return True

    def _run_workers(self, num_workers: int):
        self.workers = [
            Worker(worker_id, self.settings, self.channel, self.stop_event)
            for worker_id in range(num_workers)
        ]
        for worker in self.workers:
            worker.start()

    def _stop_workers(self):
        self.stop_event.set()
        for worker in self.workers:
            worker.request_stop()

        # Best effort: worker threads are daemons and may outlive the grace period
        deadline = time.monotonic() + SHUTDOWN_GRACE
        still_running = 0
        for worker in self.workers:
            if not worker.join(max(0.0, deadline - time.monotonic())):
                still_running += 1
        if still_running:
            logger.warning(f"{still_running} worker(s) still running after {SHUTDOWN_GRACE}s grace period")

        # Final merge of improvements published after the last poll
        merged = 0
        while True:
            candidate = self.channel.try_pop()
            if candidate is None:
                break
            if self._offer(candidate):
                merged += 1
        if merged:
            logger.debug(f"Merged {merged} late candidate(s) after shutdown")

        failed = [worker for worker in self.workers if worker.error is not None]
        if failed:
            logger.error(f"{len(failed)} worker(s) exited with errors")
