"""
Periodic background jobs run on daemon threads for the life of the app.
"""
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Callable, Optional

from .database import SessionLocal
from .limiter import FixedWindowRateLimiter
from .logging_config import timed, worker_logger
from .services.auth import AuthService


class PeriodicTask:
    """Run ``func`` every ``interval`` seconds until stopped. The first run happens after one interval.

    With a ``timeout``, each run goes to a single worker thread owned by the
    task and the loop stops waiting for it after ``timeout`` seconds. A run
    that overstays keeps the worker busy, so later runs queue behind it.
    """

    def __init__(self, name: str, interval: float, func: Callable[[], object], timeout: Optional[float] = None):
        self.name = name
        self.interval = interval
        self.func = func
        self.timeout = timeout
        self.running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    def start_background(self) -> bool:
        if self.running:
            return False

        self.running = True
        self._stop_event.clear()
        if self.timeout is not None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{self.name}-run")
        self._thread = threading.Thread(target=self._loop, daemon=True, name=self.name)
        self._thread.start()
        worker_logger.info("Background task started", task=self.name, interval=self.interval, timeout=self.timeout)
        return True

    def stop(self, timeout: float = 5.0) -> bool:
        if not self.running:
            return False

        self.running = False
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        worker_logger.info("Background task stopped", task=self.name)
        return True

    def _loop(self):
        while not self._stop_event.wait(self.interval):
            try:
                self._run_once()
            except Exception as e:
                worker_logger.error("Background task failed", error=e, task=self.name)

    def _run_once(self):
        executor = self._executor
        if executor is None:
            self.func()
            return

        future = executor.submit(self.func)
        try:
            future.result(timeout=self.timeout)
        except FutureTimeout:
            worker_logger.warning("Background task exceeded timeout", task=self.name, timeout_seconds=self.timeout)


@timed(worker_logger)
def cleanup_expired_sessions() -> int:
    db = SessionLocal()
    try:
        removed = AuthService(db).cleanup_expired_sessions()
    finally:
        db.close()
    if removed:
        worker_logger.info("Expired sessions removed", count=removed)
    return removed


def make_rate_limiter_eviction(rate_limiter: FixedWindowRateLimiter) -> Callable[[], None]:
    def run():
        dropped = rate_limiter.purge_stale()
        if dropped:
            worker_logger.debug("Rate limiter entries evicted", count=dropped, remaining=len(rate_limiter))

    return run
