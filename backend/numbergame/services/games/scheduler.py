import itertools
import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


def _start_thread(target, *args):
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()
    return thread


class DisconnectScheduler:
    """Deferred, cancellable removal of dropped connections.

    - One pending timer per connection id; scheduling again replaces it
    - Each timer runs as a background task that sleeps until its deadline,
      then fires only if its token is still the current one for that id
    - Cancelling just forgets the token, so a woken task becomes a no-op
    - ``on_expire(connection_id)`` runs on the background task
    """

    def __init__(self, on_expire: Callable[[str], None], grace_period: float = 10.0,
                 start_background_task: Optional[Callable] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self.grace_period = grace_period
        self._on_expire = on_expire
        self._start_background_task = start_background_task or _start_thread
        self._sleep = sleep or time.sleep
        self._pending: Dict[str, Tuple[int, float]] = {}
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()

    def schedule(self, connection_id: str, grace_period: Optional[float] = None) -> float:
        delay = self.grace_period if grace_period is None else grace_period
        deadline = time.time() + delay
        with self._lock:
            replaced = connection_id in self._pending
            token = next(self._tokens)
            self._pending[connection_id] = (token, deadline)
        logger.info(
            f"[timer-set] conn={connection_id} delay={delay}s deadline={deadline:.3f}"
            + (" (replaced)" if replaced else "")
        )
        self._start_background_task(self._runner, connection_id, token, deadline)
        return deadline

    def cancel(self, connection_id: str) -> bool:
        with self._lock:
            cancelled = self._pending.pop(connection_id, None) is not None
        if cancelled:
            logger.info(f"[timer-cancel] conn={connection_id}")
        return cancelled

    def cancel_all(self) -> int:
        with self._lock:
            count = len(self._pending)
            self._pending.clear()
        if count:
            logger.info(f"[timer-cancel] dropped {count} pending removals")
        return count

    def is_pending(self, connection_id: str) -> bool:
        with self._lock:
            return connection_id in self._pending

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def _runner(self, connection_id: str, token: int, deadline: float) -> None:
        sleep_for = max(0.0, deadline - time.time())
        if sleep_for:
            self._sleep(sleep_for)
        with self._lock:
            current = self._pending.get(connection_id)
            if current is None or current[0] != token:
                logger.info(f"[timer-abort] conn={connection_id} token={token} stale")
                return
            del self._pending[connection_id]
        logger.info(f"[timer-fire] conn={connection_id}")
        self._on_expire(connection_id)
