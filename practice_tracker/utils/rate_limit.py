import threading
import time
from collections import defaultdict, deque

from fastapi import Request

from practice_tracker.configs import settings
from practice_tracker.utils.errors import RateLimitError

_rate_buckets = defaultdict(deque)
_rate_lock = threading.Lock()
_last_sweep = 0.0


def _prune(dq: deque, cutoff: float):
    while dq and dq[0] <= cutoff:
        dq.popleft()


def _sweep(cutoff: float):
    # addresses that went quiet for a full window are dropped
    for ip in list(_rate_buckets):
        _prune(_rate_buckets[ip], cutoff)
        if not _rate_buckets[ip]:
            del _rate_buckets[ip]


def check_rate_limit(request: Request):
    """Sliding-window limit on requests per client address."""
    global _last_sweep
    ip = request.client.host if request.client else "unknown"
    now = time.time()
    limit, period = settings.RATE_LIMIT_REQUESTS, settings.RATE_LIMIT_WINDOW_SECONDS
    with _rate_lock:
        if now - _last_sweep >= period:
            _sweep(now - period)
            _last_sweep = now
        dq = _rate_buckets[ip]
        _prune(dq, now - period)
        if len(dq) >= limit:
            raise RateLimitError(f"Too many requests, please try again later ({limit} req / {period}s)")
        dq.append(now)
    return True


def reset_rate_limits():
    global _last_sweep
    with _rate_lock:
        _rate_buckets.clear()
        _last_sweep = 0.0
