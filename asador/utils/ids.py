"""
Record ID generation
"""

import threading
import time

_lock = threading.Lock()
_last_id = 0


def time_ordered_id() -> str:
    """Millisecond timestamp, bumped so IDs stay strictly increasing in-process"""
    global _last_id
    with _lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)
