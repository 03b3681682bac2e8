from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for synthesis caches and shared instances.

    Use ``THREAD`` whenever definitions may be instantiated from several
    threads. ``NONE`` skips locking and is only safe for single-threaded hosts.
    """

    THREAD = "thread"
    """Guard cache writes with ``threading.Lock`` (``RLock`` for shared instances)."""

    NONE = "none"
    """Disable locking around cache reads/writes."""
