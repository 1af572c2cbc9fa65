from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for container operations.

    Every public container operation runs under one coarse lock per container.
    Registries and the build stacks are updated in several steps during a
    rebind or a nested build, so partial updates are never visible to other
    threads while the lock is held.
    """

    THREAD = "thread"
    """Guard container state with a reentrant ``threading.RLock``."""

    NONE = "none"
    """Disable locking for single-threaded applications."""
