from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for singleton construction.

    Pass a value as ``Injector(lock_mode=...)``. Both modes guarantee that every
    caller observes one retained singleton per key; they differ in how much
    work a cold-cache race may waste.
    """

    NONE = "none"
    """Construct without locking and keep the first published instance.

    Threads racing on a cold singleton may each build an instance; the losers'
    instances are discarded.
    """

    THREAD = "thread"
    """Guard cold singleton construction with a per-key ``threading.RLock``.

    A thread resolving a cold singleton waits for the thread already building
    it, so each singleton is normally built once. A call chain that already
    holds a singleton lock never waits for another one: it builds without the
    lock and the first published instance wins, which keeps cycles entered from
    opposite ends reporting ``WireboxCircularDependencyError``.
    """
