"""
Registry / Store Synchronization

Best-effort mirroring of the in-memory registry into the durable store.

Modules:
    coordinator: PersistenceCoordinator (apply-then-emit background writes)
    reporting: ErrorReporter (single channel for absorbed failures)
    reconciler: StartupReconciler (store -> registry on load)

Flow:
    operation -> registry commit (sync) -> coordinator.emit(write) -> store
                                                     |
                                              failure -> reporter (logged, kept)

The registry is never rolled back or retried based on a write outcome.
"""

from vfiles.sync.coordinator import PersistenceCoordinator
from vfiles.sync.reconciler import StartupReconciler
from vfiles.sync.reporting import ErrorReporter

__all__ = ["PersistenceCoordinator", "ErrorReporter", "StartupReconciler"]
