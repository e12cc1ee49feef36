"""Runtime: paging, REST transport, deferral and sync sessions."""

from .context import SyncContext
from .session import SyncSession

__all__ = ["SyncContext", "SyncSession"]
