"""Single-run guard for a master store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType


@runtime_checkable
class SyncLock(Protocol):
    """Context manager held for the whole of a writing run.

    Entering raises ``SyncAlreadyRunningError`` if another run holds the lock.
    """

    def __enter__(self) -> SyncLock: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...
