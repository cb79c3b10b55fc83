"""Ports for fetching the external catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sakesync.domain.model import CandidateRecord


@runtime_checkable
class CatalogFetcher(Protocol):
    """Callable port returning every joinable candidate record of the source.

    Implementations either return the complete set or raise ``CatalogFetchError``.
    """

    def __call__(self) -> list[CandidateRecord]: ...


__all__ = ["CatalogFetcher"]
