"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class HistoryOperation(StrEnum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class GenerationStatus(StrEnum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ChangeImpact(StrEnum):
    """Coarse severity of one generation's change set."""

    NONE = "none"
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"
