"""Change summaries and the human-readable dry-run preview."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from sakesync.domain.model import ChangeImpact, ChangeSummary

if TYPE_CHECKING:
    from sakesync.domain.changes import ChangeSet

MINOR_CHANGE_LIMIT: Final[int] = 10
MODERATE_CHANGE_LIMIT: Final[int] = 100
PREVIEW_LIMIT: Final[int] = 5


def classify_impact(total_changes: int) -> ChangeImpact:
    if total_changes <= 0:
        return ChangeImpact.NONE
    if total_changes <= MINOR_CHANGE_LIMIT:
        return ChangeImpact.MINOR
    if total_changes <= MODERATE_CHANGE_LIMIT:
        return ChangeImpact.MODERATE
    return ChangeImpact.MAJOR


def build_change_summary(change_set: ChangeSet, *, generation_id: int) -> ChangeSummary:
    return ChangeSummary(
        generation_id=generation_id,
        new_brands=tuple(record.brand_name for record in change_set.inserts),
        removed_brands=tuple(record.brand_name for record in change_set.deletes),
        updated_brands=tuple(update.new.brand_name for update in change_set.updates),
        change_impact=classify_impact(change_set.total_changes),
        details={
            "inserts": len(change_set.inserts),
            "updates": len(change_set.updates),
            "deletes": len(change_set.deletes),
        },
    )


def format_change_preview(change_set: ChangeSet, *, limit: int = PREVIEW_LIMIT) -> list[str]:
    lines = [
        f"Pending changes: {len(change_set.inserts)} new, {len(change_set.updates)} updated, "
        f"{len(change_set.deletes)} removed, {change_set.unchanged} unchanged "
        f"(impact: {classify_impact(change_set.total_changes)})"
    ]

    lines.append("New brands:")
    lines.extend(
        f"  - {record.brand_name} ({record.brewery_name})" for record in change_set.inserts[:limit]
    )
    lines.extend(_overflow(len(change_set.inserts), limit))

    lines.append("Updated brands:")
    lines.extend(
        f"  - {update.new.brand_name}: {', '.join(update.changed_fields) or 'content hash only'}"
        for update in change_set.updates[:limit]
    )
    lines.extend(_overflow(len(change_set.updates), limit))

    lines.append("Removed brands:")
    lines.extend(
        f"  - {record.brand_name} ({record.brewery_name})" for record in change_set.deletes[:limit]
    )
    lines.extend(_overflow(len(change_set.deletes), limit))
    return lines


def _overflow(count: int, limit: int) -> list[str]:
    return [f"  ... and {count - limit} more"] if count > limit else []
