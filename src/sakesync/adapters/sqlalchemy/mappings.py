"""SQLAlchemy table metadata for the master store and its audit trail."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
)

from sakesync.domain.model import (
    ChangeImpact,
    ChangeSummary,
    Generation,
    GenerationStatus,
    HistoryEntry,
    HistoryOperation,
    MasterRecord,
)
from sakesync.domain.model.catalog import FLAVOR_FIELDS

if TYPE_CHECKING:
    from enum import StrEnum

    from sqlalchemy.engine import Engine, RowMapping

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


def _str_enum(enum_cls: type[StrEnum]) -> Enum:
    return Enum(enum_cls, native_enum=False, values_callable=_enum_values)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# Core tables -----------------------------------------------------------------

sync_generation_table = Table(
    "sync_generations",
    metadata,
    Column("generation_id", Integer, primary_key=True, autoincrement=True),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("completed_at", UTCDateTime(), nullable=True),
    Column("status", _str_enum(GenerationStatus), nullable=False),
    Column("total_records", Integer, nullable=False, default=0),
    Column("inserted_count", Integer, nullable=False, default=0),
    Column("updated_count", Integer, nullable=False, default=0),
    Column("deleted_count", Integer, nullable=False, default=0),
    Column("unchanged_count", Integer, nullable=False, default=0),
    Column("error_message", Text, nullable=True),
    Column("error_details", JSON, nullable=True),
    sqlite_autoincrement=True,
)

sake_master_table = Table(
    "sake_master",
    metadata,
    Column("brand_id", Integer, primary_key=True, autoincrement=False),
    Column("brand_name", String, nullable=False),
    Column("brewery_id", Integer, nullable=False),
    Column("brewery_name", String, nullable=False),
    Column("sweetness", Float, nullable=False),
    Column("richness", Float, nullable=False),
    *(Column(name, Float, nullable=False) for name in FLAVOR_FIELDS),
    Column("flavor_vector", JSON, nullable=False),
    Column("data_hash", String(64), nullable=False),
    Column(
        "generation_id",
        Integer,
        ForeignKey("sync_generations.generation_id"),
        nullable=False,
    ),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Column("deleted_at", UTCDateTime(), nullable=True),
    Index("ix_sake_master_is_active", "is_active"),
)

sake_master_history_table = Table(
    "sake_master_history",
    metadata,
    Column("history_id", Integer, primary_key=True, autoincrement=True),
    Column("brand_id", Integer, nullable=False),
    Column(
        "generation_id",
        Integer,
        ForeignKey("sync_generations.generation_id"),
        nullable=False,
    ),
    Column("operation", _str_enum(HistoryOperation), nullable=False),
    Column("old_data", JSON, nullable=True),
    Column("new_data", JSON, nullable=True),
    Column("changed_fields", JSON, nullable=False),
    Column("recorded_at", UTCDateTime(), nullable=False),
    Index("ix_sake_master_history_generation", "generation_id"),
    Index("ix_sake_master_history_brand", "brand_id"),
)

generation_changes_summary_table = Table(
    "generation_changes_summary",
    metadata,
    Column(
        "generation_id",
        Integer,
        ForeignKey("sync_generations.generation_id"),
        primary_key=True,
        autoincrement=False,
    ),
    Column("new_brands", JSON, nullable=False),
    Column("removed_brands", JSON, nullable=False),
    Column("updated_brands", JSON, nullable=False),
    Column("total_changes", Integer, nullable=False),
    Column("change_details", JSON, nullable=False),
    Column("change_impact", _str_enum(ChangeImpact), nullable=False),
)

sync_lock_table = Table(
    "sync_lock",
    metadata,
    Column("name", String, primary_key=True),
    Column("owner", String, nullable=False),
    Column("acquired_at", UTCDateTime(), nullable=False),
)

# Row translation -------------------------------------------------------------


def master_record_values(record: MasterRecord) -> dict[str, object]:
    return {
        "brand_id": record.brand_id,
        "brand_name": record.brand_name,
        "brewery_id": record.brewery_id,
        "brewery_name": record.brewery_name,
        "sweetness": record.sweetness,
        "richness": record.richness,
        **{name: getattr(record, name) for name in FLAVOR_FIELDS},
        "flavor_vector": list(record.flavor_vector),
        "data_hash": record.data_hash,
        "generation_id": record.generation_id,
        "is_active": record.is_active,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
        "deleted_at": record.deleted_at,
    }


def master_record_from_row(row: RowMapping) -> MasterRecord:
    flavor_vector = cast(list[float] | None, row["flavor_vector"]) or []
    return MasterRecord(
        brand_id=row["brand_id"],
        brand_name=row["brand_name"],
        brewery_id=row["brewery_id"],
        brewery_name=row["brewery_name"],
        sweetness=row["sweetness"],
        richness=row["richness"],
        f1_floral=row["f1_floral"],
        f2_mellow=row["f2_mellow"],
        f3_heavy=row["f3_heavy"],
        f4_mild=row["f4_mild"],
        f5_dry=row["f5_dry"],
        f6_light=row["f6_light"],
        flavor_vector=tuple(float(value) for value in flavor_vector),
        data_hash=row["data_hash"],
        generation_id=row["generation_id"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        deleted_at=row["deleted_at"],
    )


def history_entry_values(entry: HistoryEntry) -> dict[str, object]:
    return {
        "brand_id": entry.brand_id,
        "generation_id": entry.generation_id,
        "operation": entry.operation,
        "old_data": dict(entry.old_data) if entry.old_data is not None else None,
        "new_data": dict(entry.new_data) if entry.new_data is not None else None,
        "changed_fields": list(entry.changed_fields),
        "recorded_at": entry.recorded_at,
    }


def history_entry_from_row(row: RowMapping) -> HistoryEntry:
    return HistoryEntry(
        history_id=row["history_id"],
        brand_id=row["brand_id"],
        generation_id=row["generation_id"],
        operation=HistoryOperation(row["operation"]),
        old_data=row["old_data"],
        new_data=row["new_data"],
        changed_fields=tuple(cast(list[str], row["changed_fields"])),
        recorded_at=row["recorded_at"],
    )


def generation_values(generation: Generation) -> dict[str, object]:
    return {
        "started_at": generation.started_at,
        "completed_at": generation.completed_at,
        "status": generation.status,
        "total_records": generation.total_records,
        "inserted_count": generation.inserted_count,
        "updated_count": generation.updated_count,
        "deleted_count": generation.deleted_count,
        "unchanged_count": generation.unchanged_count,
        "error_message": generation.error_message,
        "error_details": (
            dict(generation.error_details) if generation.error_details is not None else None
        ),
    }


def generation_from_row(row: RowMapping) -> Generation:
    return Generation(
        generation_id=row["generation_id"],
        started_at=row["started_at"],
        completed_at=row["completed_at"],
        status=GenerationStatus(row["status"]),
        total_records=row["total_records"],
        inserted_count=row["inserted_count"],
        updated_count=row["updated_count"],
        deleted_count=row["deleted_count"],
        unchanged_count=row["unchanged_count"],
        error_message=row["error_message"],
        error_details=row["error_details"],
    )


def change_summary_values(summary: ChangeSummary) -> dict[str, object]:
    return {
        "generation_id": summary.generation_id,
        "new_brands": list(summary.new_brands),
        "removed_brands": list(summary.removed_brands),
        "updated_brands": list(summary.updated_brands),
        "total_changes": summary.total_changes,
        "change_details": dict(summary.details),
        "change_impact": summary.change_impact,
    }


def change_summary_from_row(row: RowMapping) -> ChangeSummary:
    details = cast(dict[str, Any], row["change_details"]) or {}
    return ChangeSummary(
        generation_id=row["generation_id"],
        new_brands=tuple(cast(list[str], row["new_brands"])),
        removed_brands=tuple(cast(list[str], row["removed_brands"])),
        updated_brands=tuple(cast(list[str], row["updated_brands"])),
        change_impact=ChangeImpact(row["change_impact"]),
        details={key: int(value) for key, value in details.items()},
    )


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the store metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
