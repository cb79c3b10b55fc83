from __future__ import annotations

from typing import cast

import pytest

from sakesync.domain.apply import ChangeApplier
from sakesync.domain.changes import detect_changes
from sakesync.domain.errors import ChangeApplicationError
from sakesync.domain.hashing import compute_content_hash
from sakesync.domain.model import HistoryOperation
from tests.helpers.catalog import (
    FIXED_NOW,
    FakeHistoryRepository,
    FakeMasterRecordRepository,
    make_candidate,
    make_fake_repositories,
    make_master,
)


def test_apply_writes_masters_and_one_history_entry_per_change() -> None:
    unchanged = make_candidate(1)
    updated_old = make_master(make_candidate(2, brand_name="久保田"))
    removed = make_master(make_candidate(3, brand_name="八海山"))
    repositories = make_fake_repositories([make_master(unchanged), updated_old, removed])
    candidates = [unchanged, make_candidate(2, brand_name="久保田 萬寿"), make_candidate(4)]
    change_set = detect_changes(candidates, repositories.masters.list_active())

    result = ChangeApplier(repositories, generation_id=2).apply(change_set, now=FIXED_NOW)

    masters = cast(FakeMasterRecordRepository, repositories.masters)
    history = cast(FakeHistoryRepository, repositories.history)
    assert (result.inserted, result.updated, result.deleted) == (1, 1, 1)
    assert result.total == history.count_for_generation(2) == 3
    assert [entry.operation for entry in history.entries] == [
        HistoryOperation.INSERT,
        HistoryOperation.UPDATE,
        HistoryOperation.DELETE,
    ]

    inserted = masters.records[4]
    assert inserted.is_active
    assert inserted.generation_id == 2
    assert inserted.data_hash == compute_content_hash(make_candidate(4))
    assert inserted.created_at == inserted.updated_at == FIXED_NOW

    updated = masters.records[2]
    assert updated.brand_name == "久保田 萬寿"
    assert updated.generation_id == 2
    assert updated.created_at == updated_old.created_at
    assert updated.updated_at == FIXED_NOW

    deleted = masters.records[3]
    assert not deleted.is_active
    assert deleted.deleted_at == FIXED_NOW
    assert deleted.generation_id == 2

    assert masters.records[1].generation_id == 1


def test_history_snapshots_follow_operation() -> None:
    old = make_master(make_candidate(2, brand_name="久保田"))
    repositories = make_fake_repositories([old, make_master(make_candidate(3))])
    change_set = detect_changes(
        [make_candidate(1), make_candidate(2, brand_name="久保田 千寿")],
        repositories.masters.list_active(),
    )

    ChangeApplier(repositories, generation_id=7).apply(change_set, now=FIXED_NOW)

    insert, update, delete = cast(FakeHistoryRepository, repositories.history).entries
    assert insert.old_data is None
    assert insert.new_data is not None
    assert insert.new_data["brand_name"] == "獺祭"
    assert set(insert.changed_fields) == set(insert.new_data)

    assert update.old_data is not None
    assert update.new_data is not None
    assert update.old_data["brand_name"] == "久保田"
    assert update.new_data["brand_name"] == "久保田 千寿"
    assert update.changed_fields == ("brand_name",)

    assert delete.brand_id == 3
    assert delete.new_data is None
    assert delete.old_data is not None
    assert delete.old_data["is_active"] is True
    assert delete.changed_fields == ()


def test_store_failure_names_brand_and_operation() -> None:
    repositories = make_fake_repositories()
    masters = cast(FakeMasterRecordRepository, repositories.masters)
    masters.fail_on.add(2)
    change_set = detect_changes([make_candidate(1), make_candidate(2), make_candidate(3)], [])
    applier = ChangeApplier(repositories, generation_id=1)

    with pytest.raises(ChangeApplicationError) as excinfo:
        applier.apply(change_set, now=FIXED_NOW)

    assert excinfo.value.brand_id == 2
    assert excinfo.value.operation == HistoryOperation.INSERT
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert applier.result.inserted == 1
    assert list(masters.records) == [1]
