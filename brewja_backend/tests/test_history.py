import pytest
from pydantic import ValidationError as PydanticValidationError

from brewja_backend.app.schemas import ActionType


def test_history_is_newest_first(brewing_engine, clock):
    clock.advance(seconds=5)
    brewing_engine.package_to_keg("T1", "K-001", 50)
    clock.advance(seconds=5)
    brewing_engine.package_to_bottles("T1", 10, 0.6, "LABEL")

    actions = [h.action_type for h in brewing_engine.history()]
    assert actions == [ActionType.BOTTLE, ActionType.KEG, ActionType.BREW]

    first = brewing_engine.history()[-1]
    assert first.date == "26/01/2025, 14:30:00"
    assert first.recorded_at == "2025-01-26T14:30:00"
    assert first.tank_id == "FV-01"


def test_entries_are_frozen(brewing_engine):
    entry = brewing_engine.history()[0]
    with pytest.raises(PydanticValidationError):
        entry.details = "edited"


def test_entry_ids_unique_within_same_millisecond(brewing_engine):
    brewing_engine.package_to_keg("T1", "K-001", 10)
    brewing_engine.package_to_keg("T1", "K-002", 10)
    ids = [h.id for h in brewing_engine.history()]
    assert len(set(ids)) == len(ids) == 3


def test_rejected_operation_records_nothing(brewing_engine):
    with pytest.raises(Exception):
        brewing_engine.package_to_keg("T1", "K-404", 10)
    assert len(brewing_engine.history()) == 1


def test_filter_by_month_action_and_limit(brewing_engine, clock):
    clock.advance(days=10)
    brewing_engine.package_to_keg("T1", "K-001", 50)
    brewing_engine.package_to_keg("T1", "K-002", 50)

    assert [h.action_type for h in brewing_engine.history(month="2025-01")] == [ActionType.BREW]
    assert len(brewing_engine.history(month="2025-02")) == 2
    assert brewing_engine.history(month="2024-12") == []
    assert len(brewing_engine.history(action_type=ActionType.KEG)) == 2
    assert len(brewing_engine.history(limit=1)) == 1

    totals = brewing_engine.monthly_totals("2025-02")
    assert totals["KEG"] == 100
    assert totals["BREW"] == 0


def test_finish_snapshot_survives_later_edits(brewing_engine, clock):
    clock.advance(days=14)
    brewing_engine.finalize_batch("T1")
    brewing_engine.update_material("malt-pils", {"name": "Renamed Malt", "quantity": 1})
    brewing_engine.update_recipe("rec-ipa", {"name": "IPA", "style": "Hazy IPA", "og": 1.060, "fg": 1.015})

    batch = brewing_engine.finished_batches()[0].batch_data
    assert batch.recipe_snapshot.style == "American IPA"
    assert batch.recipe_snapshot.ingredients[0].name == "Pilsen Malt"
    assert batch.recipe_snapshot.ingredients[0].quantity == 64
    assert batch.start_date == "2025-01-26T14:30:00"
    assert batch.end_date == "2025-02-09T14:30:00"


def test_returned_entries_are_copies(brewing_engine):
    rows = brewing_engine.history()
    rows.clear()
    assert len(brewing_engine.history()) == 1


def test_entry_ids_stay_unique_past_many_entries_per_millisecond(brewing_engine):
    brewing_engine.package_to_keg("T1", "K-001", 50)
    for n in range(40):
        brewing_engine.dispatch_keg("K-001", "Bar do Zé" if n % 2 else "Empório Central")
    ids = [h.id for h in brewing_engine.history()]
    assert len(ids) == 42
    assert len(set(ids)) == 42
