import pytest

from brewja_backend.app.schemas import IngredientLine, MaterialType, RawMaterial, Recipe
from brewja_backend.app.services.production import errors
from brewja_backend.app.services.production.inventory import (
    Requirement, check_requirements, reserve_and_deduct,
)


def _materials(**qty):
    return {
        mid: RawMaterial(id=mid, name=mid.title(), type=MaterialType.MALT, quantity=q, unit="kg")
        for mid, q in qty.items()
    }


def _recipe(lines, base_volume=100.0):
    return Recipe(id="r", name="Test", base_volume=base_volume,
                  ingredients=[IngredientLine(material_id=m, quantity=q) for m, q in lines])


def test_deduction_scales_with_brew_volume():
    mats = _materials(malt=64, wheat=10)
    used = reserve_and_deduct(_recipe([("malt", 8), ("wheat", 1)]), 800, mats)

    assert [(u.material_id, u.amount) for u in used] == [("malt", 64.0), ("wheat", 8.0)]
    assert mats["malt"].quantity == 0
    assert mats["wheat"].quantity == pytest.approx(2.0)


def test_custom_base_volume():
    mats = _materials(malt=100)
    reserve_and_deduct(_recipe([("malt", 20)], base_volume=500), 250, mats)
    assert mats["malt"].quantity == pytest.approx(90.0)


def test_later_shortfall_deducts_nothing():
    mats = _materials(malt=100, oats=1)
    with pytest.raises(errors.InsufficientStockError) as ei:
        reserve_and_deduct(_recipe([("malt", 10), ("oats", 5)]), 100, mats)

    assert ei.value.ref == "Oats"
    assert ei.value.required == pytest.approx(5.0)
    assert mats["malt"].quantity == 100
    assert mats["oats"].quantity == 1


def test_missing_material_is_not_found():
    mats = _materials(malt=100)
    with pytest.raises(errors.NotFoundError) as ei:
        reserve_and_deduct(_recipe([("malt", 1), ("ghost", 1)]), 100, mats)
    assert ei.value.kind == "material"
    assert mats["malt"].quantity == 100


def test_recipe_without_lines_is_a_noop():
    mats = _materials(malt=5)
    assert reserve_and_deduct(_recipe([]), 500, mats) == []
    assert reserve_and_deduct(None, 500, mats) == []
    assert mats["malt"].quantity == 5


def test_repeated_material_lines_are_checked_together():
    mats = _materials(malt=15)
    with pytest.raises(errors.InsufficientStockError):
        check_requirements(mats, [Requirement("malt", 10), Requirement("malt", 10)])
    assert mats["malt"].quantity == 15


def test_receive_update_delete_material(engine):
    mat = engine.receive_material({"name": "Safale US-05", "type": "YEAST", "quantity": 10, "unit": "pct",
                                   "generation": 2})
    assert mat.id.startswith("MAT-")
    assert mat.generation == 2

    updated = engine.update_material(mat.id, {"quantity": 4, "lot_number": "L-77"})
    assert updated.quantity == 4 and updated.lot_number == "L-77"

    with pytest.raises(errors.ValidationError):
        engine.update_material(mat.id, {"quantity": -1})
    assert engine.list_materials()[0].quantity == 4

    engine.delete_material(mat.id)
    assert engine.list_materials() == []
    with pytest.raises(errors.NotFoundError):
        engine.delete_material(mat.id)


def test_duplicate_material_id_rejected(engine):
    engine.receive_material({"id": "m1", "name": "Malt", "type": "MALT", "quantity": 1})
    with pytest.raises(errors.ValidationError):
        engine.receive_material({"id": "m1", "name": "Other", "type": "MALT", "quantity": 1})


def test_inventory_summary_lists_stock(stocked_engine):
    summary = stocked_engine.inventory_summary()
    assert "Pilsen Malt (MALT): 64kg" in summary
    assert "Citra (HOPS): 10000g" in summary


def test_malformed_payload_is_a_validation_error(engine):
    with pytest.raises(errors.ValidationError) as ei:
        engine.receive_material({"name": "Malt", "type": "MALT", "quantity": -5})
    assert ei.value.data["fields"] == ["quantity"]
    with pytest.raises(errors.ValidationError):
        engine.receive_material({"name": "Sugar", "type": "SUGAR"})
    assert engine.list_materials() == []


def test_update_material_rejects_null_required_fields(engine):
    engine.receive_material({"id": "m1", "name": "Malt", "type": "MALT", "quantity": 5})
    with pytest.raises(errors.ValidationError) as ei:
        engine.update_material("m1", {"type": None})
    assert ei.value.data["fields"] == ["type"]
    with pytest.raises(errors.ValidationError):
        engine.update_material("m1", {"unit": None})
    mat = engine.list_materials()[0]
    assert (mat.type.value, mat.unit) == ("MALT", "kg")
