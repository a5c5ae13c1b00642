import pytest

from brewja_backend.app.schemas import ActionType, KegStatus
from brewja_backend.app.services.production import errors


@pytest.fixture
def full_keg(brewing_engine):
    brewing_engine.package_to_keg("T1", "K-001", 50)
    return brewing_engine


def test_create_keg_normalizes_id(engine):
    keg = engine.create_keg("  k-100 ", 30)
    assert keg.id == "K-100"
    assert keg.status == KegStatus.EMPTY
    assert keg.customer == "Fábrica"
    with pytest.raises(errors.DuplicateKegIdError):
        engine.create_keg("K-100", 50)
    with pytest.raises(errors.ValidationError):
        engine.create_keg("", 50)
    with pytest.raises(errors.ValidationError):
        engine.create_keg("K-101", 0)
    assert [k.id for k in engine.list_kegs()] == ["K-100"]


def test_dispatch_to_customer_stamps_date_once(full_keg, clock):
    keg = full_keg.dispatch_keg("K-001", "Bar do Zé")
    assert keg.status == KegStatus.RETAIL
    assert keg.customer == "Bar do Zé"
    assert keg.dispatch_date == "2025-01-26"
    assert keg.location_history[-1] == "Bar do Zé"

    clock.advance(days=3)
    keg = full_keg.dispatch_keg("K-001", "Empório Central")
    assert keg.dispatch_date == "2025-01-26"
    assert keg.location_history == ["Envasado na Fábrica", "Bar do Zé", "Empório Central"]

    entry = full_keg.history()[0]
    assert entry.action_type == ActionType.DISPATCH
    assert entry.tank_id == "K-001"
    assert entry.volume_changed == 50


def test_dispatch_within_factory_stays_in_house(full_keg):
    keg = full_keg.dispatch_keg("K-001", "Câmara Fria - Fábrica")
    assert keg.status == KegStatus.IN_HOUSE
    assert keg.dispatch_date is None
    keg = full_keg.dispatch_keg("K-001", "ESTOQUE 2")
    assert keg.status == KegStatus.IN_HOUSE
    with pytest.raises(errors.ValidationError):
        full_keg.dispatch_keg("K-001", "   ")


def test_partial_return(full_keg):
    full_keg.dispatch_keg("K-001", "Bar do Zé")
    keg = full_keg.return_keg("K-001", 12.5)

    assert keg.status == KegStatus.IN_HOUSE
    assert keg.volume == 12.5
    assert keg.customer == "Fábrica"
    assert keg.recipe_name == "IPA"
    assert keg.dispatch_date == "2025-01-26"
    assert keg.location_history[-1] == "Retorno Parcial (12.5L): Bar do Zé -> Fábrica"

    entry = full_keg.history()[0]
    assert entry.action_type == ActionType.RETURN
    assert entry.volume_changed == 37.5


def test_empty_return_clears_keg(full_keg):
    full_keg.dispatch_keg("K-001", "Bar do Zé")
    keg = full_keg.return_keg("K-001")

    assert keg.status == KegStatus.EMPTY
    assert keg.volume == 0
    assert keg.recipe_name == ""
    assert keg.batch_id == ""
    assert keg.fill_date == "-"
    assert keg.dispatch_date is None
    assert keg.location_history[-1] == "Retorno Vazio: Bar do Zé -> Fábrica"

    entry = full_keg.history()[0]
    assert entry.volume_changed == 50
    assert entry.recipe_name == "IPA"

    # the keg can be filled again
    assert full_keg.package_to_keg("T1", "K-001", 40).volume == 40


def test_return_cannot_add_beer(full_keg):
    with pytest.raises(errors.ValidationError):
        full_keg.return_keg("K-001", 51)
    with pytest.raises(errors.ValidationError):
        full_keg.return_keg("K-001", -1)
    assert full_keg.get_keg("K-001").volume == 50


def test_bottle_from_keg_partial(full_keg):
    lot = full_keg.bottle_from_keg("K-001", 20, 0.6, "Growler")
    assert lot.count == 20
    assert lot.recipe_name == "IPA"
    keg = full_keg.get_keg("K-001")
    assert keg.volume == pytest.approx(38.0)
    assert keg.status == KegStatus.IN_HOUSE

    entry = full_keg.history()[0]
    assert entry.action_type == ActionType.BOTTLE
    assert entry.tank_id == "K-001"
    assert entry.volume_changed == pytest.approx(12.0)


def test_bottle_from_keg_treats_dregs_as_empty(full_keg):
    full_keg.dispatch_keg("K-001", "Bar do Zé")
    # 49.8L bottled leaves 0.2L, above the empty threshold
    full_keg.bottle_from_keg("K-001", 83, 0.6, "Growler")
    assert full_keg.get_keg("K-001").volume == pytest.approx(0.2)

    full_keg.return_keg("K-001", 0.2)
    keg = full_keg.get_keg("K-001")
    with pytest.raises(errors.InsufficientKegVolumeError):
        full_keg.bottle_from_keg("K-001", 1, 0.6, "Growler")
    assert keg.volume == pytest.approx(0.2)


def test_bottle_from_keg_below_epsilon(brewing_engine):
    brewing_engine.package_to_keg("T1", "K-002", 50)
    brewing_engine.dispatch_keg("K-002", "Bar do Zé")
    brewing_engine.bottle_from_keg("K-002", 99, 0.505, "Small")

    keg = brewing_engine.get_keg("K-002")
    assert keg.status == KegStatus.EMPTY
    assert keg.volume == 0
    assert keg.recipe_name == ""
    assert keg.dispatch_date == "2025-01-26"


def test_bottle_from_empty_keg(stocked_engine):
    with pytest.raises(errors.InsufficientKegVolumeError):
        stocked_engine.bottle_from_keg("K-001", 1, 0.6, "Growler")
    assert stocked_engine.list_bottle_lots() == []


def test_update_keg_rename_keeps_order(stocked_engine):
    stocked_engine.create_keg("K-003", 30)
    keg = stocked_engine.update_keg("K-002", new_id="k-020", capacity=60)
    assert keg.id == "K-020"
    assert keg.capacity == 60
    assert [k.id for k in stocked_engine.list_kegs()] == ["K-001", "K-020", "K-003"]
    with pytest.raises(errors.DuplicateKegIdError):
        stocked_engine.update_keg("K-020", new_id="K-001")
    with pytest.raises(errors.NotFoundError):
        stocked_engine.get_keg("K-002")


def test_update_keg_capacity_below_contents(full_keg):
    with pytest.raises(errors.CapacityExceededError):
        full_keg.update_keg("K-001", capacity=30)


def test_delete_keg(full_keg):
    with pytest.raises(errors.KegNotAvailableError):
        full_keg.delete_keg("K-001")
    full_keg.delete_keg("k-002")
    assert [k.id for k in full_keg.list_kegs()] == ["K-001"]


def test_list_kegs_by_status(full_keg):
    assert [k.id for k in full_keg.list_kegs("In-House")] == ["K-001"]
    assert [k.id for k in full_keg.list_kegs("Empty")] == ["K-002"]


def test_empty_keg_cannot_leave_the_factory(stocked_engine):
    with pytest.raises(errors.ValidationError):
        stocked_engine.dispatch_keg("K-001", "Bar do Zé")
    keg = stocked_engine.get_keg("K-001")
    assert keg.status == KegStatus.EMPTY
    assert keg.dispatch_date is None
    assert stocked_engine.history() == []

    keg = stocked_engine.dispatch_keg("K-001", "Estoque 2")
    assert keg.status == KegStatus.EMPTY
    assert keg.customer == "Estoque 2"
    assert keg.dispatch_date is None
    assert stocked_engine.keg_shelf_life() == []


def test_dispatch_date_kept_when_keg_comes_back_in_house(full_keg, clock):
    full_keg.dispatch_keg("K-001", "Bar do Zé")
    clock.advance(days=2)
    keg = full_keg.dispatch_keg("K-001", "Fábrica")
    assert keg.status == KegStatus.IN_HOUSE
    assert keg.dispatch_date == "2025-01-26"

    clock.advance(days=5)
    keg = full_keg.dispatch_keg("K-001", "Empório Central")
    assert keg.status == KegStatus.RETAIL
    assert keg.dispatch_date == "2025-01-26"
