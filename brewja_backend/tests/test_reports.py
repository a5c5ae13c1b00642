from datetime import date, datetime

from brewja_backend.app.services import analysis
from brewja_backend.app.services.production import reports


def test_days_remaining():
    assert reports.days_remaining(None, 30, date(2025, 2, 1)) is None
    assert reports.days_remaining("2025-01-26", 30, date(2025, 2, 5)) == 20
    assert reports.days_remaining("2025-01-26", 5, date(2025, 2, 5)) == -5
    assert reports.days_elapsed("2025-01-26T14:30:00", date(2025, 2, 5)) == 10
    assert reports.days_elapsed("-", date(2025, 2, 5)) == 0


def test_keg_shelf_life_uses_recipe_shelf_life(brewing_engine, clock):
    brewing_engine.package_to_keg("T1", "K-001", 50)
    brewing_engine.package_to_keg("T1", "K-002", 50)
    brewing_engine.dispatch_keg("K-001", "Bar do Zé")

    clock.advance(days=50)
    rows = {r["keg_id"]: r for r in brewing_engine.keg_shelf_life()}
    assert rows["K-001"]["shelf_life"] == 45
    assert rows["K-001"]["days_left"] == -5
    assert rows["K-001"]["expired"] is True
    assert rows["K-002"]["days_left"] is None
    assert rows["K-002"]["expired"] is False


def test_stock_by_style_and_keg_summary(brewing_engine):
    brewing_engine.package_to_keg("T1", "K-001", 50)
    brewing_engine.package_to_keg("T1", "K-002", 50)
    brewing_engine.package_to_bottles("T1", 10, 0.6, "LABEL")
    brewing_engine.dispatch_keg("K-002", "Bar do Zé")

    dash = brewing_engine.dashboard()
    [ipa] = dash["stock_by_style"]
    assert ipa["recipe_name"] == "IPA"
    assert ipa["tank_volume"] == 694
    assert ipa["keg_volume"] == 100
    assert ipa["bottle_count"] == 10
    assert ipa["total_volume"] == 800

    [row] = dash["keg_summary"]
    assert (row["total"], row["in_house"], row["away"]) == (2, 1, 1)

    assert dash["kegs"] == {"total": 2, "full": 2, "empty": 0, "at_client": 1}
    assert dash["tanks"] == {"total": 1, "active": 1, "volume": 694, "capacity": 1000}
    assert dash["bottles"]["count"] == 10


def test_inventory_summary(stocked_engine):
    assert stocked_engine.inventory_summary() == "Pilsen Malt (MALT): 64kg; Citra (HOPS): 10000g"


def test_analysis_without_analyzer(brewing_engine):
    tank = brewing_engine.get_tank("T1")
    assert analysis.analyze_fermentation(tank, None) == analysis.ANALYSIS_UNAVAILABLE
    assert analysis.suggest_recipe("malt", None) == analysis.SUGGESTION_UNAVAILABLE


def test_analysis_with_stub_analyzer(brewing_engine):
    brewing_engine.update_field("T1", "current_gravity", 1.020)
    tank = brewing_engine.get_tank("T1")
    prompts = []

    def analyzer(prompt):
        prompts.append(prompt)
        return "Healthy fermentation."

    text = analysis.analyze_fermentation(tank, analyzer, datetime(2025, 2, 2))
    assert text == "Healthy fermentation."
    assert "Recipe: IPA" in prompts[0]
    assert "approx 7 days" in prompts[0]

    snap = analysis.fermentation_snapshot(tank, datetime(2025, 2, 2))
    assert snap["current_abv"] == 5.5
    assert brewing_engine.get_tank("T1") == tank


def test_analysis_failure_is_placeholder(brewing_engine):
    def broken(prompt):
        raise RuntimeError("service down")

    tank = brewing_engine.get_tank("T1")
    assert analysis.analyze_fermentation(tank, broken) == analysis.ANALYSIS_FAILED
    assert analysis.suggest_recipe("malt", broken) == analysis.SUGGESTION_FAILED
