from __future__ import annotations
import os
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from brewja_backend.app.config.policy import ProductionPolicy
from brewja_backend.app.services.data_stores import JsonCollectionStore
from brewja_backend.app.services.production import BreweryEngine


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, days: int = 0, seconds: int = 0) -> None:
        self.current = self.current + timedelta(days=days, seconds=seconds)


# --- Data tree override ------------------------------------------------------
@pytest.fixture(scope="session", autouse=True)
def tmp_data_tree(tmp_path_factory):
    tmp = tmp_path_factory.mktemp("data_tree")
    os.environ["DATA_DIR"] = str(tmp)
    return tmp

@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 26, 14, 30, 0))

@pytest.fixture
def policy():
    return ProductionPolicy()

@pytest.fixture
def engine(clock, policy):
    """In-memory engine: nothing is written to disk."""
    return BreweryEngine(store=None, policy=policy, clock=clock)

@pytest.fixture
def store(tmp_path):
    return JsonCollectionStore(tmp_path / "production")

@pytest.fixture
def stocked_engine(engine):
    """
    Tank T1 (FV-01, 1000L, empty), recipe IPA needing 8kg malt + 500g hops
    per 100L, with 64kg malt and 10kg hops in stock, and two empty 50L kegs.
    """
    engine.receive_material({"id": "malt-pils", "name": "Pilsen Malt", "type": "MALT", "quantity": 64, "unit": "kg"})
    engine.receive_material({"id": "hop-citra", "name": "Citra", "type": "HOPS", "quantity": 10000, "unit": "g",
                             "alpha_acid": 12.5})
    engine.add_recipe({
        "id": "rec-ipa", "name": "IPA", "style": "American IPA", "base_volume": 100,
        "og": 1.062, "fg": 1.012, "ibu": 60, "shelf_life": 45,
        "ingredients": [
            {"material_id": "malt-pils", "quantity": 8, "unit": "kg"},
            {"material_id": "hop-citra", "quantity": 500, "unit": "g"},
        ],
    })
    engine.create_tank({"id": "T1", "tank_id": "FV-01", "capacity": 1000})
    engine.create_keg("K-001", 50)
    engine.create_keg("K-002", 50)
    return engine

@pytest.fixture
def brewing_engine(stocked_engine):
    """stocked_engine with 800L of IPA fermenting in T1."""
    stocked_engine.start_batch("T1", "IPA", 800)
    return stocked_engine

# --- API client --------------------------------------------------------------
@pytest.fixture
def api_engine(tmp_path, clock, policy):
    return BreweryEngine(store=JsonCollectionStore(tmp_path / "api"), policy=policy, clock=clock)

@pytest.fixture
def client(api_engine):
    from brewja_backend.app.deps import get_engine
    from brewja_backend.app.main import app

    app.dependency_overrides[get_engine] = lambda: api_engine
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
