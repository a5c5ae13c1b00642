from __future__ import annotations
from typing import Any, Optional

from fastapi import APIRouter, Depends

from brewja_backend.app.deps import get_analyzer, get_engine
from brewja_backend.app.schemas import (
    AnalysisOut, FieldUpdateIn, PackageBottlesIn, PackageKegIn, QualityControl,
    StartBatchIn, StatusIn, Tank, TankEquipmentIn, TankIn,
)
from brewja_backend.app.services.analysis import Analyzer, analyze_fermentation, fermentation_snapshot
from brewja_backend.app.services.production import BreweryEngine

router = APIRouter(prefix="/tanks", tags=["production"])

# What it does:
# List every fermenter with its current batch.
@router.get("/", response_model=list[Tank])
def list_tanks(engine: BreweryEngine = Depends(get_engine)) -> list[Tank]:
    return engine.list_tanks()

# What it does:
# Read one tank by internal id or display code.
@router.get("/{tank_ref}", response_model=Tank)
def get_tank(tank_ref: str, engine: BreweryEngine = Depends(get_engine)) -> Tank:
    return engine.get_tank(tank_ref)

# What it does:
# Register a new (empty) fermenter.
@router.post("/")
def create_tank(body: TankIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "tank": engine.create_tank(body)}

# What it does:
# Rename and/or resize a tank.
@router.patch("/{tank_ref}")
def update_tank(tank_ref: str, body: TankEquipmentIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "tank": engine.update_tank_equipment(tank_ref, body.tank_id, body.capacity)}

# What it does:
# Remove an empty tank.
@router.delete("/{tank_ref}")
def delete_tank(tank_ref: str, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    engine.delete_tank(tank_ref)
    return {"ok": True}

# What it does:
# Brew into an empty tank, deducting recipe ingredients from stock.
@router.post("/{tank_ref}/batch")
def start_batch(tank_ref: str, body: StartBatchIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "tank": engine.start_batch(tank_ref, body.recipe_name, body.volume)}

# What it does:
# Operator status override (Fermenting / Conditioning / Packaging).
@router.post("/{tank_ref}/status")
def set_status(tank_ref: str, body: StatusIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "tank": engine.set_status(tank_ref, body.status)}

# What it does:
# Edit a telemetry field (gravity, temperature, pH, recipe name).
@router.post("/{tank_ref}/fields")
def update_field(tank_ref: str, body: FieldUpdateIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "tank": engine.update_field(tank_ref, body.field, body.value)}

# What it does:
# Attach quality-control results to the running batch.
@router.post("/{tank_ref}/quality")
def record_quality(tank_ref: str, body: QualityControl, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "tank": engine.record_quality_control(tank_ref, body)}

# What it does:
# Close the batch (FINISH history with snapshot) and reset the tank.
@router.post("/{tank_ref}/finalize")
def finalize_batch(tank_ref: str, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "tank": engine.finalize_batch(tank_ref)}

# What it does:
# Fill an empty keg from the tank.
@router.post("/{tank_ref}/kegs")
def package_to_keg(tank_ref: str, body: PackageKegIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    keg = engine.package_to_keg(tank_ref, body.keg_id, body.volume)
    return {"ok": True, "keg": keg, "tank": engine.get_tank(tank_ref)}

# What it does:
# Bottle from the tank into the matching bottle lot.
@router.post("/{tank_ref}/bottles")
def package_to_bottles(tank_ref: str, body: PackageBottlesIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    lot = engine.package_to_bottles(tank_ref, body.count, body.volume_per_bottle, body.label_name)
    return {"ok": True, "lot": lot, "tank": engine.get_tank(tank_ref)}

# What it does:
# Free-text commentary on the fermentation (never changes state).
@router.get("/{tank_ref}/analysis", response_model=AnalysisOut)
def analysis(
    tank_ref: str,
    engine: BreweryEngine = Depends(get_engine),
    analyzer: Optional[Analyzer] = Depends(get_analyzer),
) -> AnalysisOut:
    tank = engine.get_tank(tank_ref)
    now = engine.ctx.now()
    return AnalysisOut(text=analyze_fermentation(tank, analyzer, now), snapshot=fermentation_snapshot(tank, now))
