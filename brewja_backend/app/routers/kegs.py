from __future__ import annotations
from typing import Any, Optional

from fastapi import APIRouter, Depends

from brewja_backend.app.deps import get_engine
from brewja_backend.app.schemas import BottleFromKegIn, DispatchIn, Keg, KegIn, KegUpdateIn, ReturnIn
from brewja_backend.app.services.production import BreweryEngine

router = APIRouter(prefix="/kegs", tags=["kegs"])

# What it does:
# List the keg fleet, optionally by status.
@router.get("/", response_model=list[Keg])
def list_kegs(status: Optional[str] = None, engine: BreweryEngine = Depends(get_engine)) -> list[Keg]:
    return engine.list_kegs(status)

# What it does:
# Shelf-life countdown for every full keg.
@router.get("/shelf-life")
def shelf_life(engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"items": engine.keg_shelf_life()}

# What it does:
# Read one keg by id.
@router.get("/{keg_id}", response_model=Keg)
def get_keg(keg_id: str, engine: BreweryEngine = Depends(get_engine)) -> Keg:
    return engine.get_keg(keg_id)

# What it does:
# Register a keg; ids are unique across the fleet.
@router.post("/")
def create_keg(body: KegIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "keg": engine.create_keg(body.id, body.capacity)}

# What it does:
# Rename a keg or change its capacity.
@router.patch("/{keg_id}")
def update_keg(keg_id: str, body: KegUpdateIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "keg": engine.update_keg(keg_id, body.id, body.capacity)}

# What it does:
# Remove an empty keg from the fleet.
@router.delete("/{keg_id}")
def delete_keg(keg_id: str, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    engine.delete_keg(keg_id)
    return {"ok": True}

# What it does:
# Move a keg to a customer or back to stock.
@router.post("/{keg_id}/dispatch")
def dispatch_keg(keg_id: str, body: DispatchIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "keg": engine.dispatch_keg(keg_id, body.location)}

# What it does:
# Keg comes back, empty or with leftover beer.
@router.post("/{keg_id}/return")
def return_keg(keg_id: str, body: ReturnIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "keg": engine.return_keg(keg_id, body.remaining_volume)}

# What it does:
# Bottle beer out of a keg.
@router.post("/{keg_id}/bottles")
def bottle_from_keg(keg_id: str, body: BottleFromKegIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    lot = engine.bottle_from_keg(keg_id, body.count, body.volume_per_bottle, body.label_name)
    return {"ok": True, "lot": lot, "keg": engine.get_keg(keg_id)}
