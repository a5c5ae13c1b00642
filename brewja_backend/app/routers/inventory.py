from __future__ import annotations
from typing import Any, Optional

from fastapi import APIRouter, Depends

from brewja_backend.app.deps import get_analyzer, get_engine
from brewja_backend.app.schemas import AnalysisOut, MaterialIn, MaterialPatch, RawMaterial
from brewja_backend.app.services.analysis import Analyzer, suggest_recipe
from brewja_backend.app.services.production import BreweryEngine

router = APIRouter(prefix="/inventory", tags=["inventory"])

# What it does:
# List raw-material stock.
@router.get("/materials", response_model=list[RawMaterial])
def list_materials(engine: BreweryEngine = Depends(get_engine)) -> list[RawMaterial]:
    return engine.list_materials()

# What it does:
# Receive a new material lot.
@router.post("/materials")
def receive_material(body: MaterialIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "material": engine.receive_material(body)}

# What it does:
# Correct a material record (quantity never below zero).
@router.patch("/materials/{material_id}")
def update_material(material_id: str, body: MaterialPatch, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "material": engine.update_material(material_id, body)}

# What it does:
# Delete a material record.
@router.delete("/materials/{material_id}")
def delete_material(material_id: str, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    engine.delete_material(material_id)
    return {"ok": True}

# What it does:
# Free-text recipe idea from the current stock (never changes state).
@router.get("/suggestion", response_model=AnalysisOut)
def suggestion(
    engine: BreweryEngine = Depends(get_engine),
    analyzer: Optional[Analyzer] = Depends(get_analyzer),
) -> AnalysisOut:
    return AnalysisOut(text=suggest_recipe(engine.inventory_summary(), analyzer))
