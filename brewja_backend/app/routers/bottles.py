from __future__ import annotations
from typing import Any

from fastapi import APIRouter, Depends

from brewja_backend.app.deps import get_engine
from brewja_backend.app.schemas import BottleLot, SaleIn
from brewja_backend.app.services.production import BreweryEngine

router = APIRouter(prefix="/bottles", tags=["bottles"])

# What it does:
# Bottle stock, optionally filtered by recipe or label text.
@router.get("/", response_model=list[BottleLot])
def list_lots(q: str = "", engine: BreweryEngine = Depends(get_engine)) -> list[BottleLot]:
    return engine.list_bottle_lots(q)

# What it does:
# Register a bottle sale.
@router.post("/sales")
def sell(body: SaleIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    lot = engine.sell_bottles(body.recipe_name, body.label_name, body.count, body.volume_per_bottle)
    return {"ok": True, "lot": lot}
