from __future__ import annotations
from typing import Any

from fastapi import APIRouter, Depends

from brewja_backend.app.deps import get_engine
from brewja_backend.app.services.production import BreweryEngine

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

# What it does:
# Overview: tank occupancy, keg fleet, bottle stock, stock per style, expiring kegs.
@router.get("/")
def overview(engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return engine.dashboard()
