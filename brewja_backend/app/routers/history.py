from __future__ import annotations
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from brewja_backend.app.deps import get_engine
from brewja_backend.app.schemas import ActionType, HistoryEntry
from brewja_backend.app.services.production import BreweryEngine

router = APIRouter(prefix="/history", tags=["history"])

_MONTH = Query(default=None, pattern=r"^\d{4}-\d{2}$")

# What it does:
# Production history, newest first.
@router.get("/", response_model=list[HistoryEntry])
def list_history(
    month: Optional[str] = _MONTH,
    action_type: Optional[ActionType] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=2000),
    engine: BreweryEngine = Depends(get_engine),
) -> list[HistoryEntry]:
    return engine.history(month, action_type, limit)

# What it does:
# FINISH entries with their batch snapshots (batch reports).
@router.get("/batches", response_model=list[HistoryEntry])
def finished_batches(month: Optional[str] = _MONTH, engine: BreweryEngine = Depends(get_engine)) -> list[HistoryEntry]:
    return engine.finished_batches(month)

# What it does:
# Volume moved per action type.
@router.get("/totals")
def totals(month: Optional[str] = _MONTH, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"month": month, "totals": engine.monthly_totals(month)}
