# brewja_backend/app/services/production/reports.py
"""Pure read-side derivations over the production ledgers."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from brewja_backend.app.schemas import ActionType, HistoryEntry, KegStatus, TankStatus
from .state import ProductionState, round_qty


def _parse_day(value: Optional[str]) -> Optional[date]:
    if not value or value == "-":
        return None
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def days_elapsed(start: Optional[str], today: date) -> int:
    """Calendar days since `start` (ISO); 0 when unset."""
    d = _parse_day(start)
    if d is None:
        return 0
    return abs((today - d).days)


def days_remaining(dispatch_date: Optional[str], shelf_life: int, today: date) -> Optional[int]:
    """Days of shelf life left after dispatch; None while the keg has not left."""
    d = _parse_day(dispatch_date)
    if d is None:
        return None
    return (d - today).days + shelf_life


def style_stock(state: ProductionState, recipe_name: str) -> Dict[str, Any]:
    tanks = [t for t in state.tanks.values() if t.recipe_name == recipe_name and t.status != TankStatus.EMPTY]
    kegs = [k for k in state.kegs.values() if k.recipe_name == recipe_name and k.status != KegStatus.EMPTY]
    lots = [b for b in state.bottles.values() if b.recipe_name == recipe_name]
    tank_vol = sum(t.volume for t in tanks)
    keg_vol = sum(k.volume for k in kegs)
    bottle_vol = sum(b.total_volume for b in lots)
    return {
        "recipe_name": recipe_name,
        "tank_count": len(tanks),
        "keg_count": len(kegs),
        "tank_volume": round_qty(tank_vol),
        "keg_volume": round_qty(keg_vol),
        "bottle_count": sum(b.count for b in lots),
        "bottle_volume": round_qty(bottle_vol),
        "total_volume": round_qty(tank_vol + keg_vol + bottle_vol),
    }


def stock_by_style(state: ProductionState) -> List[Dict[str, Any]]:
    """One row per recipe holding any beer, in recipe order."""
    rows = [style_stock(state, r.name) for r in state.recipes.values()]
    return [r for r in rows if r["total_volume"] > 0]


def keg_summary(state: ProductionState) -> List[Dict[str, Any]]:
    """Full kegs grouped by (recipe, volume), with how many are home or away."""
    groups: Dict[tuple, Dict[str, Any]] = {}
    for keg in state.kegs.values():
        if keg.status in (KegStatus.EMPTY, KegStatus.CLEANING):
            continue
        key = (keg.recipe_name, keg.volume)
        row = groups.setdefault(key, {
            "recipe_name": keg.recipe_name, "volume": keg.volume, "total": 0, "in_house": 0, "away": 0,
        })
        row["total"] += 1
        if keg.status == KegStatus.IN_HOUSE:
            row["in_house"] += 1
        elif keg.status in (KegStatus.RETAIL, KegStatus.DISTRIBUTOR):
            row["away"] += 1
    return sorted(groups.values(), key=lambda r: (r["recipe_name"].lower(), r["volume"]))


def keg_fleet_stats(state: ProductionState) -> Dict[str, int]:
    kegs = list(state.kegs.values())
    return {
        "total": len(kegs),
        "full": sum(1 for k in kegs if k.volume > 0 and k.status != KegStatus.EMPTY),
        "empty": sum(1 for k in kegs if k.volume == 0 or k.status == KegStatus.EMPTY),
        "at_client": sum(1 for k in kegs if k.status == KegStatus.RETAIL),
    }


def keg_shelf_life(state: ProductionState, today: date, default_shelf_life: int = 30) -> List[Dict[str, Any]]:
    """Remaining shelf life of every full keg; `expired` once days_left < 0."""
    out: List[Dict[str, Any]] = []
    for keg in state.kegs.values():
        if keg.status == KegStatus.EMPTY:
            continue
        recipe = state.recipe_by_name(keg.recipe_name)
        shelf = recipe.shelf_life if recipe else default_shelf_life
        left = days_remaining(keg.dispatch_date, shelf, today)
        out.append({
            "keg_id": keg.id,
            "recipe_name": keg.recipe_name,
            "customer": keg.customer,
            "dispatch_date": keg.dispatch_date,
            "shelf_life": shelf,
            "days_left": left,
            "expired": left is not None and left < 0,
        })
    return out


def _entry_month(entry: HistoryEntry) -> Optional[str]:
    if entry.recorded_at:
        return entry.recorded_at[:7]
    # older entries only carry the display date "DD/MM/YYYY, HH:MM:SS"
    parts = entry.date.split(",")[0].strip().split(" ")[0].split("/")
    if len(parts) != 3:
        return None
    return f"{parts[2]}-{parts[1]}"


def filter_history(
    state: ProductionState,
    month: Optional[str] = None,
    action_type: Optional[ActionType] = None,
    limit: Optional[int] = None,
) -> List[HistoryEntry]:
    """Newest-first entries, optionally for one month ("YYYY-MM") and/or action type."""
    rows = state.history
    if month:
        rows = [h for h in rows if _entry_month(h) == month]
    if action_type is not None:
        rows = [h for h in rows if h.action_type == ActionType(action_type)]
    if limit is not None:
        rows = rows[: max(0, limit)]
    return list(rows)


def finished_batches(state: ProductionState, month: Optional[str] = None) -> List[HistoryEntry]:
    return [h for h in filter_history(state, month, ActionType.FINISH) if h.batch_data is not None]


def monthly_totals(state: ProductionState, month: Optional[str] = None) -> Dict[str, float]:
    """Signed volume moved per action type."""
    totals: Dict[str, float] = {a.value: 0.0 for a in ActionType}
    for h in filter_history(state, month):
        totals[h.action_type.value] = round_qty(totals[h.action_type.value] + h.volume_changed)
    return totals


def dashboard(state: ProductionState, today: date, default_shelf_life: int = 30) -> Dict[str, Any]:
    tanks = list(state.tanks.values())
    return {
        "tanks": {
            "total": len(tanks),
            "active": sum(1 for t in tanks if t.status != TankStatus.EMPTY),
            "volume": round_qty(sum(t.volume for t in tanks)),
            "capacity": round_qty(sum(t.capacity for t in tanks)),
        },
        "kegs": keg_fleet_stats(state),
        "bottles": {
            "lots": len(state.bottles),
            "count": sum(b.count for b in state.bottles.values()),
            "volume": round_qty(sum(b.total_volume for b in state.bottles.values())),
        },
        "stock_by_style": stock_by_style(state),
        "keg_summary": keg_summary(state),
        "expiring_kegs": [
            row for row in keg_shelf_life(state, today, default_shelf_life)
            if row["days_left"] is not None and row["days_left"] < 7
        ],
    }


__all__ = [
    "days_elapsed",
    "days_remaining",
    "style_stock",
    "stock_by_style",
    "keg_summary",
    "keg_fleet_stats",
    "keg_shelf_life",
    "filter_history",
    "finished_batches",
    "monthly_totals",
    "dashboard",
]
