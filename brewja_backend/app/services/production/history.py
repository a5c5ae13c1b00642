# brewja_backend/app/services/production/history.py
"""
Append-only production history.

Entries are frozen models prepended to `state.history` (newest first). There is
no update or delete path; FINISH entries carry a deep snapshot of the batch so
later edits to materials or recipes never change a historical record.
"""
from __future__ import annotations

from typing import List, Optional

from brewja_backend.app.schemas import (
    ActionType, BatchData, HistoryEntry, QualityControl, RecipeSnapshot, SnapshotIngredient, Tank,
)
from .state import ProductionState, TransitionContext

def _entry_id(state: ProductionState, ctx: TransitionContext) -> str:
    """Millisecond timestamp, suffixed "-n" when that millisecond is already taken."""
    base = str(int(ctx.now().timestamp() * 1000))
    taken = {h.id for h in state.history if h.id.split("-", 1)[0] == base}
    eid, n = base, 1
    while eid in taken:
        eid = f"{base}-{n}"
        n += 1
    return eid


def record(
    state: ProductionState,
    ctx: TransitionContext,
    action_type: ActionType,
    ref: str,
    recipe_name: str,
    volume_changed: float,
    details: str,
    batch_data: Optional[BatchData] = None,
) -> HistoryEntry:
    now = ctx.now()
    entry = HistoryEntry(
        id=_entry_id(state, ctx),
        date=now.strftime(ctx.policy.history_date_format),
        recorded_at=now.isoformat(timespec="seconds"),
        action_type=action_type,
        tank_id=ref or "N/A",
        recipe_name=recipe_name or "N/A",
        volume_changed=volume_changed,
        details=details,
        batch_data=batch_data.model_copy(deep=True) if batch_data is not None else None,
    )
    state.history.insert(0, entry)
    return entry


def build_batch_data(state: ProductionState, ctx: TransitionContext, tank: Tank) -> BatchData:
    """
    Snapshot of the batch in `tank` for its FINISH entry. Ingredient amounts
    are what was consumed at brew time; names/units/types are resolved from the
    current material records, best effort.
    """
    recipe = state.recipe_by_name(tank.recipe_name)
    ingredients: List[SnapshotIngredient] = []
    for used in tank.ingredients:
        mat = state.materials.get(used.material_id)
        ingredients.append(SnapshotIngredient(
            name=mat.name if mat else "Unknown",
            quantity=used.amount,
            unit=mat.unit if mat else "",
            type=mat.type.value if mat else "N/A",
        ))
    qc: Optional[QualityControl] = tank.quality_control.model_copy(deep=True) if tank.quality_control else None
    return BatchData(
        batch_id=tank.batch_id,
        start_date=tank.brew_date,
        end_date=ctx.now_iso(),
        tank_id=tank.tank_id,
        recipe_snapshot=RecipeSnapshot(
            name=tank.recipe_name,
            style=recipe.style if recipe and recipe.style else "N/A",
            ingredients=ingredients,
        ),
        quality_control=qc,
    )


__all__ = ["record", "build_batch_data"]
