# brewja_backend/app/services/production/bottles.py
from __future__ import annotations

from typing import List, Optional

from brewja_backend.app.schemas import ActionType, BottleLot
from . import history
from .errors import InsufficientBottleStockError, LotNotFoundError, ValidationError
from .state import ProductionState, TransitionContext, round_qty


def find_lots(state: ProductionState, recipe_name: str, label_name: str) -> List[BottleLot]:
    return [b for b in state.bottles.values() if b.recipe_name == recipe_name and b.label_name == label_name]


def search_lots(state: ProductionState, term: str = "") -> List[BottleLot]:
    t = (term or "").strip().lower()
    if not t:
        return list(state.bottles.values())
    return [b for b in state.bottles.values() if t in b.recipe_name.lower() or t in b.label_name.lower()]


def sell_bottles(
    state: ProductionState,
    ctx: TransitionContext,
    recipe_name: str,
    label_name: str,
    count: int,
    volume_per_bottle: Optional[float] = None,
) -> Optional[BottleLot]:
    """
    Sell `count` bottles from the lot matching (recipe, label[, size]).
    Returns the remaining lot, or None when the sale emptied it.
    """
    if count is None or int(count) != count or count <= 0:
        raise ValidationError("sale count must be a positive whole number", count=count)
    count = int(count)

    lots = find_lots(state, recipe_name, label_name)
    if volume_per_bottle is not None:
        lots = [b for b in lots if b.volume_per_bottle == volume_per_bottle]
    if not lots:
        raise LotNotFoundError(recipe_name, label_name)
    if len(lots) > 1:
        sizes = ", ".join(f"{b.volume_per_bottle:g}L" for b in lots)
        raise ValidationError(f"{recipe_name} / {label_name} is stocked in several sizes ({sizes}); choose one",
                              recipe_name=recipe_name, label_name=label_name)

    lot = lots[0]
    if count > lot.count:
        raise InsufficientBottleStockError(f"{recipe_name} / {label_name}", count, lot.count)

    lot.count -= count
    volume = round_qty(count * lot.volume_per_bottle)
    remaining: Optional[BottleLot] = lot
    if lot.count == 0:
        del state.bottles[lot.key]
        remaining = None

    history.record(state, ctx, ActionType.SALE, "Bottle", recipe_name, -volume,
                   f"Venda de {count} garrafas de {label_name or recipe_name}")
    return remaining


__all__ = ["find_lots", "search_lots", "sell_bottles"]
