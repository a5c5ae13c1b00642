# brewja_backend/app/services/production/kegs.py
from __future__ import annotations

from typing import Optional, Tuple

from brewja_backend.app.schemas import ActionType, BottleLot, Keg, KegStatus
from . import history
from .errors import (
    CapacityExceededError, DuplicateKegIdError, InsufficientKegVolumeError, KegNotAvailableError, ValidationError,
)
from .packaging import add_bottles, validate_bottling
from .state import ProductionState, TransitionContext, round_qty


def _normalize_id(keg_id: str) -> str:
    kid = (keg_id or "").strip().upper()
    if not kid:
        raise ValidationError("keg id is required")
    return kid


def _clear_contents(keg: Keg, ctx: TransitionContext) -> None:
    keg.status = KegStatus.EMPTY
    keg.volume = 0.0
    keg.recipe_name = ""
    keg.batch_id = ""
    keg.fill_date = "-"
    keg.customer = ctx.policy.factory_location


# ---------------------------------------------------------------------------
# Fleet management
# ---------------------------------------------------------------------------

def create_keg(state: ProductionState, ctx: TransitionContext, keg_id: str, capacity: float) -> Keg:
    kid = _normalize_id(keg_id)
    if capacity is None or capacity <= 0:
        raise ValidationError("keg capacity must be positive", capacity=capacity)
    if kid in state.kegs:
        raise DuplicateKegIdError(kid)
    keg = Keg(id=kid, capacity=float(capacity), customer=ctx.policy.factory_location)
    state.kegs[kid] = keg
    return keg


def update_keg(state: ProductionState, keg_id: str, new_id: Optional[str] = None, capacity: Optional[float] = None) -> Keg:
    keg = state.get_keg(keg_id)
    if capacity is not None:
        if capacity <= 0:
            raise ValidationError("keg capacity must be positive", capacity=capacity)
        if capacity < keg.volume:
            raise CapacityExceededError(f"keg {keg.id}", keg.volume, capacity)
    target = keg.id if new_id is None else _normalize_id(new_id)
    if target != keg.id and target in state.kegs:
        raise DuplicateKegIdError(target)

    if capacity is not None:
        keg.capacity = float(capacity)
    if target != keg.id:
        # rebuild the dict so the keg keeps its position in the fleet order
        state.kegs = {(target if k == keg.id else k): v for k, v in state.kegs.items()}
        keg.id = target
    return keg


def delete_keg(state: ProductionState, keg_id: str) -> Keg:
    keg = state.get_keg(keg_id)
    if keg.status != KegStatus.EMPTY or keg.volume > 0:
        raise KegNotAvailableError(keg.id, keg.status.value)
    del state.kegs[keg.id]
    return keg


# ---------------------------------------------------------------------------
# Movements
# ---------------------------------------------------------------------------

def dispatch_keg(state: ProductionState, ctx: TransitionContext, keg_id: str, location: str) -> Keg:
    keg = state.get_keg(keg_id)
    dest = (location or "").strip()
    if not dest:
        raise ValidationError("destination is required", keg_id=keg.id)

    leaving = not ctx.policy.is_in_house(dest)
    empty = keg.status == KegStatus.EMPTY or keg.volume <= 0
    if empty and leaving:
        raise ValidationError(f"keg {keg.id} is empty; fill it before sending it to {dest}",
                              keg_id=keg.id, location=dest)
    keg.customer = dest
    if not empty:
        keg.status = KegStatus.RETAIL if leaving else KegStatus.IN_HOUSE
    if leaving and not keg.dispatch_date:
        keg.dispatch_date = ctx.today()
    keg.location_history.append(dest)

    history.record(state, ctx, ActionType.DISPATCH, keg.id, keg.recipe_name, keg.volume,
                   f"Barril {keg.id} movido para {dest}")
    return keg


def return_keg(state: ProductionState, ctx: TransitionContext, keg_id: str, remaining_volume: float = 0.0) -> Keg:
    keg = state.get_keg(keg_id)
    remaining = float(remaining_volume or 0.0)
    if remaining < 0:
        raise ValidationError("remaining volume cannot be negative", remaining_volume=remaining)
    if remaining > keg.volume:
        raise ValidationError(
            f"keg {keg.id} cannot come back with {remaining:g}L, it left with {keg.volume:g}L",
            keg_id=keg.id, remaining_volume=remaining,
        )

    p = ctx.policy
    previous_location = keg.customer or p.unknown_location
    previous_volume = keg.volume
    recipe_name = keg.recipe_name

    if remaining > 0:
        keg.status = KegStatus.IN_HOUSE
        keg.volume = round_qty(remaining)
        keg.customer = p.factory_location
        keg.location_history.append(f"Retorno Parcial ({remaining:g}L): {previous_location} -> {p.factory_location}")
        consumed = round_qty(previous_volume - remaining)
        details = f"Barril {keg.id} retornou com {remaining:g}L de sobra de {previous_location}"
    else:
        _clear_contents(keg, ctx)
        keg.dispatch_date = None
        keg.location_history.append(f"Retorno Vazio: {previous_location} -> {p.factory_location}")
        consumed = previous_volume
        details = f"Barril {keg.id} voltou vazio de {previous_location}"

    history.record(state, ctx, ActionType.RETURN, keg.id, recipe_name, consumed, details)
    return keg


def bottle_from_keg(
    state: ProductionState, ctx: TransitionContext, keg_id: str, count: int, volume_per_bottle: float, label_name: str,
) -> Tuple[Keg, BottleLot]:
    keg = state.get_keg(keg_id)
    count, size, label, total = validate_bottling(count, volume_per_bottle, label_name)
    if keg.status == KegStatus.EMPTY or keg.volume < total:
        raise InsufficientKegVolumeError(keg.id, total, keg.volume)

    recipe_name = keg.recipe_name
    remaining = round_qty(keg.volume - total)
    emptied = remaining <= ctx.policy.keg_empty_epsilon
    if emptied:
        _clear_contents(keg, ctx)
    else:
        keg.volume = remaining
    lot = add_bottles(state, recipe_name, label, size, count)

    history.record(state, ctx, ActionType.BOTTLE, keg.id, recipe_name, total,
                   f"Envase de {count} garrafas ({size:g}L) via Barril {keg.id}")
    return keg, lot


__all__ = [
    "create_keg",
    "update_keg",
    "delete_keg",
    "dispatch_keg",
    "return_keg",
    "bottle_from_keg",
]
