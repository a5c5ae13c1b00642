# brewja_backend/app/services/production/packaging.py
from __future__ import annotations

from typing import Tuple

from brewja_backend.app.schemas import ActionType, BottleLot, Keg, KegStatus, Tank
from . import history
from .errors import (
    CapacityExceededError, InsufficientTankVolumeError, KegNotAvailableError, ValidationError,
)
from .state import ProductionState, TransitionContext, round_qty


def validate_bottling(count: int, volume_per_bottle: float, label_name: str) -> Tuple[int, float, str, float]:
    """Returns (count, volume_per_bottle, label, total litres) or raises."""
    if count is None or int(count) != count or count <= 0:
        raise ValidationError("bottle count must be a positive whole number", count=count)
    if volume_per_bottle is None or volume_per_bottle <= 0:
        raise ValidationError("bottle volume must be positive", volume_per_bottle=volume_per_bottle)
    label = (label_name or "").strip()
    if not label:
        raise ValidationError("label name is required")
    return int(count), float(volume_per_bottle), label, round_qty(count * volume_per_bottle)


def add_bottles(state: ProductionState, recipe_name: str, label_name: str, volume_per_bottle: float, count: int) -> BottleLot:
    """Merge into the lot with the same (recipe, label, size) or open a new one."""
    key = (recipe_name, label_name, volume_per_bottle)
    lot = state.bottles.get(key)
    if lot is None:
        lot = BottleLot(recipe_name=recipe_name, label_name=label_name,
                        volume_per_bottle=volume_per_bottle, count=count)
        state.bottles[key] = lot
    else:
        lot.count += count
    return lot


def package_to_keg(state: ProductionState, ctx: TransitionContext, tank_ref: str, keg_id: str, volume: float) -> Tuple[Tank, Keg]:
    tank = state.get_tank(tank_ref)
    if volume is None or volume <= 0:
        raise ValidationError("keg fill volume must be positive", volume=volume)
    if tank.volume < volume:
        raise InsufficientTankVolumeError(tank.tank_id, volume, tank.volume)
    keg = state.get_keg(keg_id)
    if keg.status != KegStatus.EMPTY:
        raise KegNotAvailableError(keg.id, keg.status.value)
    if volume > keg.capacity:
        raise CapacityExceededError(f"keg {keg.id}", volume, keg.capacity)

    p = ctx.policy
    tank.volume = round_qty(tank.volume - volume)
    keg.batch_id = tank.batch_id
    keg.recipe_name = tank.recipe_name
    keg.fill_date = ctx.today()
    keg.volume = round_qty(volume)
    keg.status = KegStatus.IN_HOUSE
    keg.customer = p.factory_stock_location
    keg.location_history.append(p.filled_location_note)

    history.record(state, ctx, ActionType.KEG, tank.tank_id, tank.recipe_name, keg.volume, f"Barril: {keg.id}")
    return tank, keg


def package_to_bottles(
    state: ProductionState, ctx: TransitionContext, tank_ref: str, count: int, volume_per_bottle: float, label_name: str,
) -> Tuple[Tank, BottleLot]:
    tank = state.get_tank(tank_ref)
    count, size, label, total = validate_bottling(count, volume_per_bottle, label_name)
    if tank.volume < total:
        raise InsufficientTankVolumeError(tank.tank_id, total, tank.volume)

    tank.volume = round_qty(tank.volume - total)
    lot = add_bottles(state, tank.recipe_name, label, size, count)

    history.record(state, ctx, ActionType.BOTTLE, tank.tank_id, tank.recipe_name, total,
                   f"{count} garrafas ({size:g}L) - Rótulo: {label}")
    return tank, lot


__all__ = ["validate_bottling", "add_bottles", "package_to_keg", "package_to_bottles"]
