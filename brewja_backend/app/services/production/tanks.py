# brewja_backend/app/services/production/tanks.py
"""
Fermenter lifecycle.

    Empty --start_batch--> Fermenting --set_status--> Conditioning / Packaging
      ^                                                      |
      +-------------------- finalize_batch ------------------+

Only start_batch (from Empty) and finalize_batch (back to Empty) are enforced;
between them the operator may set Fermenting, Conditioning or Packaging freely.
The tank record is reused for every batch; finalize clears the batch fields and
keeps the equipment fields (id, tank_id, capacity).
"""
from __future__ import annotations

from typing import Any, Optional

from brewja_backend.app.schemas import ActionType, QualityControl, Tank, TankIn, TankStatus
from . import history
from .errors import CapacityExceededError, TankNotEmptyError, ValidationError
from .inventory import reserve_and_deduct
from .state import ProductionState, TransitionContext, round_qty, short_id

# telemetry the operator edits while a batch is running
EDITABLE_FIELDS = {
    "current_gravity": float,
    "original_gravity": float,
    "target_gravity": float,
    "temperature": float,
    "ph": float,
    "recipe_name": str,
}


def _require_positive(value: float, what: str) -> float:
    if value is None or value <= 0:
        raise ValidationError(f"{what} must be positive", value=value)
    return float(value)


def _reset_batch_fields(tank: Tank, ctx: TransitionContext) -> None:
    p = ctx.policy
    tank.status = TankStatus.EMPTY
    tank.volume = 0.0
    tank.recipe_name = ""
    tank.batch_id = ""
    tank.brew_date = "-"
    tank.conditioning_date = None
    tank.ingredients = []
    tank.quality_control = None
    tank.current_gravity = 1.000
    tank.original_gravity = p.default_original_gravity
    tank.target_gravity = p.default_target_gravity
    tank.temperature = p.default_temperature
    tank.ph = p.default_ph


# ---------------------------------------------------------------------------
# Equipment management
# ---------------------------------------------------------------------------

def create_tank(state: ProductionState, ctx: TransitionContext, payload: TankIn) -> Tank:
    code = payload.tank_id.strip()
    if not code:
        raise ValidationError("tank code is required")
    capacity = _require_positive(payload.capacity, "tank capacity")
    tid = (payload.id or "").strip() or short_id("TANK")
    if tid in state.tanks:
        raise ValidationError(f"tank id already exists: {tid}", tank_id=tid)
    tank = Tank(id=tid, tank_id=code, capacity=capacity)
    _reset_batch_fields(tank, ctx)
    state.tanks[tid] = tank
    return tank


def delete_tank(state: ProductionState, tank_ref: str) -> Tank:
    tank = state.get_tank(tank_ref)
    if tank.status != TankStatus.EMPTY or tank.volume > 0:
        raise TankNotEmptyError(tank.tank_id, tank.status.value)
    del state.tanks[tank.id]
    return tank


def update_tank_equipment(
    state: ProductionState, tank_ref: str, tank_id: Optional[str] = None, capacity: Optional[float] = None,
) -> Tank:
    """Rename the display code and/or resize. Capacity never drops below the beer inside."""
    tank = state.get_tank(tank_ref)
    new_code = tank.tank_id if tank_id is None else tank_id.strip()
    if not new_code:
        raise ValidationError("tank code is required")
    new_capacity = tank.capacity if capacity is None else _require_positive(capacity, "tank capacity")
    if new_capacity < tank.volume:
        raise CapacityExceededError(new_code, tank.volume, new_capacity)
    tank.tank_id = new_code
    tank.capacity = new_capacity
    return tank


# ---------------------------------------------------------------------------
# Batch lifecycle
# ---------------------------------------------------------------------------

def start_batch(state: ProductionState, ctx: TransitionContext, tank_ref: str, recipe_name: str, brew_volume: float) -> Tank:
    tank = state.get_tank(tank_ref)
    volume = _require_positive(brew_volume, "brew volume")
    name = (recipe_name or "").strip()
    if not name:
        raise ValidationError("recipe name is required")
    if tank.status != TankStatus.EMPTY:
        raise TankNotEmptyError(tank.tank_id, tank.status.value)
    if volume > tank.capacity:
        raise CapacityExceededError(tank.tank_id, volume, tank.capacity)

    p = ctx.policy
    recipe = state.recipe_by_name(name)
    consumed = reserve_and_deduct(recipe, volume, state.materials, p.default_base_volume)

    og = recipe.og if recipe else p.default_original_gravity
    tank.status = TankStatus.FERMENTING
    tank.recipe_name = name
    tank.batch_id = short_id("BATCH")
    tank.volume = round_qty(volume)
    tank.brew_date = ctx.now_iso()
    tank.conditioning_date = None
    tank.original_gravity = og
    tank.target_gravity = recipe.fg if recipe else p.default_target_gravity
    tank.current_gravity = og
    tank.temperature = p.default_temperature
    tank.ingredients = consumed
    tank.quality_control = None

    history.record(state, ctx, ActionType.BREW, tank.tank_id, name, tank.volume,
                   f"Nova Brassagem (OG: {og:.3f})")
    return tank


def set_status(state: ProductionState, ctx: TransitionContext, tank_ref: str, new_status: TankStatus) -> Tank:
    tank = state.get_tank(tank_ref)
    new_status = TankStatus(new_status)
    if new_status == TankStatus.EMPTY:
        raise ValidationError("a tank is emptied by finalizing its batch", tank_id=tank.tank_id)
    if tank.status == TankStatus.EMPTY:
        raise ValidationError(f"tank {tank.tank_id} has no batch; start one first", tank_id=tank.tank_id)
    if new_status == TankStatus.CONDITIONING and tank.status != TankStatus.CONDITIONING:
        tank.conditioning_date = ctx.now_iso()
    tank.status = new_status
    return tank


def update_field(state: ProductionState, tank_ref: str, field: str, value: Any) -> Tank:
    tank = state.get_tank(tank_ref)
    caster = EDITABLE_FIELDS.get(field)
    if caster is None:
        raise ValidationError(f"field {field!r} cannot be edited directly", field=field)
    if caster is str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{field} must be a non-blank text value", field=field)
        value = value.strip()
    try:
        setattr(tank, field, caster(value))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"invalid value for {field}: {value!r}", field=field) from e
    return tank


def record_quality_control(state: ProductionState, tank_ref: str, qc: QualityControl) -> Tank:
    tank = state.get_tank(tank_ref)
    if tank.status == TankStatus.EMPTY:
        raise ValidationError(f"tank {tank.tank_id} has no batch to assess", tank_id=tank.tank_id)
    tank.quality_control = qc.model_copy(deep=True)
    return tank


def finalize_batch(state: ProductionState, ctx: TransitionContext, tank_ref: str) -> Tank:
    tank = state.get_tank(tank_ref)
    if tank.status == TankStatus.EMPTY:
        raise ValidationError(f"tank {tank.tank_id} has no batch to finalize", tank_id=tank.tank_id)

    snapshot = history.build_batch_data(state, ctx, tank)
    history.record(state, ctx, ActionType.FINISH, tank.tank_id, tank.recipe_name, tank.volume,
                   f"Leva finalizada no tanque {tank.tank_id}", batch_data=snapshot)
    _reset_batch_fields(tank, ctx)
    return tank


__all__ = [
    "EDITABLE_FIELDS",
    "create_tank",
    "delete_tank",
    "update_tank_equipment",
    "start_batch",
    "set_status",
    "update_field",
    "record_quality_control",
    "finalize_batch",
]
