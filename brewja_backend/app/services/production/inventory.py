# brewja_backend/app/services/production/inventory.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from brewja_backend.app.schemas import (
    ConsumedIngredient, MaterialIn, MaterialPatch, RawMaterial, Recipe,
)
from .errors import InsufficientStockError, NotFoundError, ValidationError
from .state import ProductionState, round_qty, short_id


# ---------------------------------------------------------------------------
# Two-phase reservation: validate every line, then commit every line
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Requirement:
    material_id: str
    amount: float
    label: str = ""          # shown in errors when the material is missing


def check_requirements(materials: Dict[str, RawMaterial], requirements: Iterable[Requirement]) -> List[Requirement]:
    """
    Validate that every requirement can be met. Amounts for the same material
    are summed before comparing with stock. Raises on the first missing or
    short material; mutates nothing.
    """
    reqs = list(requirements)
    totals: Dict[str, float] = {}
    for req in reqs:
        if req.amount < 0:
            raise ValidationError(f"negative requirement for {req.label or req.material_id}")
        stock = materials.get(req.material_id)
        if stock is None:
            raise NotFoundError("material", req.material_id,
                                f"ingredient {req.label or req.material_id!r} not found in stock")
        totals[req.material_id] = totals.get(req.material_id, 0.0) + req.amount
        if stock.quantity < totals[req.material_id]:
            raise InsufficientStockError(stock.name, totals[req.material_id], stock.quantity, stock.unit)
    return reqs


def commit_requirements(materials: Dict[str, RawMaterial], requirements: Iterable[Requirement]) -> None:
    for req in requirements:
        stock = materials[req.material_id]
        stock.quantity = max(0.0, round_qty(stock.quantity - req.amount))


def reserve_and_deduct(
    recipe: Optional[Recipe],
    brew_volume: float,
    materials: Dict[str, RawMaterial],
    default_base_volume: float = 100.0,
) -> List[ConsumedIngredient]:
    """
    Deduct the ingredients of `recipe` scaled to `brew_volume` litres.

    scale = brew_volume / (recipe.base_volume or default_base_volume)

    All lines are checked before any stock changes, so a shortfall on a later
    line never leaves earlier lines deducted. A recipe without ingredient lines
    consumes nothing. Returns the per-line amounts for the batch record.
    """
    if recipe is None or not recipe.ingredients:
        return []
    scale = brew_volume / (recipe.base_volume or default_base_volume)
    reqs = [
        Requirement(line.material_id, line.quantity * scale, line.name or line.material_id)
        for line in recipe.ingredients
    ]
    check_requirements(materials, reqs)
    commit_requirements(materials, reqs)
    return [ConsumedIngredient(material_id=r.material_id, amount=round_qty(r.amount)) for r in reqs]


# ---------------------------------------------------------------------------
# Material records
# ---------------------------------------------------------------------------

def receive_material(state: ProductionState, payload: MaterialIn) -> RawMaterial:
    if not payload.name.strip():
        raise ValidationError("material name is required")
    mid = (payload.id or "").strip() or short_id("MAT")
    if mid in state.materials:
        raise ValidationError(f"material id already exists: {mid}", material_id=mid)
    mat = RawMaterial(**{**payload.model_dump(), "id": mid, "name": payload.name.strip()})
    state.materials[mid] = mat
    return mat


def update_material(state: ProductionState, material_id: str, patch: MaterialPatch) -> RawMaterial:
    mat = state.get_material(material_id)
    changes = patch.model_dump(exclude_unset=True)
    if "quantity" in changes and (changes["quantity"] is None or changes["quantity"] < 0):
        raise ValidationError("material quantity cannot be negative", material_id=material_id)
    if "name" in changes and not (changes["name"] or "").strip():
        raise ValidationError("material name is required", material_id=material_id)
    try:
        updated = RawMaterial.model_validate({**mat.model_dump(), **changes})
    except PydanticValidationError as e:
        raise ValidationError(f"invalid update for material {material_id}",
                              material_id=material_id,
                              fields=[".".join(str(p) for p in err["loc"]) for err in e.errors()]) from e
    state.materials[material_id] = updated
    return state.materials[material_id]


def delete_material(state: ProductionState, material_id: str) -> RawMaterial:
    mat = state.get_material(material_id)
    del state.materials[material_id]
    return mat


def stock_summary(state: ProductionState) -> List[Tuple[str, str, float, str]]:
    """(name, type, quantity, unit) rows, used for the recipe-suggestion prompt."""
    return [(m.name, m.type.value, m.quantity, m.unit) for m in state.materials.values()]


__all__ = [
    "Requirement",
    "check_requirements",
    "commit_requirements",
    "reserve_and_deduct",
    "receive_material",
    "update_material",
    "delete_material",
    "stock_summary",
]
