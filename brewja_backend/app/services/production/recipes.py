# brewja_backend/app/services/production/recipes.py
from __future__ import annotations

from brewja_backend.app.schemas import Recipe, RecipeIn
from .errors import ValidationError
from .state import ProductionState, short_id

# ABV (%) per gravity point drop, the usual homebrew approximation
ABV_FACTOR = 131.25


def calculate_abv(og: float, fg: float) -> float:
    return round((og - fg) * ABV_FACTOR, 1)


def attenuation_percent(og: float, fg: float) -> float:
    """Apparent attenuation; 0 when OG carries no sugar."""
    if og <= 1.0:
        return 0.0
    return round((og - fg) / (og - 1.0) * 100.0, 1)


def estimated_calories(og: float, fg: float) -> int:
    """kcal per 355 ml serving."""
    abv = (og - fg) * ABV_FACTOR
    return int(round(((6.9 * abv) + (4 * (og - fg) * 1000 * 0.25)) * 3.55))


def _validated(payload: RecipeIn, rid: str) -> Recipe:
    name = payload.name.strip()
    if not name:
        raise ValidationError("recipe name is required")
    if payload.fg > payload.og:
        raise ValidationError(f"final gravity {payload.fg} above original gravity {payload.og}", recipe=name)
    data = payload.model_dump()
    data.update(id=rid, name=name, abv=calculate_abv(payload.og, payload.fg))
    return Recipe.model_validate(data)


def add_recipe(state: ProductionState, payload: RecipeIn) -> Recipe:
    rid = (payload.id or "").strip() or short_id("REC")
    if rid in state.recipes:
        raise ValidationError(f"recipe id already exists: {rid}", recipe_id=rid)
    recipe = _validated(payload, rid)
    state.recipes[rid] = recipe
    return recipe


def update_recipe(state: ProductionState, recipe_id: str, payload: RecipeIn) -> Recipe:
    state.get_recipe(recipe_id)
    recipe = _validated(payload, recipe_id)
    state.recipes[recipe_id] = recipe
    return recipe


def delete_recipe(state: ProductionState, recipe_id: str) -> Recipe:
    recipe = state.get_recipe(recipe_id)
    del state.recipes[recipe_id]
    return recipe


__all__ = [
    "ABV_FACTOR",
    "calculate_abv",
    "attenuation_percent",
    "estimated_calories",
    "add_recipe",
    "update_recipe",
    "delete_recipe",
]
