from __future__ import annotations
from typing import Any

from fastapi import APIRouter, Depends

from brewja_backend.app.deps import get_engine
from brewja_backend.app.schemas import Recipe, RecipeIn
from brewja_backend.app.services.production import BreweryEngine

router = APIRouter(prefix="/recipes", tags=["recipes"])

@router.get("/", response_model=list[Recipe])
def list_recipes(engine: BreweryEngine = Depends(get_engine)) -> list[Recipe]:
    return engine.list_recipes()

# What it does:
# Save a recipe; ABV is computed from OG/FG here.
@router.post("/")
def add_recipe(body: RecipeIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "recipe": engine.add_recipe(body)}

@router.put("/{recipe_id}")
def update_recipe(recipe_id: str, body: RecipeIn, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    return {"ok": True, "recipe": engine.update_recipe(recipe_id, body)}

@router.delete("/{recipe_id}")
def delete_recipe(recipe_id: str, engine: BreweryEngine = Depends(get_engine)) -> dict[str, Any]:
    engine.delete_recipe(recipe_id)
    return {"ok": True}
