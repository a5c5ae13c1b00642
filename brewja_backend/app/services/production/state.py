# brewja_backend/app/services/production/state.py
from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError as PydanticValidationError

from brewja_backend.app.config.policy import ProductionPolicy
from brewja_backend.app.schemas import (
    BottleLot, HistoryEntry, Keg, LotKey, RawMaterial, Recipe, Tank,
)
from .errors import NotFoundError

log = logging.getLogger("brewja.engine")

# float noise from repeated litre/kg arithmetic
_QTY_DIGITS = 6


def round_qty(x: float) -> float:
    return round(float(x), _QTY_DIGITS)


def short_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


@dataclass
class TransitionContext:
    """What a transition needs besides the ledgers: site policy and a clock."""
    policy: ProductionPolicy = field(default_factory=ProductionPolicy)
    clock: Callable[[], datetime] = datetime.now

    def now(self) -> datetime:
        return self.clock()

    def now_iso(self) -> str:
        return self.clock().isoformat(timespec="seconds")

    def today(self) -> str:
        return self.clock().date().isoformat()


@dataclass
class ProductionState:
    """
    The six production ledgers. Dicts keep insertion order, which is the
    display order of every collection; history is newest-first.
    """
    materials: Dict[str, RawMaterial] = field(default_factory=dict)
    recipes: Dict[str, Recipe] = field(default_factory=dict)
    tanks: Dict[str, Tank] = field(default_factory=dict)
    kegs: Dict[str, Keg] = field(default_factory=dict)
    bottles: Dict[LotKey, BottleLot] = field(default_factory=dict)
    history: List[HistoryEntry] = field(default_factory=list)

    def clone(self) -> "ProductionState":
        return copy.deepcopy(self)

    # ---- lookups ----------------------------------------------------------

    def get_tank(self, ref: str) -> Tank:
        """Find a tank by internal id, falling back to its display code."""
        tank = self.tanks.get(ref)
        if tank is not None:
            return tank
        for t in self.tanks.values():
            if t.tank_id == ref:
                return t
        raise NotFoundError("tank", ref)

    def get_keg(self, keg_id: str) -> Keg:
        keg = self.kegs.get(keg_id) or self.kegs.get((keg_id or "").strip().upper())
        if keg is None:
            raise NotFoundError("keg", keg_id)
        return keg

    def get_material(self, material_id: str) -> RawMaterial:
        mat = self.materials.get(material_id)
        if mat is None:
            raise NotFoundError("material", material_id)
        return mat

    def get_recipe(self, recipe_id: str) -> Recipe:
        rec = self.recipes.get(recipe_id)
        if rec is None:
            raise NotFoundError("recipe", recipe_id)
        return rec

    def recipe_by_name(self, name: str) -> Optional[Recipe]:
        """Recipes are cross-referenced by name; the first match wins."""
        for r in self.recipes.values():
            if r.name == name:
                return r
        return None

    # ---- serialization ----------------------------------------------------

    def to_documents(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "materials": [m.model_dump(mode="json") for m in self.materials.values()],
            "recipes": [r.model_dump(mode="json") for r in self.recipes.values()],
            "tanks": [t.model_dump(mode="json") for t in self.tanks.values()],
            "kegs": [k.model_dump(mode="json") for k in self.kegs.values()],
            "bottles": [b.model_dump(mode="json") for b in self.bottles.values()],
            "history": [h.model_dump(mode="json") for h in self.history],
        }

    @classmethod
    def from_documents(cls, docs: Mapping[str, Any]) -> "ProductionState":
        materials = _parse_collection("materials", docs.get("materials"), RawMaterial)
        recipes = _parse_collection("recipes", docs.get("recipes"), Recipe)
        tanks = _parse_collection("tanks", docs.get("tanks"), Tank)
        kegs = _parse_collection("kegs", docs.get("kegs"), Keg)
        bottles = _parse_collection("bottles", docs.get("bottles"), BottleLot)
        history = _parse_collection("history", docs.get("history"), HistoryEntry)

        state = cls(
            materials={m.id: m for m in materials},
            recipes={r.id: r for r in recipes},
            tanks={t.id: t for t in tanks},
            kegs={k.id: k for k in kegs},
            history=history,
        )
        # stored lots are merged by key so at most one lot per key survives
        for lot in bottles:
            existing = state.bottles.get(lot.key)
            if existing is None:
                state.bottles[lot.key] = lot
            else:
                existing.count += lot.count
        return state


def _parse_collection(key: str, raw: Any, model: Type[BaseModel]) -> List[Any]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        log.warning(f"[state] {key}: stored document is not a list; starting empty")
        return []
    try:
        return [model.model_validate(item) for item in raw]
    except PydanticValidationError as e:
        log.warning(f"[state] {key}: stored document failed validation ({e.error_count()} errors); starting empty")
        return []


__all__ = ["ProductionState", "TransitionContext", "round_qty", "short_id"]
