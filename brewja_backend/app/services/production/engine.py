# brewja_backend/app/services/production/engine.py
"""
BreweryEngine: the single writer of production state.

Every mutating call runs under one process-wide lock against a deep copy of
the ledgers. The copy replaces the live state only when the transition
(including its history entry) completed; any error discards it. After a
commit, all collections are flushed to the store. A failed flush is logged and
does not undo the committed transition.

Reads hand out deep copies, never references into the live ledgers.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Iterator, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from brewja_backend.app.config.manifest import COLLECTION_KEYS
from brewja_backend.app.config.policy import ProductionPolicy, get_policy
from brewja_backend.app.schemas import (
    ActionType, BottleLot, HistoryEntry, Keg, MaterialIn, MaterialPatch, QualityControl,
    RawMaterial, Recipe, RecipeIn, Tank, TankIn, TankStatus,
)
from brewja_backend.app.services.data_stores import JsonCollectionStore
from . import bottles, inventory, kegs, packaging, recipes, reports, tanks
from .errors import ProductionError, ValidationError
from .state import ProductionState, TransitionContext

log = logging.getLogger("brewja.engine")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

M = TypeVar("M", bound=BaseModel)


def _coerce(model: Type[M], payload: Union[M, Dict[str, Any]]) -> M:
    if isinstance(payload, model):
        return payload.model_copy(deep=True)
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(f"invalid {model.__name__}: {e.error_count()} field error(s)",
                              fields=[".".join(str(p) for p in err["loc"]) for err in e.errors()]) from e


def _copy(obj: Optional[M]) -> Optional[M]:
    return obj.model_copy(deep=True) if obj is not None else None


class BreweryEngine:
    def __init__(
        self,
        store: Optional[JsonCollectionStore] = None,
        policy: Optional[ProductionPolicy] = None,
        clock: Optional[Callable[[], datetime]] = None,
        state: Optional[ProductionState] = None,
    ):
        self.store = store
        self.ctx = TransitionContext(policy=policy or get_policy(), clock=clock or datetime.now)
        self._lock = RLock()
        self._state = state.clone() if state is not None else self._load()

    @classmethod
    def from_data_dir(cls, data_dir: Optional[Path] = None, **kwargs: Any) -> "BreweryEngine":
        return cls(store=JsonCollectionStore(data_dir), **kwargs)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> ProductionState:
        if self.store is None:
            return ProductionState()
        docs = {key: self.store.load(key, []) for key in COLLECTION_KEYS}
        state = ProductionState.from_documents(docs)
        log.info(
            f"[engine] loaded {len(state.tanks)} tanks, {len(state.kegs)} kegs, "
            f"{len(state.materials)} materials, {len(state.history)} history entries"
        )
        return state

    def _persist(self) -> None:
        if self.store is None:
            return
        docs = self._state.to_documents()
        for key in COLLECTION_KEYS:
            try:
                self.store.save(key, docs[key])
            except (OSError, TypeError, ValueError) as e:
                log.warning(f"[engine] could not save {key}: {e}")

    @contextmanager
    def _transaction(self, action: str) -> Iterator[ProductionState]:
        with self._lock:
            work = self._state.clone()
            try:
                yield work
            except ProductionError as e:
                log.info(f"[engine] {action} rejected: {e.code} {e.message}")
                raise
            self._state = work
            log.info(f"[engine] {action} committed")
            self._persist()

    def snapshot(self) -> ProductionState:
        with self._lock:
            return self._state.clone()

    def today(self) -> date:
        return self.ctx.now().date()

    # ------------------------------------------------------------------
    # Raw materials
    # ------------------------------------------------------------------

    def list_materials(self) -> List[RawMaterial]:
        with self._lock:
            return [_copy(m) for m in self._state.materials.values()]

    def receive_material(self, payload: Union[MaterialIn, Dict[str, Any]]) -> RawMaterial:
        data = _coerce(MaterialIn, payload)
        with self._transaction("receive_material") as s:
            return _copy(inventory.receive_material(s, data))

    def update_material(self, material_id: str, patch: Union[MaterialPatch, Dict[str, Any]]) -> RawMaterial:
        data = _coerce(MaterialPatch, patch)
        with self._transaction("update_material") as s:
            return _copy(inventory.update_material(s, material_id, data))

    def delete_material(self, material_id: str) -> RawMaterial:
        with self._transaction("delete_material") as s:
            return _copy(inventory.delete_material(s, material_id))

    # ------------------------------------------------------------------
    # Recipes
    # ------------------------------------------------------------------

    def list_recipes(self) -> List[Recipe]:
        with self._lock:
            return [_copy(r) for r in self._state.recipes.values()]

    def get_recipe_by_name(self, name: str) -> Optional[Recipe]:
        with self._lock:
            return _copy(self._state.recipe_by_name(name))

    def add_recipe(self, payload: Union[RecipeIn, Dict[str, Any]]) -> Recipe:
        data = _coerce(RecipeIn, payload)
        with self._transaction("add_recipe") as s:
            return _copy(recipes.add_recipe(s, data))

    def update_recipe(self, recipe_id: str, payload: Union[RecipeIn, Dict[str, Any]]) -> Recipe:
        data = _coerce(RecipeIn, payload)
        with self._transaction("update_recipe") as s:
            return _copy(recipes.update_recipe(s, recipe_id, data))

    def delete_recipe(self, recipe_id: str) -> Recipe:
        with self._transaction("delete_recipe") as s:
            return _copy(recipes.delete_recipe(s, recipe_id))

    # ------------------------------------------------------------------
    # Tanks
    # ------------------------------------------------------------------

    def list_tanks(self) -> List[Tank]:
        with self._lock:
            return [_copy(t) for t in self._state.tanks.values()]

    def get_tank(self, tank_ref: str) -> Tank:
        with self._lock:
            return _copy(self._state.get_tank(tank_ref))

    def create_tank(self, payload: Union[TankIn, Dict[str, Any]]) -> Tank:
        data = _coerce(TankIn, payload)
        with self._transaction("create_tank") as s:
            return _copy(tanks.create_tank(s, self.ctx, data))

    def delete_tank(self, tank_ref: str) -> Tank:
        with self._transaction("delete_tank") as s:
            return _copy(tanks.delete_tank(s, tank_ref))

    def update_tank_equipment(self, tank_ref: str, tank_id: Optional[str] = None, capacity: Optional[float] = None) -> Tank:
        with self._transaction("update_tank_equipment") as s:
            return _copy(tanks.update_tank_equipment(s, tank_ref, tank_id, capacity))

    def start_batch(self, tank_ref: str, recipe_name: str, brew_volume: float) -> Tank:
        with self._transaction("start_batch") as s:
            return _copy(tanks.start_batch(s, self.ctx, tank_ref, recipe_name, brew_volume))

    def set_status(self, tank_ref: str, status: Union[TankStatus, str]) -> Tank:
        with self._transaction("set_status") as s:
            return _copy(tanks.set_status(s, self.ctx, tank_ref, TankStatus(status)))

    def update_field(self, tank_ref: str, field: str, value: Any) -> Tank:
        with self._transaction("update_field") as s:
            return _copy(tanks.update_field(s, tank_ref, field, value))

    def record_quality_control(self, tank_ref: str, qc: Union[QualityControl, Dict[str, Any]]) -> Tank:
        data = _coerce(QualityControl, qc)
        with self._transaction("record_quality_control") as s:
            return _copy(tanks.record_quality_control(s, tank_ref, data))

    def finalize_batch(self, tank_ref: str) -> Tank:
        with self._transaction("finalize_batch") as s:
            return _copy(tanks.finalize_batch(s, self.ctx, tank_ref))

    # ------------------------------------------------------------------
    # Packaging
    # ------------------------------------------------------------------

    def package_to_keg(self, tank_ref: str, keg_id: str, volume: float) -> Keg:
        with self._transaction("package_to_keg") as s:
            _, keg = packaging.package_to_keg(s, self.ctx, tank_ref, keg_id, volume)
            return _copy(keg)

    def package_to_bottles(self, tank_ref: str, count: int, volume_per_bottle: float, label_name: str) -> BottleLot:
        with self._transaction("package_to_bottles") as s:
            _, lot = packaging.package_to_bottles(s, self.ctx, tank_ref, count, volume_per_bottle, label_name)
            return _copy(lot)

    # ------------------------------------------------------------------
    # Kegs
    # ------------------------------------------------------------------

    def list_kegs(self, status: Optional[str] = None) -> List[Keg]:
        with self._lock:
            rows = self._state.kegs.values()
            return [_copy(k) for k in rows if status is None or k.status.value == status]

    def get_keg(self, keg_id: str) -> Keg:
        with self._lock:
            return _copy(self._state.get_keg(keg_id))

    def create_keg(self, keg_id: str, capacity: float) -> Keg:
        with self._transaction("create_keg") as s:
            return _copy(kegs.create_keg(s, self.ctx, keg_id, capacity))

    def update_keg(self, keg_id: str, new_id: Optional[str] = None, capacity: Optional[float] = None) -> Keg:
        with self._transaction("update_keg") as s:
            return _copy(kegs.update_keg(s, keg_id, new_id, capacity))

    def delete_keg(self, keg_id: str) -> Keg:
        with self._transaction("delete_keg") as s:
            return _copy(kegs.delete_keg(s, keg_id))

    def dispatch_keg(self, keg_id: str, location: str) -> Keg:
        with self._transaction("dispatch_keg") as s:
            return _copy(kegs.dispatch_keg(s, self.ctx, keg_id, location))

    def return_keg(self, keg_id: str, remaining_volume: float = 0.0) -> Keg:
        with self._transaction("return_keg") as s:
            return _copy(kegs.return_keg(s, self.ctx, keg_id, remaining_volume))

    def bottle_from_keg(self, keg_id: str, count: int, volume_per_bottle: float, label_name: str) -> BottleLot:
        with self._transaction("bottle_from_keg") as s:
            _, lot = kegs.bottle_from_keg(s, self.ctx, keg_id, count, volume_per_bottle, label_name)
            return _copy(lot)

    # ------------------------------------------------------------------
    # Bottles
    # ------------------------------------------------------------------

    def list_bottle_lots(self, term: str = "") -> List[BottleLot]:
        with self._lock:
            return [_copy(b) for b in bottles.search_lots(self._state, term)]

    def sell_bottles(self, recipe_name: str, label_name: str, count: int,
                     volume_per_bottle: Optional[float] = None) -> Optional[BottleLot]:
        with self._transaction("sell_bottles") as s:
            return _copy(bottles.sell_bottles(s, self.ctx, recipe_name, label_name, count, volume_per_bottle))

    # ------------------------------------------------------------------
    # History & reports
    # ------------------------------------------------------------------

    def history(self, month: Optional[str] = None, action_type: Optional[ActionType] = None,
                limit: Optional[int] = None) -> List[HistoryEntry]:
        with self._lock:
            return [_copy(h) for h in reports.filter_history(self._state, month, action_type, limit)]

    def finished_batches(self, month: Optional[str] = None) -> List[HistoryEntry]:
        with self._lock:
            return [_copy(h) for h in reports.finished_batches(self._state, month)]

    def monthly_totals(self, month: Optional[str] = None) -> Dict[str, float]:
        with self._lock:
            return reports.monthly_totals(self._state, month)

    def keg_shelf_life(self) -> List[Dict[str, Any]]:
        with self._lock:
            return reports.keg_shelf_life(self._state, self.today(), self.ctx.policy.default_shelf_life_days)

    def dashboard(self) -> Dict[str, Any]:
        with self._lock:
            return reports.dashboard(self._state, self.today(), self.ctx.policy.default_shelf_life_days)

    def inventory_summary(self) -> str:
        with self._lock:
            rows = inventory.stock_summary(self._state)
        return "; ".join(f"{name} ({kind}): {qty:g}{unit}" for name, kind, qty, unit in rows)


__all__ = ["BreweryEngine"]
