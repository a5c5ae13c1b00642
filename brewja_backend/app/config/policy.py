# brewja_backend/app/config/policy.py
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .paths import get_policy_file

# -----------------------------------------------------------------------------
# Logger
# -----------------------------------------------------------------------------
log = logging.getLogger("brewja.policy")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)


class ProductionPolicy(BaseModel):
    """
    Site-specific knobs of the production engine.

    Dispatch classification: a destination is "in-house" when it equals one of
    `in_house_locations` or contains one of `in_house_keywords`
    (both case-insensitive); anything else counts as leaving the factory.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    keg_empty_epsilon: float = Field(default=0.1, ge=0)
    in_house_keywords: List[str] = Field(default_factory=lambda: ["fábrica", "fabrica", "estoque"])
    in_house_locations: List[str] = Field(default_factory=list)

    factory_location: str = "Fábrica"
    factory_stock_location: str = "Fábrica (Estoque)"
    filled_location_note: str = "Envasado na Fábrica"
    unknown_location: str = "Desconhecido"

    default_original_gravity: float = 1.050
    default_target_gravity: float = 1.010
    default_temperature: float = 20.0
    default_ph: float = 7.0
    default_base_volume: float = Field(default=100.0, gt=0)
    default_shelf_life_days: int = Field(default=30, ge=0)

    history_date_format: str = "%d/%m/%Y, %H:%M:%S"

    def is_in_house(self, location: str) -> bool:
        text = (location or "").strip().lower()
        if not text:
            return True
        if any(text == loc.strip().lower() for loc in self.in_house_locations):
            return True
        return any(k.lower() in text for k in self.in_house_keywords if k)


def _load_yaml_from(path: Path) -> dict:
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ValueError(f"Policy file {path} must hold a mapping, got {type(obj).__name__}")
    return obj


def load_policy(path: Optional[Path] = None) -> ProductionPolicy:
    """
    Read the production policy from YAML. Missing or malformed files fall back
    to the built-in defaults (logged).
    """
    p = path or get_policy_file()
    if not p.exists():
        log.info(f"[policy] {p} not found, using defaults")
        return ProductionPolicy()
    try:
        policy = ProductionPolicy(**_load_yaml_from(p))
    except (OSError, ValueError, ValidationError) as e:
        log.warning(f"[policy] could not load {p}: {e}; using defaults")
        return ProductionPolicy()
    log.info(f"[policy] loaded {p}")
    return policy


@lru_cache(maxsize=1)
def get_policy() -> ProductionPolicy:
    return load_policy()


def clear_policy_cache() -> None:
    get_policy.cache_clear()


__all__ = ["ProductionPolicy", "load_policy", "get_policy", "clear_policy_cache"]
