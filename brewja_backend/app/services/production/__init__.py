# brewja_backend/app/services/production/__init__.py
"""
Production-state transition engine.

    from brewja_backend.app.services.production import BreweryEngine, errors

    engine = BreweryEngine.from_data_dir()
    engine.start_batch("FV-01", "IPA", 800)
"""
from __future__ import annotations

from . import errors  # noqa: F401
from .engine import BreweryEngine  # noqa: F401
from .errors import ProductionError  # noqa: F401
from .inventory import reserve_and_deduct  # noqa: F401
from .state import ProductionState, TransitionContext  # noqa: F401

__all__ = [
    "BreweryEngine",
    "ProductionError",
    "ProductionState",
    "TransitionContext",
    "errors",
    "reserve_and_deduct",
]
