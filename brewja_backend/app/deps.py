# brewja_backend/app/deps.py
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from brewja_backend.app.config.paths import production_data_dir
from brewja_backend.app.services.analysis import Analyzer
from brewja_backend.app.services.production import BreweryEngine

# No analyzer is bundled; deployments assign a callable here at startup.
ANALYZER: Optional[Analyzer] = None


@lru_cache(maxsize=1)
def get_engine() -> BreweryEngine:
    """Process-wide engine over <DATA_DIR>/production, loaded once."""
    return BreweryEngine.from_data_dir(production_data_dir())


def get_analyzer() -> Optional[Analyzer]:
    return ANALYZER


def reset_engine() -> None:
    get_engine.cache_clear()
