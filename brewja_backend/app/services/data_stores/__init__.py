# brewja_backend/app/services/data_stores/__init__.py
"""
Unified export surface for data store helpers.

Import from here in engine/router code, e.g.:
    from brewja_backend.app.services.data_stores import (
        # IO
        read_json, write_json, atomic_write,
        # Collections
        JsonCollectionStore,
    )
"""

from __future__ import annotations

# ---- Low-level IO helpers ----
from .io_utils import read_json, write_json, atomic_write  # noqa: F401

# ---- Production collections ----
from .production_store import JsonCollectionStore  # noqa: F401

__all__ = [
    # io_utils
    "read_json", "write_json", "atomic_write",
    # collections
    "JsonCollectionStore",
]
