# brewja_backend/app/services/data_stores/production_store.py
from __future__ import annotations

import logging
from pathlib import Path
from threading import RLock
from typing import Any, Iterable, Optional

from brewja_backend.app.config.manifest import COLLECTION_KEYS
from brewja_backend.app.config.paths import production_data_dir
from .io_utils import read_json, write_json

log = logging.getLogger("brewja.data_stores")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

_IO_LOCK = RLock()


class JsonCollectionStore:
    """
    One JSON document per production collection under `base_dir`:

        <base_dir>/materials.json
        <base_dir>/tanks.json
        ...

    There is no schema version; unreadable documents load as `default`.
    """

    def __init__(self, base_dir: Optional[Path] = None, keys: Iterable[str] = COLLECTION_KEYS):
        self.base_dir = Path(base_dir) if base_dir is not None else production_data_dir()
        self.keys = tuple(keys)

    def path_for(self, key: str) -> Path:
        if key not in self.keys:
            raise KeyError(f"unknown collection: {key}")
        return self.base_dir / f"{key}.json"

    def load(self, key: str, default: Any = None) -> Any:
        with _IO_LOCK:
            obj = read_json(self.path_for(key), default=None)
        if obj is None:
            return default
        if default is not None and not isinstance(obj, type(default)):
            log.warning(f"[store] {key}: expected {type(default).__name__}, found {type(obj).__name__}; ignoring")
            return default
        return obj

    def save(self, key: str, value: Any) -> None:
        with _IO_LOCK:
            write_json(self.path_for(key), value)


__all__ = ["JsonCollectionStore"]
