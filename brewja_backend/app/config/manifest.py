# brewja_backend/app/config/manifest.py
from __future__ import annotations

import os
from typing import Dict

from .paths import get_data_dir, get_policy_file

# Optional env flags
APP_ENV: str = os.getenv("APP_ENV", "development")
DEBUG_MODE: bool = os.getenv("DEBUG", "0") not in ("", "0", "false", "False")

# Keys of the six production collections (one JSON document each)
COLLECTION_KEYS = ("materials", "tanks", "kegs", "bottles", "recipes", "history")


def validate_manifest() -> Dict[str, object]:
    data_dir = get_data_dir()
    policy = get_policy_file()
    return {
        "status": "ok" if data_dir.exists() else "missing_data_dir",
        "app_env": APP_ENV,
        "data_dir": str(data_dir),
        "policy_file": str(policy),
        "policy_file_present": policy.exists(),
        "collections": list(COLLECTION_KEYS),
    }


__all__ = ["APP_ENV", "DEBUG_MODE", "COLLECTION_KEYS", "validate_manifest"]
