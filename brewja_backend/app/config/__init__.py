# brewja_backend/app/config/__init__.py
from __future__ import annotations

# Re-export config surface expected by callers across the app.

# Env settings live in manifest.py
from .manifest import (
    APP_ENV,
    DEBUG_MODE,
    COLLECTION_KEYS,
    validate_manifest,
)

# Path helpers live in paths.py
from .paths import (
    REPO_ROOT,
    APP_ROOT,
    DATA_DIR,
    get_data_dir,
    get_policy_file,
    resolve_data_file,
    production_data_dir,
)

# Production policy (YAML) lives in policy.py
from .policy import ProductionPolicy, get_policy, load_policy, clear_policy_cache

__all__ = [
    # manifest
    "APP_ENV",
    "DEBUG_MODE",
    "COLLECTION_KEYS",
    "validate_manifest",
    # paths
    "REPO_ROOT",
    "APP_ROOT",
    "DATA_DIR",
    "get_data_dir",
    "get_policy_file",
    "resolve_data_file",
    "production_data_dir",
    # policy
    "ProductionPolicy",
    "get_policy",
    "load_policy",
    "clear_policy_cache",
]
