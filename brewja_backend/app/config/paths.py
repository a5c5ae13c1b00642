# brewja_backend/app/config/paths.py
from __future__ import annotations

"""
Central path resolution for Brewja.

Env overrides:
    DATA_DIR
    BREWJA_POLICY_FILE

Defaults:
    <repo_root>/data
    <repo_root>/brewja_backend/app/config/production_policy.yaml

Exports:
    - constants: DATA_DIR, POLICY_FILE, REPO_ROOT, APP_ROOT
    - getters: get_*()
    - resolvers: resolve_data_file(), production_data_dir()
"""

import os
from pathlib import Path
from typing import Dict

# ──────────────────────────────────────────────────────────────────────────────
_THIS_FILE = Path(__file__).resolve()

def _resolve_repo_root() -> Path:
    p = _THIS_FILE
    for _ in range(6):
        if (p.parent / "brewja_backend" / "app").exists():
            return p.parent
        p = p.parent
    return _THIS_FILE.parents[3]

REPO_ROOT: Path = _resolve_repo_root()
APP_ROOT: Path = REPO_ROOT / "brewja_backend" / "app"

def _clean_env(value: str | None) -> str | None:
    if value is None:
        return None
    v = value.strip().strip('"').strip("'")
    return v or None

def _env_path(name: str) -> Path | None:
    raw = _clean_env(os.getenv(name))
    if not raw:
        return None
    return Path(raw).expanduser().resolve()

_default_data = REPO_ROOT / "data"
_default_policy = APP_ROOT / "config" / "production_policy.yaml"

DATA_DIR: Path = (_env_path("DATA_DIR") or _default_data).resolve()
POLICY_FILE: Path = (_env_path("BREWJA_POLICY_FILE") or _default_policy).resolve()

# ── Getters
def get_repo_root() -> Path: return REPO_ROOT
def get_app_root()  -> Path: return APP_ROOT

def get_data_dir() -> Path:
    """DATA_DIR as currently set in the environment (tests repoint it at runtime)."""
    return _env_path("DATA_DIR") or DATA_DIR

def get_policy_file() -> Path:
    return _env_path("BREWJA_POLICY_FILE") or POLICY_FILE

# ── Resolvers
def resolve_data_file(*parts: str) -> Path:
    """Return absolute path under DATA_DIR for nested parts and ensure parent exists."""
    p = get_data_dir().joinpath(*parts)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p

def production_data_dir() -> Path:
    """
    Directory holding the six production collections.
    Example:
        production_data_dir() -> <DATA_DIR>/production
    """
    p = get_data_dir() / "production"
    p.mkdir(parents=True, exist_ok=True)
    return p

def get_paths() -> Dict[str, Path]:
    return {
        "DATA_DIR": get_data_dir(),
        "POLICY_FILE": get_policy_file(),
        "REPO_ROOT": REPO_ROOT,
        "APP_ROOT": APP_ROOT,
    }

__all__ = [
    # constants
    "DATA_DIR", "POLICY_FILE", "REPO_ROOT", "APP_ROOT",
    # getters
    "get_repo_root", "get_app_root", "get_data_dir", "get_policy_file", "get_paths",
    # resolvers
    "resolve_data_file", "production_data_dir",
]
