# brewja_backend/app/services/analysis.py
"""
Optional, non-authoritative commentary on production data.

An `Analyzer` is any callable taking a prompt and returning text (a hosted
model client, a rules engine, a stub in tests). Nothing here touches engine
state: callers pass copies, and failures come back as placeholder text.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from brewja_backend.app.schemas import Tank
from brewja_backend.app.services.production.recipes import ABV_FACTOR, attenuation_percent
from brewja_backend.app.services.production.reports import days_elapsed

log = logging.getLogger("brewja.analysis")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

Analyzer = Callable[[str], Optional[str]]

ANALYSIS_UNAVAILABLE = "Analysis could not be generated."
ANALYSIS_FAILED = "Error connecting to analysis service."
SUGGESTION_UNAVAILABLE = "No suggestion generated."
SUGGESTION_FAILED = "Error generating suggestion."


def fermentation_snapshot(tank: Tank, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now()
    og, sg = tank.original_gravity, tank.current_gravity
    return {
        "tank_id": tank.tank_id,
        "recipe_name": tank.recipe_name,
        "status": tank.status.value,
        "original_gravity": og,
        "current_gravity": sg,
        "target_gravity": tank.target_gravity,
        "temperature": tank.temperature,
        "ph": tank.ph,
        "days": days_elapsed(tank.brew_date, now.date()),
        "current_abv": round(max(0.0, (og - sg) * ABV_FACTOR), 1),
        "apparent_attenuation": attenuation_percent(og, sg),
    }


def fermentation_prompt(snap: Dict[str, Any]) -> str:
    return (
        "Act as a chemical engineering consultant for a brewery. "
        "Analyze the following fermentation batch data:\n\n"
        f"Recipe: {snap['recipe_name']}\n"
        f"Original Gravity (OG): {snap['original_gravity']}\n"
        f"Current Gravity (SG): {snap['current_gravity']}\n"
        f"Target Gravity (FG): {snap['target_gravity']}\n"
        f"Temperature: {snap['temperature']}°C\n"
        f"pH: {snap['ph']}\n"
        f"Day of fermentation: approx {snap['days']} days\n\n"
        "Provide: current ABV estimate, attenuation percentage, a brief assessment of "
        "fermentation health (temperature vs gravity), and corrective actions if "
        "parameters look off for the style. Keep it concise and technical."
    )


def analyze_fermentation(tank: Tank, analyzer: Optional[Analyzer], now: Optional[datetime] = None) -> str:
    if analyzer is None:
        return ANALYSIS_UNAVAILABLE
    prompt = fermentation_prompt(fermentation_snapshot(tank, now))
    try:
        text = analyzer(prompt)
    except Exception as e:  # any provider failure becomes placeholder text
        log.warning(f"[analysis] fermentation analysis failed for {tank.tank_id}: {e}")
        return ANALYSIS_FAILED
    return text or ANALYSIS_UNAVAILABLE


def suggest_recipe(inventory_summary: str, analyzer: Optional[Analyzer]) -> str:
    if analyzer is None:
        return SUGGESTION_UNAVAILABLE
    prompt = (
        f"Given the following available inventory summary: {inventory_summary}. "
        "Suggest a creative seasonal brew recipe that optimizes stock usage."
    )
    try:
        text = analyzer(prompt)
    except Exception as e:
        log.warning(f"[analysis] recipe suggestion failed: {e}")
        return SUGGESTION_FAILED
    return text or SUGGESTION_UNAVAILABLE


__all__ = [
    "Analyzer",
    "fermentation_snapshot",
    "fermentation_prompt",
    "analyze_fermentation",
    "suggest_recipe",
]
