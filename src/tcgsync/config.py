from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .errors import ConfigError

DEFAULT_LOCATOR_URL = "https://op-core.pokemon.com/api/v2/event_locator/search/"


@dataclass(frozen=True)
class AreaConfig:
    label: str
    calendar_id: str
    location_query: str         # e.g. "latitude=..&longitude=..&distance=.."
    time_offset_hours: float
    time_zone: str


@dataclass
class LocatorConfig:
    base_url: str
    timeout_seconds: float
    activity_format: str
    activity_type: str
    name_keywords: List[str]


@dataclass
class AppConfig:
    locator: LocatorConfig
    areas: List[AreaConfig]


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return value


def _number(value: Any, where: str) -> float:
    # YAML reads yes/no as bool, which float() would accept.
    if isinstance(value, bool):
        raise ConfigError(f"{where} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{where} must be a number, got {value!r}") from e


def _load_area(raw: Dict[str, Any], defaults: Dict[str, Any], index: int) -> AreaConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"Area #{index + 1} must be a mapping")

    label = str(raw.get("label") or f"area-{index + 1}")
    query = str(raw.get("location_query", "") or "").strip().lstrip("?")
    if not query:
        raise ConfigError(f"Area {label} has no location_query")

    return AreaConfig(
        label=label,
        calendar_id=str(raw.get("calendar_id", "") or ""),
        location_query=query,
        time_offset_hours=_number(
            raw.get("time_offset_hours", defaults.get("time_offset_hours", 0)),
            f"Area {label} time_offset_hours",
        ),
        time_zone=str(raw.get("time_zone", defaults.get("time_zone", "UTC"))),
    )


def load_config(path: str) -> AppConfig:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    locator = _section(data, "locator")
    defaults = _section(data, "defaults")
    areas = data.get("areas", []) or []
    if not isinstance(areas, list):
        raise ConfigError("'areas' must be a list")

    keywords = locator.get("name_keywords", ["challenge", "cup"])
    if not isinstance(keywords, list):
        raise ConfigError("locator.name_keywords must be a list")

    return AppConfig(
        locator=LocatorConfig(
            base_url=str(locator.get("base_url", DEFAULT_LOCATOR_URL)),
            timeout_seconds=_number(locator.get("timeout_seconds", 15), "locator.timeout_seconds"),
            activity_format=str(locator.get("activity_format", "tcg_std")),
            activity_type=str(locator.get("activity_type", "tournament")),
            name_keywords=[str(k).lower() for k in keywords],
        ),
        areas=[_load_area(raw, defaults, i) for i, raw in enumerate(areas)],
    )
