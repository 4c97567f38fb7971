from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

import requests

from .config import DEFAULT_LOCATOR_URL, AreaConfig
from .errors import NetworkError
from .models import CalendarEvent

logger = logging.getLogger(__name__)

USER_AGENT = "tcgsync/1.0"


def make_session(user_agent: str = USER_AGENT) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


def is_challenge_or_cup(name: str, keywords: Iterable[str] = ("challenge", "cup")) -> bool:
    lowered = name.lower()
    return any(k in lowered for k in keywords)


def is_target_event(
    item: Dict[str, Any],
    activity_format: str = "tcg_std",
    activity_type: str = "tournament",
    keywords: Iterable[str] = ("challenge", "cup"),
) -> bool:
    return (
        item.get("activity_format") == activity_format
        and item.get("activity_type") == activity_type
        and is_challenge_or_cup(str(item.get("name") or ""), keywords)
    )


def parse_timestamp(value: str) -> datetime:
    # Python < 3.11 fromisoformat does not accept a trailing "Z".
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def adjust_start_time(start: datetime, offset_hours: float) -> datetime:
    """Fixed-offset correction; does not follow DST transitions."""
    return start + timedelta(hours=offset_hours)


def to_calendar_event(item: Dict[str, Any], area: AreaConfig) -> CalendarEvent:
    address = item.get("address") or {}
    start = adjust_start_time(parse_timestamp(str(item["start_datetime"])), area.time_offset_hours)
    return CalendarEvent(
        summary=str(item.get("name") or ""),
        location=str(address.get("full_address") or ""),
        description=str(item.get("pokemon_url") or ""),
        start=start,
        time_zone=area.time_zone,
    )


def fetch_area_events(
    area: AreaConfig,
    session: Optional[requests.Session] = None,
    base_url: str = DEFAULT_LOCATOR_URL,
    timeout: float = 15,
    activity_format: str = "tcg_std",
    activity_type: str = "tournament",
    keywords: Iterable[str] = ("challenge", "cup"),
) -> List[CalendarEvent]:
    session = session or make_session()
    url = f"{base_url}?{area.location_query}"
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
        payload = resp.json()
    except requests.RequestException as e:
        raise NetworkError(f"Event search failed for {area.label}: {e}") from e
    except ValueError as e:
        raise NetworkError(f"Event search for {area.label} returned invalid JSON: {e}") from e

    activities = payload.get("activities") if isinstance(payload, dict) else None
    if not isinstance(activities, list):
        raise NetworkError(f"Event search for {area.label} returned no 'activities' list")

    keywords = list(keywords)
    events: List[CalendarEvent] = []
    for item in activities:
        if not isinstance(item, dict):
            continue
        if not is_target_event(item, activity_format, activity_type, keywords):
            continue
        try:
            events.append(to_calendar_event(item, area))
        except (KeyError, ValueError) as e:
            logger.warning("Skipping %r for %s: bad start_datetime (%s)", item.get("name"), area.label, e)

    logger.debug("%s: %d of %d activities matched", area.label, len(events), len(activities))
    return events
