from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Collection, List, Optional

import requests

from .calendar_google import insert_event, list_existing_descriptions
from .config import AreaConfig, LocatorConfig
from .errors import CalendarApiError, NetworkError
from .locator import fetch_area_events
from .models import AreaResult, CalendarEvent

logger = logging.getLogger(__name__)


def filter_new_events(events: List[CalendarEvent], existing: Collection[str]) -> List[CalendarEvent]:
    return [e for e in events if e.description not in existing]


def sync_area(
    area: AreaConfig,
    service: Any,
    session: requests.Session,
    locator: LocatorConfig,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> AreaResult:
    """
    Lists what the area's calendar already holds, fetches upstream events and
    inserts the missing ones one at a time. AuthError propagates; network and
    calendar listing failures are recorded on the result.
    """
    result = AreaResult(label=area.label)
    if not area.calendar_id:
        logger.warning("No calendar_id configured for %s; skipping", area.label)
        result.error = "no calendar_id"
        return result

    try:
        existing = list_existing_descriptions(service, area.calendar_id, now=now)
        events = fetch_area_events(
            area,
            session=session,
            base_url=locator.base_url,
            timeout=locator.timeout_seconds,
            activity_format=locator.activity_format,
            activity_type=locator.activity_type,
            keywords=locator.name_keywords,
        )
    except (NetworkError, CalendarApiError) as e:
        logger.error("Sync for %s aborted: %s", area.label, e)
        result.error = str(e)
        return result

    new_events = filter_new_events(events, existing)
    result.fetched = len(events)
    result.skipped = len(events) - len(new_events)

    if dry_run:
        for event in new_events:
            logger.info("[dry-run] would add %s (%s) to %s", event.summary, event.start.isoformat(), area.label)
        return result

    for event in new_events:
        outcome = insert_event(service, area.calendar_id, event)
        result.attempted += 1
        if outcome.ok:
            result.inserted += 1
        else:
            result.failed += 1

    if result.failed:
        logger.warning("%d events added for %s (%d failed)", result.inserted, area.label, result.failed)
    else:
        logger.info("%d events added for %s", result.inserted, area.label)
    return result


def sync_areas(
    areas: List[AreaConfig],
    service: Any,
    session: requests.Session,
    locator: LocatorConfig,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> List[AreaResult]:
    return [sync_area(area, service, session, locator, dry_run=dry_run, now=now) for area in areas]
