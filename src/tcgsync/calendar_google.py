from __future__ import annotations
from datetime import datetime, timezone
import logging
from typing import Any, Optional, Set

import httplib2
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .errors import AuthError, CalendarApiError
from .models import CalendarEvent, InsertResult

logger = logging.getLogger(__name__)

# execute() raises OSError or HttpLib2Error when no HTTP response comes back.
_CALL_ERRORS = (HttpError, OSError, httplib2.HttpLib2Error)


def build_calendar_service(creds: Credentials) -> Any:
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


def list_existing_descriptions(service: Any, calendar_id: str, now: Optional[datetime] = None) -> Set[str]:
    """Descriptions of every event in the calendar starting at or after ``now``, across all pages."""
    now = now or datetime.now(tz=timezone.utc)
    descriptions: Set[str] = set()
    page_token: Optional[str] = None

    while True:
        try:
            resp = service.events().list(
                calendarId=calendar_id,
                timeMin=now.isoformat(),
                singleEvents=True,
                orderBy="startTime",
                pageToken=page_token,
            ).execute()
        except RefreshError as e:
            raise AuthError(f"Google token refresh failed: {e}") from e
        except _CALL_ERRORS as e:
            raise CalendarApiError(f"Listing events in {calendar_id} failed: {e}") from e

        for item in resp.get("items", []):
            description = item.get("description")
            if description:
                descriptions.add(description)

        page_token = resp.get("nextPageToken")
        if not page_token:
            return descriptions


def insert_event(service: Any, calendar_id: str, event: CalendarEvent) -> InsertResult:
    try:
        service.events().insert(calendarId=calendar_id, body=event.to_resource()).execute()
    except RefreshError as e:
        raise AuthError(f"Google token refresh failed: {e}") from e
    except _CALL_ERRORS as e:
        logger.error("There was an error contacting the Calendar service for %r: %s", event.summary, e)
        return InsertResult(event=event, ok=False, error=str(e))
    return InsertResult(event=event, ok=True)
