from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CalendarEvent:
    summary: str
    location: str
    description: str            # canonical event URL, used as identity key
    start: datetime             # timezone-aware
    time_zone: str

    def to_resource(self) -> Dict[str, Any]:
        # Upstream does not publish a duration; start and end are the same instant.
        when = {
            "dateTime": self.start.astimezone(timezone.utc).isoformat(),
            "timeZone": self.time_zone,
        }
        return {
            "summary": self.summary,
            "location": self.location,
            "description": self.description,
            "start": dict(when),
            "end": dict(when),
        }


@dataclass(frozen=True)
class InsertResult:
    event: CalendarEvent
    ok: bool
    error: Optional[str] = None


@dataclass
class AreaResult:
    label: str
    fetched: int = 0
    skipped: int = 0
    attempted: int = 0
    inserted: int = 0
    failed: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.failed == 0
