from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests
from googleapiclient.errors import HttpError

from tcgsync.config import AreaConfig, LocatorConfig


def http_error(status: int = 500) -> HttpError:
    return HttpError(SimpleNamespace(status=status, reason="Backend Error"), b"boom")


class _Request:
    def __init__(self, fn: Callable[[], Dict[str, Any]]):
        self._fn = fn

    def execute(self) -> Dict[str, Any]:
        return self._fn()


class FakeCalendarService:
    """Stands in for googleapiclient's calendar v3 resource; inserted events become listable."""

    def __init__(self, items: Optional[Dict[str, List[Dict[str, Any]]]] = None, page_size: Optional[int] = None):
        self.items: Dict[str, List[Dict[str, Any]]] = {k: list(v) for k, v in (items or {}).items()}
        self.page_size = page_size
        self.list_calls: List[Dict[str, Any]] = []
        self.insert_calls: List[Dict[str, Any]] = []
        self.fail_list = False
        self.fail_insert_summaries: set = set()
        self.list_errors: Dict[str, Exception] = {}
        self.insert_errors: Dict[str, Exception] = {}

    def events(self) -> "FakeCalendarService":
        return self

    def list(self, **kwargs: Any) -> _Request:
        self.list_calls.append(kwargs)

        def run() -> Dict[str, Any]:
            if kwargs["calendarId"] in self.list_errors:
                raise self.list_errors[kwargs["calendarId"]]
            if self.fail_list:
                raise http_error(503)
            items = self.items.get(kwargs["calendarId"], [])
            if self.page_size is None:
                return {"items": list(items)}
            start = int(kwargs.get("pageToken") or 0)
            end = start + self.page_size
            resp: Dict[str, Any] = {"items": items[start:end]}
            if end < len(items):
                resp["nextPageToken"] = str(end)
            return resp

        return _Request(run)

    def insert(self, calendarId: str, body: Dict[str, Any]) -> _Request:
        self.insert_calls.append({"calendarId": calendarId, "body": body})

        def run() -> Dict[str, Any]:
            if body["summary"] in self.insert_errors:
                raise self.insert_errors[body["summary"]]
            if body["summary"] in self.fail_insert_summaries:
                raise http_error(500)
            self.items.setdefault(calendarId, []).append(body)
            return body

        return _Request(run)


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, responses: Optional[Dict[str, FakeResponse]] = None, default: Optional[FakeResponse] = None):
        self.responses = responses or {}
        self.default = default or FakeResponse({"activities": []})
        self.calls: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None

    def get(self, url: str, timeout: float = None) -> FakeResponse:
        self.calls.append({"url": url, "timeout": timeout})
        if self.error is not None:
            raise self.error
        for fragment, response in self.responses.items():
            if fragment in url:
                return response
        return self.default

    def close(self) -> None:
        pass


def activity(
    name: str,
    url: str,
    start: str = "2024-03-02T10:00:00Z",
    activity_format: str = "tcg_std",
    activity_type: str = "tournament",
) -> Dict[str, Any]:
    return {
        "name": name,
        "activity_format": activity_format,
        "activity_type": activity_type,
        "start_datetime": start,
        "address": {"full_address": "123 Main St, Austin, TX"},
        "pokemon_url": url,
    }


@pytest.fixture
def austin() -> AreaConfig:
    return AreaConfig(
        label="Austin",
        calendar_id="austin@group.calendar.google.com",
        location_query="latitude=30.267153&longitude=-97.7430608&distance=100",
        time_offset_hours=5,
        time_zone="America/Chicago",
    )


@pytest.fixture
def locator_cfg() -> LocatorConfig:
    return LocatorConfig(
        base_url="https://op-core.pokemon.com/api/v2/event_locator/search/",
        timeout_seconds=15,
        activity_format="tcg_std",
        activity_type="tournament",
        name_keywords=["challenge", "cup"],
    )
