from __future__ import annotations


class SyncError(Exception):
    """Base class for failures raised while syncing events."""


class ConfigError(SyncError):
    pass


class AuthError(SyncError):
    pass


class NetworkError(SyncError):
    """Upstream event-locator request failed or returned an unusable body."""


class CalendarApiError(SyncError):
    pass
