from __future__ import annotations
import json
import logging
import os
from typing import Any, Dict, Optional

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .errors import AuthError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]


def _load_saved_credentials(token_path: str) -> Optional[Credentials]:
    if not os.path.exists(token_path):
        return None
    try:
        # Expiry is not checked here; google-auth refreshes on first use.
        return Credentials.from_authorized_user_file(token_path, SCOPES)
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable token file %s: %s", token_path, e)
        return None


def _load_client_key(credentials_path: str) -> Dict[str, Any]:
    try:
        with open(credentials_path, encoding="utf-8") as f:
            keys = json.load(f)
    except (OSError, ValueError) as e:
        raise AuthError(f"Cannot read client secrets {credentials_path}: {e}") from e

    key = (keys.get("installed") or keys.get("web")) if isinstance(keys, dict) else None
    if not isinstance(key, dict) or "client_id" not in key or "client_secret" not in key:
        raise AuthError(f"Client secrets {credentials_path} must describe an installed or web app")
    return key


def save_credentials(token_path: str, key: Dict[str, Any], creds: Credentials) -> None:
    payload = {
        "type": "authorized_user",
        "client_id": key["client_id"],
        "client_secret": key["client_secret"],
        "refresh_token": creds.refresh_token,
    }
    parent = os.path.dirname(token_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(token_path, "w", encoding="utf-8") as f:
        json.dump(payload, f)


def get_credentials(credentials_path: str, token_path: str) -> Credentials:
    """
    Returns cached credentials from token_path, or runs the browser consent
    flow and caches the result there.
    """
    creds = _load_saved_credentials(token_path)
    if creds is not None:
        return creds

    key = _load_client_key(credentials_path)
    try:
        flow = InstalledAppFlow.from_client_secrets_file(credentials_path, SCOPES)
        creds = flow.run_local_server(port=0)
    except Exception as e:
        raise AuthError(f"Google authorization flow failed: {e}") from e

    if creds.refresh_token:
        save_credentials(token_path, key, creds)
        logger.info("Saved Google token to %s", token_path)
    else:
        logger.warning("Authorization returned no refresh token; %s not written", token_path)
    return creds
