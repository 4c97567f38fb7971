from __future__ import annotations

import logging
import os
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from .auth import get_credentials
from .calendar_google import build_calendar_service
from .config import load_config
from .errors import AuthError, ConfigError
from .locator import make_session
from .models import AreaResult
from .sync import sync_areas

logger = logging.getLogger(__name__)

CONFIG_PATH_DEFAULT = "config.yaml"
CREDENTIALS_PATH_DEFAULT = "credentials.json"
TOKEN_PATH_DEFAULT = "token.json"


def run_once(
    config_path: str = CONFIG_PATH_DEFAULT,
    dry_run: bool = False,
    only: Optional[Sequence[str]] = None,
) -> List[AreaResult]:
    load_dotenv()
    cfg = load_config(config_path)

    areas = cfg.areas
    if only:
        wanted = {label.lower() for label in only}
        areas = [a for a in areas if a.label.lower() in wanted]
        missing = wanted - {a.label.lower() for a in areas}
        if missing:
            raise ConfigError(f"Unknown area(s): {', '.join(sorted(missing))}")

    creds_path = os.environ.get("GOOGLE_CREDENTIALS_JSON", CREDENTIALS_PATH_DEFAULT)
    token_path = os.environ.get("GOOGLE_TOKEN_JSON", TOKEN_PATH_DEFAULT)
    creds = get_credentials(creds_path, token_path)
    service = build_calendar_service(creds)

    session = make_session()
    try:
        results = sync_areas(areas, service, session, cfg.locator, dry_run=dry_run)
    finally:
        session.close()

    inserted = sum(r.inserted for r in results)
    failed_areas = [r.label for r in results if r.error]
    logger.info(
        "Synced %d areas; %d events added, %d insert failures, %d areas aborted",
        len(results),
        inserted,
        sum(r.failed for r in results),
        len(failed_areas),
    )
    return results


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse

    ap = argparse.ArgumentParser(description="Copy upcoming Pokemon TCG challenges and cups into Google Calendars")
    ap.add_argument("--config", default=CONFIG_PATH_DEFAULT)
    ap.add_argument("--dry-run", action="store_true", help="Fetch and compare, but insert nothing")
    ap.add_argument("--area", action="append", dest="areas", metavar="LABEL", help="Only sync this area (repeatable)")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args(argv)

    level = getattr(logging, args.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # basicConfig is a no-op when the root logger already has handlers.
    logging.getLogger().setLevel(level)

    try:
        results = run_once(config_path=args.config, dry_run=args.dry_run, only=args.areas)
    except (AuthError, ConfigError) as e:
        logger.error("%s", e)
        return 2

    return 0 if all(r.succeeded for r in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
