#!/usr/bin/env python3
"""
Standalone feed fetcher that writes the latest feed snapshot to JSON.

Intended for scheduled runs (e.g., GitHub Actions cron) so a static
front-end can show a followed-athletes feed without a live server.
"""

import argparse
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from orbit import BackendConfig, OrbitBackend, build_feed_card

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch an Orbit user's feed and write JSON output.")
    parser.add_argument(
        "--output",
        default="public/data/feed.json",
        help="Path to write the feed JSON (default: public/data/feed.json).",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="Number of spaces for JSON indentation (default: 2).",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of feed items (default: ORBIT_FEED_LIMIT or 50).",
    )
    return parser.parse_args()


def build_snapshot(backend: OrbitBackend, email: str, password: str, limit=None) -> dict:
    auth = backend.sign_in(email, password)
    try:
        feed = backend.fetch_user_feed(auth.user_id, access_token=auth.access_token, limit=limit)
    finally:
        backend.sign_out(auth.access_token)

    return {
        "feed": [build_feed_card(item).as_dict() for item in feed],
        "last_update": datetime.now(timezone.utc).isoformat(),
        "user_id": auth.user_id,
    }


def main():
    args = parse_args()
    email = os.getenv("ORBIT_EMAIL")
    password = os.getenv("ORBIT_PASSWORD")
    if not all([email, password]):
        raise SystemExit("Missing required environment variables: ORBIT_EMAIL, ORBIT_PASSWORD")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    backend = OrbitBackend(BackendConfig.from_env())
    snapshot = build_snapshot(backend, email, password, limit=args.limit)

    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(snapshot, handle, indent=args.indent)
        handle.write("\n")

    logger.info("Feed snapshot written to %s (%s items)", output_path, len(snapshot["feed"]))


if __name__ == "__main__":
    main()
