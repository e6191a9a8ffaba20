#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from greasedesk.core.config import DATABASE_URL, DEV_BOOTSTRAP_ALLOW, IS_DEV  # noqa: E402
from greasedesk.core.database import Base, dispose_database, get_session_factory, init_database  # noqa: E402
from greasedesk.core.logging_setup import configure_logging  # noqa: E402
import greasedesk.models  # noqa: E402,F401
from greasedesk.services.demo_seed import seed_demo  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed a fully onboarded demo garage.")
    parser.add_argument("--email", default="demo@greasedesk.com", help="Owner email")
    parser.add_argument("--password", default="greasedesk-demo", help="Owner password")
    parser.add_argument("--name", default="Lewis", help="Owner name")
    parser.add_argument("--garage", default="AutoFix", help="Garage (group) name")
    parser.add_argument("--site", default="AutoFix Birmingham", help="Site name")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables from the models before seeding (SQLite dev databases)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Allow running outside dev without DEV_BOOTSTRAP_ALLOW=1",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    if not (IS_DEV or DEV_BOOTSTRAP_ALLOW) and not args.force:
        print("Demo seeding is disabled outside dev. Set DEV_BOOTSTRAP_ALLOW=1 or use --force.")
        return 1

    configure_logging()
    engine = init_database(DATABASE_URL)
    if args.create_tables:
        Base.metadata.create_all(bind=engine)

    db = get_session_factory()()
    try:
        summary = seed_demo(
            db,
            email=args.email,
            name=args.name,
            password=args.password,
            garage_name=args.garage,
            site_name=args.site,
        )
    finally:
        db.close()
        dispose_database()

    print(
        f"Demo garage ready: group={summary.group_id} site={summary.site_id} "
        f"owner={args.email} bookings_created={summary.bookings_created}"
    )
    if IS_DEV:
        print(f"Sign in with {args.email} / {args.password}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
