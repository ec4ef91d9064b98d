"""Bring the recommendation read tables up to date.

Deploys run this before the API starts. It waits for the database, applies
Alembic revisions and then checks that every table the recommenders query is
present, so a half-applied schema fails the deploy instead of degrading every
request at runtime. ``--verify-only`` skips the upgrade and just checks.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from learnrec.config import Settings
from learnrec.db import models  # noqa: F401
from learnrec.db.base import Base

LOGGER = logging.getLogger("learnrec.migrations")
BACKEND_ROOT = Path(__file__).resolve().parent.parent
URL_PLACEHOLDER = "%(LEARNREC_DATABASE_URL)s"
READ_TABLES = tuple(sorted(Base.metadata.tables))


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Migrate and verify the recommendation read tables.")
    parser.add_argument("--revision", default=os.getenv("LEARNREC_DB_MIGRATION_REVISION", "head"))
    parser.add_argument(
        "--timeout",
        type=int,
        default=int(os.getenv("LEARNREC_DB_MIGRATION_TIMEOUT", "60")),
        help="Seconds to wait for the database before giving up.",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=float(os.getenv("LEARNREC_DB_MIGRATION_POLL_INTERVAL", "3")),
    )
    parser.add_argument("--config", default=str(BACKEND_ROOT / "alembic.ini"))
    parser.add_argument(
        "--verify-only",
        action="store_true",
        help="Only check that the read tables exist; do not upgrade.",
    )
    return parser.parse_args(argv)


def get_alembic_config(config_path: str) -> Config:
    config = Config(config_path)
    config.set_main_option("script_location", str(BACKEND_ROOT / "alembic"))
    return config


def resolve_database_url(config: Config) -> str:
    """Use the URL from alembic.ini unless it is the env placeholder, then fall back to settings."""
    url = config.get_main_option("sqlalchemy.url")
    if url and url != URL_PLACEHOLDER:
        return url
    settings_url = Settings().database_url
    if not settings_url:
        raise RuntimeError("LEARNREC_DATABASE_URL must be set before running migrations.")
    config.set_main_option("sqlalchemy.url", settings_url)
    return settings_url


def wait_for_database(database_url: str, *, timeout: int, poll_interval: float) -> None:
    deadline = time.time() + timeout
    engine = create_engine(database_url, future=True, pool_pre_ping=True)
    attempts = 0
    try:
        while True:
            attempts += 1
            try:
                with engine.connect() as connection:
                    connection.execute(text("SELECT 1"))
                LOGGER.info("Recommendation database reachable after %d attempt(s).", attempts)
                return
            except OperationalError as exc:
                last_error: SQLAlchemyError = exc
                LOGGER.warning("Recommendation database not ready (attempt %d): %s", attempts, exc)
            except SQLAlchemyError as exc:
                raise RuntimeError("Recommendation database rejected the readiness probe.") from exc
            if time.time() >= deadline:
                raise RuntimeError(
                    f"Recommendation database unreachable after {attempts} attempt(s)."
                ) from last_error
            time.sleep(poll_interval)
    finally:
        engine.dispose()


def missing_read_tables(database_url: str) -> List[str]:
    engine = create_engine(database_url, future=True)
    try:
        present = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    return [table for table in READ_TABLES if table not in present]


def verify_read_tables(database_url: str) -> None:
    missing = missing_read_tables(database_url)
    if missing:
        raise RuntimeError(f"Recommendation read tables missing after migration: {', '.join(missing)}")
    LOGGER.info("All %d recommendation read tables present.", len(READ_TABLES))


def run_migrations(
    revision: str,
    *,
    timeout: int,
    poll_interval: float,
    config: Optional[Config] = None,
    verify_only: bool = False,
) -> None:
    config = config or get_alembic_config(str(BACKEND_ROOT / "alembic.ini"))
    database_url = resolve_database_url(config)
    wait_for_database(database_url, timeout=timeout, poll_interval=poll_interval)
    if not verify_only:
        LOGGER.info("Upgrading recommendation schema to %s", revision)
        command.upgrade(config, revision)
    verify_read_tables(database_url)


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(
        level=os.getenv("LEARNREC_DB_MIGRATION_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    args = parse_args(argv)
    try:
        run_migrations(
            args.revision,
            timeout=args.timeout,
            poll_interval=args.poll_interval,
            config=get_alembic_config(args.config),
            verify_only=args.verify_only,
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Migration run failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
