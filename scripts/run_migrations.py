#!/usr/bin/env python3
"""
Apply Alembic migrations for the database profile store.
Run at container startup when ENGAGEMENT_STORE=database.
"""

import os
import subprocess
import sys
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from tenacity import RetryError, retry, retry_if_exception_type, stop_after_attempt, wait_fixed

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import get_config
from core.logger import setup_logging, get_logger
from modules.database.storage import DatabaseProfileStore

logger = get_logger(__name__)

DB_WAIT_ATTEMPTS = 30
DB_WAIT_SECONDS = 2


def _log_wait(retry_state) -> None:
    logger.info(
        "Waiting for database",
        attempt=retry_state.attempt_number,
        max_attempts=DB_WAIT_ATTEMPTS
    )


@retry(
    stop=stop_after_attempt(DB_WAIT_ATTEMPTS),
    wait=wait_fixed(DB_WAIT_SECONDS),
    retry=retry_if_exception_type(OperationalError),
    before_sleep=_log_wait
)
def _ping_database(store: DatabaseProfileStore) -> None:
    with store.engine.connect() as connection:
        connection.execute(text("SELECT 1"))


def wait_for_database(store: DatabaseProfileStore) -> bool:
    """Block until the database accepts connections or attempts run out."""
    try:
        _ping_database(store)
    except RetryError as e:
        logger.error("Database unreachable", error=str(e.last_attempt.exception()))
        return False
    logger.info("Database is ready")
    return True


def run_migrations() -> None:
    """Wait for the database, then run ``alembic upgrade head``."""
    config = get_config()
    setup_logging(log_level=config.log_level, log_file=config.log_file)

    store = DatabaseProfileStore()
    if not wait_for_database(store):
        sys.exit(1)
    store.engine.dispose()

    # alembic/env.py reads DATABASE_URL
    env = dict(os.environ, DATABASE_URL=store.database_url)

    logger.info("Applying migrations")
    result = subprocess.run(
        ["alembic", "upgrade", "head"],
        cwd=project_root,
        env=env,
        capture_output=True,
        text=True
    )

    for line in (result.stdout + result.stderr).splitlines():
        if line.strip():
            logger.info("alembic", message=line)

    if result.returncode != 0:
        logger.error("Migration failed", returncode=result.returncode)
        sys.exit(result.returncode)

    logger.info("Migrations complete")


if __name__ == "__main__":
    run_migrations()
