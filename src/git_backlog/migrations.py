"""Placeholder database migration runner for the pre-commit pipeline.

No database is contacted: the runner makes sure a migrations directory
exists, walks the ``*.sql`` files in order, sleeps to simulate the work and
records the resulting schema version next to the project.
"""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import Field

from .models import CamelModel

logger = logging.getLogger(__name__)


MIGRATIONS_DIR = "migrations"
SCHEMA_VERSION_FILE = "schema-version.json"
EXAMPLE_MIGRATION = "001_create_backlog_table.sql"

EXAMPLE_MIGRATION_SQL = """-- Migration: Create backlog table
-- Created: {created}

CREATE TABLE IF NOT EXISTS backlog_items (
  id SERIAL PRIMARY KEY,
  title VARCHAR(255) NOT NULL,
  priority VARCHAR(50) NOT NULL,
  status VARCHAR(50) DEFAULT 'todo',
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
  updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_backlog_status ON backlog_items(status);
CREATE INDEX IF NOT EXISTS idx_backlog_priority ON backlog_items(priority);
"""


class SchemaVersion(CamelModel):
    """Schema version recorded after a migration run."""

    version: int = Field(description="Number of applied migration files")
    last_migration: str = Field(description="File name of the last applied migration")
    updated_at: datetime = Field(description="When the version was recorded")


def ensure_migrations_dir(migrations_dir: Path) -> None:
    """Create ``migrations_dir`` with an example migration if it is missing."""
    if migrations_dir.exists():
        return

    logger.info(f"Creating migrations directory: {migrations_dir}")
    migrations_dir.mkdir(parents=True)
    created = datetime.now(timezone.utc).isoformat()
    (migrations_dir / EXAMPLE_MIGRATION).write_text(
        EXAMPLE_MIGRATION_SQL.format(created=created), encoding="utf-8"
    )
    logger.info(f"Created example migration file: {EXAMPLE_MIGRATION}")


def pending_migrations(migrations_dir: Path) -> list[str]:
    """Names of the ``.sql`` files in ``migrations_dir``, sorted."""
    return sorted(p.name for p in migrations_dir.iterdir() if p.is_file() and p.suffix == ".sql")


def run_migrations(
    project_root: str | Path,
    connect_delay: float = 1.0,
    migration_delay: float = 0.5,
) -> Optional[SchemaVersion]:
    """
    Run the placeholder migrations for a project.

    Args:
        project_root: Directory holding ``migrations/`` and ``schema-version.json``
        connect_delay: Seconds spent "connecting" to the database
        migration_delay: Seconds spent on each migration file

    Returns:
        The recorded SchemaVersion, or None when there are no migration files

    Raises:
        OSError: When the migrations directory or version file cannot be written
    """
    project_root = Path(project_root)
    migrations_dir = project_root / MIGRATIONS_DIR

    logger.info(f"Checking migrations directory: {migrations_dir}")
    ensure_migrations_dir(migrations_dir)

    files = pending_migrations(migrations_dir)
    if not files:
        logger.info("No migration files found")
        return None

    logger.info(f"Found {len(files)} migration file(s): {', '.join(files)}")

    logger.info("Connecting to database...")
    time.sleep(connect_delay)

    for name in files:
        logger.info(f"Running migration: {name}")
        time.sleep(migration_delay)
        logger.info(f"Migration completed: {name}")

    schema_version = SchemaVersion(
        version=len(files),
        last_migration=files[-1],
        updated_at=datetime.now(timezone.utc),
    )
    (project_root / SCHEMA_VERSION_FILE).write_text(
        json.dumps(schema_version.model_dump(mode="json", by_alias=True), indent=2),
        encoding="utf-8",
    )
    logger.info(f"Schema version updated to: {schema_version.version}")
    return schema_version


def main(argv: Optional[list[str]] = None) -> int:
    """Run migrations for the project in the given directory (default: cwd)."""
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=logging.INFO)

    project_root = Path(argv[0]) if argv else Path.cwd()
    logger.info("Running database migrations...")
    try:
        run_migrations(project_root)
    except OSError as e:
        logger.error(f"Database migration failed: {e}")
        return 1

    logger.info("Database script execution completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
