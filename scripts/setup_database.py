"""Apply the SQL migrations in db/migrations to the configured database.

Statements that fail (typically because the object already exists) are
skipped so the script can be re-run against an initialized database.
"""

import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent / "db" / "migrations"


def _extract_statements(sql: str) -> list[str]:
    """Split SQL on ';' and strip comment-only chunks, returning executable statements."""
    statements = []
    for chunk in sql.split(";"):
        sql_lines = [line for line in chunk.splitlines() if not line.strip().startswith("--")]
        stmt = "\n".join(sql_lines).strip()
        if stmt:
            statements.append(stmt)
    return statements


async def setup() -> None:
    """Create the service tables if they don't exist."""
    from sqlalchemy import text
    from sqlalchemy.ext.asyncio import create_async_engine

    from app.core.config import get_settings

    config = get_settings().database
    missing = config.missing_fields()
    if missing:
        logger.error("Database configuration incomplete: missing %s", ", ".join(missing))
        sys.exit(1)

    engine = create_async_engine(config.async_url)

    # One transaction per file so a failure in one file does not roll back
    # tables created by a prior file.
    for migration_file in sorted(MIGRATIONS_DIR.glob("*.sql")):
        logger.info("Running migration: %s", migration_file.name)
        sql = migration_file.read_text()
        async with engine.begin() as conn:
            for statement in _extract_statements(sql):
                try:
                    await conn.execute(text("SAVEPOINT _migration_stmt"))
                    await conn.execute(text(statement))
                    await conn.execute(text("RELEASE SAVEPOINT _migration_stmt"))
                except Exception as e:
                    await conn.execute(text("ROLLBACK TO SAVEPOINT _migration_stmt"))
                    logger.warning("Statement skipped (may already exist): %s", e)

    await engine.dispose()
    logger.info("Database setup complete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(setup())
