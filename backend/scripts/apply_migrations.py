"""Apply SQL files from backend/migrations in order, recording applied versions."""

from __future__ import annotations

import asyncio
import pathlib
import sys

import asyncpg

sys.path.append(str(pathlib.Path(__file__).resolve().parent.parent))

from app.settings import settings  # noqa: E402

MIGRATIONS_DIR = pathlib.Path(__file__).resolve().parent.parent / "migrations"


async def wait_for_db(retries: int = 30, delay: int = 2) -> asyncpg.Connection:
    for i in range(retries):
        try:
            return await asyncpg.connect(settings.postgres_url)
        except (OSError, asyncpg.CannotConnectNowError):
            print(f"Database starting up... waiting {delay}s ({i + 1}/{retries})")
            await asyncio.sleep(delay)
    raise SystemExit("Could not connect to database after multiple retries")


async def main() -> None:
    paths = sorted(MIGRATIONS_DIR.glob("*.sql"))
    if not paths:
        raise SystemExit("no migration files found")
    conn = await wait_for_db()
    try:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version TEXT PRIMARY KEY,
                applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
            """
        )
        applied = {row["version"] for row in await conn.fetch("SELECT version FROM schema_migrations")}
        for path in paths:
            version = path.name.split("_", 1)[0]
            if version in applied:
                continue
            async with conn.transaction():
                await conn.execute(path.read_text())
                await conn.execute("INSERT INTO schema_migrations (version) VALUES ($1)", version)
            print(f"Applied {path.name}")
    finally:
        await conn.close()


if __name__ == "__main__":
    asyncio.run(main())
