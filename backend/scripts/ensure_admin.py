"""Grant admin rights to an existing account: python scripts/ensure_admin.py <username>."""

from __future__ import annotations

import asyncio
import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parent.parent))

from app.domain.identity import policy  # noqa: E402
from app.domain.identity.repo import UserRepository  # noqa: E402
from app.infra.postgres import close_pool, init_pool  # noqa: E402


async def ensure_admin(username: str) -> None:
    await init_pool()
    try:
        repo = UserRepository()
        user = await repo.get_by_username(policy.normalise_username(username))
        if user is None:
            raise SystemExit(f"user {username!r} not found")
        if user.is_admin:
            print(f"{user.username} is already an admin")
            return
        await repo.update(user.id, {"is_admin": True})
        print(f"Granted admin to {user.username} (id={user.id})")
    finally:
        await close_pool()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        raise SystemExit("usage: ensure_admin.py <username>")
    asyncio.run(ensure_admin(sys.argv[1]))
