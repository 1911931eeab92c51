"""Create a super admin account, or promote an existing one.

Usage: python scripts/ensure_superadmin.py <email> [password]
"""

import asyncio
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.append(str(BACKEND_ROOT))

from clubhub.domain.repo import ClubhubRepository
from clubhub.infra.password import hash_password
from clubhub.infra.postgres import close_pool, get_pool


async def ensure_superadmin(email: str, password: str | None) -> None:
    pool = await get_pool()
    try:
        repo = ClubhubRepository(pool)
        user = await repo.get_user_by_email(email)
        if user is None:
            user = await repo.create_user(
                email=email,
                password_hash=hash_password(password) if password else None,
                is_super_admin=True,
            )
            print(f"Created super admin {user.email}")
            return
        if user.is_super_admin:
            print(f"{user.email} is already a super admin")
            return
        await repo.set_super_admin(user.id, True)
        print(f"Promoted {user.email} to super admin")
    finally:
        await close_pool()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/ensure_superadmin.py <email> [password]")
        sys.exit(1)
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(ensure_superadmin(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None))
