"""Bootstrap an administrator account.

    python -m tourbook.scripts.create_admin --name "Ada" --email ada@example.com --password secret123
"""

import argparse
import asyncio
import logging
import sys

from tourbook.core import BaseError
from tourbook.infrastructure.database import AsyncSessionFactory, engine
from tourbook.services.admin_service import AdminService

logger = logging.getLogger("tourbook.create_admin")


async def create_admin(name: str, email: str, password: str) -> str:
    async with AsyncSessionFactory() as session:
        user = await AdminService(session).create_admin(name=name, email=email, password=password)
        await session.commit()
        return user.id


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a Tourbook administrator")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    async def _run():
        try:
            return await create_admin(args.name, args.email, args.password)
        finally:
            await engine.dispose()

    try:
        user_id = asyncio.run(_run())
    except BaseError as exc:
        logger.error("Could not create admin: %s", exc.message)
        return 1

    logger.info("Admin %s created with id %s", args.email, user_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
