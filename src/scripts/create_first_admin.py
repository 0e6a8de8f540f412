import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db.database import local_session
from app.core.security import get_password_hash
from app.models.user import ROLE_ADMIN, Profile, User, UserRole

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def create_first_admin(session: AsyncSession) -> bool:
    """Creates the first admin from environment settings. Returns False if it already exists."""
    email = settings.ADMIN_EMAIL.strip().lower()
    result = await session.execute(select(User).filter_by(email=email))
    if result.scalar_one_or_none() is not None:
        logger.info(f"Admin user '{email}' already exists.")
        return False

    user = User(email=email, hashed_password=get_password_hash(settings.ADMIN_PASSWORD))
    session.add(user)
    await session.flush()
    session.add(Profile(user_id=user.id, email=email, full_name=settings.ADMIN_NAME, email_verified=True))
    session.add(UserRole(user_id=user.id, role=ROLE_ADMIN))
    await session.flush()
    logger.info(f"Admin user '{email}' created successfully.")
    return True


async def main():
    async with local_session() as session:
        await create_first_admin(session)
        await session.commit()


if __name__ == "__main__":
    asyncio.run(main())
