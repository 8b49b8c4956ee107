"""Database engine, session factory, and declarative base.

All storefront tables share one `Base`. Tenant isolation is row-level:
every store-owned row carries a `store_id` and every write is scoped by the
caller's own store id (resolved server-side, never taken from the request).

Session dependency for FastAPI:
  - get_db()  → yields an AsyncSession, commits on success, rolls back on error
"""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=20,
    max_overflow=10,
)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Timezone-aware UTC now, used for column defaults and stamps."""
    return datetime.now(timezone.utc)


async def get_db() -> AsyncSession:
    """Yield a request-scoped session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
