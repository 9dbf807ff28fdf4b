"""
Selah Backend — Database
=========================

Async SQLAlchemy 2.0 plumbing shared by the API, the seeder and Alembic:

    engine                 one per process, built from DATABASE_URL
    async_session_factory  sessions with expire_on_commit=False
    Base                   declarative base; Base.metadata is the schema
    get_db_session         FastAPI dependency, one transaction per request

Pool sizing only applies to server databases; SQLite's pool classes reject
pool_size/max_overflow, so sqlite URLs get the defaults.
"""

from typing import Any, AsyncIterator, Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


def engine_options(url: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

# Response models read ORM attributes after the request's commit
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """
    Commit when the route returns, roll back when it raises.

    Services only flush, so a request's writes land together or not at all.
    Routes that must persist state before re-raising (a failed transcript)
    commit explicitly first.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    await engine.dispose()
