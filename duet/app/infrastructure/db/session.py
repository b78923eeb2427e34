from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from .base import Base


def build_engine(db_url: str) -> AsyncEngine:
    engine_kwargs: dict = {"pool_pre_ping": True}
    if db_url.startswith("sqlite"):
        # pool sizing is not supported by sqlite; in-memory databases need one shared connection
        if ":memory:" in db_url:
            engine_kwargs.update({"poolclass": StaticPool, "connect_args": {"check_same_thread": False}})
    else:
        engine_kwargs.update({
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
        })
    return create_async_engine(db_url, **engine_kwargs)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    from . import models  # noqa: F401  registers tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
