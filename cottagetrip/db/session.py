from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def build_engine(url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    return create_async_engine(url, echo=echo, **kwargs)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    # rows are re-read explicitly after commit, keep loaded state around
    return async_sessionmaker(engine, expire_on_commit=False)
