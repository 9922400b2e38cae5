from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from libs.db.config import AsyncSessionLocal


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an async database session.

    Uncommitted work is rolled back when the request ends, so an operation
    that raises midway leaves no partial writes behind.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit the enclosed work as one unit, rolling everything back on error.

    Usage:
        async with atomic(db):
            await borrow_cup(db, ...)
    """
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise


async def conditional_update(db: AsyncSession, model, *criteria, **values) -> bool:
    """Compare-and-set: ``UPDATE model SET values WHERE criteria``.

    Returns False when no row matched, meaning a concurrent request changed
    the row first. Pending ORM changes are flushed before the statement.
    """
    await db.flush()
    result = await db.execute(
        update(model)
        .where(*criteria)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0
