import asyncio
from datetime import datetime, timezone
from typing import AsyncGenerator, Awaitable, Callable, TypeVar
from sqlalchemy.exc import DataError, DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from app.core.config import settings
from app.core.exceptions import ConflictError, TransientStorageError, ValidationError
from app.core.logging import logger

T = TypeVar("T")


def engine_options(url: str) -> dict:
    """Connection pooling and timeouts for the configured backend."""
    if url.startswith("sqlite"):
        return {"echo": False}
    return {
        "echo": False,
        "pool_size": 20,              # Number of permanent connections to maintain
        "max_overflow": 10,           # Maximum number of connections to allow beyond pool_size
        "pool_pre_ping": True,        # Verify connections before using them
        "pool_recycle": 3600,         # Recycle connections after 1 hour
        "pool_timeout": settings.STORAGE_TIMEOUT_SECONDS,
        "connect_args": {"command_timeout": settings.STORAGE_TIMEOUT_SECONDS},
    }


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


async def _rollback(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except DBAPIError as e:
        logger.error(f"Rollback failed after storage error: {e}")


async def run_atomic(session: AsyncSession, work: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
    """
    Run ``work`` and commit it as one transaction, bounded by STORAGE_TIMEOUT_SECONDS.

    Any failure rolls the whole unit back. Timeouts and connection failures
    surface as TransientStorageError, lost unique-key races as ConflictError,
    out-of-range values as ValidationError.
    """
    async def unit() -> T:
        result = await work(*args, **kwargs)
        await session.commit()
        return result

    try:
        return await asyncio.wait_for(unit(), timeout=settings.STORAGE_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        await _rollback(session)
        logger.warning(f"Storage operation {getattr(work, '__name__', work)} timed out")
        raise TransientStorageError("Storage operation timed out, please retry")
    except IntegrityError as e:
        await _rollback(session)
        logger.warning(f"Integrity error in {getattr(work, '__name__', work)}: {e.orig}")
        raise ConflictError() from e
    except (DataError, OverflowError) as e:
        await _rollback(session)
        logger.warning(f"Value out of range in {getattr(work, '__name__', work)}: {e}")
        raise ValidationError("A numeric value is out of range") from e
    except (OperationalError, InterfaceError) as e:
        await _rollback(session)
        logger.error(f"Storage failure in {getattr(work, '__name__', work)}: {e}")
        raise TransientStorageError() from e
    except DBAPIError as e:
        await _rollback(session)
        if e.connection_invalidated:
            raise TransientStorageError() from e
        raise
    except BaseException:
        await _rollback(session)
        raise


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
