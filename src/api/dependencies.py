"""FastAPI dependency injection helpers."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database import async_session_factory


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; roll back if the request fails."""
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
