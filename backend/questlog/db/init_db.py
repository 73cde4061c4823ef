import structlog
from sqlalchemy.ext.asyncio import AsyncEngine

from questlog.db import models  # noqa: F401
from questlog.db.base import Base

logger = structlog.get_logger(__name__)


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database schema ready", backend=engine.url.get_backend_name())
