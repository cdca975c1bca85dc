import logging
from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.schema import CreateTable
from sqlmodel.ext.asyncio.session import AsyncSession
from ..core.config import settings
from .models import LegalPrompt, SEED_PROMPTS

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

AsyncSessionLocal = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(bind: AsyncEngine = engine, *, seed: bool = False) -> None:
    """Create the legalprompt table if it is missing, optionally seeding it.

    Safe to call concurrently: the DDL is CREATE TABLE IF NOT EXISTS and the
    seed rows only go into an empty table.
    """
    table = LegalPrompt.__table__
    async with bind.begin() as conn:
        await conn.execute(CreateTable(table, if_not_exists=True))
        if not seed:
            return
        existing = await conn.scalar(select(func.count()).select_from(table))
        if existing:
            logger.debug("legalprompt already holds %s rows, skipping seed", existing)
            return
        await conn.execute(insert(table), SEED_PROMPTS)
        logger.info("Seeded legalprompt with %d rows", len(SEED_PROMPTS))


def get_engine() -> AsyncEngine:
    return engine


async def get_session():
    async with AsyncSessionLocal() as session:
        yield session
