import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from .core.config import settings
from .core.log_config import setup_logging
from .db.session import engine, init_db
from .api.v1 import health, prompts, query

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Otherwise the table is created on the first query that needs it
    if settings.INIT_DB_ON_STARTUP:
        await init_db(engine, seed=True)
        logger.info("Database initialised on startup")
    yield
    await engine.dispose()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.include_router(health.router,  prefix=settings.API_V1_PREFIX)
app.include_router(query.router,   prefix=settings.API_V1_PREFIX)
app.include_router(prompts.router, prefix=settings.API_V1_PREFIX)
