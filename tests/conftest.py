import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from lexsql.main import app
from lexsql.db.session import get_engine, get_session, init_db
from lexsql.services.provider import get_generator


class FakeGenerator:
    """Stands in for the language model: canned answers keyed by schema.

    A value may be a dict (validated into the schema), a schema instance, or
    an exception to raise. Unknown schemas fail like a broken upstream call.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    async def generate(self, system, prompt, schema):
        self.calls.append({"system": system, "prompt": prompt, "schema": schema})
        if schema not in self.responses:
            raise RuntimeError(f"no canned response for {schema.__name__}")
        value = self.responses[schema]
        if isinstance(value, Exception):
            raise value
        if isinstance(value, dict):
            return schema.model_validate(value)
        return value


# A fresh SQLite file per test, the table does not exist yet
@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'lexsql.db'}", echo=False)
    yield engine
    await engine.dispose()


# Same database with the table created and the three seed rows in it
@pytest_asyncio.fixture(scope="function")
async def seeded_engine(engine):
    await init_db(engine, seed=True)
    return engine


@pytest_asyncio.fixture(scope="function")
async def fake_generator():
    return FakeGenerator()


@pytest_asyncio.fixture(scope="function")
async def client(engine, fake_generator):
    SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with SessionLocal() as session:
            yield session

    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_generator] = lambda: fake_generator

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
