import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from brewqc.db import get_db
from brewqc.main import app
from brewqc.models import Base, Batch, BatchStatus, QualityCheck, Recipe, User
from brewqc.services import QualityService


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def recipe(db):
    recipe = Recipe(
        name="Harvest Pale Ale",
        style="American Pale Ale",
        yeast_strain="US-05",
        fermentation_temp=18.5,
        estimated_days=14,
    )
    db.add(recipe)
    await db.commit()
    return recipe


@pytest.fixture
async def batch(db, recipe):
    batch = Batch(
        batch_number="B-2026-001",
        recipe_id=recipe.id,
        status=BatchStatus.FERMENTING,
        volume=500.0,
        brew_date=datetime.now(timezone.utc) - timedelta(days=7),
        original_gravity=1.050,
    )
    db.add(batch)
    await db.commit()
    return batch


@pytest.fixture
async def inspector(db):
    user = User(
        email="dana@brewery.test",
        first_name="Dana",
        last_name="Brewer",
        role="quality",
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
def service(db):
    return QualityService(db)


@pytest.fixture
def make_check(db, inspector):
    """Insert a check directly, with control over its timestamp."""

    async def _make_check(
        batch,
        check_type,
        passed,
        parameters=None,
        notes=None,
        timestamp=None,
    ):
        check = QualityCheck(
            batch_id=batch.id,
            inspector_id=inspector.id,
            check_type=check_type,
            passed=passed,
            parameters=parameters or {},
            notes=notes,
            timestamp=timestamp or datetime.now(timezone.utc),
        )
        db.add(check)
        await db.commit()
        return check

    return _make_check


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()
