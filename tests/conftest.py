"""Root conftest: environment defaults and a fresh in-memory database per test.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Seed data is committed through its own session, closed before the test runs
"""

import os

# Ensure tests never reach a real database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession, create_async_engine, async_sessionmaker,
)

from entity_admin.admin.site import AdminSite  # noqa: E402
from tests.models import (  # noqa: E402
    ApiKey, Author, Base, Book, Country, Genre, Tag,
)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def site():
    site = AdminSite()
    site.register("library", Author)
    site.register("library", Book)
    site.register("library", Tag)
    site.register("geo", Country)
    site.register("access", ApiKey)
    return site


@pytest.fixture
async def seeded(test_session_factory):
    """Two authors, three tags, two books. Returns their primary keys by label."""
    async with test_session_factory() as db:
        tolkien = Author(name="J. R. R. Tolkien", bio="Philologist")
        sagan = Author(name="Carl Sagan")
        fantasy = Tag(label="fantasy")
        classic = Tag(label="classic")
        space = Tag(label="space")
        hobbit = Book(
            title="The Hobbit", genre=Genre.FICTION, author=tolkien,
            pages=310, tags=[fantasy, classic],
        )
        cosmos = Book(
            title="Cosmos", genre=Genre.SCIENCE, author=sagan,
            in_print=False, tags=[space],
        )
        france = Country(code="FR", name="France")
        db.add_all([tolkien, sagan, fantasy, classic, space, hobbit, cosmos, france])
        await db.commit()
        return {
            "tolkien": tolkien.id,
            "sagan": sagan.id,
            "fantasy": fantasy.id,
            "classic": classic.id,
            "space": space.id,
            "hobbit": hobbit.id,
            "cosmos": cosmos.id,
        }
