"""
Test configuration and fixtures for the property listing API.
Provides an in-memory store, repository/service fixtures and a listing factory.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")

import itertools
import pytest
from datetime import datetime, timedelta
from typing import AsyncGenerator, Dict, Any, List
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from property_api.main import app
from property_api.config import Settings
from property_api.database import create_tables, get_db
from property_api.models.property import Property
from property_api.repositories.property import PropertyRepository
from property_api.services.property import PropertyService


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
async def test_engine():
    """Create a fresh in-memory store with the schema for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the default query policies."""
    return Settings(database_url=TEST_DATABASE_URL, environment="testing")


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    """Create a property repository instance."""
    return PropertyRepository(db_session)


@pytest.fixture
def property_service(db_session: AsyncSession, test_settings: Settings) -> PropertyService:
    """Create a property service instance."""
    return PropertyService(db_session, test_settings)


class ListingFactory:
    """Factory for creating test listings."""

    _sequence = itertools.count(1)

    @staticmethod
    def create_listing_data(**overrides: Any) -> Dict[str, Any]:
        """Create listing data dictionary; later listings get later creation times."""
        n = next(ListingFactory._sequence)
        data = {
            "reference_no": f"BDP-{n:05d}",
            "title": f"Test Listing {n}",
            "purpose_id": "sale",
            "purpose_name": "Sale",
            "sub_purpose_id": None,
            "status": "ready",
            "location": "Gulshan",
            "type_id": "residential",
            "type_name": "Residential",
            "sub_type_id": "apartment",
            "sub_type_name": "Apartment",
            "bed": 3,
            "bath": 2,
            "price": 5000000,
            "size": 1200,
            "images": [f"https://images.example.com/{n}/1.jpg"],
            "keywords": [],
            "video": None,
            "created_at": BASE_TIME + timedelta(hours=n),
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_listing(property_repo: PropertyRepository, **overrides: Any) -> Property:
        """Create a test listing in the database."""
        return await property_repo.create_property(ListingFactory.create_listing_data(**overrides))

    @staticmethod
    async def create_listings(property_repo: PropertyRepository, count: int, **overrides: Any) -> List[Property]:
        """Create several listings sharing the same overrides."""
        return await property_repo.bulk_create(
            [ListingFactory.create_listing_data(**overrides) for _ in range(count)]
        )


@pytest.fixture
async def test_listing(property_repository: PropertyRepository) -> Property:
    """Create a single listing with keywords and a video tour."""
    return await ListingFactory.create_listing(
        property_repository,
        title="Lake View Apartment",
        keywords=["lake view", "gym"],
        video="https://videos.example.com/tour.mp4"
    )
