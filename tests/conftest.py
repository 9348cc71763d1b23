from decimal import Decimal
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from main import app
from marketplace.db.database import Base, get_db
from marketplace.core.config import settings
from marketplace.models import *  # noqa: F401,F403 register all tables
from marketplace.schemas.product import ProductDetail
from marketplace.schemas.variant import BulkUpdateVariantsRequest, VariantUpdateItem
from marketplace.services.product_service import ProductService
from marketplace.services.variant_service import VariantService

from helpers import tshirt_payload


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        settings.TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """httpx client talking to the app, with the test session as its database."""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    del app.dependency_overrides[get_db]


@pytest_asyncio.fixture
async def tshirt(db_session: AsyncSession) -> ProductDetail:
    """Persisted T-Shirt whose four variants are priced 10, 20, 30 and 40 with stock 1 to 4"""
    service = ProductService(db_session)
    product = await service.create_product(tshirt_payload())

    updates = [
        VariantUpdateItem(id=variant.id, price=Decimal(10 * (i + 1)), stock_quantity=i + 1)
        for i, variant in enumerate(product.variants)
    ]
    await VariantService(db_session).bulk_update_variants(
        product.product_id, BulkUpdateVariantsRequest(variants=updates)
    )
    return await service.get_product(product.product_id)

