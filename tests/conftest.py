from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.factories import FakeStore

TEST_JWT_SECRET = "test-secret-key-for-unit-tests-must-be-32-chars"


@pytest.fixture(autouse=True)
def _patch_settings(monkeypatch):
    from storefront.core.config import settings
    monkeypatch.setattr(settings, "jwt_secret_key", TEST_JWT_SECRET)
    monkeypatch.setattr(settings, "low_stock_threshold", 5)
    monkeypatch.setattr(settings, "cart_stale_days", 30)


@pytest.fixture
def mock_db():
    """Create a mock async database session."""
    db = AsyncMock()
    db.flush = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.execute = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def store(monkeypatch):
    """Swap every repository module the services and auth use for one FakeStore."""
    fake = FakeStore()
    from storefront.api.dependencies import auth
    from storefront.services import cart_service, inventory_service

    for module in (cart_service, inventory_service, auth):
        for name in ("user_repo", "product_repo", "variant_repo", "cart_repo"):
            if hasattr(module, name):
                monkeypatch.setattr(module, name, getattr(fake, name))
    return fake
