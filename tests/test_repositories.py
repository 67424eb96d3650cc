"""Tests for the SQL the repositories hand to the session."""
import uuid
from typing import get_args
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from storefront.models.dto.cart import Size
from storefront.models.orm.product_variant import SIZES, ProductVariant
from storefront.repositories import cart_repo, variant_repo
from tests.factories import make_cart_item, make_variant


def _sql(mock_db) -> str:
    stmt = mock_db.execute.call_args.args[0]
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestVariantRepo:
    @pytest.mark.asyncio
    async def test_find_variant_locks_row_when_asked(self, mock_db):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db.execute.return_value = result

        await variant_repo.find_variant(mock_db, uuid.uuid4(), "M", "Black", for_update=True)

        assert "FOR UPDATE" in _sql(mock_db)

    @pytest.mark.asyncio
    async def test_find_variant_plain_read_does_not_lock(self, mock_db):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db.execute.return_value = result

        await variant_repo.find_variant(mock_db, uuid.uuid4(), "M", "Black")

        assert "FOR UPDATE" not in _sql(mock_db)

    @pytest.mark.asyncio
    async def test_decrement_is_guarded_by_stock(self, mock_db):
        result = MagicMock()
        result.scalar_one_or_none.return_value = 2
        mock_db.execute.return_value = result

        new_stock = await variant_repo.decrement_stock(mock_db, uuid.uuid4(), 3)

        assert new_stock == 2
        sql = _sql(mock_db)
        assert sql.startswith("UPDATE product_variants")
        assert "product_variants.stock >=" in sql
        assert "RETURNING product_variants.stock" in sql

    @pytest.mark.asyncio
    async def test_decrement_reports_shortfall(self, mock_db):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db.execute.return_value = result

        assert await variant_repo.decrement_stock(mock_db, uuid.uuid4(), 10) is None

    @pytest.mark.asyncio
    async def test_increment_returns_new_stock(self, mock_db):
        result = MagicMock()
        result.scalar_one.return_value = 8
        mock_db.execute.return_value = result

        assert await variant_repo.increment_stock(mock_db, uuid.uuid4(), 3) == 8

    @pytest.mark.asyncio
    async def test_set_stock_flushes(self, mock_db):
        variant = make_variant(product_id=uuid.uuid4(), stock=1)

        await variant_repo.set_stock(mock_db, variant, 12)

        assert variant.stock == 12
        mock_db.flush.assert_awaited_once()


class TestCartRepo:
    @pytest.mark.asyncio
    async def test_create_adds_and_flushes(self, mock_db):
        user_id, product_id = uuid.uuid4(), uuid.uuid4()

        item = await cart_repo.create(
            mock_db, user_id=user_id, product_id=product_id, size="L", color="White", quantity=2,
        )

        assert item.quantity == 2
        assert item.size == "L"
        mock_db.add.assert_called_once_with(item)
        mock_db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_item(self, mock_db):
        item = make_cart_item(user_id=uuid.uuid4(), product_id=uuid.uuid4())

        await cart_repo.delete_item(mock_db, item)

        mock_db.delete.assert_awaited_once_with(item)

    @pytest.mark.asyncio
    async def test_delete_for_user_returns_rowcount(self, mock_db):
        result = MagicMock()
        result.rowcount = 3
        mock_db.execute.return_value = result

        assert await cart_repo.delete_for_user(mock_db, uuid.uuid4()) == 3

    @pytest.mark.asyncio
    async def test_count_quantity_empty_cart(self, mock_db):
        result = MagicMock()
        result.scalar.return_value = 0
        mock_db.execute.return_value = result

        assert await cart_repo.count_quantity(mock_db, uuid.uuid4()) == 0

    @pytest.mark.asyncio
    async def test_delete_for_user_limited_to_ids(self, mock_db):
        result = MagicMock()
        result.rowcount = 1
        mock_db.execute.return_value = result

        await cart_repo.delete_for_user(mock_db, uuid.uuid4(), only_ids=[uuid.uuid4()])

        assert "cart_items.id IN" in _sql(mock_db)

    @pytest.mark.asyncio
    async def test_get_by_id_locked_read(self, mock_db):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db.execute.return_value = result

        await cart_repo.get_by_id(mock_db, uuid.uuid4(), for_update=True)

        assert "FOR UPDATE" in _sql(mock_db)
        stmt = mock_db.execute.call_args.args[0]
        assert stmt.get_execution_options()["populate_existing"] is True

    @pytest.mark.asyncio
    async def test_list_for_user_keeps_lines_without_variant(self, mock_db):
        result = MagicMock()
        result.all.return_value = []
        mock_db.execute.return_value = result

        rows = await cart_repo.list_for_user(mock_db, uuid.uuid4())

        assert rows == []
        sql = _sql(mock_db)
        assert "LEFT OUTER JOIN product_variants" in sql
        assert "FOR UPDATE" not in sql


class TestVariantSizes:
    def test_request_size_matches_model(self):
        assert get_args(Size) == SIZES

    def test_size_constraint_lists_every_size(self):
        constraint = next(
            c for c in ProductVariant.__table__.constraints if c.name == "ck_variant_size"
        )
        assert str(constraint.sqltext) == "size IN ('XS', 'S', 'M', 'L', 'XL', 'XXL', 'XXXL')"
