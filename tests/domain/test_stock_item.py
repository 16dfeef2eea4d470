"""Unit tests for the StockItem aggregate."""

from decimal import Decimal

import pytest

from ims.domain.exceptions import InsufficientStockError, ValidationError
from ims.domain.model.movement import MovementType
from ims.domain.model.stock_item import DEFAULT_UNIT, StockItem


class TestStockItemCreate:

    def test_defaults(self):
        item = StockItem.create("Gloves")
        assert item.unit == DEFAULT_UNIT
        assert item.category == ""
        assert item.quantity == Decimal("0")
        assert item.initial_quantity == Decimal("0")
        assert item.minimum_quantity is None
        assert len(item.id) == 32

    def test_initial_quantity_matches_opening_quantity(self):
        item = StockItem.create("Gloves", "PPE", "box", "50", "10")
        assert item.quantity == Decimal("50")
        assert item.initial_quantity == Decimal("50")
        assert item.minimum_quantity == Decimal("10")

    def test_name_required(self):
        with pytest.raises(ValidationError, match="name cannot be empty"):
            StockItem.create("  ")

    def test_category_required_when_asked(self):
        with pytest.raises(ValidationError, match="category is required"):
            StockItem.create("Gloves", None, require_category=True)

    def test_zero_quantity_rejected_when_asked(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            StockItem.create("Gloves", "PPE", quantity=0, allow_zero_quantity=False)

    def test_minimum_above_quantity_rejected(self):
        with pytest.raises(ValidationError, match="minimum_quantity must be at most 5"):
            StockItem.create("Gloves", quantity=5, minimum_quantity=6)

    def test_price_parsed(self):
        item = StockItem.create("Gloves", price="12.5")
        assert item.price == Decimal("12.5")


class TestStockItemQueries:

    def test_low_stock_at_minimum(self):
        item = StockItem.create("Gloves", quantity=10, minimum_quantity=10)
        assert item.is_low_stock

    def test_not_low_without_minimum(self):
        item = StockItem.create("Gloves", quantity=0)
        assert not item.is_low_stock

    def test_inflow_adds(self):
        item = StockItem.create("Gloves", quantity=50)
        assert item.quantity_after(MovementType.INFLOW, Decimal("20")) == Decimal("70")

    def test_outflow_to_exactly_zero(self):
        item = StockItem.create("Gloves", quantity=5)
        assert item.quantity_after(MovementType.OUTFLOW, Decimal("5")) == Decimal("0")

    def test_outflow_below_zero_rejected(self):
        item = StockItem.create("Gloves", quantity=5)
        with pytest.raises(InsufficientStockError, match=r"need 10, have 5"):
            item.quantity_after(MovementType.OUTFLOW, Decimal("10"))

    def test_quantity_after_does_not_mutate(self):
        item = StockItem.create("Gloves", quantity=5)
        item.quantity_after(MovementType.INFLOW, Decimal("1"))
        assert item.quantity == Decimal("5")
