"""Unit tests for the Inventory."""

import pytest

from accounts.domain.exceptions import NotOwnedError
from accounts.domain.inventory import Inventory
from accounts.domain.value_objects import ItemId


class TestInventory:
    """Tests for item ownership."""

    def test_starts_empty(self):
        assert len(Inventory()) == 0
        assert Inventory().items == []

    def test_add_then_owns(self):
        inventory = Inventory()
        inventory.add(ItemId(value=25))
        assert inventory.owns(ItemId(value=25))
        assert not inventory.owns(ItemId(value=26))

    def test_keeps_insertion_order(self):
        inventory = Inventory([ItemId(value=3), ItemId(value=1)])
        inventory.add(ItemId(value=2))
        assert inventory.items == [ItemId(value=3), ItemId(value=1), ItemId(value=2)]

    def test_duplicates_are_kept(self):
        """Two copies of the same item are two holdings."""
        inventory = Inventory()
        inventory.add(ItemId(value=7))
        inventory.add(ItemId(value=7))
        assert len(inventory) == 2

    def test_remove_drops_one_occurrence(self):
        inventory = Inventory([ItemId(value=7), ItemId(value=7)])
        inventory.remove(ItemId(value=7))
        assert inventory.items == [ItemId(value=7)]

    def test_remove_unowned_raises(self):
        inventory = Inventory([ItemId(value=1)])
        with pytest.raises(NotOwnedError) as exc_info:
            inventory.remove(ItemId(value=2))
        assert exc_info.value.item_id == ItemId(value=2)
        assert inventory.items == [ItemId(value=1)]

    def test_items_returns_a_copy(self):
        """Mutating the returned list must not change the inventory."""
        inventory = Inventory([ItemId(value=1)])
        inventory.items.append(ItemId(value=2))
        assert len(inventory) == 1
