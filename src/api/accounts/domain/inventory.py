"""Inventory of collectible items held by a user."""

from __future__ import annotations

from collections.abc import Iterable

from accounts.domain.exceptions import NotOwnedError
from accounts.domain.value_objects import ItemId


class Inventory:
    """Ordered collection of owned item identifiers.

    Ownership checks use set semantics. The underlying sequence does not
    enforce uniqueness, so an item may be added more than once; remove()
    takes out exactly one occurrence.
    """

    def __init__(self, items: Iterable[ItemId] = ()) -> None:
        self._items: list[ItemId] = list(items)

    @property
    def items(self) -> list[ItemId]:
        """Owned items in insertion order (a copy)."""
        return list(self._items)

    def owns(self, item_id: ItemId) -> bool:
        """Check whether the item is held at least once."""
        return item_id in self._items

    def add(self, item_id: ItemId) -> None:
        """Append an item to the inventory."""
        self._items.append(item_id)

    def remove(self, item_id: ItemId) -> None:
        """Remove a single occurrence of an item.

        Raises:
            NotOwnedError: If the item is not held
        """
        if not self.owns(item_id):
            raise NotOwnedError(item_id)
        self._items.remove(item_id)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Inventory):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"Inventory({self._items!r})"
