import math
from typing import Any, Iterable, List, Optional

import structlog

from lydia.schemas.cart import LineItem
from lydia.services.line_item_store import LineItemStore, normalize

logger = structlog.get_logger()


def _identity(product_id: Any, variant_id: Any = None):
    return (str(product_id).strip(), str(variant_id).strip() if variant_id else None)


class CartEngine:
    """
    Cart mutations over a LineItemStore.

    Every operation computes the complete new state and hands it to
    `LineItemStore.write`, so uniqueness and positivity are re-checked on each
    mutation path.
    """

    def __init__(self, store: LineItemStore):
        self.store = store

    def items(self) -> List[LineItem]:
        return self.store.read()

    def item_count(self) -> int:
        return sum(item.quantity for item in self.store.read())

    def add(self, product_id: str, quantity: int = 1, variant_id: Optional[str] = None) -> List[LineItem]:
        key = _identity(product_id, variant_id)
        items = self.store.read()
        if not key[0]:
            logger.warning("cart_item_rejected", reason="blank product id")
            return items
        increment = max(1, int(quantity))

        for index, item in enumerate(items):
            if item.identity_key == key:
                items[index] = item.model_copy(update={"quantity": item.quantity + increment})
                break
        else:
            items.append(
                LineItem(
                    product_id=key[0],
                    variant_id=key[1],
                    quantity=increment,
                    added_at=self.store.clock(),
                )
            )

        logger.debug("cart_item_added", product_id=key[0], variant_id=key[1], quantity=increment)
        return self.store.write(items)

    def update_quantity(self, product_id: str, quantity: float, variant_id: Optional[str] = None) -> List[LineItem]:
        key = _identity(product_id, variant_id)
        items = self.store.read()
        if not any(item.identity_key == key for item in items):
            return items

        if quantity <= 0:
            updated = [item for item in items if item.identity_key != key]
        else:
            new_quantity = max(1, math.floor(quantity))
            updated = [
                item.model_copy(update={"quantity": new_quantity}) if item.identity_key == key else item
                for item in items
            ]
        return self.store.write(updated)

    def adjust_quantity(self, product_id: str, delta: int, variant_id: Optional[str] = None) -> List[LineItem]:
        """Step a quantity up or down; stepping to zero or below removes the item."""
        key = _identity(product_id, variant_id)
        current = next((item for item in self.store.read() if item.identity_key == key), None)
        if current is None:
            return self.store.read()
        return self.update_quantity(key[0], current.quantity + int(delta), key[1])

    def remove(self, product_id: str, variant_id: Optional[str] = None) -> List[LineItem]:
        key = _identity(product_id, variant_id)
        items = self.store.read()
        return self.store.write([item for item in items if item.identity_key != key])

    def clear(self) -> List[LineItem]:
        logger.debug("cart_cleared", key=self.store.key)
        return self.store.erase()

    def merge(self, incoming: Iterable[Any]) -> List[LineItem]:
        """Fold another cart's items into this one using the `add` identity rule."""
        items = self.store.read()
        positions = {item.identity_key: index for index, item in enumerate(items)}

        for item in normalize(incoming, self.store.clock()):
            index = positions.get(item.identity_key)
            if index is None:
                positions[item.identity_key] = len(items)
                items.append(item)
            else:
                existing = items[index]
                items[index] = existing.model_copy(
                    update={"quantity": existing.quantity + item.quantity}
                )
        return self.store.write(items)
