"""
Line-Item Store: the single persistence funnel for cart state.

Items are kept as a JSON array under a fixed key in a client-scoped key-value
store. Every write passes through `normalize`, which enforces:

* one item per (product id, variant id) pair; duplicates are merged by summing
  their quantities, keeping the first position and the first `addedAt`,
* quantity is an integer >= 1,
* a stable serialized form, so rehydrating and re-persisting is a no-op.
"""
import json
import math
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

import structlog

from lydia.core.config import settings
from lydia.db.kv_store import KeyValueStore
from lydia.schemas.cart import LineItem
from lydia.services.notifier import ChangeNotifier

logger = structlog.get_logger()

Clock = Callable[[], float]


def now_ms() -> int:
    return int(time.time() * 1000)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


def coerce_quantity(raw: Any) -> int:
    """Coerce a raw quantity to an int >= 1. Raises ValueError if it isn't numeric."""
    if raw is None:
        return 1
    if isinstance(raw, bool):
        raise ValueError(f"quantity is not numeric: {raw!r}")
    if isinstance(raw, str):
        raw = float(raw.strip())
    if not _is_number(raw):
        raise ValueError(f"quantity is not numeric: {raw!r}")
    return max(1, math.floor(raw))


def _coerce_identifier(raw: Any, field: str) -> str:
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise ValueError(f"{field} is not a scalar: {raw!r}")
    value = str(raw).strip()
    if not value:
        raise ValueError(f"{field} is empty")
    return value


def coerce_line_item(entry: Any, now: float) -> LineItem:
    """Build a canonical LineItem from a persisted or user-supplied entry."""
    if isinstance(entry, LineItem):
        entry = entry.model_dump(by_alias=True)
    if not isinstance(entry, Mapping):
        raise ValueError(f"line item is not an object: {entry!r}")

    # `id` / `qty` are the field names older browser clients persisted.
    raw_product_id = entry.get("productId", entry.get("product_id", entry.get("id")))
    if raw_product_id is None:
        raise ValueError("line item has no product id")
    product_id = _coerce_identifier(raw_product_id, "productId")

    raw_variant_id = entry.get("variantId", entry.get("variant_id"))
    variant_id = _coerce_identifier(raw_variant_id, "variantId") if raw_variant_id else None

    raw_quantity = entry.get("quantity", entry.get("qty"))
    quantity = coerce_quantity(raw_quantity)

    added_at = entry.get("addedAt", entry.get("added_at"))
    if not _is_number(added_at):
        added_at = now

    return LineItem(
        product_id=product_id,
        variant_id=variant_id,
        quantity=quantity,
        added_at=added_at,
    )


def normalize(entries: Iterable[Any], now: float, strict: bool = False) -> List[LineItem]:
    """
    Normalize a sequence of entries into unique, positive line items.

    With `strict` any uncoercible entry raises ValueError; otherwise it is
    dropped and logged.
    """
    merged: Dict[Tuple[str, Optional[str]], LineItem] = {}
    for entry in entries:
        try:
            item = coerce_line_item(entry, now)
        except ValueError as exc:
            if strict:
                raise
            logger.warning("cart_item_dropped", reason=str(exc))
            continue

        existing = merged.get(item.identity_key)
        if existing is None:
            merged[item.identity_key] = item
        else:
            merged[item.identity_key] = existing.model_copy(
                update={"quantity": existing.quantity + item.quantity}
            )
    return list(merged.values())


def serialize(items: Iterable[LineItem]) -> str:
    return json.dumps(
        [item.model_dump(by_alias=True, exclude_none=True) for item in items],
        separators=(",", ":"),
    )


class LineItemStore:
    def __init__(
        self,
        kv: KeyValueStore,
        key: Optional[str] = None,
        notifier: Optional[ChangeNotifier] = None,
        clock: Clock = now_ms,
    ):
        self.kv = kv
        self.key = key or settings.CART_STORAGE_KEY
        self.notifier = notifier or ChangeNotifier()
        self.clock = clock

    def read(self) -> List[LineItem]:
        """Load persisted items. Corrupt state is erased and reads as empty."""
        raw = self.kv.get(self.key)
        if raw is None:
            return []
        try:
            entries = json.loads(raw)
            if not isinstance(entries, list):
                raise ValueError("persisted cart is not a list")
            return normalize(entries, self.clock(), strict=True)
        except (ValueError, TypeError, OverflowError, RecursionError) as exc:
            logger.warning("cart_state_discarded", key=self.key, reason=str(exc))
            self.kv.delete(self.key)
            return []

    def write(self, items: Any) -> List[LineItem]:
        """Normalize, persist and publish `items`; returns the normalized sequence."""
        if not isinstance(items, (list, tuple)):
            items = []
        normalized = normalize(items, self.clock())
        self.kv.set(self.key, serialize(normalized))
        self.notifier.publish(normalized)
        return normalized

    def erase(self) -> List[LineItem]:
        self.kv.delete(self.key)
        self.notifier.publish([])
        return []
