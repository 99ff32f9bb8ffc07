import random
import string
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from lydia.core.config import settings
from lydia.core.exceptions import EmptyBag, OrderSubmissionFailed
from lydia.db.json_db import JsonDatabase
from lydia.schemas.cart import CartTotals, LineItem
from lydia.schemas.order import CheckoutRequest
from lydia.services.cart_engine import CartEngine
from lydia.services.catalog_service import CatalogService
from lydia.services.pricing import PricingConfig, compute_totals

logger = structlog.get_logger()


def price_bag(db: JsonDatabase, items: List[LineItem], config: Optional[PricingConfig] = None) -> CartTotals:
    """Join the bag against the current catalog and price it."""
    try:
        records = CatalogService.lookup(db, [item.product_id for item in items])
    except (OSError, ValueError):
        # Unreadable catalog: everything prices as 0 rather than failing the bag.
        logger.warning("catalog_lookup_failed", exc_info=True)
        records = {}

    totals = compute_totals(items, CatalogService.price_lookup(records), config)
    for priced in totals.items:
        record = records.get(priced.product_id)
        if record:
            priced.name = record.get("name")
            priced.image = record.get("image")
    return totals


def generate_order_number(existing: set) -> str:
    """Generate a unique order number with bounded retries."""
    max_attempts = 10

    for _ in range(max_attempts):
        timestamp = datetime.now().strftime("%Y%m%d")
        random_part = "".join(
            random.choices(string.ascii_uppercase + string.digits, k=8)
        )
        order_number = f"LYD{timestamp}{random_part}"
        if order_number not in existing:
            return order_number

    raise ValueError("Failed to generate unique order number")


class CheckoutService:

    @staticmethod
    def checkout(
        db: JsonDatabase,
        engine: CartEngine,
        checkout_data: CheckoutRequest,
        config: Optional[PricingConfig] = None,
    ) -> Dict[str, Any]:
        """
        Record an order for the current bag, then clear the bag.

        The bag is cleared only after the order is written; any failure while
        recording leaves it intact so the shopper can retry.
        """
        items = engine.items()
        if not items:
            raise EmptyBag()

        totals = price_bag(db, items, config)

        try:
            document = db.read()
            order_id = generate_order_number({order.get("orderId") for order in document["orders"]})
            order = {
                "orderId": order_id,
                "customer": checkout_data.customer.model_dump(),
                "measurements": checkout_data.measurements.model_dump() if checkout_data.measurements else None,
                "items": [item.model_dump(by_alias=True) for item in totals.items],
                "subtotal": totals.subtotal,
                "discount": totals.discount,
                "shipping": totals.shipping,
                "tax": totals.tax,
                "totalAmount": totals.total,
                "currency": settings.CURRENCY,
                "createdAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            }
            document["orders"].append(order)
            db.write(document)
        except (OSError, ValueError, KeyError) as exc:
            logger.exception("order_submission_failed", items=len(items))
            raise OrderSubmissionFailed(str(exc)) from exc

        engine.clear()
        logger.info("order_created", order_id=order_id, total=totals.total, items=len(items))
        return order
