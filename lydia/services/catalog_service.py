import random
from typing import Any, Dict, Iterable, List, Optional

import structlog

from lydia.core.exceptions import ProductNotFound
from lydia.db.json_db import JsonDatabase
from lydia.services.pricing import PriceLookup

logger = structlog.get_logger()

ANY_VALUE = "all"
FILTER_FIELDS = ("category", "size", "color", "occasion")


def _product_price(product: Dict[str, Any]) -> Optional[float]:
    try:
        return float(product.get("price"))
    except (TypeError, ValueError):
        return None


class CatalogService:

    @staticmethod
    def list_products(
        db: JsonDatabase,
        category: Optional[str] = None,
        size: Optional[str] = None,
        color: Optional[str] = None,
        occasion: Optional[str] = None,
        max_price: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Filter the catalog; `all` or an empty value disables a filter."""
        products = db.read().get("products") or []

        filters = {"category": category, "size": size, "color": color, "occasion": occasion}
        for field in FILTER_FIELDS:
            wanted = filters[field]
            if wanted and wanted != ANY_VALUE:
                products = [p for p in products if p.get(field) == wanted]

        if max_price is not None:
            products = [
                p for p in products
                if _product_price(p) is not None and _product_price(p) <= max_price
            ]
        return products

    @staticmethod
    def get_product(db: JsonDatabase, product_id: str) -> Dict[str, Any]:
        product = next(
            (p for p in db.read().get("products") or [] if str(p.get("id")) == str(product_id)),
            None,
        )
        if product is None:
            raise ProductNotFound()
        return product

    @staticmethod
    def lookup(db: JsonDatabase, product_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Return `{id: {id, name, price, image}}` for the ids that exist; `img` is the older image field."""
        wanted = {str(pid) for pid in product_ids}
        if not wanted:
            return {}
        found = {}
        for product in db.read().get("products") or []:
            pid = str(product.get("id"))
            if pid in wanted:
                found[pid] = {
                    "id": pid,
                    "name": product.get("name"),
                    "price": product.get("price"),
                    "image": product.get("image") or product.get("img"),
                }
        return found

    @staticmethod
    def price_lookup(records: Dict[str, Dict[str, Any]]) -> PriceLookup:
        def lookup(product_id: str) -> Any:
            record = records.get(str(product_id))
            return record.get("price") if record else None

        return lookup

    @staticmethod
    def recommendations(
        db: JsonDatabase,
        exclude_ids: Iterable[str],
        limit: int = 4,
        rng: Optional[random.Random] = None,
    ) -> List[Dict[str, Any]]:
        """Random catalog picks that are not already in the bag."""
        excluded = {str(pid) for pid in exclude_ids}
        try:
            products = db.read().get("products") or []
        except (OSError, ValueError):
            logger.warning("recommendations_unavailable", exc_info=True)
            return []

        candidates = [p for p in products if str(p.get("id")) not in excluded]
        rng = rng or random.Random()
        return rng.sample(candidates, k=min(limit, len(candidates)))
