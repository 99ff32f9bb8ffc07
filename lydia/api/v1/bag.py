from fastapi import APIRouter, Depends, Query, Request, status
from typing import Optional

from lydia.api.deps import get_cart_engine
from lydia.core.config import settings
from lydia.core.rate_limiter import limiter
from lydia.db.json_db import JsonDatabase, get_db
from lydia.schemas.cart import BagItemAdd, BagItemAdjust, BagItemUpdate
from lydia.schemas.order import CheckoutRequest
from lydia.services.bag_service import CheckoutService, price_bag
from lydia.services.cart_engine import CartEngine
from lydia.services.catalog_service import CatalogService
from lydia.services.storefront_service import SavedCartService
from lydia.utils.response import success

router = APIRouter()


@router.get("", response_model=dict)
@router.get("/", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def get_bag(
    request: Request,
    engine: CartEngine = Depends(get_cart_engine),
    db: JsonDatabase = Depends(get_db),
):
    """Current bag priced against the live catalog."""
    return success(data=price_bag(db, engine.items()), message="Bag retrieved")


@router.get("/count", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def get_bag_count(request: Request, engine: CartEngine = Depends(get_cart_engine)):
    return success(data={"count": engine.item_count()}, message="Bag count retrieved")


@router.post("/items", response_model=dict, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT)
def add_to_bag(
    request: Request,
    item: BagItemAdd,
    engine: CartEngine = Depends(get_cart_engine),
    db: JsonDatabase = Depends(get_db),
):
    items = engine.add(item.product_id, item.quantity, item.variant_id)
    return success(data=price_bag(db, items), message="Added to your selection")


@router.put("/items/{product_id}", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def update_bag_item(
    request: Request,
    product_id: str,
    update_data: BagItemUpdate,
    engine: CartEngine = Depends(get_cart_engine),
    db: JsonDatabase = Depends(get_db),
):
    """Set a quantity; zero or below removes the line, unknown lines are ignored."""
    items = engine.update_quantity(product_id, update_data.quantity, update_data.variant_id)
    return success(data=price_bag(db, items), message="Bag updated")


@router.patch("/items/{product_id}", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def adjust_bag_item(
    request: Request,
    product_id: str,
    adjustment: BagItemAdjust,
    engine: CartEngine = Depends(get_cart_engine),
    db: JsonDatabase = Depends(get_db),
):
    items = engine.adjust_quantity(product_id, adjustment.delta, adjustment.variant_id)
    return success(data=price_bag(db, items), message="Bag updated")


@router.delete("/items/{product_id}", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def remove_bag_item(
    request: Request,
    product_id: str,
    variant_id: Optional[str] = Query(None),
    engine: CartEngine = Depends(get_cart_engine),
    db: JsonDatabase = Depends(get_db),
):
    items = engine.remove(product_id, variant_id)
    return success(data=price_bag(db, items), message="Item removed from bag")


@router.delete("", response_model=dict)
@router.delete("/", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def clear_bag(
    request: Request,
    engine: CartEngine = Depends(get_cart_engine),
    db: JsonDatabase = Depends(get_db),
):
    items = engine.clear()
    return success(data=price_bag(db, items), message="Bag cleared")


@router.get("/recommendations", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def get_recommendations(
    request: Request,
    limit: int = Query(4, ge=1, le=20),
    engine: CartEngine = Depends(get_cart_engine),
    db: JsonDatabase = Depends(get_db),
):
    in_bag = [item.product_id for item in engine.items()]
    suggestions = CatalogService.recommendations(db, in_bag, limit=limit)
    return success(data=suggestions, message="Recommendations retrieved")


@router.post("/sync", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def sync_bag(
    request: Request,
    cart_id: Optional[str] = Query(None, alias="cartId", max_length=128),
    engine: CartEngine = Depends(get_cart_engine),
    db: JsonDatabase = Depends(get_db),
):
    """Save the bag as a server-side cart snapshot."""
    cart_id, cart = SavedCartService.save(db, engine.items(), cart_id)
    return success(data={"cartId": cart_id, "cart": cart}, message="Bag synced")


@router.post("/restore/{cart_id}", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def restore_bag(
    request: Request,
    cart_id: str,
    engine: CartEngine = Depends(get_cart_engine),
    db: JsonDatabase = Depends(get_db),
):
    """Merge a saved cart into the bag."""
    saved = SavedCartService.get(db, cart_id)
    items = engine.merge(saved.get("items") or [])
    return success(data=price_bag(db, items), message="Bag restored")


@router.post("/checkout", response_model=dict, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def checkout(
    request: Request,
    checkout_data: CheckoutRequest,
    engine: CartEngine = Depends(get_cart_engine),
    db: JsonDatabase = Depends(get_db),
):
    order = CheckoutService.checkout(db, engine, checkout_data)
    return success(
        data={
            "orderId": order["orderId"],
            "totalAmount": order["totalAmount"],
            "currency": order["currency"],
        },
        message="Order placed",
    )
