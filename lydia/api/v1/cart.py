from fastapi import APIRouter, Depends, Request

from lydia.core.config import settings
from lydia.core.rate_limiter import limiter
from lydia.db.json_db import JsonDatabase, get_db
from lydia.schemas.cart import SavedCartCreate
from lydia.services.storefront_service import SavedCartService
from lydia.utils.response import success

router = APIRouter()


@router.post("", response_model=dict)
@router.post("/", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def save_cart(
    request: Request,
    cart_data: SavedCartCreate,
    db: JsonDatabase = Depends(get_db),
):
    """Save a cart snapshot; the items go through the same normalization as the bag."""
    cart_id, cart = SavedCartService.save(db, cart_data.items, cart_data.cart_id)
    return success(data={"cartId": cart_id, "cart": cart}, message="Cart saved")


@router.get("/{cart_id}", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def get_saved_cart(request: Request, cart_id: str, db: JsonDatabase = Depends(get_db)):
    cart = SavedCartService.get(db, cart_id)
    return success(data={"cartId": cart_id, "cart": cart}, message="Cart retrieved")
