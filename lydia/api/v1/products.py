from fastapi import APIRouter, Depends, Query, Request
from typing import Optional

from lydia.core.config import settings
from lydia.core.rate_limiter import limiter
from lydia.db.init_db import seed_products
from lydia.db.json_db import JsonDatabase, get_db
from lydia.services.catalog_service import CatalogService
from lydia.utils.response import success

router = APIRouter()


@router.get("", response_model=dict)
@router.get("/", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def get_products(
    request: Request,
    category: Optional[str] = None,
    size: Optional[str] = None,
    color: Optional[str] = None,
    occasion: Optional[str] = None,
    max_price: Optional[int] = Query(None, ge=0, alias="maxPrice"),
    db: JsonDatabase = Depends(get_db),
):
    """
    List products. Each of category/size/color/occasion narrows the result
    unless it is `all`; maxPrice is an inclusive ceiling.
    """
    products = CatalogService.list_products(
        db,
        category=category,
        size=size,
        color=color,
        occasion=occasion,
        max_price=max_price,
    )
    return success(data=products, message="Products retrieved", meta={"total": len(products)})


@router.post("/seed", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def seed_catalog(request: Request, db: JsonDatabase = Depends(get_db)):
    """Seed the demo catalog (development helper)."""
    seeded, count = seed_products(db)
    message = "Seeded products" if seeded else "Products already seeded"
    return success(data={"count": count}, message=message)


@router.get("/{product_id}", response_model=dict)
@limiter.limit(settings.RATE_LIMIT)
def get_product(request: Request, product_id: str, db: JsonDatabase = Depends(get_db)):
    product = CatalogService.get_product(db, product_id)
    return success(data=product, message="Product retrieved")
