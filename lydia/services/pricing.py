import math
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Callable, Iterable, Optional

import structlog
from pydantic import BaseModel, Field

from lydia.core.config import settings
from lydia.schemas.cart import CartTotals, LineItem, PricedLineItem

logger = structlog.get_logger()

PriceLookup = Callable[[str], Any]


class PricingConfig(BaseModel):
    tax_rate: float = Field(default=0.05, ge=0, le=1)
    # None means the flat fee applies to every non-empty cart.
    shipping_threshold: Optional[float] = 1000.0
    shipping_fee: float = Field(default=49.0, ge=0)
    discount_rate: float = Field(default=0.0, ge=0, le=1)

    @classmethod
    def from_settings(cls) -> "PricingConfig":
        return cls(
            tax_rate=settings.TAX_RATE,
            shipping_threshold=settings.FREE_SHIPPING_THRESHOLD,
            shipping_fee=settings.FLAT_SHIPPING_FEE,
            discount_rate=settings.BOUTIQUE_DISCOUNT_RATE,
        )


def round_half_up(value: float) -> int:
    amount = Decimal(str(value))
    with localcontext() as ctx:
        # quantize fails once the integer part has more digits than the context precision
        ctx.prec = max(ctx.prec, amount.adjusted() + 2)
        return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _percentage_of(amount: float, rate: float) -> int:
    amount, rate = Decimal(str(amount)), Decimal(str(rate))
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(amount.as_tuple().digits) + len(rate.as_tuple().digits))
        return round_half_up(amount * rate)


def _within_range(amount: float) -> bool:
    """True while `amount` leaves headroom for tax and shipping as a finite float."""
    try:
        return math.isfinite(amount * 2)
    except OverflowError:
        return False


def resolve_price(price_lookup: PriceLookup, product_id: str) -> float:
    """Look up a unit price; misses, junk values and lookup errors price as 0."""
    try:
        raw = price_lookup(product_id)
    except Exception:
        logger.warning("price_lookup_failed", product_id=product_id, exc_info=True)
        return 0
    if isinstance(raw, bool) or raw is None:
        return 0
    if isinstance(raw, str):
        try:
            raw = float(raw.strip())
        except ValueError:
            return 0
    if not isinstance(raw, (int, float)):
        return 0
    try:
        if not math.isfinite(raw):
            return 0
    except OverflowError:
        return 0
    return raw


def calculate_shipping(subtotal: float, config: PricingConfig) -> float:
    if subtotal <= 0:
        return 0
    if config.shipping_threshold is None or subtotal < config.shipping_threshold:
        return config.shipping_fee
    return 0


def compute_totals(
    items: Iterable[LineItem],
    price_lookup: PriceLookup,
    config: Optional[PricingConfig] = None,
) -> CartTotals:
    """
    Price a cart from scratch.

    Pure: no I/O beyond the injected `price_lookup`. Never raises; a bad
    catalog entry only zeroes its own line.
    """
    config = config or PricingConfig.from_settings()

    priced = []
    subtotal = 0
    item_count = 0
    for item in items:
        unit_price = resolve_price(price_lookup, item.product_id)
        try:
            line_total = unit_price * item.quantity
            in_range = _within_range(subtotal + line_total)
        except OverflowError:
            in_range = False
        if not in_range:
            logger.warning("line_total_out_of_range", product_id=item.product_id, quantity=item.quantity)
            unit_price = line_total = 0
        subtotal += line_total
        item_count += item.quantity
        priced.append(
            PricedLineItem(
                **item.model_dump(),
                unit_price=unit_price,
                line_total=line_total,
            )
        )

    discount = _percentage_of(subtotal, config.discount_rate)
    shipping = calculate_shipping(subtotal, config)
    tax = _percentage_of(subtotal, config.tax_rate)

    return CartTotals(
        items=priced,
        subtotal=subtotal,
        discount=discount,
        shipping=shipping,
        tax=tax,
        total=subtotal - discount + shipping + tax,
        item_count=item_count,
    )
