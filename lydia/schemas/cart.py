from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional, Tuple, Union


class LineItem(BaseModel):
    """One product (optionally a variant of it) in a cart."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId", min_length=1)
    variant_id: Optional[str] = Field(default=None, alias="variantId")
    quantity: int = Field(default=1, ge=1)
    added_at: Union[int, float] = Field(..., alias="addedAt")

    @property
    def identity_key(self) -> Tuple[str, Optional[str]]:
        return (self.product_id, self.variant_id)


class PricedLineItem(LineItem):
    unit_price: float = Field(default=0, alias="unitPrice")
    line_total: float = Field(default=0, alias="lineTotal")
    name: Optional[str] = None
    image: Optional[str] = None


class CartTotals(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[PricedLineItem] = []
    subtotal: float = 0
    discount: float = 0
    shipping: float = 0
    tax: float = 0
    total: float = 0
    item_count: int = Field(default=0, alias="itemCount")


class BagItemAdd(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId", min_length=1)
    quantity: int = 1
    variant_id: Optional[str] = Field(default=None, alias="variantId")

    @field_validator("product_id")
    @classmethod
    def strip_product_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("productId must not be blank")
        return value


class BagItemUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    quantity: int
    variant_id: Optional[str] = Field(default=None, alias="variantId")


class BagItemAdjust(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    delta: int
    variant_id: Optional[str] = Field(default=None, alias="variantId")


class SavedCartCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cart_id: Optional[str] = Field(default=None, alias="cartId", max_length=128)
    items: List[Any]
