from typing import Optional

import bleach
from pydantic import BaseModel, EmailStr, Field, field_validator


class CustomerDetails(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: Optional[str] = None
    address: str = Field(..., min_length=1, max_length=500)

    @field_validator("name", "address")
    @classmethod
    def sanitize_text(cls, value: str) -> str:
        sanitized = bleach.clean(value, tags=[], attributes={}, strip=True).strip()
        if not sanitized:
            raise ValueError("Field cannot be empty")
        return sanitized


class Measurements(BaseModel):
    bust: Optional[str] = None
    waist: Optional[str] = None
    hips: Optional[str] = None
    length: Optional[str] = "Standard"

    @field_validator("length")
    @classmethod
    def default_length(cls, value: Optional[str]) -> str:
        return value or "Standard"


class CheckoutRequest(BaseModel):
    customer: CustomerDetails
    measurements: Optional[Measurements] = None
