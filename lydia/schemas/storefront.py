from typing import Optional

import bleach
from pydantic import BaseModel, EmailStr, Field, field_validator


def _clean(value: str) -> str:
    return bleach.clean(value, tags=[], attributes={}, strip=True).strip()


class NewsletterSubscribe(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ContactCreate(BaseModel):
    name: str = Field(..., max_length=120)
    email: EmailStr
    subject: str = Field(..., max_length=200)
    message: str = Field(..., max_length=5000)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("name", "subject")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        sanitized = _clean(value)
        if not sanitized:
            raise ValueError("Field cannot be empty")
        return sanitized

    @field_validator("message")
    @classmethod
    def validate_message(cls, value: str) -> str:
        sanitized = _clean(value)
        if len(sanitized) < 5:
            raise ValueError("Message must be at least 5 characters")
        return sanitized
