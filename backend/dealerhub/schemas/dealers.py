"""
Dealer schemas.

Passwords are accepted in clear on create/update, stored hashed, and never
returned: API responses use ``DealerPublic``.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from dealerhub.schemas.common import CamelModel, Money, Record


def _normalize_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if "@" not in v or "." not in v.split("@")[-1]:
        raise ValueError("Invalid email format")
    return v.lower()


class DealerCreate(CamelModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(default="", max_length=255)
    city: str = Field(default="", max_length=100)
    province: str = Field(default="", max_length=10)
    zip_code: str = Field(default="", max_length=10)
    is_active: bool = True
    contact_name: str = Field(default="", max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    credit_limit: Optional[Money] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)


class DealerUpdate(CamelModel):
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=10)
    zip_code: Optional[str] = Field(None, max_length=10)
    is_active: Optional[bool] = None
    contact_name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    credit_limit: Optional[Money] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)


class DealerPublic(Record):
    """Dealer as exposed over the API."""

    company_name: str
    address: str = ""
    city: str = ""
    province: str = ""
    zip_code: str = ""
    is_active: bool = True
    contact_name: str = ""
    email: str
    logo: Optional[str] = None
    credit_limit: Optional[Decimal] = None
    created_at: Optional[datetime] = None


class Dealer(DealerPublic):
    """Stored dealer including the password hash."""

    password: str


class DealerCredit(CamelModel):
    """Credit position of a dealer."""

    dealer_id: str
    credit_limit: Decimal
    available_credit: Decimal
    amount: Optional[Decimal] = None
    can_place_order: Optional[bool] = None
