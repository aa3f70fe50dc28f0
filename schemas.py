"""
Request and response schemas for the Shop API

Each resource model corresponds to one MongoDB collection:
- User    -> "users"
- Product -> "products"
- Order   -> "orders"

The same model validates the request at the boundary and is handed to the
handler, so rules are declared exactly once.
"""
from datetime import datetime
from typing import Annotated, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, Field, WithJsonSchema, field_validator

STRIPPED = {"str_strip_whitespace": True}

# largest integer BSON can store
MAX_INT64 = 2**63 - 1


def _check_email(value: str) -> str:
    # validated only, stored exactly as submitted
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("email is invalid")
    return value


Email = Annotated[str, AfterValidator(_check_email), WithJsonSchema({"type": "string", "format": "email"})]


def _check_phone(value):
    """Count digits as submitted, before a numeric string loses leading zeros."""
    if value is None:
        return value
    digits = value.strip() if isinstance(value, str) else str(value)
    if not digits.isdigit() or len(digits) < 9:
        raise ValueError("phone should be number and at least 9 characters")
    return value


# ----------------------- Users -----------------------
class User(BaseModel):
    model_config = {
        **STRIPPED,
        "json_schema_extra": {
            "examples": [
                {"name": "Jane Doe", "email": "jane.doe@example.com", "password": "s3cretpass", "phone": 5550123456}
            ]
        },
    }

    name: str = Field(..., min_length=5, description="Full name")
    email: Email = Field(..., description="Email address, unique among users")
    password: str = Field(..., min_length=8, description="Password, stored as given")
    phone: int = Field(..., le=MAX_INT64, description="Phone number, at least 9 digits")

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, value):
        return _check_phone(value)


class UserUpdate(BaseModel):
    model_config = STRIPPED

    name: Optional[str] = Field(None, min_length=5)
    email: Optional[Email] = None
    password: Optional[str] = Field(None, min_length=8)
    phone: Optional[int] = Field(None, le=MAX_INT64)

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, value):
        return _check_phone(value)


# ----------------------- Products -----------------------
class Product(BaseModel):
    model_config = {**STRIPPED, "json_schema_extra": {"examples": [{"name": "Widget", "quantity": 10}]}}

    name: str = Field(..., min_length=5, description="Product name, unique among products")
    quantity: int = Field(..., ge=0, le=MAX_INT64, description="Units in stock")


class ProductUpdate(BaseModel):
    model_config = STRIPPED

    name: Optional[str] = Field(None, min_length=5)
    quantity: Optional[int] = Field(None, ge=0, le=MAX_INT64)


# ----------------------- Orders -----------------------
class Order(BaseModel):
    model_config = {
        **STRIPPED,
        "json_schema_extra": {
            "examples": [
                {"productId": "65f1c2a9e4b0a1b2c3d4e5f6", "productName": "Widget", "orderedBy": "Jane", "quantity": 2}
            ]
        },
    }

    productId: str = Field(..., min_length=5, description="Identifier of the ordered product")
    productName: str = Field(..., min_length=2, description="Product name at order time")
    orderedBy: str = Field(..., min_length=3)
    quantity: int = Field(..., ge=0, le=MAX_INT64)


class OrderUpdate(BaseModel):
    model_config = STRIPPED

    productId: Optional[str] = Field(None, min_length=5)
    productName: Optional[str] = Field(None, min_length=2)
    orderedBy: Optional[str] = Field(None, min_length=3)
    quantity: Optional[int] = Field(None, ge=0, le=MAX_INT64)


class Message(BaseModel):
    message: str


# ----------------------- Mocks -----------------------
class DomainRegistration(BaseModel):
    model_config = STRIPPED

    domainName: str = Field(..., min_length=1)
    registrant: str = Field(..., min_length=1)


class DomainAvailability(BaseModel):
    domainName: str
    available: bool


class RegisteredDomain(DomainRegistration):
    registrationDate: datetime
    expirationDate: datetime


class ShipmentStatus(BaseModel):
    trackingNumber: str
    status: str
    location: str
    estimatedDelivery: str
