"""Pydantic request/response schemas for the Ordering API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Cart Schemas ---


class CartLineRequest(BaseModel):
    product_id: str
    quantity: int = Field(..., ge=1)


class ValidateCartRequest(BaseModel):
    items: list[CartLineRequest]


class PricedLineResponse(BaseModel):
    product_id: str
    name: str
    sku: str
    price: float
    image: str | None = None
    quantity: int
    subtotal: float


class CartIssueResponse(BaseModel):
    product_id: str
    reason: str
    requested: int
    available: int | None = None


class CartValidationResponse(BaseModel):
    valid: bool
    lines: list[PricedLineResponse]
    issues: list[CartIssueResponse]
    subtotal: float


# --- Order Request Schemas ---


class ShippingAddressInput(BaseModel):
    first_name: str = Field(..., max_length=50)
    last_name: str = Field(..., max_length=50)
    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    zip_code: str = Field(..., max_length=20)
    country: str = Field("USA", max_length=100)
    phone: str = Field(..., max_length=20)


class ShippingMethodInput(BaseModel):
    method_id: str = Field(..., max_length=50)
    name: str = Field(..., max_length=100)
    price: float = Field(..., ge=0)
    estimated_days: str = Field(..., max_length=50)


class PaymentDetailsInput(BaseModel):
    method: str
    card_last4: str | None = Field(None, max_length=4)
    card_brand: str | None = Field(None, max_length=30)
    paypal_email: str | None = Field(None, max_length=254)
    paypal_transaction_id: str | None = Field(None, max_length=100)
    transaction_id: str | None = Field(None, max_length=100)


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 2}],
                    "shipping_address": {
                        "first_name": "Jane",
                        "last_name": "Doe",
                        "street": "123 Elm Street",
                        "city": "Springfield",
                        "state": "IL",
                        "zip_code": "62701",
                        "country": "USA",
                        "phone": "+1-555-0123",
                    },
                    "shipping_method": {
                        "method_id": "standard",
                        "name": "Standard",
                        "price": 5.0,
                        "estimated_days": "5-7",
                    },
                    "payment_details": {"method": "credit_card", "card_last4": "4242", "card_brand": "visa"},
                    "tax": 1.5,
                }
            ]
        }
    }

    items: list[CartLineRequest]
    shipping_address: ShippingAddressInput
    shipping_method: ShippingMethodInput
    payment_details: PaymentDetailsInput
    tax: float = Field(0.0, ge=0)
    discount: float = Field(0.0, ge=0)
    customer_note: str | None = Field(None, max_length=500)


class TransitionOrderRequest(BaseModel):
    status: str
    tracking_number: str | None = Field(None, max_length=100)
    carrier: str | None = Field(None, max_length=100)
    transaction_id: str | None = Field(None, max_length=100)
    reason: str | None = Field(None, max_length=500)


class AdminNoteRequest(BaseModel):
    note: str = Field(..., max_length=1000)


# --- Response Schemas ---


class OrderIdResponse(BaseModel):
    order_id: str


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str


class StatusResponse(BaseModel):
    status: str = "ok"
