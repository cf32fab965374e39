"""Pydantic request/response schemas for the Identity API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Request Schemas ---


class RegisterUserRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "first_name": "Jane",
                    "last_name": "Doe",
                    "email": "jane.doe@example.com",
                    "password": "correct-horse",
                    "phone": "+1-555-0123",
                }
            ]
        }
    }

    first_name: str = Field(..., max_length=50)
    last_name: str = Field(..., max_length=50)
    email: str = Field(..., max_length=254)
    password: str | None = Field(None, max_length=128)
    phone: str | None = Field(None, max_length=20)


class LogInRequest(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


class UpdateProfileRequest(BaseModel):
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    phone: str | None = Field(None, max_length=20)
    avatar: str | None = Field(None, max_length=500)


class AddAddressRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "street": "123 Elm Street",
                    "city": "Springfield",
                    "state": "IL",
                    "zip_code": "62701",
                    "country": "USA",
                    "is_default": False,
                }
            ]
        }
    }

    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str | None = Field(None, max_length=100)
    zip_code: str = Field(..., max_length=20)
    country: str = Field("USA", max_length=100)
    is_default: bool = False


class ChangeRoleRequest(BaseModel):
    role: str = Field(..., max_length=20)


# --- Response Schemas ---


class UserIdResponse(BaseModel):
    user_id: str


class AddressIdResponse(BaseModel):
    address_id: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    user_id: str
    email: str | None = None
    role: str


class AddressResponse(BaseModel):
    id: str
    street: str
    city: str
    state: str | None = None
    zip_code: str
    country: str
    is_default: bool


class UserResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    role: str
    phone: str | None = None
    avatar: str | None = None
    addresses: list[AddressResponse] = []


class StatusResponse(BaseModel):
    status: str = "ok"
