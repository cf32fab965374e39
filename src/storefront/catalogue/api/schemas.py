"""Pydantic request/response schemas for the Catalogue API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Product Request Schemas ---


class ImageInput(BaseModel):
    url: str = Field(..., max_length=500)
    public_id: str | None = Field(None, max_length=255)
    alt_text: str | None = Field(None, max_length=255)
    is_primary: bool = False


class Specification(BaseModel):
    label: str
    value: str


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Wireless Mouse",
                    "description": "Ergonomic 2.4 GHz wireless mouse.",
                    "category_id": "cat-accessories",
                    "brand": "Acme",
                    "price": 24.99,
                    "sku": "acme-mouse-01",
                    "stock": 150,
                    "images": [{"url": "https://cdn.example.com/mouse.jpg", "public_id": "mouse"}],
                    "specifications": [{"label": "Connectivity", "value": "2.4 GHz"}],
                }
            ]
        }
    }

    name: str = Field(..., max_length=200)
    slug: str | None = Field(None, max_length=220)
    description: str
    short_description: str | None = Field(None, max_length=300)
    category_id: str
    brand: str = Field(..., max_length=100)
    price: float = Field(..., ge=0)
    compare_at_price: float | None = Field(None, ge=0)
    cost_price: float | None = Field(None, ge=0)
    sku: str = Field(..., max_length=64)
    stock: int = Field(0, ge=0)
    low_stock_threshold: int | None = Field(None, ge=0)
    images: list[ImageInput] = Field(..., min_length=1)
    specifications: list[Specification] = []
    meta_title: str | None = Field(None, max_length=60)
    meta_description: str | None = Field(None, max_length=160)


class UpdateProductDetailsRequest(BaseModel):
    name: str | None = Field(None, max_length=200)
    slug: str | None = Field(None, max_length=220)
    description: str | None = None
    short_description: str | None = Field(None, max_length=300)
    category_id: str | None = None
    brand: str | None = Field(None, max_length=100)
    price: float | None = Field(None, ge=0)
    compare_at_price: float | None = Field(None, ge=0)
    cost_price: float | None = Field(None, ge=0)
    low_stock_threshold: int | None = Field(None, ge=0)
    specifications: list[Specification] | None = None
    meta_title: str | None = Field(None, max_length=60)
    meta_description: str | None = Field(None, max_length=160)


class RestockRequest(BaseModel):
    quantity: int = Field(..., ge=0)


class FeaturedRequest(BaseModel):
    is_featured: bool


# --- Category Request Schemas ---


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., max_length=100)
    slug: str | None = Field(None, max_length=120)
    description: str | None = Field(None, max_length=500)
    icon: str | None = Field(None, max_length=100)
    parent_id: str | None = None
    display_order: int = 0


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, max_length=100)
    slug: str | None = Field(None, max_length=120)
    description: str | None = Field(None, max_length=500)
    icon: str | None = Field(None, max_length=100)


class MoveCategoryRequest(BaseModel):
    parent_id: str | None = None


class ReorderCategoryRequest(BaseModel):
    new_display_order: int


# --- Response Schemas ---


class ProductIdResponse(BaseModel):
    product_id: str


class ImageIdResponse(BaseModel):
    image_id: str


class CategoryIdResponse(BaseModel):
    category_id: str


class CategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    icon: str | None = None
    parent_id: str | None = None
    display_order: int
    is_active: bool
    product_count: int


class StatusResponse(BaseModel):
    status: str = "ok"
