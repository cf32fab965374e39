"""FastAPI endpoints for the catalogue. Reads are public, writes need an admin session."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.catalogue.api.schemas import (
    CategoryIdResponse,
    CategoryResponse,
    CreateCategoryRequest,
    CreateProductRequest,
    FeaturedRequest,
    ImageIdResponse,
    ImageInput,
    MoveCategoryRequest,
    ProductIdResponse,
    ReorderCategoryRequest,
    RestockRequest,
    StatusResponse,
    UpdateCategoryRequest,
    UpdateProductDetailsRequest,
)
from storefront.catalogue.catalog import product_view
from storefront.catalogue.category.category import Category
from storefront.catalogue.category.management import (
    ActivateCategory,
    CreateCategory,
    DeactivateCategory,
    MoveCategory,
    ReorderCategory,
    UpdateCategory,
)
from storefront.catalogue.product.creation import CreateProduct
from storefront.catalogue.product.details import UpdateProductDetails
from storefront.catalogue.product.images import AddProductImage, RemoveProductImage, SetPrimaryImage
from storefront.catalogue.product.lifecycle import ActivateProduct, ArchiveProduct, SetProductFeatured
from storefront.catalogue.product.product import Product, ProductStatus
from storefront.catalogue.product.stock import RecordProductView, RestockProduct
from storefront.identity.api.dependencies import admin_session
from storefront.shared.queries import fetch_all

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])


# --- Product endpoints ---


@product_router.get("")
async def list_products(category_id: str | None = None, featured: bool | None = None) -> list[dict]:
    filters = {"status": ProductStatus.ACTIVE.value}
    if category_id:
        filters["category_id"] = category_id
    products = fetch_all(current_domain.repository_for(Product)._dao.query.filter(**filters))
    if featured is not None:
        products = [p for p in products if bool(p.is_featured) == featured]
    return [product_view(p) for p in products]


@product_router.get("/{product_id}")
async def get_product(product_id: str, expand_category: bool = False) -> dict:
    product = current_domain.repository_for(Product).get(product_id)
    return product_view(product, expand_category=expand_category)


@product_router.post("/{product_id}/views", response_model=StatusResponse)
async def record_view(product_id: str) -> StatusResponse:
    current_domain.process(RecordProductView(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.post("", status_code=201, response_model=ProductIdResponse, dependencies=[Depends(admin_session)])
async def create_product(body: CreateProductRequest) -> ProductIdResponse:
    command = CreateProduct(
        name=body.name,
        slug=body.slug,
        description=body.description,
        short_description=body.short_description,
        category_id=body.category_id,
        brand=body.brand,
        price=body.price,
        compare_at_price=body.compare_at_price,
        cost_price=body.cost_price,
        sku=body.sku,
        stock=body.stock,
        low_stock_threshold=body.low_stock_threshold,
        images=json.dumps([i.model_dump() for i in body.images]),
        specifications=json.dumps([s.model_dump() for s in body.specifications]),
        meta_title=body.meta_title,
        meta_description=body.meta_description,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}/details", response_model=StatusResponse, dependencies=[Depends(admin_session)])
async def update_product_details(product_id: str, body: UpdateProductDetailsRequest) -> StatusResponse:
    specifications = None
    if body.specifications is not None:
        specifications = json.dumps([s.model_dump() for s in body.specifications])

    command = UpdateProductDetails(
        product_id=product_id,
        name=body.name,
        slug=body.slug,
        description=body.description,
        short_description=body.short_description,
        category_id=body.category_id,
        brand=body.brand,
        price=body.price,
        compare_at_price=body.compare_at_price,
        cost_price=body.cost_price,
        low_stock_threshold=body.low_stock_threshold,
        specifications=specifications,
        meta_title=body.meta_title,
        meta_description=body.meta_description,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.post(
    "/{product_id}/images", status_code=201, response_model=ImageIdResponse, dependencies=[Depends(admin_session)]
)
async def add_product_image(product_id: str, body: ImageInput) -> ImageIdResponse:
    command = AddProductImage(
        product_id=product_id,
        url=body.url,
        public_id=body.public_id,
        alt_text=body.alt_text,
        is_primary=body.is_primary,
    )
    result = current_domain.process(command, asynchronous=False)
    return ImageIdResponse(image_id=result)


@product_router.delete(
    "/{product_id}/images/{image_id}", response_model=StatusResponse, dependencies=[Depends(admin_session)]
)
async def remove_product_image(product_id: str, image_id: str) -> StatusResponse:
    current_domain.process(RemoveProductImage(product_id=product_id, image_id=image_id), asynchronous=False)
    return StatusResponse()


@product_router.put(
    "/{product_id}/images/{image_id}/primary", response_model=StatusResponse, dependencies=[Depends(admin_session)]
)
async def set_primary_image(product_id: str, image_id: str) -> StatusResponse:
    current_domain.process(SetPrimaryImage(product_id=product_id, image_id=image_id), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/activate", response_model=StatusResponse, dependencies=[Depends(admin_session)])
async def activate_product(product_id: str) -> StatusResponse:
    current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/archive", response_model=StatusResponse, dependencies=[Depends(admin_session)])
async def archive_product(product_id: str) -> StatusResponse:
    current_domain.process(ArchiveProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/featured", response_model=StatusResponse, dependencies=[Depends(admin_session)])
async def set_featured(product_id: str, body: FeaturedRequest) -> StatusResponse:
    command = SetProductFeatured(product_id=product_id, is_featured=body.is_featured)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/stock", response_model=StatusResponse, dependencies=[Depends(admin_session)])
async def restock_product(product_id: str, body: RestockRequest) -> StatusResponse:
    current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return StatusResponse()


# --- Category endpoints ---


def _category_response(category) -> CategoryResponse:
    return CategoryResponse(
        id=str(category.id),
        name=category.name,
        slug=category.slug,
        description=category.description,
        icon=category.icon,
        parent_id=str(category.parent_id) if category.parent_id else None,
        display_order=category.display_order or 0,
        is_active=bool(category.is_active),
        product_count=category.product_count or 0,
    )


@category_router.get("", response_model=list[CategoryResponse])
async def list_categories(include_inactive: bool = False) -> list[CategoryResponse]:
    categories = fetch_all(current_domain.repository_for(Category)._dao.query)
    if not include_inactive:
        categories = [c for c in categories if c.is_active]
    categories.sort(key=lambda c: (c.display_order or 0, c.name))
    return [_category_response(c) for c in categories]


@category_router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: str) -> CategoryResponse:
    return _category_response(current_domain.repository_for(Category).get(category_id))


@category_router.post(
    "", status_code=201, response_model=CategoryIdResponse, dependencies=[Depends(admin_session)]
)
async def create_category(body: CreateCategoryRequest) -> CategoryIdResponse:
    command = CreateCategory(
        name=body.name,
        slug=body.slug,
        description=body.description,
        icon=body.icon,
        parent_id=body.parent_id,
        display_order=body.display_order,
    )
    result = current_domain.process(command, asynchronous=False)
    return CategoryIdResponse(category_id=result)


@category_router.put("/{category_id}", response_model=StatusResponse, dependencies=[Depends(admin_session)])
async def update_category(category_id: str, body: UpdateCategoryRequest) -> StatusResponse:
    command = UpdateCategory(
        category_id=category_id,
        name=body.name,
        slug=body.slug,
        description=body.description,
        icon=body.icon,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@category_router.put("/{category_id}/parent", response_model=StatusResponse, dependencies=[Depends(admin_session)])
async def move_category(category_id: str, body: MoveCategoryRequest) -> StatusResponse:
    current_domain.process(MoveCategory(category_id=category_id, parent_id=body.parent_id), asynchronous=False)
    return StatusResponse()


@category_router.put("/{category_id}/reorder", response_model=StatusResponse, dependencies=[Depends(admin_session)])
async def reorder_category(category_id: str, body: ReorderCategoryRequest) -> StatusResponse:
    command = ReorderCategory(category_id=category_id, new_display_order=body.new_display_order)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@category_router.put(
    "/{category_id}/deactivate", response_model=StatusResponse, dependencies=[Depends(admin_session)]
)
async def deactivate_category(category_id: str) -> StatusResponse:
    current_domain.process(DeactivateCategory(category_id=category_id), asynchronous=False)
    return StatusResponse()


@category_router.put("/{category_id}/activate", response_model=StatusResponse, dependencies=[Depends(admin_session)])
async def activate_category(category_id: str) -> StatusResponse:
    current_domain.process(ActivateCategory(category_id=category_id), asynchronous=False)
    return StatusResponse()
