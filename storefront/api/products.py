"""
storefront/api/products.py

Purpose: Product catalog endpoints

- Public search / detail (cached)
- Admin create / update (multipart with images), stock, delete
- Admin inventory reports
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status

from storefront.api.deps import require_admin
from storefront.core.config import settings
from storefront.core.exceptions import BadRequestError
from storefront.schemas.catalog import StockUpdateRequest
from storefront.services import image_service, product_service
from storefront.services.cache_service import api_cache
from utils.serialization import serialize_doc
from utils.validation_utils import parse_json_list, parse_number

router = APIRouter()

CACHE_PREFIX = f"{settings.API_PREFIX}/products"


def _form_fields(
    title: Optional[str],
    description: Optional[str],
    category: Optional[str],
    brand: Optional[str],
    price: Optional[str],
    mrp: Optional[str],
    size: Optional[str],
    discount: Optional[str],
    stock: Optional[str],
    bullet_points: Optional[str],
) -> dict:
    discount_value = parse_number(discount)
    if discount_value is not None and not 0 <= discount_value <= 100:
        raise BadRequestError("Discount must be between 0 and 100")

    return {
        "title": title,
        "description": description,
        "category": category,
        "brand": brand,
        "price": parse_number(price),
        "mrp": parse_number(mrp),
        "size": size,
        "discount": discount_value,
        "stock": parse_number(stock),
        "bulletPoints": parse_json_list(bullet_points),
    }


@router.get("")
async def list_products(
    request: Request,
    response: Response,
    keyword: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    category: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    cached = api_cache.lookup(request, response)
    if cached is not None:
        return cached

    result = await product_service.list_products(
        keyword=keyword,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        category=category,
        sort=sort,
        page=page,
        limit=limit,
    )
    data = serialize_doc(result)
    api_cache.store(request, response, data, settings.CACHE_TTL_PRODUCTS)
    return data


@router.get("/admin/low-stock", dependencies=[Depends(require_admin)])
async def low_stock_products():
    return serialize_doc(await product_service.low_stock_report())


@router.get("/admin/out-of-stock", dependencies=[Depends(require_admin)])
async def out_of_stock_products():
    return serialize_doc(await product_service.out_of_stock_report())


@router.get("/{product_id}")
async def get_product(product_id: str, request: Request, response: Response):
    cached = api_cache.lookup(request, response)
    if cached is not None:
        return cached

    product = await product_service.get_product(product_id)
    data = {"success": True, "product": serialize_doc(product)}
    api_cache.store(request, response, data, settings.CACHE_TTL_PRODUCTS)
    return data


@router.post("/create", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_product(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    mrp: Optional[str] = Form(None),
    size: Optional[str] = Form(None),
    discount: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    bulletPoints: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
):
    fields = _form_fields(title, description, category, brand, price, mrp, size, discount, stock, bulletPoints)
    if not fields["title"] or not fields["category"] or not fields["price"]:
        raise BadRequestError("Title, category and price are required")

    image_urls = await image_service.upload_product_images(images) if images else []
    product = await product_service.create_product(fields, image_urls)
    api_cache.clear(CACHE_PREFIX)

    return {
        "success": True,
        "message": "Product created successfully",
        "product": serialize_doc(product),
    }


@router.put("/update/{product_id}", dependencies=[Depends(require_admin)])
async def update_product(
    product_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    brand: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    mrp: Optional[str] = Form(None),
    size: Optional[str] = Form(None),
    discount: Optional[str] = Form(None),
    stock: Optional[str] = Form(None),
    bulletPoints: Optional[str] = Form(None),
    existingImages: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
):
    fields = _form_fields(title, description, category, brand, price, mrp, size, discount, stock, bulletPoints)
    image_urls = await image_service.upload_product_images(images) if images else []

    product = await product_service.update_product(
        product_id,
        fields,
        existing_images=parse_json_list(existingImages),
        new_image_urls=image_urls,
    )
    api_cache.clear(CACHE_PREFIX)

    return {
        "success": True,
        "message": "Product updated",
        "product": serialize_doc(product),
    }


@router.put("/stock/{product_id}", dependencies=[Depends(require_admin)])
async def update_stock(product_id: str, payload: StockUpdateRequest):
    product = await product_service.update_stock(product_id, payload.stock)
    api_cache.clear(CACHE_PREFIX)
    return {
        "success": True,
        "message": "Stock updated successfully",
        "product": serialize_doc(product),
    }


@router.delete("/delete/{product_id}", dependencies=[Depends(require_admin)])
async def delete_product(product_id: str):
    await product_service.delete_product(product_id)
    api_cache.clear(CACHE_PREFIX)
    return {"success": True, "message": "Product deleted"}
