# botanica/api/products.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_product_service, require_admin
from ..models import User
from ..schemas import ProductIn, ProductUpdate, product_to_dict
from ..services import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("")
def list_products(
    category: Optional[str] = None,
    q: Optional[str] = None,
    size: Optional[str] = None,
    flavor: Optional[str] = None,
    min_price: Optional[float] = Query(default=None, alias="minPrice"),
    max_price: Optional[float] = Query(default=None, alias="maxPrice"),
    products: ProductService = Depends(get_product_service),
):
    if any(v is not None for v in (q, size, flavor, min_price, max_price)):
        rows = products.filter(q, category, size, flavor, min_price, max_price)
    elif category:
        rows = products.by_category(category)
    else:
        rows = products.list_all()
    return {"success": True, "data": [product_to_dict(p) for p in rows]}


@router.get("/categories")
def list_categories(products: ProductService = Depends(get_product_service)):
    return {
        "success": True,
        "categories": products.categories(),
        "sizes": products.sizes(),
        "flavors": products.flavors(),
    }


@router.get("/low-stock")
def low_stock(
    threshold: int = 5,
    _admin: User = Depends(require_admin),
    products: ProductService = Depends(get_product_service),
):
    return {"success": True, "data": [product_to_dict(p) for p in products.low_stock(threshold)]}


@router.get("/{product_id}")
def get_product(product_id: str, products: ProductService = Depends(get_product_service)):
    return {"success": True, "data": product_to_dict(products.get(product_id))}


@router.post("", status_code=201)
def create_product(
    payload: ProductIn,
    _admin: User = Depends(require_admin),
    products: ProductService = Depends(get_product_service),
):
    return {"success": True, "data": product_to_dict(products.create(payload))}


@router.patch("/{product_id}")
def update_product(
    product_id: str,
    payload: ProductUpdate,
    _admin: User = Depends(require_admin),
    products: ProductService = Depends(get_product_service),
):
    return {"success": True, "data": product_to_dict(products.update(product_id, payload))}


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    _admin: User = Depends(require_admin),
    products: ProductService = Depends(get_product_service),
):
    products.delete(product_id)
    return {"success": True, "message": "Product deleted"}
