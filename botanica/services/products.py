# botanica/services/products.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..errors import NotFound, ValidationFailed
from ..models import Product
from ..repositories import ProductRepository
from ..schemas import ProductIn, ProductUpdate

# NOT NULL columns; an explicit null in a PATCH body is a client error
REQUIRED_FIELDS = ("name", "category", "price", "stock")


class ProductService:
    def __init__(self, products: ProductRepository):
        self.products = products

    def list_all(self) -> List[Product]:
        return self.products.all()

    def get(self, product_id: str) -> Product:
        p = self.products.get(product_id)
        if not p:
            raise NotFound("Product not found")
        return p

    def by_category(self, category: str) -> List[Product]:
        return self.products.by_category(category)

    def search(self, query: str) -> List[Product]:
        if not (query or "").strip():
            return []
        return self.products.search(query)

    def filter(
        self,
        term: str | None = None,
        category: str | None = None,
        size: str | None = None,
        flavor: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
    ) -> List[Product]:
        """Filter the catalogue; price bounds are in UAH, stored prices in kopiyky."""
        term = (term or "").strip().lower()
        out = []
        for p in self.products.all():
            if term and term not in p.name.lower() and term not in (p.description or "").lower():
                continue
            if category and p.category != category:
                continue
            if size and p.size != size:
                continue
            if flavor and p.flavor != flavor:
                continue
            uah = p.price / 100
            if min_price is not None and uah < min_price:
                continue
            if max_price is not None and uah > max_price:
                continue
            out.append(p)
        return out

    def create(self, data: ProductIn, product_id: str | None = None) -> Product:
        if not data.name.strip():
            raise ValidationFailed("Product name is required")
        if not data.category.strip():
            raise ValidationFailed("Product category is required")
        if data.price < 0:
            raise ValidationFailed("Price cannot be negative")
        if data.stock < 0:
            raise ValidationFailed("Stock cannot be negative")

        fields = data.model_dump()
        fields["name"] = data.name.strip()
        fields["category"] = data.category.strip()
        return self.products.create(fields, product_id=product_id)

    def update(self, product_id: str, data: ProductUpdate) -> Product:
        p = self.get(product_id)
        fields: Dict[str, Any] = data.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in fields and fields[key] is None:
                raise ValidationFailed(f"Product {key} cannot be empty")
        if "name" in fields and not fields["name"].strip():
            raise ValidationFailed("Product name cannot be empty")
        if "category" in fields and not fields["category"].strip():
            raise ValidationFailed("Product category cannot be empty")
        if fields.get("price") is not None and fields["price"] < 0:
            raise ValidationFailed("Price cannot be negative")
        if fields.get("stock") is not None and fields["stock"] < 0:
            raise ValidationFailed("Stock cannot be negative")
        return self.products.update(p, fields)

    def delete(self, product_id: str) -> None:
        self.products.delete(self.get(product_id))

    def low_stock(self, threshold: int = 5) -> List[Product]:
        return self.products.low_stock(threshold)

    def is_available(self, product_id: str) -> bool:
        p = self.products.get(product_id)
        return bool(p and p.stock > 0)

    def price_uah(self, product_id: str) -> Optional[float]:
        p = self.products.get(product_id)
        return p.price / 100 if p else None

    def categories(self) -> List[str]:
        return _unique(p.category for p in self.products.all())

    def sizes(self) -> List[str]:
        return _unique(p.size for p in self.products.all())

    def flavors(self) -> List[str]:
        return _unique(p.flavor for p in self.products.all())


def _unique(values) -> List[str]:
    seen: List[str] = []
    for v in values:
        if v and v not in seen:
            seen.append(v)
    return seen
