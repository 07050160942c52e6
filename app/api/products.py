from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models.product import Product
from app.services.product_service import ProductService
from app.schemas.product import (
    ProductCreate,
    ProductReplace,
    ProductUpdate,
    ProductResponse,
)
from app.utils.object_id import OBJECT_ID_PATTERN

router = APIRouter(prefix="/products", tags=["Products"])


def load_product(
    product_id: str = Path(..., description="Product ID"),
    db: Session = Depends(get_db)
) -> Product:
    """Resolve the `product_id` path segment to a stored product (404 if absent)."""
    return ProductService(db).get(product_id)


def load_valid_product(
    product_id: str = Path(
        ...,
        pattern=OBJECT_ID_PATTERN,
        description="Product ID (24 hexadecimal characters)"
    ),
    db: Session = Depends(get_db)
) -> Product:
    """Like `load_product`, but rejects malformed IDs with a 400 first."""
    return ProductService(db).get(product_id)


@router.get(
    "",
    response_model=List[ProductResponse],
    summary="List products",
    description="Get a page of products, optionally filtered by exact name or price."
)
def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(
        ProductService.DEFAULT_PER_PAGE, ge=1, le=100, alias="perPage", description="Products per page"
    ),
    name: Optional[str] = Query(None, description="Product name"),
    price: Optional[float] = Query(None, allow_inf_nan=False, description="Product price"),
    db: Session = Depends(get_db)
):
    """Get a page of products."""
    service = ProductService(db)
    products = service.list(page=page, per_page=per_page, name=name, price=price)
    return [product.transform() for product in products]


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a new product with a name and an optional price."
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new product.

    - **name**: Product name, at most 128 characters (required)
    - **price**: Product price (optional)
    """
    service = ProductService(db)
    product = service.create(product_data)
    return product.transform()


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID"
)
def get_product(product: Product = Depends(load_product)):
    return product.transform()


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Replace a product",
    description="Replace the whole product with the request body. Omitted fields are cleared."
)
def replace_product(
    product_data: ProductReplace,
    product: Product = Depends(load_valid_product),
    db: Session = Depends(get_db)
):
    """
    Replace a product.

    If the product is deleted concurrently, between being loaded and being
    written, it is recreated at the same ID.
    """
    service = ProductService(db)
    product = service.replace(product, product_data)
    return product.transform()


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Update some fields of a product. Only provided fields are changed."
)
def update_product(
    product_data: Optional[ProductUpdate] = None,
    product: Product = Depends(load_valid_product),
    db: Session = Depends(get_db)
):
    """Update a product. A missing body changes nothing."""
    if product_data is None:
        product_data = ProductUpdate()
    service = ProductService(db)
    product = service.update(product, product_data)
    return product.transform()


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product"
)
def delete_product(
    product: Product = Depends(load_product),
    db: Session = Depends(get_db)
):
    """Delete a product."""
    service = ProductService(db)
    service.remove(product)
    return None
