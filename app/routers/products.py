# app/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.cart_repo import CartRepository
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.base import MessageResponse
from app.schemas.product import ProductCreate, ProductRead, ProductUpdate
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
category_repo = CategoryRepository()
cart_repo = CartRepository()
service = ProductService(repo, category_repo, cart_repo, ReviewRepository())


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    category: str | None = None,
    featured: bool | None = None,
    in_stock: bool | None = Query(default=None, alias="inStock"),
    search: str | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
):
    """
    List products, newest first.

    - `category`: category slug
    - `featured` / `inStock`: only filter when given
    - `search`: name / description / short description substring, or exact tag
    """
    return service.list_products(
        session,
        category_slug=category,
        featured=featured,
        in_stock=in_stock,
        search=search,
        skip=offset,
        limit=limit,
    )


@router.get("/{slug}", response_model=ProductRead)
def get_product(
    slug: str,
    session: Session = Depends(get_session),
):
    """
    Get a single product (with sizes) by slug.
    """
    return service.get_product_by_slug(session, slug)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product (admin only).
    """
    return service.create_product(session, payload)


@router.patch(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing product (admin only).
    """
    return service.update_product(session, product_id, payload)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a product, its sizes, its reviews and any cart lines pointing at it
    (admin only).
    """
    service.delete_product(session, product_id)
    return MessageResponse(message="Product deleted successfully")
