# app/routers/reviews.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin, require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.base import MessageResponse
from app.schemas.review import ReviewCreate, ReviewRead, ReviewVerify
from app.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["Reviews"])

service = ReviewService(ReviewRepository(), ProductRepository())


@router.get("", response_model=list[ReviewRead])
def list_reviews(
    session: Session = Depends(get_session),
    product_id: uuid.UUID | None = Query(default=None, alias="productId"),
    verified: bool | None = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
):
    """
    Reviews newest first, with author and product details.

    - `productId`: only reviews of this product
    - `verified`: only verified (true) or pending (false) reviews
    """
    return service.list_reviews(session, product_id, verified, offset, limit)


@router.post("", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
def create_review(
    payload: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Review a product as the signed-in user. One review per product.
    """
    return service.create_review(session, current_user, payload)


# -------- Admin moderation --------


@router.put(
    "/{review_id}",
    response_model=ReviewRead,
    dependencies=[Depends(require_admin)],
)
def verify_review(
    review_id: uuid.UUID,
    payload: ReviewVerify,
    session: Session = Depends(get_session),
):
    return service.set_verified(session, review_id, payload)


@router.delete(
    "/{review_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_review(
    review_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    service.delete_review(session, review_id)
    return MessageResponse(message="Review deleted successfully")
