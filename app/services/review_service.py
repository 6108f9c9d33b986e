# app/services/review_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.models.product import Product
from app.models.review import Review
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.review import (
    ReviewAuthorRead,
    ReviewCreate,
    ReviewProductRead,
    ReviewRead,
    ReviewVerify,
)

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = "You have already reviewed this product"


class ReviewService:
    """
    Business logic for product reviews.

    Rules:
      - anyone may read reviews, newest first
      - posting requires a signed-in user, a 1..5 rating and a comment
      - one review per (user, product); new reviews start unverified
      - admins verify, unverify and delete reviews
    """

    def __init__(self, repo: ReviewRepository, product_repo: ProductRepository):
        self.repo = repo
        self.product_repo = product_repo

    @staticmethod
    def _to_read(review: Review, author: User, product: Product) -> ReviewRead:
        return ReviewRead(
            id=review.id,
            rating=review.rating,
            title=review.title,
            comment=review.comment,
            verified=review.verified,
            created_at=review.created_at,
            updated_at=review.updated_at,
            user=ReviewAuthorRead(id=author.id, name=author.name),
            product=ReviewProductRead(
                id=product.id,
                name=product.name,
                slug=product.slug,
                images=list(product.images or []),
            ),
        )

    def _read_one(self, session: Session, review: Review) -> ReviewRead:
        author = session.get(User, review.user_id)
        product = self.product_repo.get_by_id(session, review.product_id)
        return self._to_read(review, author, product)

    def _get_or_404(self, session: Session, review_id: uuid.UUID) -> Review:
        review = self.repo.get_by_id(session, review_id)
        if not review:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Review not found",
            )
        return review

    def list_reviews(
        self,
        session: Session,
        product_id: uuid.UUID | None,
        verified: bool | None,
        skip: int,
        limit: int,
    ) -> list[ReviewRead]:
        rows = self.repo.list_reviews(
            session, product_id=product_id, verified=verified, skip=skip, limit=limit
        )
        return [self._to_read(review, author, product) for review, author, product in rows]

    def create_review(
        self,
        session: Session,
        author: User,
        payload: ReviewCreate,
    ) -> ReviewRead:
        """
        Post a review as `author`.

        Raises:
            HTTPException(400): empty comment, rating outside 1..5, or the
                author already reviewed the product.
            HTTPException(404): product does not exist.
        """
        if not payload.comment:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product ID, rating, and comment are required",
            )
        if not 1 <= payload.rating <= 5:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Rating must be between 1 and 5",
            )

        product = self.product_repo.get_by_id(session, payload.product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )

        if self.repo.find_for_user_product(session, author.id, product.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=ALREADY_REVIEWED,
            )

        review = Review(
            product_id=product.id,
            user_id=author.id,
            rating=payload.rating,
            title=payload.title or None,
            comment=payload.comment,
            verified=False,
        )
        try:
            review = self.repo.save(session, review)
        except IntegrityError:
            # A concurrent post from the same user won the unique constraint
            session.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=ALREADY_REVIEWED,
            )

        logger.info(
            "Review posted: user=%s product=%s rating=%d",
            author.id, product.id, review.rating,
        )
        return self._to_read(review, author, product)

    def set_verified(
        self,
        session: Session,
        review_id: uuid.UUID,
        payload: ReviewVerify,
    ) -> ReviewRead:
        review = self._get_or_404(session, review_id)
        review.verified = payload.verified
        review = self.repo.save(session, review)
        logger.info("Review %s verified=%s", review.id, review.verified)
        return self._read_one(session, review)

    def delete_review(self, session: Session, review_id: uuid.UUID) -> None:
        review = self._get_or_404(session, review_id)
        self.repo.delete(session, review)
        logger.info("Review deleted: %s", review_id)
