# app/repositories/review_repo.py
import uuid

from sqlalchemy import delete
from sqlmodel import Session, select

from app.models.product import Product
from app.models.review import Review
from app.models.user import User


class ReviewRepository:
    """
    Data access layer for Review.

    Listing joins the author and the product so the service can build
    the read model without extra queries.
    """

    def list_reviews(
        self,
        session: Session,
        *,
        product_id: uuid.UUID | None = None,
        verified: bool | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> list[tuple[Review, User, Product]]:
        stmt = (
            select(Review, User, Product)
            .join(User, User.id == Review.user_id)
            .join(Product, Product.id == Review.product_id)
        )
        if product_id is not None:
            stmt = stmt.where(Review.product_id == product_id)
        if verified is not None:
            stmt = stmt.where(Review.verified == verified)

        stmt = stmt.order_by(Review.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, review_id: uuid.UUID) -> Review | None:
        return session.get(Review, review_id)

    def find_for_user_product(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> Review | None:
        stmt = select(Review).where(
            Review.user_id == user_id,
            Review.product_id == product_id,
        )
        return session.exec(stmt).first()

    def save(self, session: Session, review: Review) -> Review:
        session.add(review)
        session.commit()
        session.refresh(review)
        return review

    def delete(self, session: Session, review: Review) -> None:
        session.delete(review)
        session.commit()

    def delete_for_product(self, session: Session, product_id: uuid.UUID) -> None:
        """Remove a product's reviews. Caller commits."""
        session.exec(delete(Review).where(Review.product_id == product_id))
