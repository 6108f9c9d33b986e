# app/repositories/category_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.product import Category, Product


class CategoryRepository:
    """
    Data access layer for Category.
    """

    def get_by_id(self, session: Session, category_id: uuid.UUID) -> Category | None:
        return session.get(Category, category_id)

    def get_by_slug(self, session: Session, slug: str) -> Category | None:
        stmt = select(Category).where(Category.slug == slug)
        return session.exec(stmt).first()

    def get_many(
        self,
        session: Session,
        category_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, Category]:
        if not category_ids:
            return {}
        stmt = select(Category).where(Category.id.in_(category_ids))
        return {c.id: c for c in session.exec(stmt).all()}

    def list_with_counts(self, session: Session) -> list[tuple[Category, int]]:
        """
        All categories by name, each with the number of products in it.
        """
        stmt = (
            select(Category, func.count(Product.id))
            .join(Product, Product.category_id == Category.id, isouter=True)
            .group_by(Category.id)
            .order_by(Category.name)
        )
        return [(category, int(count or 0)) for category, count in session.exec(stmt).all()]

    def count_products(self, session: Session, category_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Product).where(Product.category_id == category_id)
        return int(session.exec(stmt).one() or 0)

    def create(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def update(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def delete(self, session: Session, category: Category) -> None:
        session.delete(category)
        session.commit()
