# app/services/category_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.product import Category
from app.repositories.category_repo import CategoryRepository
from app.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from app.services.product_service import slugify


class CategoryService:
    """
    Business logic for catalog categories.
    """

    def __init__(self, repo: CategoryRepository):
        self.repo = repo

    @staticmethod
    def _to_read(category: Category, product_count: int) -> CategoryRead:
        return CategoryRead(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            image=category.image,
            created_at=category.created_at,
            product_count=product_count,
        )

    def _get_category(self, session: Session, category_id: uuid.UUID) -> Category:
        category = self.repo.get_by_id(session, category_id)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )
        return category

    def _check_slug_free(self, session: Session, slug: str) -> None:
        if self.repo.get_by_slug(session, slug) is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category with this slug already exists",
            )

    def list_categories(self, session: Session) -> list[CategoryRead]:
        return [self._to_read(c, n) for c, n in self.repo.list_with_counts(session)]

    def get_category(self, session: Session, category_id: uuid.UUID) -> CategoryRead:
        category = self._get_category(session, category_id)
        return self._to_read(category, self.repo.count_products(session, category.id))

    def create_category(self, session: Session, payload: CategoryCreate) -> CategoryRead:
        slug = slugify(payload.slug or payload.name, fallback="category")
        self._check_slug_free(session, slug)

        category = self.repo.create(
            session,
            Category(
                name=payload.name,
                slug=slug,
                description=payload.description,
                image=payload.image,
            ),
        )
        return self._to_read(category, 0)

    def update_category(
        self,
        session: Session,
        category_id: uuid.UUID,
        payload: CategoryUpdate,
    ) -> CategoryRead:
        """
        Partial update. Changing the slug to one already taken => 400.
        """
        category = self._get_category(session, category_id)

        if payload.slug is not None:
            new_slug = slugify(payload.slug, fallback="category")
            if new_slug != category.slug:
                self._check_slug_free(session, new_slug)
                category.slug = new_slug

        if payload.name is not None:
            category.name = payload.name
        if payload.description is not None:
            category.description = payload.description
        if payload.image is not None:
            category.image = payload.image

        category = self.repo.update(session, category)
        return self._to_read(category, self.repo.count_products(session, category.id))

    def delete_category(self, session: Session, category_id: uuid.UUID) -> None:
        """
        Delete an empty category. Categories that still hold products => 400.
        """
        category = self._get_category(session, category_id)
        if self.repo.count_products(session, category.id) > 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete category with existing products",
            )
        self.repo.delete(session, category)
