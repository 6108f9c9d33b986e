# app/services/product_service.py
import logging
import re
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.product import Category, Product, ProductSize
from app.repositories.cart_repo import CartRepository
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.product import (
    ProductCategoryRead,
    ProductCreate,
    ProductRead,
    ProductSizeCreate,
    ProductSizeRead,
    ProductUpdate,
)

logger = logging.getLogger(__name__)


def slugify(raw: str, fallback: str = "item") -> str:
    """
    Basic slugification:
      - lowercase
      - non-alphanumeric -> '-'
      - collapse multiple '-'
      - strip leading/trailing '-'
    """
    value = raw.strip().lower()
    value = re.sub(r"[^a-z0-9]+", "-", value)
    value = re.sub(r"-+", "-", value)
    value = value.strip("-")
    return value or fallback


class ProductService:
    """
    Business logic for the product catalog.

    Responsibilities:
      - slug generation & uniqueness
      - category existence checks
      - keeping the size list in declaration order
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(
        self,
        repo: ProductRepository,
        category_repo: CategoryRepository,
        cart_repo: CartRepository,
        review_repo: ReviewRepository,
    ):
        self.repo = repo
        self.category_repo = category_repo
        self.cart_repo = cart_repo
        self.review_repo = review_repo

    # ----- Helpers -----

    def _ensure_unique_slug(self, session: Session, base_slug: str) -> str:
        """
        Ensure slug is unique by appending -2, -3, ... if needed.
        """
        slug = base_slug
        i = 2
        while self.repo.get_by_slug(session, slug) is not None:
            slug = f"{base_slug}-{i}"
            i += 1
        return slug

    def _get_category(self, session: Session, category_id: uuid.UUID) -> Category:
        category = self.category_repo.get_by_id(session, category_id)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category does not exist",
            )
        return category

    @staticmethod
    def _size_rows(sizes: list[ProductSizeCreate]) -> list[ProductSize]:
        return [
            ProductSize(
                name=s.name,
                price=s.price,
                original_price=s.original_price,
                available=s.available,
            )
            for s in sizes
        ]

    def _to_read(self, session: Session, product: Product) -> ProductRead:
        category = (
            self.category_repo.get_by_id(session, product.category_id)
            if product.category_id
            else None
        )
        sizes = self.repo.list_sizes(session, product.id)
        return self._build_read(product, category, sizes)

    @staticmethod
    def _build_read(
        product: Product,
        category: Category | None,
        sizes: list[ProductSize],
    ) -> ProductRead:
        return ProductRead(
            id=product.id,
            name=product.name,
            slug=product.slug,
            description=product.description,
            short_description=product.short_description,
            price=product.price,
            original_price=product.original_price,
            images=list(product.images or []),
            tags=list(product.tags or []),
            in_stock=product.in_stock,
            featured=product.featured,
            category=(
                ProductCategoryRead(id=category.id, name=category.name, slug=category.slug)
                if category is not None
                else None
            ),
            sizes=[ProductSizeRead.model_validate(s) for s in sizes],
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    def _get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    # ----- Public reads -----

    def list_products(
        self,
        session: Session,
        *,
        category_slug: str | None = None,
        featured: bool | None = None,
        in_stock: bool | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[ProductRead]:
        """
        Catalog listing, newest first.

        An unknown category slug yields an empty list rather than an error.
        """
        category_id = None
        if category_slug:
            category = self.category_repo.get_by_slug(session, category_slug)
            if category is None:
                return []
            category_id = category.id

        products = self.repo.list_products(
            session,
            category_id=category_id,
            featured=featured,
            in_stock=in_stock,
            search=search.strip() if search else None,
            skip=skip,
            limit=limit,
        )

        product_ids = [p.id for p in products]
        sizes = self.repo.list_sizes_for_products(session, product_ids)
        categories = self.category_repo.get_many(
            session,
            list({p.category_id for p in products if p.category_id}),
        )
        return [
            self._build_read(p, categories.get(p.category_id), sizes.get(p.id, []))
            for p in products
        ]

    def get_product(self, session: Session, product_id: uuid.UUID) -> ProductRead:
        return self._to_read(session, self._get_product(session, product_id))

    def get_product_by_slug(self, session: Session, slug: str) -> ProductRead:
        product = self.repo.get_by_slug(session, slug)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return self._to_read(session, product)

    # ----- Admin writes -----

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
    ) -> ProductRead:
        """
        Create a new product with a unique slug and its sizes.

        - If slug is provided => slugify & ensure unique.
        - Else => slugify from name & ensure unique.
        """
        self._get_category(session, payload.category_id)

        base_slug = slugify(payload.slug or payload.name, fallback="product")
        slug = self._ensure_unique_slug(session, base_slug)

        product = Product(
            name=payload.name,
            slug=slug,
            description=payload.description,
            short_description=payload.short_description,
            price=payload.price,
            original_price=payload.original_price,
            images=payload.images,
            tags=payload.tags,
            in_stock=payload.in_stock,
            featured=payload.featured,
            category_id=payload.category_id,
        )
        product = self.repo.create(session, product)
        self.repo.replace_sizes(session, product.id, self._size_rows(payload.sizes))
        session.commit()
        session.refresh(product)

        logger.info("Product created: %s (%s)", product.slug, product.id)
        return self._to_read(session, product)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> ProductRead:
        """
        Partial update of a product.

        - An explicit slug that belongs to another product => 400.
        - `sizes` replaces the whole size list when provided.
        """
        product = self._get_product(session, product_id)
        data = payload.model_dump(exclude_unset=True, exclude={"sizes", "slug"})

        if payload.slug is not None:
            new_slug = slugify(payload.slug, fallback="product")
            if new_slug != product.slug:
                if self.repo.get_by_slug(session, new_slug) is not None:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail="Product with this slug already exists",
                    )
                product.slug = new_slug

        if data.get("category_id") is not None:
            self._get_category(session, data["category_id"])

        for field, value in data.items():
            if value is None and field not in {"original_price"}:
                continue
            setattr(product, field, value)

        self.repo.update(session, product)
        if payload.sizes is not None:
            self.repo.replace_sizes(session, product.id, self._size_rows(payload.sizes))

        session.commit()
        session.refresh(product)
        return self._to_read(session, product)

    def delete_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> None:
        """
        Delete a product together with its sizes, its reviews and every cart
        line that references it, in one transaction. Order history keeps its copy.
        """
        product = self._get_product(session, product_id)

        self.cart_repo.delete_for_product(session, product.id)
        self.review_repo.delete_for_product(session, product.id)
        self.repo.delete_sizes(session, product.id)
        self.repo.delete(session, product)
        session.commit()

        logger.info("Product deleted: %s", product_id)
