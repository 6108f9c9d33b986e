# app/repositories/product_repo.py
import uuid

from sqlalchemy import String, cast, delete, or_
from sqlmodel import Session, select

from app.models.product import Product, ProductSize


class ProductRepository:
    """
    Data access layer for Product & ProductSize.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_by_slug(self, session: Session, slug: str) -> Product | None:
        stmt = select(Product).where(Product.slug == slug)
        return session.exec(stmt).first()

    def get_many(
        self,
        session: Session,
        product_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}

    def list_products(
        self,
        session: Session,
        *,
        category_id: uuid.UUID | None = None,
        featured: bool | None = None,
        in_stock: bool | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Product]:
        stmt = select(Product)
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if featured is not None:
            stmt = stmt.where(Product.featured == featured)
        if in_stock is not None:
            stmt = stmt.where(Product.in_stock == in_stock)
        if search:
            pattern = f"%{search}%"
            # tags are a JSON list; match the quoted lowercase tag exactly
            tag_pattern = f'%"{search.lower()}"%'
            stmt = stmt.where(
                or_(
                    Product.name.ilike(pattern),
                    Product.description.ilike(pattern),
                    Product.short_description.ilike(pattern),
                    cast(Product.tags, String).like(tag_pattern),
                )
            )
        stmt = stmt.order_by(Product.created_at.desc()).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def create(self, session: Session, product: Product) -> Product:
        """Add without committing; sizes are written in the same transaction."""
        session.add(product)
        session.flush()
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.flush()
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)

    # ----- Sizes -----

    def list_sizes(self, session: Session, product_id: uuid.UUID) -> list[ProductSize]:
        """Declared sizes in declaration order."""
        stmt = (
            select(ProductSize)
            .where(ProductSize.product_id == product_id)
            .order_by(ProductSize.sort_order)
        )
        return list(session.exec(stmt).all())

    def list_sizes_for_products(
        self,
        session: Session,
        product_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, list[ProductSize]]:
        sizes: dict[uuid.UUID, list[ProductSize]] = {pid: [] for pid in product_ids}
        if not product_ids:
            return sizes
        stmt = (
            select(ProductSize)
            .where(ProductSize.product_id.in_(product_ids))
            .order_by(ProductSize.product_id, ProductSize.sort_order)
        )
        for size in session.exec(stmt).all():
            sizes[size.product_id].append(size)
        return sizes

    def replace_sizes(
        self,
        session: Session,
        product_id: uuid.UUID,
        sizes: list[ProductSize],
    ) -> list[ProductSize]:
        """Replace the whole size list. Does not commit."""
        self.delete_sizes(session, product_id)
        for idx, size in enumerate(sizes):
            size.product_id = product_id
            size.sort_order = idx
            session.add(size)
        session.flush()
        return sizes

    def delete_sizes(self, session: Session, product_id: uuid.UUID) -> None:
        session.exec(delete(ProductSize).where(ProductSize.product_id == product_id))
