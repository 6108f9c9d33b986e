"""
Pytest configuration and fixtures.

The app runs against an in-memory SQLite database shared by every session
(StaticPool), swapped in through FastAPI's dependency overrides. Requests
authenticate with HS256 tokens signed with the test secret.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import uuid

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.core.config import get_settings
from app.database import get_session
from app.main import app
from app.models.product import Category, Product, ProductSize
from app.models.user import User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(user_id: uuid.UUID, email: str) -> str:
    settings = get_settings()
    return jwt.encode(
        {"sub": str(user_id), "email": email},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALG,
    )


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user.id, user.email)}"}


@pytest.fixture
def make_user(session):
    def _make(role: str = "user", email: str | None = None) -> User:
        user_id = uuid.uuid4()
        user = User(
            id=user_id,
            email=email or f"{user_id.hex[:8]}@example.com",
            name="Test User",
            role=role,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def customer(make_user):
    return make_user()


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(make_user):
    return auth_headers(make_user(role="admin"))


@pytest.fixture
def category(session):
    category = Category(name="Whey Protein", slug="whey")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture
def make_product(session, category):
    def _make(
        name: str = "Whey Isolate",
        price: float = 1000.0,
        in_stock: bool = True,
        sizes: tuple[str, ...] = (),
        tags: list[str] | None = None,
    ) -> Product:
        product = Product(
            name=name,
            slug=f"{name.lower().replace(' ', '-')}-{uuid.uuid4().hex[:6]}",
            description=f"{name} description",
            short_description=name,
            price=price,
            images=["https://cdn.example.com/p.png"],
            tags=tags or [],
            in_stock=in_stock,
            category_id=category.id,
        )
        session.add(product)
        session.flush()
        for idx, label in enumerate(sizes):
            session.add(
                ProductSize(product_id=product.id, name=label, price=price, sort_order=idx)
            )
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def headers_for():
    return auth_headers
