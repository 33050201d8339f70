import os
from decimal import Decimal
from io import BytesIO

# Settings are cached on first import; keep the app from seeding a real database
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("LEGACY_MIGRATION_ENABLED", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-catalog-test-suite")

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import Category, Product
from app.seed import seed_profiles, seed_admin
from app.services.storage import LocalStorage, get_storage, optional_s3_storage

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Fresh in-memory schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "uploads")


@pytest.fixture
def client(db, storage):
    """TestClient bound to the test session and a temporary upload directory."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[optional_s3_storage] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client, db):
    seed_profiles(db)
    seed_admin(db, ADMIN_EMAIL, ADMIN_PASSWORD)
    response = client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def png_bytes():
    buffer = BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_category(db):
    """Insert a category directly; roots are flagged ``is_root_category``."""
    def _make(name, slug=None, parent=None, position=0, active=True, is_root=None):
        category = Category(
            name=name,
            link_rewrite=slug or name.lower().replace(" ", "-"),
            parent_id=parent.id if parent else None,
            level_depth=parent.level_depth + 1 if parent else 0,
            is_root_category=(parent is None) if is_root is None else is_root,
            position=position,
            active=active,
        )
        db.add(category)
        db.commit()
        db.refresh(category)
        return category
    return _make


@pytest.fixture
def make_product(db):
    def _make(name, price="10.00", categories=(), **fields):
        product = Product(
            name=name,
            link_rewrite=fields.pop("link_rewrite", name.lower().replace(" ", "-")),
            price=Decimal(price),
            **fields,
        )
        product.categories = list(categories)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make
