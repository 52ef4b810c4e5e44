"""Shared fixtures: in-memory database, temporary public disk, admin token."""

import io
import os
import tempfile
from decimal import Decimal

# Settings are read at import time, so point them at throwaway locations first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="product-admin-storage-"))

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import sessionmaker

from database import Base, get_db
from main import app
from models.category import Category
from models.product import Product
from models.users import User
from utils.hashing import get_password_hash
from utils.pricing import derive_price_sell
from utils.storage import PublicStorage, get_storage
from utils.tokenJWT import create_access_token


def image_bytes(fmt: str = "JPEG", size=(32, 32), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def noisy_png_bytes(side: int = 300) -> bytes:
    """PNG of random pixels; it does not compress, so it is well above 100 KB."""
    buffer = io.BytesIO()
    Image.frombytes("RGB", (side, side), os.urandom(side * side * 3)).save(buffer, format="PNG")
    return buffer.getvalue()


def make_upload(data: bytes, filename: str = "image.jpg") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename)


def make_product(db, name, price_buy=100, stock=5, category=None, image_path=None) -> Product:
    product = Product(
        name=name,
        price_buy=Decimal(str(price_buy)),
        price_sell=derive_price_sell(Decimal(str(price_buy))),
        stock=Decimal(str(stock)),
        category=category,
        image_path=image_path,
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path) -> PublicStorage:
    return PublicStorage(tmp_path / "public", "storage/")


@pytest.fixture
def client(session_factory, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin(db) -> User:
    user = User(
        email="admin@example.com",
        password_hash=get_password_hash("secret"),
        role="admin",
        first_name="Ada",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_headers(admin) -> dict:
    token = create_access_token({"sub": admin.email, "role": admin.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def clerk_headers(db) -> dict:
    user = User(email="clerk@example.com", password_hash=get_password_hash("secret"), role="customer")
    db.add(user)
    db.commit()
    token = create_access_token({"sub": "clerk@example.com", "role": "customer"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def categories(db) -> dict:
    names = ["Widgets-Category", "Beverages", "Apparel"]
    created = {name: Category(name=name) for name in names}
    db.add_all(created.values())
    db.commit()
    for category in created.values():
        db.refresh(category)
    return created


@pytest.fixture
def jpeg_bytes() -> bytes:
    return image_bytes("JPEG")


@pytest.fixture
def png_bytes() -> bytes:
    return image_bytes("PNG")
