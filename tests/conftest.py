"""Shared test fixtures and configuration."""
import os
from datetime import date

import pytest
import yaml
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("BAKERY_NAME", "Test Bakery")

from maison.main import app
from maison.core.dependencies import get_catalog_repository, get_draft_store
from maison.db.models import Base
from maison.services.catalog.base import Product
from maison.services.catalog.in_memory_catalog import InMemoryCatalogProvider
from maison.services.catalog.repository import CatalogLookup, CatalogRepository
from maison.services.drafts.storage import InMemoryKeyValueStorage, SqlKeyValueStorage
from maison.services.drafts.store import DraftStore
from maison.services.ordering.reconciler import OrderDraftReconciler


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite://"

TEST_CATALOG = {
    "categories": ["viennoiseries", "pains", "gateaux"],
    "products": [
        {"id": "croissant", "name": "Croissant", "price": 5.0, "category": "viennoiseries"},
        {"id": "pain", "name": "Pain", "price": 2.0, "category": "pains"},
        {"id": "pain-au-chocolat", "name": "Pain au chocolat", "price": 6.0, "category": "viennoiseries"},
        {"id": "chebakia", "name": "Chebakia", "price": 90.0, "category": "gateaux"},
    ],
}


@pytest.fixture
def products():
    """Two-product catalog: Croissant at 5, Pain at 2."""
    return [
        Product(id="croissant", name="Croissant", price=5.0),
        Product(id="pain", name="Pain", price=2.0),
    ]


@pytest.fixture
def lookup(products):
    """Catalog lookup over the two-product catalog."""
    return CatalogLookup(products)


@pytest.fixture
def fixed_today():
    """Clock pinned to 2025-01-10."""
    return lambda: date(2025, 1, 10)


@pytest.fixture
def memory_storage():
    """In-memory key/value storage."""
    return InMemoryKeyValueStorage()


@pytest.fixture
def draft_store(memory_storage):
    """Draft store over in-memory storage."""
    return DraftStore(memory_storage)


@pytest.fixture
def reconciler(draft_store):
    """Reconciler persisting through the in-memory draft store."""
    return OrderDraftReconciler(store=draft_store)


@pytest.fixture
def test_db_engine():
    """Create test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_session_factory(test_db_engine):
    """Session factory bound to the test database."""
    return sessionmaker(bind=test_db_engine, expire_on_commit=False)


@pytest.fixture
def sql_draft_store(test_session_factory):
    """Draft store backed by the test database."""
    return DraftStore(SqlKeyValueStorage(test_session_factory))


@pytest.fixture
def test_catalog_path(tmp_path):
    """Write the test catalog YAML file and return its path."""
    path = tmp_path / "catalog.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(TEST_CATALOG, f, default_flow_style=False, sort_keys=False)
    return path


@pytest.fixture
def test_catalog_repository(test_catalog_path):
    """Create catalog repository with test data."""
    provider = InMemoryCatalogProvider(catalog_file=str(test_catalog_path))
    return CatalogRepository(provider)


@pytest.fixture
def test_client(sql_draft_store, test_catalog_repository):
    """Create FastAPI test client with overrides."""
    app.dependency_overrides[get_draft_store] = lambda: sql_draft_store
    app.dependency_overrides[get_catalog_repository] = lambda: test_catalog_repository

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()
