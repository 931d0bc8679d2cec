"""FastAPI dependencies."""
from fastapi import Depends

from maison.core.config import settings
from maison.db.database import SessionLocal
from maison.services.catalog.in_memory_catalog import InMemoryCatalogProvider
from maison.services.catalog.repository import CatalogRepository
from maison.services.drafts.storage import SqlKeyValueStorage
from maison.services.drafts.store import DraftStore
from maison.services.ordering.reconciler import OrderDraftReconciler

# Shared so the parsed YAML is cached across requests
_catalog_provider = InMemoryCatalogProvider(catalog_file=settings.catalog_file)


def get_catalog_repository() -> CatalogRepository:
    """Get catalog repository instance."""
    return CatalogRepository(provider=_catalog_provider)


def get_draft_store() -> DraftStore:
    """Get the draft store backed by the database slot table."""
    return DraftStore(SqlKeyValueStorage(SessionLocal), key=settings.draft_key)


def get_reconciler(store: DraftStore = Depends(get_draft_store)) -> OrderDraftReconciler:
    """Get a reconciler that persists through the draft store."""
    return OrderDraftReconciler(store=store)
