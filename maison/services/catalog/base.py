"""Catalog provider interface."""
from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    """Sellable product."""

    id: str
    name: str
    price: float = Field(default=0.0, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None


class Catalog(BaseModel):
    """Catalog model."""

    products: List[Product]
    categories: List[str] = []


class CatalogProvider(ABC):
    """Abstract base class for catalog providers."""

    @abstractmethod
    async def get_catalog(self) -> Catalog:
        """Get the full catalog."""
        pass

    @abstractmethod
    async def get_product_by_name(self, name: str) -> Optional[Product]:
        """Get a product by its exact name (case-insensitive)."""
        pass
