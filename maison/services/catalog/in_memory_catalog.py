"""In-memory catalog provider."""
import logging
from pathlib import Path
from typing import Optional

import yaml

from maison.services.catalog.base import Catalog, CatalogProvider, Product

logger = logging.getLogger(__name__)


class InMemoryCatalogProvider(CatalogProvider):
    """In-memory catalog provider using YAML configuration."""

    def __init__(self, catalog_file: Optional[str] = None):
        """Initialize with optional catalog file path."""
        if catalog_file is None:
            catalog_file = Path(__file__).parent / "data" / "catalog.yaml"
        self.catalog_file = Path(catalog_file)
        self._catalog: Optional[Catalog] = None

    async def _load_catalog(self) -> Catalog:
        """Load catalog from YAML file."""
        if self._catalog is None:
            if not self.catalog_file.exists():
                logger.warning(f"Catalog file {self.catalog_file} not found, using default catalog")
                self._catalog = Catalog(
                    products=[
                        Product(id="croissant", name="Croissant", price=5.0, category="viennoiseries"),
                        Product(id="pain", name="Pain", price=2.0, category="pains"),
                        Product(id="baguette", name="Baguette", price=3.0, category="pains"),
                    ],
                    categories=["viennoiseries", "pains"],
                )
            else:
                with open(self.catalog_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
                products = [Product(**product) for product in data.get("products") or []]
                categories = data.get("categories") or []
                if not categories:
                    for product in products:
                        if product.category and product.category not in categories:
                            categories.append(product.category)
                self._catalog = Catalog(products=products, categories=categories)
                logger.info(f"Loaded {len(products)} products from {self.catalog_file}")
        return self._catalog

    async def get_catalog(self) -> Catalog:
        """Get the full catalog."""
        return await self._load_catalog()

    async def get_product_by_name(self, name: str) -> Optional[Product]:
        """Get a product by name."""
        catalog = await self._load_catalog()
        name_lower = name.lower().strip()
        for product in catalog.products:
            if product.name.lower() == name_lower:
                return product
        return None
