"""Catalog repository and lookup."""
from typing import Iterable, Iterator, List, Optional, Tuple

from maison.services.catalog.base import Catalog, CatalogProvider, Product


class CatalogLookup:
    """Read-only, in-memory view of the catalog used to resolve product mentions.

    Products keep the order they were supplied in. Matching is
    case-insensitive substring containment in either direction, so
    "croissants" matches "Croissant" and "pain" matches "Pain au chocolat".
    When several products match a mention, the longest product name wins and
    equal lengths fall back to catalog order.
    """

    def __init__(self, products: Optional[Iterable[Product]] = None):
        self.products: List[Product] = list(products or [])

    def __len__(self) -> int:
        return len(self.products)

    def match(self, mention: Optional[str]) -> Optional[Product]:
        """Return the best catalog product for a mention, or None."""
        if not mention:
            return None
        mention_lower = mention.lower().strip()
        if not mention_lower:
            return None

        best: Optional[Product] = None
        for product in self.products:
            name_lower = product.name.lower().strip()
            if not name_lower:
                continue
            if name_lower in mention_lower or mention_lower in name_lower:
                # Strictly longer only, so the earlier product keeps a tie
                if best is None or len(name_lower) > len(best.name.strip()):
                    best = product
        return best

    def find_in_text(self, text: str) -> Iterator[Tuple[Product, int]]:
        """Yield (product, index) for every product named in the text, in catalog order."""
        text_lower = text.lower()
        for product in self.products:
            name_lower = product.name.lower().strip()
            if not name_lower:
                continue
            index = text_lower.find(name_lower)
            if index != -1:
                yield product, index


class CatalogRepository:
    """Repository for catalog operations."""

    def __init__(self, provider: CatalogProvider):
        self.provider = provider

    async def get_catalog(self) -> Catalog:
        """Get the full catalog."""
        return await self.provider.get_catalog()

    async def get_product_by_name(self, name: str) -> Optional[Product]:
        """Get product by name."""
        return await self.provider.get_product_by_name(name)

    async def get_lookup(self) -> CatalogLookup:
        """Get a lookup over the currently loaded products."""
        catalog = await self.get_catalog()
        return CatalogLookup(catalog.products)
