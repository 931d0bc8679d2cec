"""Catalog API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from maison.core.dependencies import get_catalog_repository
from maison.services.catalog.repository import CatalogRepository

router = APIRouter()
logger = logging.getLogger(__name__)


class ProductResponse(BaseModel):
    """Product response model."""
    id: str
    name: str
    price: float
    category: Optional[str] = None
    description: Optional[str] = None

    class Config:
        from_attributes = True


class CatalogResponse(BaseModel):
    """Catalog response model."""
    products: List[ProductResponse]
    categories: List[str] = []


@router.get("/api/catalog", response_model=CatalogResponse)
async def get_catalog(
    request: Request,
    catalog_repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Get the full catalog."""
    logger.info(
        f"[CATALOG] Request received - Client: {request.client.host if request.client else 'unknown'}"
    )

    try:
        catalog = await catalog_repository.get_catalog()
        logger.info(
            f"[CATALOG] Catalog loaded - {len(catalog.products)} products, "
            f"{len(catalog.categories)} categories"
        )
        return CatalogResponse(
            products=[ProductResponse.model_validate(product) for product in catalog.products],
            categories=catalog.categories,
        )

    except Exception as e:
        logger.error(
            f"[CATALOG] Error fetching catalog - Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Error fetching catalog: {str(e)}")


@router.get("/api/catalog/products/{name}", response_model=ProductResponse)
async def get_product(
    name: str,
    catalog_repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Get one product by its exact name."""
    product = await catalog_repository.get_product_by_name(name)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product '{name}' not found")
    return ProductResponse.model_validate(product)
