"""Order draft API endpoints."""
import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field

from maison.core.config import settings
from maison.core.dependencies import get_catalog_repository, get_draft_store, get_reconciler
from maison.services.catalog.repository import CatalogRepository
from maison.services.drafts.store import DraftStore
from maison.services.ordering.models import ExtractionPatch, OrderDraft
from maison.services.ordering.reconciler import OrderDraftReconciler, new_draft
from maison.services.ordering.scan import ScanMergeExtractor
from maison.services.ordering.speech import SpeechExtractor
from maison.services.ordering.validator import OrderValidator

router = APIRouter()
logger = logging.getLogger(__name__)


class DraftContext(BaseModel):
    """Fields shared by every draft-changing request.

    When `draft` is omitted the stored draft is used, or a fresh one.
    """
    model_config = ConfigDict(populate_by_name=True)

    draft: Optional[OrderDraft] = None
    editing_existing: bool = Field(default=False, alias="editingExisting")


class PatchRequest(DraftContext):
    """Manual patch request."""
    patch: ExtractionPatch = Field(default_factory=ExtractionPatch)


class SpeechRequest(DraftContext):
    """Dictated order request."""
    transcript: str


class ScanRequest(DraftContext):
    """Scanned order slips request, one result per image."""
    results: List[Any] = []


class ItemUpdateRequest(DraftContext):
    """Single line update request."""
    product: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[float] = Field(default=None, alias="unitPrice")


class DraftResponse(BaseModel):
    """Draft response model."""
    draft: Optional[OrderDraft] = None


class ExtractionResponse(BaseModel):
    """Extraction response model."""
    draft: OrderDraft
    extracted: bool
    sources: Optional[int] = None
    skipped: Optional[int] = None


class SubmitResponse(BaseModel):
    """Submitted order response model."""
    order: OrderDraft


def _current_draft(context: DraftContext, store: DraftStore) -> OrderDraft:
    if context.draft is not None:
        return context.draft
    return store.load() or new_draft()


@router.get("/api/draft", response_model=DraftResponse)
async def get_draft(store: DraftStore = Depends(get_draft_store)):
    """Get the stored draft, if any."""
    draft = store.load()
    logger.info(f"[DRAFT] Loaded draft - present: {draft is not None}")
    return DraftResponse(draft=draft)


@router.patch("/api/draft", response_model=DraftResponse)
async def patch_draft(
    body: PatchRequest,
    store: DraftStore = Depends(get_draft_store),
    reconciler: OrderDraftReconciler = Depends(get_reconciler),
):
    """Apply a manual patch to the draft."""
    logger.info(f"[DRAFT] Patch received - fields: {sorted(body.patch.addressed_fields())}")
    current = _current_draft(body, store)
    draft = reconciler.apply(current, body.patch, editing_existing=body.editing_existing)
    return DraftResponse(draft=draft)


@router.delete("/api/draft", status_code=204)
async def clear_draft(store: DraftStore = Depends(get_draft_store)):
    """Discard the stored draft (explicit cancel)."""
    store.clear()
    logger.info("[DRAFT] Draft cleared")
    return Response(status_code=204)


@router.post("/api/draft/speech", response_model=ExtractionResponse)
async def extract_from_speech(
    body: SpeechRequest,
    store: DraftStore = Depends(get_draft_store),
    reconciler: OrderDraftReconciler = Depends(get_reconciler),
    catalog_repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Fill the draft from a dictated transcript."""
    logger.info(f"[SPEECH] Transcript received - length: {len(body.transcript)}")

    try:
        lookup = await catalog_repository.get_lookup()
        extractor = SpeechExtractor(lookup, quantity_window=settings.quantity_window)
        outcome = extractor.extract_outcome(body.transcript)
        current = _current_draft(body, store)

        if not outcome.extracted:
            logger.info("[SPEECH] Nothing extracted from transcript")
            return ExtractionResponse(draft=current, extracted=False)

        draft = reconciler.apply(current, outcome.patch, editing_existing=body.editing_existing)
        return ExtractionResponse(draft=draft, extracted=True)

    except Exception as e:
        logger.error(
            f"[SPEECH] Error extracting from transcript - Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Error extracting from transcript: {str(e)}")


@router.post("/api/draft/scan", response_model=ExtractionResponse)
async def extract_from_scans(
    body: ScanRequest,
    store: DraftStore = Depends(get_draft_store),
    reconciler: OrderDraftReconciler = Depends(get_reconciler),
    catalog_repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Fill the draft from one or more scanned order slips."""
    logger.info(f"[SCAN] Scan results received - count: {len(body.results)}")

    try:
        lookup = await catalog_repository.get_lookup()
        outcome = ScanMergeExtractor(lookup).merge(body.results)
        current = _current_draft(body, store)

        if not outcome.extracted:
            logger.info("[SCAN] Nothing extracted from scans")
            return ExtractionResponse(
                draft=current, extracted=False, sources=outcome.sources, skipped=outcome.skipped
            )

        draft = reconciler.apply(current, outcome.patch, editing_existing=body.editing_existing)
        return ExtractionResponse(
            draft=draft, extracted=True, sources=outcome.sources, skipped=outcome.skipped
        )

    except Exception as e:
        logger.error(
            f"[SCAN] Error merging scans - Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Error merging scans: {str(e)}")


@router.post("/api/draft/items", response_model=DraftResponse)
async def add_item(
    body: DraftContext,
    store: DraftStore = Depends(get_draft_store),
    reconciler: OrderDraftReconciler = Depends(get_reconciler),
):
    """Append a blank line to the draft."""
    current = _current_draft(body, store)
    draft = reconciler.add_item(current, editing_existing=body.editing_existing)
    return DraftResponse(draft=draft)


@router.patch("/api/draft/items/{index}", response_model=DraftResponse)
async def update_item(
    index: int,
    body: ItemUpdateRequest,
    store: DraftStore = Depends(get_draft_store),
    reconciler: OrderDraftReconciler = Depends(get_reconciler),
    catalog_repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Update one line. A product named exactly as in the catalog also sets the price."""
    current = _current_draft(body, store)
    if not 0 <= index < len(current.items):
        raise HTTPException(status_code=404, detail=f"Line {index} not found")

    product = None
    if body.product:
        product = await catalog_repository.get_product_by_name(body.product)

    if product is not None:
        draft = reconciler.select_product(
            current, index, product, editing_existing=body.editing_existing
        )
        if body.quantity is not None or body.unit_price is not None:
            draft = reconciler.update_item(
                draft,
                index,
                quantity=body.quantity,
                unit_price=body.unit_price,
                editing_existing=body.editing_existing,
            )
    else:
        draft = reconciler.update_item(
            current,
            index,
            product=body.product,
            quantity=body.quantity,
            unit_price=body.unit_price,
            editing_existing=body.editing_existing,
        )
    return DraftResponse(draft=draft)


@router.delete("/api/draft/items/{index}", response_model=DraftResponse)
async def remove_item(
    index: int,
    body: Optional[DraftContext] = None,
    store: DraftStore = Depends(get_draft_store),
    reconciler: OrderDraftReconciler = Depends(get_reconciler),
):
    """Remove one line from the draft."""
    body = body or DraftContext()
    current = _current_draft(body, store)
    if not 0 <= index < len(current.items):
        raise HTTPException(status_code=404, detail=f"Line {index} not found")
    draft = reconciler.remove_item(current, index, editing_existing=body.editing_existing)
    return DraftResponse(draft=draft)


@router.post("/api/draft/submit", response_model=SubmitResponse)
async def submit_draft(
    body: DraftContext,
    store: DraftStore = Depends(get_draft_store),
):
    """Validate the draft for submission and release the draft slot."""
    current = _current_draft(body, store)
    current.recompute_totals()

    errors = OrderValidator().validate(current)
    if errors:
        logger.info(f"[DRAFT] Submission rejected - {len(errors)} errors")
        raise HTTPException(status_code=422, detail={"errors": errors})

    if not body.editing_existing:
        store.clear()
    logger.info(
        f"[DRAFT] Draft submitted - {len(current.items)} items, total {current.total:.2f}"
    )
    return SubmitResponse(order=current)
