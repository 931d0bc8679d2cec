"""Order draft reconciliation."""
import logging
from typing import Optional

from maison.services.catalog.base import Product
from maison.services.drafts.store import DraftStore
from maison.services.ordering.models import ExtractionPatch, OrderDraft, OrderItem

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("customer_name", "phone_number", "delivery_address", "delivery_date")
TEXT_FIELDS = ("customer_name", "phone_number", "delivery_address")


def new_draft() -> OrderDraft:
    """Empty new-order form: no customer details and one blank line."""
    return OrderDraft(items=[OrderItem()])


class OrderDraftReconciler:
    """Applies patches to the current draft and persists the result.

    Every change to a draft, extracted or typed, goes through `apply`, which
    also keeps line totals and the order total consistent.
    """

    def __init__(self, store: Optional[DraftStore] = None):
        self.store = store

    def apply(
        self,
        current: OrderDraft,
        patch: ExtractionPatch,
        editing_existing: bool = False,
    ) -> OrderDraft:
        """
        Apply a patch onto a draft.

        Args:
            current: Draft being edited (left untouched)
            patch: Fields to change; fields the patch does not set are kept
            editing_existing: True when editing an already submitted order,
                in which case the new-order draft slot is not written

        Returns:
            New draft with recomputed totals
        """
        draft = current.model_copy(deep=True)
        addressed = patch.addressed_fields()

        for field in SCALAR_FIELDS:
            if field not in addressed:
                continue
            value = getattr(patch, field)
            if value is None and field in TEXT_FIELDS:
                value = ""
            setattr(draft, field, value)

        if "items" in addressed and patch.items:
            draft.items = [item.model_copy() for item in patch.items]

        draft.recompute_totals()

        if self.store is not None and not editing_existing:
            self.store.save(draft)
        return draft

    def add_item(self, current: OrderDraft, editing_existing: bool = False) -> OrderDraft:
        """Append a blank line."""
        items = [item.model_copy() for item in current.items] + [OrderItem()]
        return self.apply(current, ExtractionPatch(items=items), editing_existing)

    def remove_item(self, current: OrderDraft, index: int, editing_existing: bool = False) -> OrderDraft:
        """Remove a line. The form always keeps at least one line."""
        if len(current.items) <= 1:
            logger.debug("[DRAFT] Not removing the last line")
            return self.apply(current, ExtractionPatch(), editing_existing)
        items = [item.model_copy() for i, item in enumerate(current.items) if i != index]
        return self.apply(current, ExtractionPatch(items=items), editing_existing)

    def update_item(
        self,
        current: OrderDraft,
        index: int,
        product: Optional[str] = None,
        quantity: Optional[int] = None,
        unit_price: Optional[float] = None,
        editing_existing: bool = False,
    ) -> OrderDraft:
        """Change one line's product name, quantity or unit price."""
        items = [item.model_copy() for item in current.items]
        item = items[index]
        if product is not None:
            item.product = product
        if quantity is not None:
            item.quantity = quantity
        if unit_price is not None:
            item.unit_price = unit_price
        return self.apply(current, ExtractionPatch(items=items), editing_existing)

    def select_product(
        self,
        current: OrderDraft,
        index: int,
        product: Product,
        editing_existing: bool = False,
    ) -> OrderDraft:
        """Point a line at a catalog product, copying its name and price."""
        return self.update_item(
            current,
            index,
            product=product.name,
            unit_price=product.price,
            editing_existing=editing_existing,
        )
