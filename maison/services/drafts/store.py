"""Persistence of the single in-progress order draft."""
import json
import logging
from typing import Optional

from pydantic import ValidationError

from maison.services.drafts.storage import KeyValueStorage
from maison.services.ordering.models import OrderDraft

logger = logging.getLogger(__name__)

DEFAULT_DRAFT_KEY = "order_draft"

# A stored object must carry at least one of these to count as a draft
DRAFT_KEYS = frozenset({"customerName", "phoneNumber", "deliveryAddress", "deliveryDate", "items"})


class DraftStore:
    """Saves, loads and clears the one draft slot.

    There is exactly one slot: only one new order can be in progress at a time.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_DRAFT_KEY):
        self.storage = storage
        self.key = key

    def save(self, draft: OrderDraft) -> None:
        """Serialize the draft into the slot, overwriting it."""
        payload = draft.model_dump_json(by_alias=True, exclude={"total"})
        self.storage.set(self.key, payload)
        logger.debug(f"[DRAFT] Saved draft with {len(draft.items)} items to '{self.key}'")

    def load(self) -> Optional[OrderDraft]:
        """Load the draft, or None when the slot is empty or unreadable."""
        payload = self.storage.get(self.key)
        if payload is None:
            return None

        try:
            data = json.loads(payload)
        except ValueError:
            logger.warning(f"[DRAFT] Ignoring unparsable draft in '{self.key}'")
            return None

        if not isinstance(data, dict) or not DRAFT_KEYS.intersection(data):
            logger.warning(f"[DRAFT] Ignoring '{self.key}': stored value is not a draft")
            return None

        try:
            draft = OrderDraft.model_validate(data)
        except ValidationError as e:
            logger.warning(
                f"[DRAFT] Ignoring corrupt draft in '{self.key}': {e.error_count()} errors"
            )
            return None
        draft.recompute_totals()
        return draft

    def clear(self) -> None:
        """Remove the slot."""
        self.storage.delete(self.key)
        logger.debug(f"[DRAFT] Cleared '{self.key}'")
