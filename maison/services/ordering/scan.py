"""Merging of scanned order slips."""
import json
import logging
import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from maison.services.catalog.repository import CatalogLookup
from maison.services.ordering.models import (
    ExtractionPatch,
    MergeOutcome,
    OrderItem,
    ScanItem,
    ScanResult,
)

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


class ScanParseError(ValueError):
    """Raised when an image extraction response is not a JSON object."""


def parse_scan_response(content: str) -> Dict[str, Any]:
    """Parse the raw text an extraction model returned for one image.

    Markdown code fences around the JSON are tolerated.
    """
    cleaned = _CODE_FENCE.sub("", content or "").strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ScanParseError(f"Failed to parse extracted data: {e}") from e
    if not isinstance(data, dict):
        raise ScanParseError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _first_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_date(value: Optional[str]) -> Optional[date]:
    value = _first_text(value)
    if value is None:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        logger.debug(f"[SCAN] Ignoring unreadable delivery date {value!r}")
        return None


class ScanMergeExtractor:
    """Folds per-image scan results into one patch.

    Scalar fields are first-wins in the order the results are given; items
    are concatenated without de-duplication. A result that failed or cannot be
    read is skipped, the rest are still merged.
    """

    def __init__(self, lookup: Optional[CatalogLookup] = None):
        self.lookup = lookup or CatalogLookup()

    def _to_result(self, raw: Any) -> Optional[ScanResult]:
        """Coerce one raw scan result, or return None when it must be skipped."""
        if raw is None:
            return None
        if isinstance(raw, BaseException):
            logger.warning(f"[SCAN] Skipping failed scan: {type(raw).__name__}: {raw}")
            return None
        if isinstance(raw, ScanResult):
            return raw
        if isinstance(raw, str):
            try:
                raw = parse_scan_response(raw)
            except ScanParseError as e:
                logger.warning(f"[SCAN] Skipping unreadable scan: {e}")
                return None
        if not isinstance(raw, dict):
            logger.warning(f"[SCAN] Skipping scan of unexpected type {type(raw).__name__}")
            return None
        if raw.get("error"):
            logger.warning(f"[SCAN] Skipping scan that reported an error: {raw['error']}")
            return None
        try:
            return ScanResult.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"[SCAN] Skipping malformed scan: {e.error_count()} validation errors")
            return None

    def to_order_item(self, scan_item: ScanItem) -> OrderItem:
        """Turn a scanned line into an order line, filling in the price when missing."""
        product = (scan_item.product or "").strip()

        quantity = 1
        if scan_item.quantity is not None and scan_item.quantity >= 1:
            quantity = int(scan_item.quantity)

        if scan_item.unit_price is not None and scan_item.unit_price >= 0:
            unit_price = scan_item.unit_price
        elif scan_item.total is not None and scan_item.total >= 0:
            unit_price = scan_item.total / quantity
        else:
            match = self.lookup.match(product)
            unit_price = match.price if match else 0.0

        return OrderItem(
            product=product,
            quantity=quantity,
            unit_price=unit_price,
            total=quantity * unit_price,
        )

    def merge(self, results: Iterable[Any]) -> MergeOutcome:
        """
        Merge scan results in the order given.

        Args:
            results: Per-image results: dicts, raw response strings,
                exceptions or None

        Returns:
            MergeOutcome whose `extracted` is False when no name, phone
            number or item was found
        """
        customer_name: Optional[str] = None
        phone_number: Optional[str] = None
        delivery_date: Optional[date] = None
        items: List[OrderItem] = []
        sources = 0
        skipped = 0

        for raw in results:
            sources += 1
            result = self._to_result(raw)
            if result is None:
                skipped += 1
                continue

            if customer_name is None:
                customer_name = _first_text(result.customer_name)
            if phone_number is None:
                phone_number = _first_text(result.phone_number)
            if delivery_date is None:
                delivery_date = _parse_date(result.delivery_date)
            items.extend(self.to_order_item(scan_item) for scan_item in result.items)

        found = {}
        if customer_name is not None:
            found["customer_name"] = customer_name
        if phone_number is not None:
            found["phone_number"] = phone_number
        if delivery_date is not None:
            found["delivery_date"] = delivery_date
        if items:
            found["items"] = items

        extracted = bool(customer_name or phone_number or items)
        logger.info(
            f"[SCAN] Merged {sources} scans ({skipped} skipped): "
            f"{len(items)} items, fields {sorted(found) or 'none'}"
        )
        return MergeOutcome(
            patch=ExtractionPatch(**found),
            extracted=extracted,
            sources=sources,
            skipped=skipped,
        )
