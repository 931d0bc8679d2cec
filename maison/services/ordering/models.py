"""Order draft models."""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderItem(BaseModel):
    """Order line. `product` is a denormalized display name, not a catalog key."""

    model_config = ConfigDict(populate_by_name=True)

    product: str = ""
    quantity: int = 1
    unit_price: float = Field(default=0.0, alias="unitPrice")
    total: float = 0.0


class OrderDraft(BaseModel):
    """The single in-progress order being edited in the new-order form."""

    model_config = ConfigDict(populate_by_name=True)

    customer_name: str = Field(default="", alias="customerName")
    phone_number: str = Field(default="", alias="phoneNumber")
    delivery_address: str = Field(default="", alias="deliveryAddress")
    delivery_date: Optional[date] = Field(default=None, alias="deliveryDate")
    items: List[OrderItem] = []
    total: float = 0.0

    def recompute_totals(self) -> None:
        """Recompute every line total and the order total in place."""
        for item in self.items:
            item.total = item.quantity * item.unit_price
        self.total = sum(item.total for item in self.items)


class ExtractionPatch(BaseModel):
    """Partial draft produced by an extractor or a manual edit.

    Only explicitly set fields (``model_fields_set``) are applied; a field
    left out of the constructor leaves the draft untouched.
    """

    model_config = ConfigDict(populate_by_name=True)

    customer_name: Optional[str] = Field(default=None, alias="customerName")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    delivery_address: Optional[str] = Field(default=None, alias="deliveryAddress")
    delivery_date: Optional[date] = Field(default=None, alias="deliveryDate")
    items: Optional[List[OrderItem]] = None

    def addressed_fields(self) -> set:
        """Names of the fields this patch explicitly sets."""
        return set(self.model_fields_set)

    def is_empty(self) -> bool:
        return not self.model_fields_set


class ScanItem(BaseModel):
    """One line read from a scanned order slip."""

    model_config = ConfigDict(populate_by_name=True)

    product: Optional[str] = None
    quantity: Optional[float] = None
    unit_price: Optional[float] = Field(default=None, alias="unitPrice")
    total: Optional[float] = None


class ScanResult(BaseModel):
    """Structured guess returned by the image extraction service for one image."""

    model_config = ConfigDict(populate_by_name=True)

    customer_name: Optional[str] = Field(default=None, alias="customerName")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    delivery_date: Optional[str] = Field(default=None, alias="deliveryDate")
    items: List[ScanItem] = []

    @field_validator("customer_name", "phone_number", "delivery_date", mode="before")
    @classmethod
    def _stringify(cls, value):
        # OCR output occasionally gives phone numbers as bare integers
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, value):
        return [] if value is None else value


class MergeOutcome(BaseModel):
    """Result of folding several scan results into one patch."""

    patch: ExtractionPatch
    extracted: bool
    sources: int = 0
    skipped: int = 0


class SpeechOutcome(BaseModel):
    """Result of extracting a patch from a transcript."""

    patch: ExtractionPatch
    extracted: bool
