"""Unit tests for draft reconciliation and submission validation."""
from datetime import date

import pytest

from maison.services.catalog.base import Product
from maison.services.ordering.models import ExtractionPatch, OrderDraft, OrderItem
from maison.services.ordering.reconciler import OrderDraftReconciler, new_draft
from maison.services.ordering.validator import OrderValidator


@pytest.fixture
def draft():
    """Draft with customer details and two lines."""
    return OrderDraft(
        customer_name="Ahmed",
        phone_number="0612345678",
        delivery_address="12 rue des Roses",
        delivery_date=date(2025, 2, 14),
        items=[
            OrderItem(product="Croissant", quantity=3, unit_price=5.0, total=15.0),
            OrderItem(product="Pain", quantity=1, unit_price=2.0, total=2.0),
        ],
        total=17.0,
    )


def _assert_totals_consistent(draft):
    for item in draft.items:
        assert item.total == item.quantity * item.unit_price
    assert draft.total == sum(item.total for item in draft.items)


class TestApply:
    """Test applying patches onto drafts."""

    def test_empty_patch_is_identity(self, reconciler, draft):
        """Test an empty patch changes nothing."""
        result = reconciler.apply(draft, ExtractionPatch())

        assert result == draft

    def test_scalar_overwrite(self, reconciler, draft):
        """Test provided scalar fields overwrite, others are kept."""
        result = reconciler.apply(draft, ExtractionPatch(customer_name="Nadia"))

        assert result.customer_name == "Nadia"
        assert result.phone_number == "0612345678"
        assert result.delivery_address == "12 rue des Roses"
        assert result.delivery_date == date(2025, 2, 14)
        assert len(result.items) == 2

    def test_explicit_empty_string_overwrites(self, reconciler, draft):
        """Test an explicitly empty value is applied."""
        result = reconciler.apply(draft, ExtractionPatch(phone_number=""))

        assert result.phone_number == ""

    def test_explicit_none_clears(self, reconciler, draft):
        """Test explicit None clears text fields to empty and the date to None."""
        result = reconciler.apply(draft, ExtractionPatch(delivery_date=None, delivery_address=None))

        assert result.delivery_date is None
        assert result.delivery_address == ""
        assert result.customer_name == "Ahmed"

    def test_items_replace(self, reconciler, draft):
        """Test a non-empty item list replaces all lines."""
        patch = ExtractionPatch(items=[OrderItem(product="Chebakia", quantity=2, unit_price=90.0)])
        result = reconciler.apply(draft, patch)

        assert [i.product for i in result.items] == ["Chebakia"]
        assert result.total == 180.0

    def test_empty_items_keep_existing(self, reconciler, draft):
        """Test an empty item list does not wipe the lines."""
        result = reconciler.apply(draft, ExtractionPatch(items=[]))

        assert [i.product for i in result.items] == ["Croissant", "Pain"]

    def test_totals_recomputed_always(self, reconciler):
        """Test inconsistent totals are repaired even by a scalar-only patch."""
        broken = OrderDraft(
            items=[OrderItem(product="Pain", quantity=4, unit_price=2.0, total=999.0)],
            total=-1.0,
        )
        result = reconciler.apply(broken, ExtractionPatch(customer_name="Omar"))

        assert result.items[0].total == 8.0
        assert result.total == 8.0
        _assert_totals_consistent(result)

    def test_input_not_mutated(self, reconciler, draft):
        """Test the current draft is left untouched."""
        reconciler.apply(draft, ExtractionPatch(
            customer_name="Other",
            items=[OrderItem(product="Pain", quantity=9, unit_price=2.0)],
        ))

        assert draft.customer_name == "Ahmed"
        assert len(draft.items) == 2

    def test_persists_result(self, reconciler, draft_store, draft):
        """Test the reconciled draft is saved."""
        result = reconciler.apply(draft, ExtractionPatch(customer_name="Salma"))

        assert draft_store.load() == result

    def test_editing_existing_skips_persistence(self, reconciler, draft_store, draft):
        """Test editing a submitted order does not touch the draft slot."""
        reconciler.apply(draft, ExtractionPatch(customer_name="Salma"), editing_existing=True)

        assert draft_store.load() is None

    def test_without_store(self, draft):
        """Test a reconciler without a store still applies patches."""
        result = OrderDraftReconciler().apply(draft, ExtractionPatch(customer_name="Hind"))

        assert result.customer_name == "Hind"


class TestManualEdits:
    """Test line edits from the order form."""

    def test_new_draft_has_one_blank_line(self):
        """Test the empty form state."""
        draft = new_draft()

        assert len(draft.items) == 1
        assert draft.items[0].product == ""
        assert draft.items[0].quantity == 1
        assert draft.total == 0.0

    def test_add_item(self, reconciler, draft):
        """Test appending a blank line."""
        result = reconciler.add_item(draft)

        assert len(result.items) == 3
        assert result.items[-1].product == ""
        assert result.total == 17.0

    def test_remove_item(self, reconciler, draft):
        """Test removing a line updates the total."""
        result = reconciler.remove_item(draft, 0)

        assert [i.product for i in result.items] == ["Pain"]
        assert result.total == 2.0

    def test_remove_last_line_ignored(self, reconciler):
        """Test the form keeps at least one line."""
        single = OrderDraft(items=[OrderItem(product="Pain", quantity=1, unit_price=2.0)])
        result = reconciler.remove_item(single, 0)

        assert len(result.items) == 1

    def test_update_quantity_recomputes(self, reconciler, draft):
        """Test changing a quantity updates line and order totals."""
        result = reconciler.update_item(draft, 1, quantity=5)

        assert result.items[1].total == 10.0
        assert result.total == 25.0

    def test_select_product_copies_price(self, reconciler, draft):
        """Test choosing a catalog product sets name and unit price."""
        product = Product(id="pac", name="Pain au chocolat", price=6.0)
        result = reconciler.select_product(draft, 1, product)

        assert result.items[1].product == "Pain au chocolat"
        assert result.items[1].unit_price == 6.0
        assert result.items[1].total == 6.0

    def test_update_bad_index(self, reconciler, draft):
        """Test updating a missing line raises IndexError."""
        with pytest.raises(IndexError):
            reconciler.update_item(draft, 7, quantity=2)


class TestOrderValidator:
    """Test submission validation."""

    def test_valid_draft(self, draft):
        """Test a complete draft has no errors."""
        assert OrderValidator().validate(draft) == []

    def test_missing_customer_fields(self, draft):
        """Test blank name and phone are reported."""
        draft.customer_name = "  "
        draft.phone_number = ""

        errors = OrderValidator().validate(draft)

        assert "Customer name is required" in errors
        assert "Phone number is required" in errors

    def test_bad_lines(self):
        """Test blank products, zero quantities and prices are reported."""
        draft = OrderDraft(
            customer_name="Ali",
            phone_number="0600000000",
            items=[OrderItem(product="", quantity=0, unit_price=0.0)],
        )

        errors = OrderValidator().validate(draft)

        assert errors == [
            "Line 1: product is required",
            "Line 1: quantity must be at least 1",
            "Line 1: unit price must be greater than 0",
        ]

    def test_no_items(self):
        """Test a draft without lines is rejected."""
        draft = OrderDraft(customer_name="Ali", phone_number="0600000000")

        assert "At least one product is required" in OrderValidator().validate(draft)
