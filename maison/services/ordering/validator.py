"""Order submission validation."""
from typing import List

from maison.services.ordering.models import OrderDraft


class OrderValidator:
    """Checks a draft is complete enough to be submitted as an order."""

    def validate(self, draft: OrderDraft) -> List[str]:
        """
        Validate a draft for submission.

        Returns:
            List of error messages, empty when the draft can be submitted
        """
        errors = []

        if not draft.customer_name.strip():
            errors.append("Customer name is required")
        if not draft.phone_number.strip():
            errors.append("Phone number is required")

        if not draft.items:
            errors.append("At least one product is required")

        for index, item in enumerate(draft.items, start=1):
            if not item.product.strip():
                errors.append(f"Line {index}: product is required")
            if item.quantity <= 0:
                errors.append(f"Line {index}: quantity must be at least 1")
            if item.unit_price <= 0:
                errors.append(f"Line {index}: unit price must be greater than 0")

        return errors
