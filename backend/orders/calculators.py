"""
Order pricing.

PricingEngine is a pure function of its inputs: line snapshots, a delivery
fee, a discount and a tax rate. Nothing here touches the database, so the
same numbers come out for previews, order creation and ``Order.save()``.

    total = subtotal + delivery_fee + tax - discount

Tax is charged on what the customer actually pays for goods and delivery,
i.e. on (subtotal + delivery_fee - discount).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from django.conf import settings

from core_backend.exceptions import ValidationFailedError
from payments.money import ZERO, quantize


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    delivery_fee: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal


class PricingEngine:
    def __init__(self, tax_rate: Optional[Decimal] = None):
        if tax_rate is None:
            tax_rate = getattr(settings, "ORDER_TAX_RATE", ZERO)
        self.tax_rate = Decimal(tax_rate)

    @staticmethod
    def subtotal(lines: Iterable) -> Decimal:
        """Sum of ``line_subtotal`` over snapshot lines (captured prices only)."""
        return quantize(sum((line.line_subtotal for line in lines), ZERO))

    @staticmethod
    def compute_total(subtotal, delivery_fee, tax_amount, discount_amount) -> Decimal:
        total = quantize(subtotal + delivery_fee + tax_amount - discount_amount)
        return max(total, ZERO)

    def tax_for(self, subtotal: Decimal, delivery_fee: Decimal, discount_amount: Decimal) -> Decimal:
        taxable = max(subtotal + delivery_fee - discount_amount, ZERO)
        return quantize(taxable * self.tax_rate)

    def price(self, subtotal: Decimal, delivery_fee: Decimal, discount_amount: Decimal = ZERO) -> OrderTotals:
        """
        Price a candidate order.

        Raises:
            ValidationFailedError: subtotal is not positive, or fee/discount negative
        """
        subtotal = quantize(subtotal)
        delivery_fee = quantize(delivery_fee)
        discount_amount = quantize(discount_amount)

        if subtotal <= ZERO:
            raise ValidationFailedError("Order subtotal must be greater than zero")
        if delivery_fee < ZERO or discount_amount < ZERO:
            raise ValidationFailedError("Delivery fee and discount cannot be negative")

        # A discount never reaches into fees or tax.
        discount_amount = min(discount_amount, subtotal)
        tax_amount = self.tax_for(subtotal, delivery_fee, discount_amount)

        return OrderTotals(
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            discount_amount=discount_amount,
            tax_amount=tax_amount,
            total_amount=self.compute_total(subtotal, delivery_fee, tax_amount, discount_amount),
        )
