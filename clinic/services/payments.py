"""Payment allocation shared by payables and receivables."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from clinic.exceptions import DomainError


@dataclass(frozen=True)
class Allocation:
    paid: Decimal
    outstanding: Decimal

    @property
    def settled(self) -> bool:
        return self.outstanding <= 0


def allocate_payment(total: Decimal, already_paid: Decimal, amount: Decimal) -> Allocation:
    """Add ``amount`` to what was paid and recompute the outstanding balance."""
    if amount is None or amount <= 0:
        raise DomainError('Payment amount is required and must be greater than 0')
    paid = (already_paid or Decimal('0')) + amount
    return Allocation(paid=paid, outstanding=total - paid)
