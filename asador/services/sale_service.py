"""
Sale lifecycle service
Moves saved sales between the active and closed partitions

Main features:
- save a draft as an active sale
- close with split payment and tip, validated against total + tip
- reopen a closed sale for correction
- delete from either partition

Business rules:
- tender must match total + tip within one cent, otherwise nothing is written
- the primary payment method is the largest share (ties: Cash > Transfer > Other)
- a closed sale stores the tip inside its total and separately; reopen takes it out
- reopen restarts created_at
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..core.exceptions import (
    PaymentMismatchError,
    SaleNotFoundError,
    ValidationError,
)
from ..models.sale import ClosedFields, PaymentBreakdown, PersistedSale, SaleStatus
from ..utils.ids import time_ordered_id
from .draft_sale import DraftSaleEngine
from .sale_repository import SaleRepository

logger = logging.getLogger(__name__)

# Tender may differ from the amount due by less than this
PAYMENT_TOLERANCE_CENTS = 1


class SaleService:
    """Sale lifecycle state machine"""

    def __init__(self, repository: SaleRepository = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.repository = repository or SaleRepository()
        self.clock = clock

    def list_active(self) -> List[PersistedSale]:
        return self.repository.list_active()

    def list_closed(self, limit: Optional[int] = None) -> List[PersistedSale]:
        return self.repository.list_closed(limit)

    def create_sale(self, draft: DraftSaleEngine, delivery_fee_cents: int = 0) -> PersistedSale:
        """
        Save the draft as an active sale

        The draft is left untouched; the caller clears it once this returns.

        Raises:
            ValidationError: empty draft or negative delivery fee
            PersistenceError: the store rejected the insert
        """
        if draft.is_empty:
            raise ValidationError("Add at least one item to the sale")
        if delivery_fee_cents < 0:
            raise ValidationError("Delivery fee cannot be negative")

        items = draft.snapshot()
        sale = PersistedSale(
            id=time_ordered_id(),
            items=items,
            total_cents=sum(line.subtotal_cents for line in items) + delivery_fee_cents,
            delivery_fee_cents=delivery_fee_cents,
            status=SaleStatus.ACTIVE,
            created_at=self.clock(),
        )
        self.repository.insert_active(sale)
        logger.info("Saved sale %s for $%.2f", sale.id, sale.total_mxn)
        return sale

    def close_sale(self, sale_id: str, payment_breakdown: PaymentBreakdown,
                   tip_cents: int = 0) -> PersistedSale:
        """
        Close an active sale

        Args:
            sale_id: active sale ID
            payment_breakdown: amounts per payment method
            tip_cents: tip on top of the sale total

        Raises:
            ValidationError: negative tip
            SaleNotFoundError: not in the active partition (already closed or deleted)
            PaymentMismatchError: tender differs from total + tip
        """
        if tip_cents < 0:
            raise ValidationError("Tip cannot be negative")

        sale = self.repository.get_active(sale_id)
        required = sale.total_cents + tip_cents
        tendered = payment_breakdown.total_cents
        remaining = required - tendered
        if abs(remaining) >= PAYMENT_TOLERANCE_CENTS:
            raise PaymentMismatchError(remaining, required, tendered)

        fields = ClosedFields(
            total_cents=required,
            tip_cents=tip_cents,
            payment_method=payment_breakdown.primary_method(),
            payment_breakdown=payment_breakdown,
            closed_at=self.clock(),
        )
        closed = self.repository.move_active_to_closed(sale_id, fields)
        logger.info("Closed sale %s via %s", sale_id, fields.payment_method.value)
        return closed

    def reopen_sale(self, sale_id: str) -> PersistedSale:
        """Move a closed sale back to active with its payment fields cleared"""
        reopened = self.repository.move_closed_to_active(sale_id, self.clock())
        logger.info("Reopened sale %s", sale_id)
        return reopened

    def delete_active(self, sale_id: str):
        self.repository.delete_active(sale_id)

    def delete_closed(self, sale_id: str):
        self.repository.delete_closed(sale_id)

    def delete_sale(self, sale_id: str) -> str:
        """
        Delete a sale from whichever partition holds it

        Returns:
            The partition it was removed from
        """
        try:
            self.repository.delete_active(sale_id)
            return "active"
        except SaleNotFoundError:
            pass
        try:
            self.repository.delete_closed(sale_id)
            return "closed"
        except SaleNotFoundError:
            raise SaleNotFoundError(sale_id) from None
