"""
Custom exceptions
Precise error types for the sale engine, lifecycle and storage layers
"""

from typing import Any, Dict


class BaseApplicationError(Exception):
    """Base application error"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class PersistenceError(BaseApplicationError):
    """Storage operation failed"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "PERSISTENCE_ERROR", details)


class ConcurrencyError(BaseApplicationError):
    """Write conflict detected by the store"""

    def __init__(self, message: str = "Storage is busy, try again"):
        super().__init__(message, "CONCURRENCY_CONFLICT")


class AuthenticationError(BaseApplicationError):
    """Missing or invalid session"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "AUTHENTICATION_REQUIRED")


class ValidationError(BaseApplicationError):
    """Rejected input; no state was mutated"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundError(BaseApplicationError):
    """Resource absent from where it was expected"""

    def __init__(self, message: str, error_code: str = "RESOURCE_NOT_FOUND",
                 details: Dict[str, Any] = None):
        super().__init__(message, error_code, details)


class SaleNotFoundError(NotFoundError):
    def __init__(self, sale_id: str, partition: str = None):
        where = f" in {partition} sales" if partition else ""
        super().__init__(
            f"Sale {sale_id} not found{where}",
            "SALE_NOT_FOUND",
            {"sale_id": sale_id, "partition": partition}
        )


class LineNotFoundError(NotFoundError):
    def __init__(self, line_id: str):
        super().__init__(
            f"Line {line_id} is not part of the current sale",
            "LINE_NOT_FOUND",
            {"line_id": line_id}
        )


class MenuItemNotFoundError(NotFoundError):
    def __init__(self, category_id: str, item_id: str = None):
        if item_id is None:
            message = f"Category {category_id} not found"
        else:
            message = f"Item {item_id} not found in category {category_id}"
        super().__init__(
            message,
            "MENU_ITEM_NOT_FOUND",
            {"category_id": category_id, "item_id": item_id}
        )


class ExpenseNotFoundError(NotFoundError):
    def __init__(self, expense_id: str):
        super().__init__(
            f"Expense {expense_id} not found",
            "EXPENSE_NOT_FOUND",
            {"expense_id": expense_id}
        )


class PaymentMismatchError(BaseApplicationError):
    """
    Tender does not cover total + tip

    remaining_cents is signed: positive means money is still owed,
    negative means the customer handed over too much.
    """

    def __init__(self, remaining_cents: int, required_cents: int, tendered_cents: int):
        self.remaining_cents = remaining_cents
        if remaining_cents > 0:
            message = f"Payment is short by ${remaining_cents / 100:.2f}"
        else:
            message = f"Payment exceeds the amount due by ${-remaining_cents / 100:.2f}"
        super().__init__(
            message,
            "PAYMENT_MISMATCH",
            {
                "remaining_cents": remaining_cents,
                "required_cents": required_cents,
                "tendered_cents": tendered_cents,
            }
        )
