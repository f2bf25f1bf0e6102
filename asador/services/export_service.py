"""
Export service
Monthly or yearly report as a sectioned CSV document
"""

import io
from datetime import date, datetime
from typing import Callable, List, Optional, Tuple

import pandas as pd

from ..core.exceptions import ValidationError
from ..models.expense import EXPENSE_CATEGORY_LABELS, Expense
from ..models.report import PeriodRange
from ..models.sale import PaymentMethod, PersistedSale
from .expense_service import ExpenseService
from .report_service import end_of_day, month_range, payment_totals, sale_time, start_of_day
from .sale_repository import SaleRepository

MONTH_NAMES = {
    1: "enero", 2: "febrero", 3: "marzo", 4: "abril", 5: "mayo", 6: "junio",
    7: "julio", 8: "agosto", 9: "septiembre", 10: "octubre", 11: "noviembre", 12: "diciembre",
}

PAYMENT_LABELS = {
    PaymentMethod.CASH.value: "Efectivo",
    PaymentMethod.TRANSFER.value: "Transferencia",
    PaymentMethod.OTHER.value: "Otro",
}


def _money(cents: int) -> str:
    return f"${cents / 100:.2f}"


class ExportService:
    """Export service"""

    def __init__(self, repository: SaleRepository = None, expense_service: ExpenseService = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.repository = repository or SaleRepository()
        self.expense_service = expense_service or ExpenseService()
        self.clock = clock

    def export_csv(self, year: int, month: Optional[int] = None) -> Tuple[str, str]:
        """
        Build the report for a year, or one month of it

        Returns:
            (filename, csv text)
        """
        window = self._window(year, month)
        sales = self.repository.list_closed_between(window.start, window.end)
        sales.sort(key=sale_time)
        expenses = self.expense_service.list_expenses(window.start.date(), window.end.date())

        buffer = io.StringIO()
        buffer.write("=== REPORTE ASADOR CALLEJERO ===\n")
        buffer.write(f"Fecha de generación: {self.clock().strftime('%d/%m/%Y %H:%M:%S')}\n\n")
        self._write_section(buffer, "RESUMEN EJECUTIVO", self._summary_frame(sales, expenses))
        self._write_section(buffer, "VENTAS POR MÉTODO DE PAGO", self._payments_frame(sales))
        self._write_section(buffer, "DETALLE DE VENTAS", self._sales_frame(sales))
        self._write_section(buffer, "DETALLE DE GASTOS", self._expenses_frame(expenses))

        label = MONTH_NAMES[month] if month else "anual"
        return f"reporte_{label}_{year}.csv", buffer.getvalue()

    def _window(self, year: int, month: Optional[int]) -> PeriodRange:
        if month is not None and not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12", {"month": month})
        if not 2000 <= year <= 9999:
            raise ValidationError("Invalid year", {"year": year})
        if month:
            start, end = month_range(year, month)
            return PeriodRange(period="month", start=start, end=end)
        return PeriodRange(period="year", start=start_of_day(date(year, 1, 1)),
                           end=end_of_day(date(year, 12, 31)))

    def _write_section(self, buffer: io.StringIO, title: str, frame: pd.DataFrame):
        buffer.write(f"=== {title} ===\n")
        frame.to_csv(buffer, index=False, lineterminator="\n")
        buffer.write("\n")

    def _summary_frame(self, sales: List[PersistedSale], expenses: List[Expense]) -> pd.DataFrame:
        revenue = sum(sale.total_cents for sale in sales)
        spent = sum(expense.amount_cents for expense in expenses)
        return pd.DataFrame({
            "Concepto": ["Ingresos Totales", "Gastos Totales", "Ganancia Neta"],
            "Monto": [_money(revenue), _money(spent), _money(revenue - spent)],
        })

    def _payments_frame(self, sales: List[PersistedSale]) -> pd.DataFrame:
        totals = payment_totals(sales)
        return pd.DataFrame({
            "Método": [PAYMENT_LABELS[method] for method in totals],
            "Monto": [_money(amount) for amount in totals.values()],
        })

    def _sales_frame(self, sales: List[PersistedSale]) -> pd.DataFrame:
        rows = []
        for sale in sales:
            moment = sale_time(sale)
            rows.append({
                "Fecha": moment.strftime("%d/%m/%Y"),
                "Hora": moment.strftime("%H:%M"),
                "Método de Pago": sale.payment_method.value if sale.payment_method else "N/A",
                "Items": "; ".join(f"{line.name} x{line.quantity}" for line in sale.items) or "N/A",
                "Total": _money(sale.total_cents),
            })
        return pd.DataFrame(rows, columns=["Fecha", "Hora", "Método de Pago", "Items", "Total"])

    def _expenses_frame(self, expenses: List[Expense]) -> pd.DataFrame:
        rows = [{
            "Fecha": expense.date.strftime("%d/%m/%Y"),
            "Categoría": EXPENSE_CATEGORY_LABELS.get(expense.category, expense.category.value),
            "Descripción": expense.description,
            "Monto": _money(expense.amount_cents),
        } for expense in sorted(expenses, key=lambda e: (e.date, e.created_at))]
        return pd.DataFrame(rows, columns=["Fecha", "Categoría", "Descripción", "Monto"])
