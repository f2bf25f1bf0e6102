"""
Business logic services.
Menu, draft sale, sale lifecycle, expenses and reporting.
"""

from .draft_sale import DraftRegistry, DraftSaleEngine, draft_registry
from .expense_service import ExpenseService
from .export_service import ExportService
from .menu_catalog import MenuCatalog
from .menu_service import MenuService
from .report_service import ReportService
from .sale_repository import SaleRepository
from .sale_service import SaleService

__all__ = [
    "DraftRegistry",
    "DraftSaleEngine",
    "ExpenseService",
    "ExportService",
    "MenuCatalog",
    "MenuService",
    "ReportService",
    "SaleRepository",
    "SaleService",
    "draft_registry",
]
