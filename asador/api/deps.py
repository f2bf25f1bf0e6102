"""
Route dependencies
Services built over the request's database manager
"""

from fastapi import Depends

from ..core.database import DatabaseManager, get_db
from ..core.security import require_session
from ..services.draft_sale import DraftRegistry, DraftSaleEngine, draft_registry
from ..services.expense_service import ExpenseService
from ..services.export_service import ExportService
from ..services.menu_service import MenuService
from ..services.report_service import ReportService
from ..services.sale_repository import SaleRepository
from ..services.sale_service import SaleService


def get_draft_registry() -> DraftRegistry:
    return draft_registry


def get_menu_service(db: DatabaseManager = Depends(get_db)) -> MenuService:
    return MenuService(db)


def get_sale_service(db: DatabaseManager = Depends(get_db)) -> SaleService:
    return SaleService(SaleRepository(db))


def get_expense_service(db: DatabaseManager = Depends(get_db)) -> ExpenseService:
    return ExpenseService(db)


def get_report_service(db: DatabaseManager = Depends(get_db)) -> ReportService:
    return ReportService(SaleRepository(db), ExpenseService(db))


def get_export_service(db: DatabaseManager = Depends(get_db)) -> ExportService:
    return ExportService(SaleRepository(db), ExpenseService(db))


def get_draft(
    session_id: str = Depends(require_session),
    menu_service: MenuService = Depends(get_menu_service),
    registry: DraftRegistry = Depends(get_draft_registry),
) -> DraftSaleEngine:
    """The caller's draft, priced against the stored menu"""
    return registry.get(session_id, menu_service.get_catalog())
