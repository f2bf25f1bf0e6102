"""
Test configuration
Fixtures for an in-memory database, a sample menu and the API client
"""

import os

# Settings are read at import time
os.environ.setdefault("ASADOR_DATABASE_URL", "duckdb://:memory:")
os.environ["ASADOR_AUTH_PASSWORD"] = ""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from ..api.deps import get_draft_registry
from ..app import create_app
from ..config import settings
from ..core.database import DatabaseManager, get_db
from ..models.menu import Menu
from ..services.draft_sale import DraftRegistry, DraftSaleEngine
from ..services.expense_service import ExpenseService
from ..services.menu_catalog import MenuCatalog
from ..services.menu_service import MenuService
from ..services.sale_repository import SaleRepository
from ..services.sale_service import SaleService

SAMPLE_MENU = {
    "categories": [
        {
            "id": "especialidades",
            "name": "Especialidades",
            "items": [
                {"id": "quesadilla", "name": "Quesadilla", "price_cents": 5000},
                {"id": "quesadilla-2", "name": "2 Quesadillas", "price_cents": 9000,
                 "pricing_mode": "bundle", "bundle_quantity": 2, "bundle_for": "Quesadilla"},
                {"id": "gringa", "name": "Gringa", "price_cents": 6000},
                # Not cheaper than two singles, so never applied
                {"id": "gringa-2", "name": "2 Gringas", "price_cents": 12000,
                 "pricing_mode": "bundle", "bundle_quantity": 2, "bundle_for": "Gringa"},
                {"id": "charola", "name": "Charola", "price_cents": 15000,
                 "pricing_mode": "multi_option",
                 "price_options": [{"name": "Chica", "price_cents": 15000},
                                   {"name": "Grande", "price_cents": 25000}]},
                {"id": "costilla", "name": "Costilla", "price_cents": 20000, "available": False},
            ],
        },
        {
            "id": "bebidas",
            "name": "Bebidas",
            "items": [
                {"id": "refresco", "name": "Refresco", "price_cents": 2500},
            ],
        },
        {
            "id": "servicios",
            "name": "Servicios",
            "items": [
                {"id": "envio", "name": "Envío", "price_cents": 0, "pricing_mode": "custom_amount"},
            ],
        },
    ]
}

NOW = datetime(2024, 5, 15, 14, 30)


class FakeClock:
    """Settable clock for services that stamp times"""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def test_db():
    """Fresh in-memory database"""
    db = DatabaseManager(":memory:")
    db.init_database()
    yield db
    db.close()


@pytest.fixture
def sample_menu():
    return Menu.model_validate(SAMPLE_MENU)


@pytest.fixture
def catalog(sample_menu):
    return MenuCatalog(sample_menu)


@pytest.fixture
def draft(catalog):
    return DraftSaleEngine(catalog)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sale_repository(test_db):
    return SaleRepository(test_db)


@pytest.fixture
def sale_service(sale_repository, clock):
    return SaleService(sale_repository, clock=clock)


@pytest.fixture
def expense_service(test_db):
    return ExpenseService(test_db)


@pytest.fixture
def menu_service(test_db, sample_menu):
    service = MenuService(test_db)
    service.save_menu(sample_menu)
    return service


@pytest.fixture
def saved_sale(sale_service, draft):
    """Active sale of two quesadillas (pair price 9000) and one Grande charola: 34000 cents"""
    draft.add_item("quesadilla", "especialidades")
    draft.add_item("quesadilla", "especialidades")
    draft.add_item("charola", "especialidades", option_name="Grande")
    return sale_service.create_sale(draft)


@pytest.fixture
def registry():
    """Draft registry private to one test"""
    return DraftRegistry()


@pytest.fixture
def app_instance(test_db, menu_service, registry):
    app = create_app()
    app.dependency_overrides[get_db] = lambda: test_db
    app.dependency_overrides[get_draft_registry] = lambda: registry
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app_instance):
    return TestClient(app_instance)


@pytest.fixture
def auth_enabled(monkeypatch):
    """Require the password 'secreto' for the duration of a test"""
    monkeypatch.setattr(settings, "auth_password", "secreto")
    monkeypatch.setattr(settings, "cookie_secure", False)
    return "secreto"
