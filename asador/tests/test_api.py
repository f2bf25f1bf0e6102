"""
API integration tests
Exercise the routes through the FastAPI test client
"""

from ..core.exceptions import PersistenceError
from ..services.sale_repository import SaleRepository

API = "/api/v1"


def _add(client, item_id, category_id="especialidades", **extra):
    return client.post(f"{API}/draft/items", json={"item_id": item_id, "category_id": category_id, **extra})


def _save_quesadillas(client):
    """Two quesadillas at pair price: 9000"""
    _add(client, "quesadilla")
    _add(client, "quesadilla")
    response = client.post(f"{API}/draft/save")
    assert response.status_code == 200
    return response.json()["data"]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert "version" in client.get("/").json()


class TestAuthAPI:
    """Password login and session cookie"""

    def test_session_open_when_auth_disabled(self, client):
        data = client.get(f"{API}/auth/session").json()["data"]
        assert data == {"authenticated": True, "auth_enabled": False}

    def test_protected_route_requires_session(self, client, auth_enabled):
        response = client.get(f"{API}/sales/active")
        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTHENTICATION_REQUIRED"

    def test_wrong_password(self, client, auth_enabled):
        response = client.post(f"{API}/auth/login", json={"password": "nope"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_login_sets_cookie_and_unlocks_routes(self, client, auth_enabled):
        response = client.post(f"{API}/auth/login", json={"password": auth_enabled})
        assert response.status_code == 200
        assert "asador_session" in response.cookies

        assert client.get(f"{API}/sales/active").status_code == 200
        assert client.get(f"{API}/auth/session").json()["data"]["authenticated"] is True

    def test_logout_clears_session(self, client, auth_enabled):
        client.post(f"{API}/auth/login", json={"password": auth_enabled})
        client.post(f"{API}/auth/logout")

        assert client.get(f"{API}/sales/active").status_code == 401

    def test_logout_drops_session_draft(self, client, auth_enabled, registry):
        for _ in range(3):
            client.post(f"{API}/auth/login", json={"password": auth_enabled})
            assert _add(client, "refresco", "bebidas").status_code == 200
            assert len(registry) == 1

            client.post(f"{API}/auth/logout")
            assert len(registry) == 0

    def test_logout_without_session(self, client, auth_enabled, registry):
        assert client.post(f"{API}/auth/logout").status_code == 200
        assert len(registry) == 0

    def test_tampered_cookie_rejected(self, client, auth_enabled):
        client.cookies.set("asador_session", "not-a-token")
        assert client.get(f"{API}/draft").status_code == 401


class TestMenuAPI:
    def test_get_menu(self, client):
        data = client.get(f"{API}/menu").json()["data"]
        assert [c["id"] for c in data["categories"]] == ["especialidades", "bebidas", "servicios"]

    def test_toggle_item(self, client):
        response = client.post(f"{API}/menu/categories/bebidas/items/refresco/toggle")
        assert response.json()["data"]["available"] is False

        response = _add(client, "refresco", "bebidas")
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_add_item(self, client):
        response = client.post(f"{API}/menu/categories/bebidas/items",
                               json={"id": "horchata", "name": "Horchata", "price_cents": 3000})
        assert response.status_code == 200
        assert _add(client, "horchata", "bebidas").status_code == 200

    def test_invalid_item_rejected(self, client):
        response = client.post(f"{API}/menu/categories/bebidas/items",
                               json={"id": "x", "name": "X", "price_cents": 100, "pricing_mode": "bundle"})
        assert response.status_code == 422

    def test_unknown_category(self, client):
        response = client.delete(f"{API}/menu/categories/postres")
        assert response.status_code == 404
        assert response.json()["error_code"] == "MENU_ITEM_NOT_FOUND"


class TestDraftAPI:
    """Draft sale through the API"""

    def test_pair_pricing(self, client):
        _add(client, "quesadilla")
        data = _add(client, "quesadilla").json()["data"]

        assert data["draft"]["total_cents"] == 9000
        assert data["line"]["bundle_applied"] is True
        assert data["notices"][0]["level"] == "success"

    def test_increment_decrement_remove(self, client):
        line_id = _add(client, "quesadilla").json()["data"]["line"]["line_id"]

        assert client.post(f"{API}/draft/items/{line_id}/increment").json()["data"]["draft"]["total_cents"] == 9000
        assert client.post(f"{API}/draft/items/{line_id}/decrement").json()["data"]["draft"]["total_cents"] == 5000
        data = client.delete(f"{API}/draft/items/{line_id}").json()["data"]
        assert data["removed"] is True
        assert data["draft"]["items"] == []

    def test_unknown_line(self, client):
        response = client.post(f"{API}/draft/items/missing/increment")
        assert response.status_code == 404
        assert response.json()["error_code"] == "LINE_NOT_FOUND"

    def test_custom_amount_needs_amount(self, client):
        assert _add(client, "envio", "servicios").status_code == 400
        assert _add(client, "envio", "servicios", amount_cents=3500).status_code == 200

    def test_clear_requires_confirmation(self, client):
        _add(client, "quesadilla")

        assert client.delete(f"{API}/draft").status_code == 400
        assert client.get(f"{API}/draft").json()["data"]["item_count"] == 1

        assert client.delete(f"{API}/draft", params={"confirm": "true"}).status_code == 200
        assert client.get(f"{API}/draft").json()["data"]["items"] == []

    def test_clear_empty_draft_without_confirmation(self, client):
        assert client.delete(f"{API}/draft").status_code == 200

    def test_save_clears_draft(self, client):
        sale = _save_quesadillas(client)

        assert sale["total_cents"] == 9000
        assert sale["status"] == "active"
        assert client.get(f"{API}/draft").json()["data"]["total_cents"] == 0

    def test_failed_save_keeps_draft(self, client, monkeypatch):
        def fail(self, sale):
            raise PersistenceError("disk full")

        monkeypatch.setattr(SaleRepository, "insert_active", fail)
        _add(client, "quesadilla")

        response = client.post(f"{API}/draft/save")
        assert response.status_code == 500
        assert response.json()["error_code"] == "PERSISTENCE_ERROR"

        draft = client.get(f"{API}/draft").json()["data"]
        assert draft["item_count"] == 1
        assert draft["total_cents"] == 5000

    def test_save_empty_draft(self, client):
        response = client.post(f"{API}/draft/save")
        assert response.status_code == 400

    def test_save_with_delivery_fee(self, client):
        _add(client, "refresco", "bebidas")
        sale = client.post(f"{API}/draft/save", json={"delivery_fee_cents": 2000}).json()["data"]
        assert sale["total_cents"] == 4500


class TestSalesAPI:
    """Close, reopen and delete through the API"""

    def test_close_and_reopen(self, client):
        sale_id = _save_quesadillas(client)["id"]

        response = client.post(f"{API}/sales/active/{sale_id}/close", json={
            "payment_breakdown": {"Cash": 5000, "Transfer": 5000, "Other": 0},
            "tip_cents": 1000,
        })
        assert response.status_code == 200
        closed = response.json()["data"]
        assert closed["total_cents"] == 10000
        assert closed["payment_method"] == "Cash"
        assert closed["payment_breakdown"] == {"Cash": 5000, "Transfer": 5000, "Other": 0}

        listed = client.get(f"{API}/sales/closed").json()["data"][0]
        assert listed["payment_breakdown"] == {"Cash": 5000, "Transfer": 5000, "Other": 0}

        assert client.get(f"{API}/sales/active").json()["data"] == []
        assert [s["id"] for s in client.get(f"{API}/sales/closed").json()["data"]] == [sale_id]

        reopened = client.post(f"{API}/sales/closed/{sale_id}/reopen").json()["data"]
        assert reopened["total_cents"] == 9000
        assert reopened["tip_cents"] is None

    def test_payment_mismatch(self, client):
        sale_id = _save_quesadillas(client)["id"]

        response = client.post(f"{API}/sales/active/{sale_id}/close",
                               json={"payment_breakdown": {"Cash": 8500}})
        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "PAYMENT_MISMATCH"
        assert body["details"]["remaining_cents"] == 500
        assert len(client.get(f"{API}/sales/active").json()["data"]) == 1

    def test_negative_payment_rejected(self, client):
        sale_id = _save_quesadillas(client)["id"]
        response = client.post(f"{API}/sales/active/{sale_id}/close",
                               json={"payment_breakdown": {"Cash": -100}})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_close_unknown_sale(self, client):
        response = client.post(f"{API}/sales/active/missing/close",
                               json={"payment_breakdown": {"Cash": 100}})
        assert response.status_code == 404
        assert response.json()["error_code"] == "SALE_NOT_FOUND"

    def test_delete_from_either_partition(self, client):
        sale_id = _save_quesadillas(client)["id"]

        response = client.delete(f"{API}/sales/{sale_id}")
        assert response.json()["data"]["partition"] == "active"
        assert client.delete(f"{API}/sales/{sale_id}").status_code == 404

    def test_delete_closed(self, client):
        sale_id = _save_quesadillas(client)["id"]
        client.post(f"{API}/sales/active/{sale_id}/close", json={"payment_breakdown": {"Transfer": 9000}})

        assert client.delete(f"{API}/sales/active/{sale_id}").status_code == 404
        assert client.delete(f"{API}/sales/closed/{sale_id}").status_code == 200


class TestExpensesAndReportsAPI:
    def test_expense_crud(self, client):
        created = client.post(f"{API}/expenses", json={
            "date": "2024-05-03", "description": "Gas", "amount_cents": 10000, "category": "gas",
        }).json()["data"]

        updated = client.put(f"{API}/expenses/{created['id']}", json={"amount_cents": 12000}).json()["data"]
        assert updated["amount_cents"] == 12000

        listed = client.get(f"{API}/expenses", params={"start": "2024-05-01", "end": "2024-05-31"}).json()["data"]
        assert [e["id"] for e in listed] == [created["id"]]

        assert client.delete(f"{API}/expenses/{created['id']}").status_code == 200
        assert client.delete(f"{API}/expenses/{created['id']}").status_code == 404

    def test_expense_unknown_category(self, client):
        response = client.post(f"{API}/expenses", json={
            "date": "2024-05-03", "description": "Volantes", "amount_cents": 100, "category": "publicidad",
        })
        assert response.status_code == 422

    def test_summary_includes_closed_sale(self, client):
        sale_id = _save_quesadillas(client)["id"]
        client.post(f"{API}/sales/active/{sale_id}/close",
                    json={"payment_breakdown": {"Cash": 10000}, "tip_cents": 1000})

        data = client.get(f"{API}/reports/summary", params={"period": "today"}).json()["data"]
        assert data["revenue_cents"] == 10000
        assert data["tips_cents"] == 1000
        assert data["sales_count"] == 1
        assert data["payment_totals_cents"]["Cash"] == 10000

    def test_export_csv(self, client):
        response = client.get(f"{API}/reports/export", params={"year": 2024, "month": 5})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "reporte_mayo_2024.csv" in response.headers["content-disposition"]
        assert "RESUMEN EJECUTIVO" in response.content.decode("utf-8-sig")

    def test_export_invalid_month(self, client):
        response = client.get(f"{API}/reports/export", params={"year": 2024, "month": 13})
        assert response.status_code == 400
