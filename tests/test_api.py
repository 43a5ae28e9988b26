from decimal import Decimal

import pytest

from budget.exceptions import ValidationError
from budget_api.app import create_app
from budget_api.config import Settings


@pytest.fixture
def client(tmp_path):
    app = create_app(tmp_path / "data", settings=Settings(env="dev"))
    app.config.update(TESTING=True)
    return app.test_client()


def _seed(client):
    client.post("/api/incomes", json={"description": "Salary", "amount": "2000", "income_date": 1})
    client.post(
        "/api/deductions",
        json={"description": "Rent", "amount": "800", "category": "housing", "deduction_date": 5},
    )
    client.post(
        "/api/deductions",
        json={"description": "Insurance", "amount": "500", "category": "insurance", "deduction_date": 20},
    )


class TestRecordEndpoints:
    def test_create_and_list_incomes(self, client):
        response = client.post(
            "/api/incomes", json={"description": "Salary", "amount": "2000", "income_date": 1}
        )
        assert response.status_code == 201
        body = response.get_json()
        assert body["amount"] == "2000.00"
        assert body["frequency"] == "monthly"

        listing = client.get("/api/incomes").get_json()
        assert listing["total"] == "2000.00"
        assert [item["id"] for item in listing["items"]] == [body["id"]]

    def test_validation_error_is_400(self, client):
        response = client.post(
            "/api/deductions",
            json={"description": "Rent", "amount": "-1", "category": "housing", "deduction_date": 5},
        )
        assert response.status_code == 400
        assert response.get_json()["error"] == "Validation error"

    def test_superscript_day_is_400(self, client):
        response = client.post(
            "/api/incomes", json={"description": "Pay", "amount": "10", "income_date": "\u00b2"}
        )
        assert response.status_code == 400
        assert client.get("/api/incomes").get_json()["items"] == []

    def test_non_json_body_is_400(self, client):
        response = client.post("/api/incomes", data="amount=1")
        assert response.status_code == 400

    def test_update_is_partial(self, client):
        created = client.post(
            "/api/deductions",
            json={"description": "Rent", "amount": "800", "category": "housing", "deduction_date": 5},
        ).get_json()
        response = client.put(
            f"/api/deductions/{created['id']}", json={"amount": "850", "id": "hijack"}
        )
        assert response.status_code == 200
        body = response.get_json()
        assert body["id"] == created["id"]
        assert body["amount"] == "850.00"
        assert body["category"] == "housing"

    def test_missing_records_are_404(self, client):
        assert client.get("/api/incomes/nope").status_code == 404
        assert client.put("/api/incomes/nope", json={"amount": "1"}).status_code == 404
        response = client.delete("/api/deductions/nope")
        assert response.status_code == 404
        assert response.get_json()["error"] == "Record not found"

    def test_delete_returns_204(self, client):
        created = client.post(
            "/api/incomes", json={"description": "Bonus", "amount": "100", "income_date": 28}
        ).get_json()
        assert client.delete(f"/api/incomes/{created['id']}").status_code == 204
        assert client.get("/api/incomes").get_json()["items"] == []

    def test_account_balances(self, client):
        created = client.post(
            "/api/account-balances", json={"amount": "-12.3", "balance_date": 4}
        )
        assert created.status_code == 201
        body = created.get_json()
        assert body["amount"] == "-12.30"
        assert body["created_at"].endswith("Z")
        listing = client.get("/api/account-balances").get_json()
        assert "total" not in listing
        assert len(listing["items"]) == 1


class TestProjectionEndpoints:
    def test_projection_dates(self, client):
        assert client.get("/api/projection-dates").get_json() == {"dates": []}
        client.post("/api/projection-dates", json={"day": 15})
        client.post("/api/projection-dates", json={"day": 5})
        # Duplicates and out-of-range days are ignored.
        client.post("/api/projection-dates", json={"day": 15})
        response = client.post("/api/projection-dates", json={"day": 32})
        assert response.status_code == 200
        assert response.get_json() == {"dates": [5, 15]}
        assert client.delete("/api/projection-dates/5").get_json() == {"dates": [15]}
        assert client.delete("/api/projection-dates/9").get_json() == {"dates": [15]}

    def test_summary(self, client):
        _seed(client)
        body = client.get(
            "/api/summary?day=10&overdraft_enabled=true&overdraft_limit=300"
        ).get_json()
        assert body["current_day"] == 10
        assert body["totals"]["remaining_budget"] == "700.00"
        assert body["dashboard"]["available"] == "700.00"
        assert body["tracking"]["raw_budget"] == "1200.00"
        assert body["tracking"]["remaining_overdraft"] == "300.00"
        assert len(body["tracking"]["deductions"]["processed"]) == 1
        assert len(body["tracking"]["deductions"]["pending"]) == 1

    def test_summary_deficit_without_overdraft(self, client):
        client.post(
            "/api/deductions",
            json={"description": "Phone", "amount": "100", "category": "utilities", "deduction_date": 1},
        )
        body = client.get("/api/summary?day=15&overdraft_enabled=false").get_json()
        assert body["totals"]["remaining_budget"] == "-100.00"
        assert body["dashboard"]["available"] == "-100.00"

    def test_summary_uses_configured_overdraft(self, tmp_path):
        settings = Settings(overdraft_enabled=True, overdraft_limit=Decimal("250"))
        client = create_app(tmp_path / "data", settings=settings).test_client()
        client.post(
            "/api/deductions",
            json={"description": "Phone", "amount": "100", "category": "utilities", "deduction_date": 1},
        )
        body = client.get("/api/summary?day=15").get_json()
        assert body["dashboard"] == {
            "available": "0.00",
            "used_overdraft": "100.00",
            "remaining_overdraft": "150.00",
        }

    def test_summary_rejects_bad_day(self, client):
        assert client.get("/api/summary?day=40").status_code == 400
        assert client.get("/api/summary?overdraft_limit=-5").status_code == 400

    def test_budget_at_clamps_to_today(self, client):
        _seed(client)
        body = client.get("/api/budget-at/25?day=10").get_json()
        assert body == {
            "target_date": 25,
            "effective_date": 10,
            "current_day": 10,
            "budget": "1200.00",
        }

    def test_projection_does_not_clamp(self, client):
        _seed(client)
        body = client.get("/api/projection?dates=15,5,10,15&day=10").get_json()
        points = body["points"]
        assert [p["date"] for p in points] == [5, 10, 15]
        assert points[1]["is_today"] is True
        assert points[2]["is_past"] is False
        assert client.get("/api/projection?dates=25&day=10").get_json()["points"][0]["budget"] == "700.00"

    def test_projection_defaults_to_stored_dates(self, client):
        _seed(client)
        client.post("/api/projection-dates", json={"day": 20})
        points = client.get("/api/projection?day=10").get_json()["points"]
        assert [p["date"] for p in points] == [20]

    def test_projection_rejects_invalid_dates(self, client):
        assert client.get("/api/projection?dates=0,5&day=10").status_code == 400


def test_settings_from_env(tmp_path):
    settings = Settings.from_env({
        "BUDGET_TRACKER_ENV": "Development",
        "BUDGET_TRACKER_ALLOWED_ORIGINS": "http://a.test, http://b.test,",
        "BUDGET_TRACKER_DATA_DIR": str(tmp_path),
        "BUDGET_TRACKER_OVERDRAFT_ENABLED": "yes",
        "BUDGET_TRACKER_OVERDRAFT_LIMIT": "150",
    })
    assert settings.is_dev
    assert settings.allowed_origins == ["http://a.test", "http://b.test"]
    assert settings.data_dir == tmp_path
    assert settings.overdraft_enabled is True
    assert settings.overdraft_limit == Decimal("150.00")
    assert settings.port == 5000


@pytest.mark.parametrize("port", ["abc", "0", "70000", ""])
def test_settings_rejects_invalid_port(port):
    with pytest.raises(ValidationError):
        Settings.from_env({"PORT": port})


def test_settings_reads_port():
    assert Settings.from_env({"PORT": " 8080 "}).port == 8080
