"""
Tests for the Flask JSON API.
"""

from __future__ import annotations

import json

import pytest

import bolan_calc_web.app as web
from bolan_calc_web.calculation_store import CalculationStore

VALUES = {
    "original_loan_amount": 2_000_000,
    "current_loan_amount": 2_000_000,
    "property_value": 3_000_000,
    "annual_income": 500_000,
    "interest_rate": 3.5,
    "loan_term_years": 30,
}


@pytest.fixture
def client(tmp_path, monkeypatch):
    store = CalculationStore(f"sqlite:///{tmp_path / 'web.sqlite3'}")
    monkeypatch.setattr(web, "calculation_store", store)
    web.app.config["TESTING"] = True
    with web.app.test_client() as client:
        yield client


def test_evaluate(client):
    response = client.post("/api/evaluate", json=VALUES)
    assert response.status_code == 200
    data = response.get_json()
    assert data["results"]["total_monthly_payment"] == pytest.approx(7_500)
    assert data["results"]["is_affordable"] is True
    assert data["current_path"]["never_pays_off"] is False
    assert [s["label"] for s in data["payment_scenarios"]][-1] == "Double payment"
    assert len(data["balance_paths"]["Double payment"]) == 30


def test_evaluate_without_current_amount_uses_original(client):
    values = {k: v for k, v in VALUES.items() if k != "current_loan_amount"}
    data = client.post("/api/evaluate", json=values).get_json()
    assert data["values"]["current_loan_amount"] == 2_000_000


def test_evaluate_rejects_invalid_input(client):
    response = client.post("/api/evaluate", json={**VALUES, "annual_income": 0})
    assert response.status_code == 400
    assert "income" in response.get_json()["error"]

    response = client.post("/api/evaluate", json={**VALUES, "property_value": "abc"})
    assert response.status_code == 400

    response = client.post("/api/evaluate", data="nope", content_type="text/plain")
    assert response.status_code == 400


def test_investment(client):
    response = client.post(
        "/api/investment", json={"values": VALUES, "expected_return": 7, "account_type": "standard"}
    )
    assert response.status_code == 200
    comparisons = response.get_json()["comparisons"]
    assert len(comparisons) == 5
    assert comparisons[0]["winner"] in {"mortgage", "investment", "tie"}
    assert comparisons[0]["investment_strategy"]["tax_amount"] is not None


def test_investment_rejects_unknown_account(client):
    response = client.post("/api/investment", json={"values": VALUES, "account_type": "pension"})
    assert response.status_code == 400


def test_custom(client):
    response = client.post(
        "/api/custom", json={"values": VALUES, "monthly_extra": 2_000, "one_time_payment": 100_000}
    )
    data = response.get_json()
    assert data["monthly_payment"] == pytest.approx(9_500)
    assert data["new_balance"] == pytest.approx(1_900_000)
    assert data["months_saved"] > 0


def test_values_default_then_saved(client):
    assert client.get("/api/values").get_json()["property_value"] == 3_000_000
    client.post("/api/values", json={**VALUES, "interest_rate": 4.2})
    assert client.get("/api/values").get_json()["interest_rate"] == 4.2


def test_saved_calculation_lifecycle(client):
    response = client.post("/api/calculations", json={"values": VALUES})
    assert response.status_code == 201
    record = response.get_json()
    assert record["name"] == "Calculation 1"
    calc_id = record["id"]

    assert [r["id"] for r in client.get("/api/calculations").get_json()] == [calc_id]
    assert client.get(f"/api/calculations/{calc_id}").get_json() == record

    updated = client.put(
        f"/api/calculations/{calc_id}", json={"name": "Radhus", "values": {**VALUES, "interest_rate": 4.0}}
    ).get_json()
    assert updated["name"] == "Radhus"
    assert updated["date"] == record["date"]
    assert updated["results"]["monthly_interest"] == pytest.approx(2_000_000 * 0.04 / 12)

    export = client.get(f"/api/calculations/{calc_id}/export")
    assert 'filename="Radhus.json"' in export.headers["Content-Disposition"]

    assert client.delete(f"/api/calculations/{calc_id}").status_code == 204
    assert client.get(f"/api/calculations/{calc_id}").status_code == 404
    assert client.delete(f"/api/calculations/{calc_id}").status_code == 404


def test_calculations_are_private_to_session(client):
    record = client.post("/api/calculations", json={"values": VALUES, "name": "Mine"}).get_json()
    with web.app.test_client() as other:
        assert other.get("/api/calculations").get_json() == []
        assert other.get(f"/api/calculations/{record['id']}").status_code == 404


def test_import_exported_calculation(client):
    record = client.post("/api/calculations", json={"values": VALUES, "name": "Villa"}).get_json()
    exported = client.get(f"/api/calculations/{record['id']}/export").get_data(as_text=True)

    response = client.post("/api/calculations/import", data=exported, content_type="application/json")
    assert response.status_code == 201
    imported = response.get_json()
    assert imported["id"] != record["id"]
    assert imported["name"] == "Villa"
    assert imported["results"] == record["results"]
    assert len(client.get("/api/calculations").get_json()) == 2


def test_import_rejects_malformed_document(client):
    response = client.post("/api/calculations/import", data="{broken", content_type="application/json")
    assert response.status_code == 400
    assert "Invalid calculation file format" in response.get_json()["error"]

    bad_values = json.dumps({"id": "x", "date": "d", "name": "n", "values": {**VALUES, "property_value": 0}, "results": {}})
    response = client.post("/api/calculations/import", data=bad_values, content_type="application/json")
    assert response.status_code == 400


def test_clear(client):
    client.post("/api/calculations", json={"values": VALUES})
    assert client.post("/api/calculations/clear").status_code == 204
    assert client.get("/api/calculations").get_json() == []


def _strict_json(text: str):
    def reject(token):
        raise ValueError(f"non-standard JSON token {token}")

    return json.loads(text, parse_constant=reject)


def test_investment_with_nothing_to_invest_is_strict_json(client):
    # Zero rate and LTV at most 50 % give a zero base payment
    values = {**VALUES, "original_loan_amount": 1_000_000, "current_loan_amount": 1_000_000, "interest_rate": 0}
    response = client.post("/api/investment", json={"values": values})
    assert response.status_code == 200
    comparisons = _strict_json(response.get_data(as_text=True))["comparisons"]
    idle = [c for c in comparisons if c["extra_amount"] == 0]
    assert [c["label"] for c in idle] == ["+50% payment", "Double payment"]
    for comparison in idle:
        assert comparison["winner"] == "mortgage"
        assert comparison["winner_margin_pct"] is None
        assert comparison["description"] == "Better"


@pytest.mark.parametrize(
    "field, value",
    [
        ("loan_term_years", "nan"),
        ("loan_term_years", "inf"),
        ("loan_term_years", 10**9),
        ("property_value", "nan"),
        ("annual_income", "inf"),
        ("interest_rate", "-inf"),
    ],
)
def test_non_finite_and_oversized_input_is_rejected(client, field, value):
    response = client.post("/api/evaluate", json={**VALUES, field: value})
    assert response.status_code == 400

    response = client.post("/api/calculations", json={"values": {**VALUES, field: value}})
    assert response.status_code == 400
    assert client.get("/api/calculations").get_json() == []


@pytest.mark.parametrize(
    "extra",
    [
        {"monthly_extra": "nan"},
        {"one_time_payment": "inf"},
        {"monthly_extra": -500},
        {"one_time_payment": 2_000_001},
    ],
)
def test_custom_rejects_invalid_extra_payments(client, extra):
    response = client.post("/api/custom", json={"values": VALUES, **extra})
    assert response.status_code == 400


def test_custom_accepts_paying_off_the_whole_balance(client):
    data = client.post("/api/custom", json={"values": VALUES, "one_time_payment": 2_000_000}).get_json()
    assert data["new_balance"] == 0
    assert data["payoff"]["final_balance"] == 0


def test_investment_rejects_non_finite_return(client):
    response = client.post("/api/investment", json={"values": VALUES, "expected_return": "nan"})
    assert response.status_code == 400


def test_import_rejects_non_finite_numbers(client):
    record = client.post("/api/calculations", json={"values": VALUES}).get_json()
    text = json.dumps({**record, "values": {**record["values"], "property_value": float("nan")}})
    response = client.post("/api/calculations/import", data=text, content_type="application/json")
    assert response.status_code == 400
    assert len(client.get("/api/calculations").get_json()) == 1
