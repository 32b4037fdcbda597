"""
Tests for exporting and importing calculations.
"""

from __future__ import annotations

import json

import pytest

from bolan_calc.data_models import SavedCalculation
from bolan_calc.engine import evaluate_mortgage
from bolan_calc.errors import MalformedImportError
from bolan_calc.export import (
    build_export_document,
    calculation_to_dict,
    comparison_to_dict,
    evaluation_from_dict,
    evaluation_to_dict,
    export_filename,
    parse_imported_calculation,
)
from bolan_calc.investment import compare_investment_strategies
from bolan_calc.scenarios import compare_extra_payments


def _calculation(scenario) -> SavedCalculation:
    return SavedCalculation(
        id="abc123",
        date="2024-05-01T12:00:00+00:00",
        name="Villa Solna",
        values=scenario,
        results=evaluate_mortgage(scenario),
    )


def test_evaluation_survives_json(reference_scenario):
    evaluation = evaluate_mortgage(reference_scenario)
    restored = evaluation_from_dict(json.loads(json.dumps(evaluation_to_dict(evaluation))))
    assert restored == evaluation


def test_evaluation_dict_keeps_floats(reference_scenario):
    data = evaluation_to_dict(evaluate_mortgage(reference_scenario))
    assert isinstance(data["monthly_amortization"], float)
    assert isinstance(data["yearly_schedule"], list)
    assert data["yearly_schedule"][0]["year"] == 1


def test_calculation_round_trip(reference_scenario):
    calculation = _calculation(reference_scenario)
    text = json.dumps(calculation_to_dict(calculation), indent=2)
    assert parse_imported_calculation(text) == calculation


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2, 3]",
        '{"id": "x"}',
        '{"id": "x", "date": "d", "name": "n", "values": {}, "results": {}}',
    ],
)
def test_malformed_imports_are_rejected(text):
    with pytest.raises(MalformedImportError):
        parse_imported_calculation(text)


def test_import_rejects_non_numeric_values(reference_scenario):
    data = calculation_to_dict(_calculation(reference_scenario))
    data["values"]["property_value"] = "three million"
    with pytest.raises(MalformedImportError):
        parse_imported_calculation(json.dumps(data))


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_import_rejects_non_finite_tokens(reference_scenario, value):
    data = calculation_to_dict(_calculation(reference_scenario))
    data["results"]["monthly_interest"] = value
    text = json.dumps(data)
    assert "NaN" in text or "Infinity" in text
    with pytest.raises(MalformedImportError):
        parse_imported_calculation(text)


def test_import_rejects_non_finite_strings(reference_scenario):
    data = calculation_to_dict(_calculation(reference_scenario))
    data["results"]["monthly_interest"] = "nan"
    with pytest.raises(MalformedImportError):
        parse_imported_calculation(json.dumps(data))


def test_export_filename():
    assert export_filename("My  plan\t2024") == "My_plan_2024.json"


def test_export_document(reference_scenario):
    evaluation = evaluate_mortgage(reference_scenario)
    scenarios = compare_extra_payments(2_000_000, evaluation.total_monthly_payment, 3.5)
    document = build_export_document(reference_scenario, evaluation, scenarios, date="2024-05-01")

    assert document["date"] == "2024-05-01"
    assert document["inputs"]["property_value"] == 3_000_000
    assert document["monthly_payments"]["total"] == pytest.approx(7_500)
    assert document["monthly_payments"]["stress_test"] == pytest.approx(12_500)
    assert document["rates"] == {
        "amortization": evaluation.amortization_rate_pct,
        "debt_to_income": evaluation.debt_to_income_pct,
        "interest": 3.5,
    }
    assert len(document["payment_scenarios"]) == 5
    assert "never_pays_off" in document["payment_scenarios"][0]["payoff"]
    assert len(document["amortization_schedule"]) == 30
    json.dumps(document)


def test_comparison_dict_is_json_ready():
    scenarios = compare_extra_payments(2_000_000, 7_500, 3.5)
    comparison = compare_investment_strategies(scenarios, 2_000_000, 3.5, 7.0, "isk")[0]
    data = json.loads(json.dumps(comparison_to_dict(comparison)))
    assert data["winner"] in {"mortgage", "investment", "tie"}
    assert data["investment_strategy"]["capital_gains"] is None
    assert data["mortgage_strategy"]["payoff"]["never_pays_off"] is False
