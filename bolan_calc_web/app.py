import logging
import os
from uuid import uuid4

from flask import Flask, jsonify, request, session

from bolan_calc.data_models import SavedCalculation
from bolan_calc.engine import evaluate_mortgage
from bolan_calc.errors import CalculatorError, MalformedImportError
from bolan_calc.export import (
    calculation_to_dict,
    comparison_to_dict,
    custom_scenario_to_dict,
    evaluation_to_dict,
    export_filename,
    parse_imported_calculation,
    payment_scenario_to_dict,
    payoff_to_dict,
    scenario_to_dict,
)
from bolan_calc.investment import compare_investment_strategies
from bolan_calc.scenarios import (
    compare_extra_payments,
    current_payoff_path,
    evaluate_custom_scenario,
    project_balance_path,
)
from bolan_calc.utils import (
    build_scenario,
    ensure_finite,
    iso_timestamp,
    validate_extra_payments,
    validate_scenario,
)
from bolan_calc_web.calculation_store import create_store_from_env

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
calculation_store = create_store_from_env(
    os.environ.get("BOLAN_DATABASE_URL"), os.environ.get("BOLAN_MAX_SAVED")
)

DEFAULT_VALUES = {
    "original_loan_amount": 2_000_000,
    "current_loan_amount": 2_000_000,
    "property_value": 3_000_000,
    "annual_income": 500_000,
    "interest_rate": 3.5,
    "loan_term_years": 30,
}


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise CalculatorError("Request body must be a JSON object")
    return data


def _number(data: dict, key: str, default=None) -> float:
    value = data.get(key, default)
    if value is None:
        raise CalculatorError(f"Missing field: {key}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise CalculatorError(f"Invalid numeric value for {key}: {value!r}")
    return ensure_finite(number, key)


def _scenario_from_json(data: dict):
    values = data.get("values", data)
    if not isinstance(values, dict):
        raise CalculatorError("values must be an object")
    current = values.get("current_loan_amount")
    return build_scenario(
        _number(values, "original_loan_amount"),
        _number(values, "current_loan_amount") if current is not None else None,
        _number(values, "property_value"),
        _number(values, "annual_income"),
        _number(values, "interest_rate"),
        int(_number(values, "loan_term_years", 30)),
    )


@app.errorhandler(CalculatorError)
def handle_calculator_error(exc: CalculatorError):
    if isinstance(exc, MalformedImportError):
        app.logger.warning("Rejected import: %s", exc)
    return jsonify({"error": str(exc)}), 400


@app.post("/api/evaluate")
def evaluate():
    scenario = _scenario_from_json(_json_body())
    evaluation = evaluate_mortgage(scenario)
    base_payment = evaluation.total_monthly_payment
    payment_scenarios = compare_extra_payments(
        scenario.current_loan_amount, base_payment, scenario.interest_rate
    )
    balance_paths = {
        s.label: project_balance_path(
            scenario.current_loan_amount, s.monthly_payment, scenario.interest_rate, scenario.loan_term_years
        )
        for s in payment_scenarios
    }
    return jsonify(
        {
            "values": scenario_to_dict(scenario),
            "results": evaluation_to_dict(evaluation),
            "current_path": payoff_to_dict(
                current_payoff_path(scenario.current_loan_amount, base_payment, scenario.interest_rate)
            ),
            "payment_scenarios": [payment_scenario_to_dict(s) for s in payment_scenarios],
            "balance_paths": balance_paths,
        }
    )


@app.post("/api/investment")
def investment():
    data = _json_body()
    scenario = _scenario_from_json(data)
    evaluation = evaluate_mortgage(scenario)
    payment_scenarios = compare_extra_payments(
        scenario.current_loan_amount, evaluation.total_monthly_payment, scenario.interest_rate
    )
    try:
        comparisons = compare_investment_strategies(
            payment_scenarios,
            scenario.current_loan_amount,
            scenario.interest_rate,
            _number(data, "expected_return", 7.0),
            data.get("account_type", "isk"),
        )
    except ValueError as exc:
        raise CalculatorError(str(exc)) from exc
    return jsonify({"comparisons": [comparison_to_dict(c) for c in comparisons]})


@app.post("/api/custom")
def custom():
    data = _json_body()
    scenario = _scenario_from_json(data)
    monthly_extra = _number(data, "monthly_extra", 0.0)
    one_time_payment = _number(data, "one_time_payment", 0.0)
    validate_extra_payments(scenario.current_loan_amount, monthly_extra, one_time_payment)
    evaluation = evaluate_mortgage(scenario)
    result = evaluate_custom_scenario(
        scenario.current_loan_amount,
        evaluation.total_monthly_payment,
        scenario.interest_rate,
        monthly_extra=monthly_extra,
        one_time_payment=one_time_payment,
    )
    return jsonify(custom_scenario_to_dict(result))


@app.get("/api/values")
def load_values():
    user_token = _ensure_user_token()
    return jsonify(calculation_store.load_values(user_token) or DEFAULT_VALUES)


@app.post("/api/values")
def save_values():
    user_token = _ensure_user_token()
    scenario = _scenario_from_json(_json_body())
    values = scenario_to_dict(scenario)
    calculation_store.save_values(user_token, values)
    return jsonify(values)


@app.get("/api/calculations")
def list_calculations():
    user_token = _ensure_user_token()
    return jsonify(calculation_store.list_calculations(user_token))


@app.post("/api/calculations")
def save_calculation():
    user_token = _ensure_user_token()
    data = _json_body()
    scenario = _scenario_from_json(data)
    existing = calculation_store.list_calculations(user_token)
    name = str(data.get("name") or "").strip() or f"Calculation {len(existing) + 1}"
    calculation = SavedCalculation(
        id=uuid4().hex,
        date=iso_timestamp(),
        name=name,
        values=scenario,
        results=evaluate_mortgage(scenario),
    )
    record = calculation_to_dict(calculation)
    calculation_store.add_calculation(user_token, record)
    return jsonify(record), 201


@app.get("/api/calculations/<calculation_id>")
def get_calculation(calculation_id: str):
    user_token = _ensure_user_token()
    record = calculation_store.get_calculation(user_token, calculation_id)
    if record is None:
        return jsonify({"error": "Calculation not found"}), 404
    return jsonify(record)


@app.put("/api/calculations/<calculation_id>")
def update_calculation(calculation_id: str):
    user_token = _ensure_user_token()
    current = calculation_store.get_calculation(user_token, calculation_id)
    if current is None:
        return jsonify({"error": "Calculation not found"}), 404
    data = _json_body()
    scenario = _scenario_from_json(data) if "values" in data else _scenario_from_json(current)
    calculation = SavedCalculation(
        id=calculation_id,
        date=current["date"],
        name=str(data.get("name") or current["name"]),
        values=scenario,
        results=evaluate_mortgage(scenario),
    )
    record = calculation_to_dict(calculation)
    calculation_store.update_calculation(user_token, record)
    return jsonify(record)


@app.delete("/api/calculations/<calculation_id>")
def delete_calculation(calculation_id: str):
    user_token = _ensure_user_token()
    if not calculation_store.remove_calculation(user_token, calculation_id):
        return jsonify({"error": "Calculation not found"}), 404
    return "", 204


@app.post("/api/calculations/clear")
def clear_calculations():
    user_token = _ensure_user_token()
    calculation_store.clear_calculations(user_token)
    return "", 204


@app.get("/api/calculations/<calculation_id>/export")
def export_calculation(calculation_id: str):
    user_token = _ensure_user_token()
    record = calculation_store.get_calculation(user_token, calculation_id)
    if record is None:
        return jsonify({"error": "Calculation not found"}), 404
    response = jsonify(record)
    response.headers["Content-Disposition"] = f'attachment; filename="{export_filename(record["name"])}"'
    return response


@app.post("/api/calculations/import")
def import_calculation():
    user_token = _ensure_user_token()
    upload = request.files.get("file")
    text = upload.read().decode("utf-8", errors="replace") if upload else request.get_data(as_text=True)
    calculation = parse_imported_calculation(text)
    validate_scenario(calculation.values)
    # Imported records get a fresh id so they never overwrite an existing one
    record = calculation_to_dict(
        SavedCalculation(
            id=uuid4().hex,
            date=calculation.date,
            name=calculation.name,
            values=calculation.values,
            results=calculation.results,
        )
    )
    calculation_store.add_calculation(user_token, record)
    return jsonify(record), 201


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.logger.info("Starting mortgage calculator API...")
    app.run(debug=False)
