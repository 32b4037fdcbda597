import os

import pytest

# The web app builds its store at import time; keep it off the working directory.
os.environ.setdefault("BOLAN_DATABASE_URL", "sqlite://")

from bolan_calc.data_models import LoanScenario  # noqa: E402


@pytest.fixture
def reference_scenario() -> LoanScenario:
    """2 MSEK loan on a 3 MSEK home with 500 kSEK income at 3.5 %."""
    return LoanScenario(
        original_loan_amount=2_000_000.0,
        current_loan_amount=2_000_000.0,
        property_value=3_000_000.0,
        annual_income=500_000.0,
        interest_rate=3.5,
        loan_term_years=30,
    )
