"""Shared fixtures.

Fixture loans:
- $200K at 3% over 30 years (payment ~843.21)
- 150K at 3% over 30 years, the simulator's default form values
"""

from decimal import Decimal

import pytest

from mortgage_sim.data_models import LoanParameters, ReferenceRate


@pytest.fixture
def standard_loan() -> LoanParameters:
    return LoanParameters(
        principal=Decimal("200000"),
        annual_rate_percent=Decimal("3"),
        term_months=360,
    )


@pytest.fixture
def default_form_loan() -> LoanParameters:
    return LoanParameters(
        principal=Decimal("150000"),
        annual_rate_percent=Decimal("3"),
        term_months=360,
    )


@pytest.fixture
def euribor() -> ReferenceRate:
    return ReferenceRate(value=Decimal("2.5"), date="2024-05-02", raw_value="2,5%")
