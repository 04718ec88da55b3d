"""Unit tests for calculator.py: level payment, escrow, total monthly cost."""
from decimal import Decimal

import pytest

from home_affordability.calculator import (
    compute_escrow_costs,
    compute_monthly_payment,
    compute_total_monthly_cost,
)
from home_affordability.resolver import PolicyInputs

ZERO = Decimal("0")
CENT = Decimal("0.01")


def _policy(**kwargs) -> PolicyInputs:
    defaults = dict(
        annual_income=Decimal("120000"),
        total_assets=Decimal("50000"),
        monthly_debts=Decimal("500"),
        max_ltv=Decimal("0.95"),
        property_tax_rate=Decimal("0.018"),
        insurance_rate=Decimal("0.005"),
        max_dti=Decimal("0.36"),
        interest_rate=Decimal("0.04"),
        required_reserves=Decimal("6"),
    )
    defaults.update(kwargs)
    return PolicyInputs(**defaults)


class TestComputeMonthlyPayment:
    @pytest.mark.parametrize("loan_amount,annual_rate,expected", [
        # L=200000, r=4%/12, n=360 → 954.83
        (Decimal("200000"), Decimal("0.04"), Decimal("954.83")),
        # L=100000, r=6%/12, n=360 → 599.55
        (Decimal("100000"), Decimal("0.06"), Decimal("599.55")),
        # L=500000, r=5%/12, n=360 → 2684.11
        (Decimal("500000"), Decimal("0.05"), Decimal("2684.11")),
    ])
    def test_standard_cases(self, loan_amount, annual_rate, expected):
        result = compute_monthly_payment(loan_amount, annual_rate)
        assert abs(result - expected) < CENT, f"Payment mismatch: got {result}, expected {expected}"

    def test_full_precision_kept(self):
        """No rounding to cents inside the model."""
        result = compute_monthly_payment(Decimal("200000"), Decimal("0.04"))
        assert result != result.quantize(CENT)

    def test_zero_loan(self):
        assert compute_monthly_payment(ZERO, Decimal("0.04")) == ZERO

    def test_linear_in_loan_amount(self):
        single = compute_monthly_payment(Decimal("100000"), Decimal("0.045"))
        double = compute_monthly_payment(Decimal("200000"), Decimal("0.045"))
        assert abs(double - 2 * single) < Decimal("1e-20")

    def test_custom_term(self):
        # One month: the whole loan plus one month of interest.
        result = compute_monthly_payment(Decimal("1000"), Decimal("0.12"), term_months=1)
        assert abs(result - Decimal("1010")) < Decimal("1e-20")

    def test_rate_below_precision_repays_in_equal_parts(self):
        # (1 + r)^360 rounds to exactly 1 at 28 digits.
        assert compute_monthly_payment(Decimal("360000"), Decimal("1e-30")) == Decimal("1000")

    def test_tiny_rate_close_to_equal_parts(self):
        result = compute_monthly_payment(Decimal("360000"), Decimal("1e-12"))
        assert abs(result - Decimal("1000")) < CENT

    @pytest.mark.parametrize("annual_rate", [ZERO, Decimal("-0.01")])
    def test_non_positive_rate(self, annual_rate):
        with pytest.raises(ValueError, match="annual_rate"):
            compute_monthly_payment(Decimal("100000"), annual_rate)

    def test_negative_loan(self):
        with pytest.raises(ValueError, match="loan_amount"):
            compute_monthly_payment(Decimal("-1"), Decimal("0.04"))

    def test_invalid_term(self):
        with pytest.raises(ValueError, match="term_months"):
            compute_monthly_payment(Decimal("100000"), Decimal("0.04"), term_months=0)


class TestComputeEscrowCosts:
    def test_standard(self):
        # 300000 * 1.8% / 12 = 450, 300000 * 0.5% / 12 = 125
        escrow = compute_escrow_costs(Decimal("300000"), Decimal("0.018"), Decimal("0.005"))
        assert escrow.property_tax == Decimal("450")
        assert escrow.homeowners_insurance == Decimal("125")

    def test_zero_price(self):
        escrow = compute_escrow_costs(ZERO, Decimal("0.018"), Decimal("0.005"))
        assert escrow.property_tax == ZERO
        assert escrow.homeowners_insurance == ZERO

    def test_zero_rates(self):
        escrow = compute_escrow_costs(Decimal("300000"), ZERO, ZERO)
        assert escrow.property_tax == ZERO
        assert escrow.homeowners_insurance == ZERO


class TestComputeTotalMonthlyCost:
    def test_finances_up_to_ltv_cap(self):
        policy = _policy()
        price = Decimal("400000")
        expected = (
            compute_monthly_payment(price * Decimal("0.95"), Decimal("0.04"))
            + price * Decimal("0.018") / 12
            + price * Decimal("0.005") / 12
        )
        assert compute_total_monthly_cost(price, policy) == expected

    def test_zero_price_costs_nothing(self):
        assert compute_total_monthly_cost(ZERO, _policy()) == ZERO

    def test_increases_with_price(self):
        policy = _policy()
        low = compute_total_monthly_cost(Decimal("300000"), policy)
        high = compute_total_monthly_cost(Decimal("300001"), policy)
        assert high > low

    def test_increases_with_rate(self):
        price = Decimal("300000")
        low = compute_total_monthly_cost(price, _policy(interest_rate=Decimal("0.04")))
        high = compute_total_monthly_cost(price, _policy(interest_rate=Decimal("0.05")))
        assert high > low
