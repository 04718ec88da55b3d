"""Payment model: level mortgage payment and escrow costs.

All monetary values use decimal.Decimal. No rounding happens here; results
keep full precision and are rounded only for display.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .config import LOAN_TERM_MONTHS, MONTHS_PER_YEAR, ZERO
from .resolver import PolicyInputs


@dataclass(frozen=True)
class EscrowCosts:
    property_tax: Decimal
    homeowners_insurance: Decimal


def compute_monthly_payment(
    loan_amount: Decimal,
    annual_rate: Decimal,
    term_months: int = LOAN_TERM_MONTHS,
) -> Decimal:
    """Return the level monthly principal + interest payment.

    Uses the standard fixed-rate amortization formula:
        payment = L * r * (1 + r)^n / ((1 + r)^n - 1),  r = annual_rate / 12

    A zero rate is not a free loan here: the geometric series degenerates,
    so annual_rate must be strictly positive. A rate too small for (1 + r)^n
    to differ from 1 at context precision pays the loan off in equal parts.
    """
    if term_months <= 0:
        raise ValueError("term_months must be > 0")
    if annual_rate <= ZERO:
        raise ValueError("annual_rate must be > 0")
    if loan_amount < ZERO:
        raise ValueError("loan_amount must be >= 0")

    r = annual_rate / MONTHS_PER_YEAR
    factor = (1 + r) ** term_months
    if factor == 1:
        return loan_amount / term_months
    return loan_amount * r * factor / (factor - 1)


def compute_escrow_costs(
    price: Decimal,
    property_tax_rate: Decimal,
    insurance_rate: Decimal,
) -> EscrowCosts:
    """Monthly property tax and homeowners insurance, linear in price."""
    return EscrowCosts(
        property_tax=price * property_tax_rate / MONTHS_PER_YEAR,
        homeowners_insurance=price * insurance_rate / MONTHS_PER_YEAR,
    )


def compute_total_monthly_cost(price: Decimal, policy: PolicyInputs) -> Decimal:
    """Total monthly housing cost at *price*, financing up to the LTV cap.

    The loan is taken as exactly price * max_ltv regardless of how much of
    the down payment the buyer's assets could actually cover.
    """
    loan_amount = price * policy.max_ltv
    escrow = compute_escrow_costs(price, policy.property_tax_rate, policy.insurance_rate)
    return (
        compute_monthly_payment(loan_amount, policy.interest_rate)
        + escrow.property_tax
        + escrow.homeowners_insurance
    )
