"""Binary-search affordability solver.

Finds the largest whole-currency purchase price for which both constraints hold:
- DTI: total monthly housing cost fits in the budget left after existing debts.
- LTV/reserves: assets left after setting aside the reserve months cover the
  minimum down payment implied by the LTV cap.

Search space: price in [0, PRICE_SEARCH_UPPER_BOUND], resolution 1.
Both constraints get harder as price grows, so feasibility is monotone and a
plain bisection converges in ~24 steps for a bound of 10 000 000.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .calculator import compute_escrow_costs, compute_monthly_payment, compute_total_monthly_cost
from .config import ONE, PRICE_RESOLUTION, PRICE_SEARCH_UPPER_BOUND, ZERO
from .resolver import PolicyInputs

logger = logging.getLogger(__name__)


def _json_number(value: Decimal) -> Optional[float]:
    return float(value) if value.is_finite() else None


@dataclass(frozen=True)
class AffordabilityResult:
    purchase_price: Decimal
    down_payment: Decimal
    loan_amount: Decimal
    monthly_payment: Decimal         # P&I + tax + insurance
    principal_and_interest: Decimal
    homeowners_insurance: Decimal
    property_tax: Decimal
    debt_to_income_ratio: Decimal
    ltv_ratio: Decimal
    reserved_assets: Decimal
    available_down_payment: Decimal
    interest_rate: Decimal

    def to_dict(self) -> dict[str, Optional[float]]:
        """Flat record with camelCase keys, as returned to API/JSON callers.

        Non-finite values (DTI with no income) become None so the record
        serializes to strict JSON.
        """
        return {
            "purchasePrice": _json_number(self.purchase_price),
            "downPayment": _json_number(self.down_payment),
            "loanAmount": _json_number(self.loan_amount),
            "monthlyPayment": _json_number(self.monthly_payment),
            "principalAndInterest": _json_number(self.principal_and_interest),
            "homeownersInsurance": _json_number(self.homeowners_insurance),
            "propertyTax": _json_number(self.property_tax),
            "debtToIncomeRatio": _json_number(self.debt_to_income_ratio),
            "ltvRatio": _json_number(self.ltv_ratio),
            "reservedAssets": _json_number(self.reserved_assets),
            "availableDownPayment": _json_number(self.available_down_payment),
            "interestRate": _json_number(self.interest_rate),
        }


def max_monthly_budget(policy: PolicyInputs) -> Decimal:
    """Monthly payment allowed by the DTI cap once existing debts are paid."""
    return policy.max_dti * policy.monthly_income - policy.monthly_debts


def is_affordable(price: Decimal, policy: PolicyInputs, budget: Optional[Decimal] = None) -> bool:
    """Return True if *price* satisfies both the DTI and the reserve/LTV constraint.

    Reserves are carved out of assets in currency: exhausting assets on
    reserves shrinks the possible down payment rather than failing outright.
    """
    if budget is None:
        budget = max_monthly_budget(policy)

    monthly_payment = compute_total_monthly_cost(price, policy)
    reserved_assets = monthly_payment * policy.required_reserves
    available_down_payment = max(policy.total_assets - reserved_assets, ZERO)
    required_down_payment = price * (ONE - policy.max_ltv)

    return monthly_payment <= budget and available_down_payment >= required_down_payment


def search_max_price(policy: PolicyInputs, upper_bound: int = PRICE_SEARCH_UPPER_BOUND) -> int:
    """Bisect for the greatest affordable price in [0, upper_bound].

    Returns 0 when nothing above 0 is affordable (debts over the DTI budget,
    no assets for the down payment, ...). Never raises.
    """
    budget = max_monthly_budget(policy)

    low, high = 0, upper_bound
    purchase_price = 0
    while high - low > PRICE_RESOLUTION:
        mid = (low + high) // 2
        if is_affordable(Decimal(mid), policy, budget):
            purchase_price = mid
            low = mid
        else:
            high = mid

    return purchase_price


def _debt_to_income(policy: PolicyInputs, monthly_payment: Decimal) -> Decimal:
    obligations = policy.monthly_debts + monthly_payment
    monthly_income = policy.monthly_income
    if monthly_income == ZERO:
        return ZERO if obligations == ZERO else Decimal("Infinity")
    return obligations / monthly_income


def optimize(policy: PolicyInputs, upper_bound: int = PRICE_SEARCH_UPPER_BOUND) -> AffordabilityResult:
    """Find the maximum affordable purchase price and its full cost breakdown.

    The search prices the loan at price * max_ltv. The final breakdown instead
    uses price - available_down_payment, with the down payment capped at the
    LTV-implied amount; excess assets stay with the buyer.
    """
    purchase_price = Decimal(search_max_price(policy, upper_bound))
    logger.debug("Converged on purchase price %s (bound %s)", purchase_price, upper_bound)

    search_payment = compute_total_monthly_cost(purchase_price, policy)
    reserved_assets = search_payment * policy.required_reserves
    available_down_payment = min(
        purchase_price * (ONE - policy.max_ltv),
        max(policy.total_assets - reserved_assets, ZERO),
    )
    loan_amount = purchase_price - available_down_payment

    principal_and_interest = compute_monthly_payment(loan_amount, policy.interest_rate)
    escrow = compute_escrow_costs(purchase_price, policy.property_tax_rate, policy.insurance_rate)
    monthly_payment = principal_and_interest + escrow.property_tax + escrow.homeowners_insurance

    ltv_ratio = loan_amount / purchase_price if purchase_price > ZERO else ZERO

    return AffordabilityResult(
        purchase_price=purchase_price,
        down_payment=available_down_payment,
        loan_amount=loan_amount,
        monthly_payment=monthly_payment,
        principal_and_interest=principal_and_interest,
        homeowners_insurance=escrow.homeowners_insurance,
        property_tax=escrow.property_tax,
        debt_to_income_ratio=_debt_to_income(policy, monthly_payment),
        ltv_ratio=ltv_ratio,
        reserved_assets=reserved_assets,
        available_down_payment=available_down_payment,
        interest_rate=policy.interest_rate,
    )
