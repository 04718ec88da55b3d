"""Input resolution and validation.

Turns raw caller values (numbers or formatted strings, rates in percent) into
a fully validated PolicyInputs. This is the only place user-facing input
errors are raised; the optimizer assumes its inputs already passed here.

Resolution rules:
1. Money fields accept thousands separators ("120,000").
2. Rate fields are given in percent (a trailing "%" is allowed) and divided by 100.
3. requiredReserves is a month count, used as-is.
4. Every field must parse to a finite number.
5. The interest rate must be strictly positive.
6. Amounts, rates and reserve months are bounded above (see config).
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from .config import (
    MAX_AMOUNT, MAX_RATE, MAX_RESERVE_MONTHS, MONTHS_PER_YEAR, ONE, PERCENT, ZERO,
)

INVALID_NUMBERS_MESSAGE = "Please enter valid numbers for all fields"
NON_POSITIVE_RATE_MESSAGE = "Interest rate must be greater than 0"

MONEY_FIELDS = ("annualIncome", "assets", "monthlyDebts")
PERCENT_FIELDS = ("maxLTV", "propertyTaxRate", "insuranceRate", "maxDTI", "interestRate")
MONTH_FIELDS = ("requiredReserves",)
REQUIRED_FIELDS = MONEY_FIELDS + PERCENT_FIELDS + MONTH_FIELDS


@dataclass(frozen=True)
class PolicyInputs:
    """Validated borrower and lending-policy parameters. Rates are fractions."""
    annual_income: Decimal
    total_assets: Decimal
    monthly_debts: Decimal
    max_ltv: Decimal
    property_tax_rate: Decimal
    insurance_rate: Decimal
    max_dti: Decimal
    interest_rate: Decimal
    required_reserves: Decimal

    @property
    def monthly_income(self) -> Decimal:
        return self.annual_income / MONTHS_PER_YEAR


class InvalidInputError(ValueError):
    """Raised when raw inputs cannot be turned into a valid PolicyInputs."""


def parse_number(value: object, *, strip_commas: bool = False, strip_percent: bool = False) -> Decimal:
    """Parse a number or numeric string into a finite Decimal.

    Raises InvalidInputError for anything else (None, bools, junk, NaN, inf).
    A trailing "%" is only tolerated with strip_percent.
    """
    if value is None or isinstance(value, bool):
        raise InvalidInputError(INVALID_NUMBERS_MESSAGE)

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if strip_commas:
            text = text.replace(",", "")
        if strip_percent:
            text = text.removesuffix("%").strip()
        try:
            number = Decimal(text)
        except InvalidOperation as exc:
            raise InvalidInputError(INVALID_NUMBERS_MESSAGE) from exc
    else:
        raise InvalidInputError(INVALID_NUMBERS_MESSAGE)

    if not number.is_finite():
        raise InvalidInputError(INVALID_NUMBERS_MESSAGE)
    return number


def resolve(raw: Mapping[str, object]) -> PolicyInputs:
    """Resolve raw request values into a validated PolicyInputs."""
    values: dict[str, Decimal] = {}
    for name in REQUIRED_FIELDS:
        values[name] = parse_number(
            raw.get(name),
            strip_commas=name in MONEY_FIELDS,
            strip_percent=name in PERCENT_FIELDS,
        )

    for name in PERCENT_FIELDS:
        try:
            values[name] = values[name] / PERCENT
        except ArithmeticError as exc:
            raise InvalidInputError(INVALID_NUMBERS_MESSAGE) from exc

    if values["interestRate"] <= ZERO:
        raise InvalidInputError(NON_POSITIVE_RATE_MESSAGE)

    policy = PolicyInputs(
        annual_income=values["annualIncome"],
        total_assets=values["assets"],
        monthly_debts=values["monthlyDebts"],
        max_ltv=values["maxLTV"],
        property_tax_rate=values["propertyTaxRate"],
        insurance_rate=values["insuranceRate"],
        max_dti=values["maxDTI"],
        interest_rate=values["interestRate"],
        required_reserves=values["requiredReserves"],
    )
    check_domain(policy)
    return policy


def check_domain(policy: PolicyInputs) -> None:
    """Raise InvalidInputError if a parsed value is outside its allowed range."""
    for label, value in (
        ("Annual income", policy.annual_income),
        ("Total assets", policy.total_assets),
        ("Monthly debts", policy.monthly_debts),
        ("Required reserves", policy.required_reserves),
        ("Property tax rate", policy.property_tax_rate),
        ("Insurance rate", policy.insurance_rate),
    ):
        if value < ZERO:
            raise InvalidInputError(f"{label} cannot be negative")

    if not ZERO < policy.max_ltv <= ONE:
        raise InvalidInputError("Max LTV must be greater than 0 and at most 100%")

    if policy.max_dti <= ZERO:
        raise InvalidInputError("Max DTI must be greater than 0")

    for label, value in (
        ("Annual income", policy.annual_income),
        ("Total assets", policy.total_assets),
        ("Monthly debts", policy.monthly_debts),
    ):
        if value > MAX_AMOUNT:
            raise InvalidInputError(f"{label} cannot exceed {MAX_AMOUNT:,.0f}")

    for label, value in (
        ("Interest rate", policy.interest_rate),
        ("Property tax rate", policy.property_tax_rate),
        ("Insurance rate", policy.insurance_rate),
        ("Max DTI", policy.max_dti),
    ):
        if value > MAX_RATE:
            raise InvalidInputError(f"{label} cannot exceed 100%")

    if policy.required_reserves > MAX_RESERVE_MONTHS:
        raise InvalidInputError(f"Required reserves cannot exceed {MAX_RESERVE_MONTHS} months")
