"""Application-wide constants and configuration defaults.

All tuneable defaults live here so there is a single place to adjust them.
"""
from __future__ import annotations

from decimal import Decimal

# ── Loan product ──────────────────────────────────────────────────────────────

LOAN_TERM_MONTHS: int = 360  # 30-year fixed, fully amortizing

# ── Affordability search ──────────────────────────────────────────────────────

# Must exceed any plausible affordable price: results are silently capped here.
PRICE_SEARCH_UPPER_BOUND: int = 10_000_000
PRICE_RESOLUTION: int = 1  # one unit of currency, no cents

# ── Form defaults (percentages / months, as typed by the user) ────────────────

DEFAULT_FORM_VALUES: dict[str, str] = {
    "maxLTV": "95",
    "propertyTaxRate": "1.8",
    "insuranceRate": "0.5",
    "maxDTI": "36",
    "interestRate": "4",
    "requiredReserves": "6",
}

# ── Input bounds ──────────────────────────────────────────────────────────────

# Keep every intermediate product well inside the Decimal context's range.
MAX_AMOUNT = Decimal("1e15")
MAX_RATE = Decimal("1")  # 100 %, as a fraction
MAX_RESERVE_MONTHS = Decimal("1200")

# ── Online rate fetch ─────────────────────────────────────────────────────────

FRED_API_KEY_ENV = "FRED_API_KEY"
HTTP_TIMEOUT_SECONDS = 10

# ── Numeric convenience ───────────────────────────────────────────────────────

ZERO = Decimal("0")
ONE = Decimal("1")
MONTHS_PER_YEAR = Decimal("12")
PERCENT = Decimal("100")
