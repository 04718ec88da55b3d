"""Command-line entry point: click command + rich result display.

Session:
  1. Collect income, assets and debts (from options or interactive prompt).
  2. Resolve all nine inputs; invalid input is reported and the solver is skipped.
  3. Run the affordability search and display (or print as JSON) the result.

Exit codes: 0 success, 1 invalid input, 2 unexpected failure.
"""
from __future__ import annotations

import json
import logging
import sys
from decimal import Decimal
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .config import DEFAULT_FORM_VALUES, PERCENT, ZERO
from .fetcher import FetchError, fetch_rate
from .optimizer import AffordabilityResult, optimize
from .resolver import InvalidInputError, parse_number, resolve

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True, style="bold red")
note_console = Console(stderr=True)

FAILURE_MESSAGE = "Failed to calculate affordability"

# ──────────────────────────────────────────────────────────────────────────────
# Formatting helpers
# ──────────────────────────────────────────────────────────────────────────────

def _fmt_money(value: Decimal, places: int = 0) -> str:
    return f"${value:,.{places}f}"


def _fmt_pct(value: Decimal, places: int = 0) -> str:
    if not value.is_finite():
        return "n/a"
    return f"{float(value) * 100:.{places}f}%"


# ──────────────────────────────────────────────────────────────────────────────
# Result display
# ──────────────────────────────────────────────────────────────────────────────

def display_result(result: AffordabilityResult) -> None:
    console.print()
    console.print(Panel(
        f"[bold green]Affordable Purchase Price[/bold green]: "
        f"[bold]{_fmt_money(result.purchase_price)}[/bold]",
        expand=False,
    ))

    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")
    t.add_row("Down payment", _fmt_money(result.down_payment))
    t.add_row("Loan amount", _fmt_money(result.loan_amount))
    t.add_row("Monthly payment", _fmt_money(result.monthly_payment))
    t.add_row("LTV ratio", _fmt_pct(result.ltv_ratio))
    console.print(t)


def display_breakdown(result: AffordabilityResult) -> None:
    """Monthly payment split into its three components with their share."""
    t = Table(title="Monthly Payment Breakdown", box=box.MINIMAL_HEAVY_HEAD)
    t.add_column("Component", style="cyan")
    t.add_column("Amount", justify="right")
    t.add_column("Share", justify="right")

    total = result.monthly_payment
    for label, amount in (
        ("Principal & Interest", result.principal_and_interest),
        ("Property Tax", result.property_tax),
        ("Homeowners Insurance", result.homeowners_insurance),
    ):
        share = _fmt_pct(amount / total, 1) if total > ZERO else "-"
        t.add_row(label, _fmt_money(amount, 2), share)
    t.add_row("[bold]Total[/bold]", f"[bold]{_fmt_money(total, 2)}[/bold]", "")
    console.print(t)


def display_loan_details(result: AffordabilityResult) -> None:
    t = Table(title="Loan Details", box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")
    t.add_row("Interest rate", _fmt_pct(result.interest_rate, 2))
    t.add_row("Debt-to-income", _fmt_pct(result.debt_to_income_ratio))
    t.add_row("Reserved assets", _fmt_money(result.reserved_assets))
    console.print(t)


# ──────────────────────────────────────────────────────────────────────────────
# Input helpers
# ──────────────────────────────────────────────────────────────────────────────

def _prompt_amount(prompt: str) -> str:
    """Prompt until the answer parses as a non-negative amount; return it raw."""
    while True:
        raw = console.input(f"[bold]{prompt}[/bold] ").strip()
        try:
            value = parse_number(raw, strip_commas=True)
        except InvalidInputError:
            err_console.print(f"  Invalid number: '{raw}'")
            continue
        if value < ZERO:
            err_console.print("  Value must be >= 0.")
            continue
        return raw


def _default_rate(fetch: bool) -> object:
    """Interest rate in percent: FRED when requested and available, else the form default."""
    if fetch:
        try:
            rate = fetch_rate()
        except FetchError as exc:
            err_console.print(f"Rate fetch failed: {exc}")
            err_console.print(f"Using default interest rate of {DEFAULT_FORM_VALUES['interestRate']}%.")
        else:
            note_console.print(f"  Using current 30-year fixed rate: {_fmt_pct(rate, 2)}", style="dim")
            return rate * PERCENT
    return DEFAULT_FORM_VALUES["interestRate"]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=note_console, show_path=False)],
    )


# ──────────────────────────────────────────────────────────────────────────────
# Click entry point
# ──────────────────────────────────────────────────────────────────────────────

@click.command()
@click.option("--income", type=str, default=None, help="Gross annual income, e.g. 120,000")
@click.option("--assets", type=str, default=None, help="Total liquid assets")
@click.option("--debts", type=str, default=None, help="Existing monthly debt payments")
@click.option("--max-ltv", type=str, default=DEFAULT_FORM_VALUES["maxLTV"], show_default=True, help="Max LTV (%)")
@click.option("--tax-rate", type=str, default=DEFAULT_FORM_VALUES["propertyTaxRate"], show_default=True, help="Annual property tax (% of price)")
@click.option("--insurance-rate", type=str, default=DEFAULT_FORM_VALUES["insuranceRate"], show_default=True, help="Annual homeowners insurance (% of price)")
@click.option("--max-dti", type=str, default=DEFAULT_FORM_VALUES["maxDTI"], show_default=True, help="Max DTI (%)")
@click.option("--rate", type=str, default=None, help=f"Interest rate (%) [default: {DEFAULT_FORM_VALUES['interestRate']}]")
@click.option("--reserves", type=str, default=DEFAULT_FORM_VALUES["requiredReserves"], show_default=True, help="Required reserves (months of payment)")
@click.option("--fetch-rate", "fetch", is_flag=True, help="Use the current FRED 30-year rate when --rate is omitted (needs FRED_API_KEY).")
@click.option("--json", "as_json", is_flag=True, help="Print the result record as JSON.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(
    income: Optional[str],
    assets: Optional[str],
    debts: Optional[str],
    max_ltv: str,
    tax_rate: str,
    insurance_rate: str,
    max_dti: str,
    rate: Optional[str],
    reserves: str,
    fetch: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    """Home affordability calculator: maximum purchase price for a 30-year fixed mortgage."""
    _configure_logging(verbose)

    if not as_json:
        console.print(Panel("[bold blue]Home Affordability Calculator[/bold blue]", expand=False))
        # JSON mode never prompts; a missing field is reported as invalid input.
        if income is None:
            income = _prompt_amount("Annual income?")
        if assets is None:
            assets = _prompt_amount("Total assets?")
        if debts is None:
            debts = _prompt_amount("Monthly debts?")

    raw = {
        "annualIncome": income,
        "assets": assets,
        "monthlyDebts": debts,
        "maxLTV": max_ltv,
        "propertyTaxRate": tax_rate,
        "insuranceRate": insurance_rate,
        "maxDTI": max_dti,
        "interestRate": rate if rate is not None else _default_rate(fetch),
        "requiredReserves": reserves,
    }

    try:
        policy = resolve(raw)
    except InvalidInputError as exc:
        err_console.print(str(exc))
        sys.exit(1)

    try:
        result = optimize(policy)
    except Exception:
        logger.exception("Error calculating affordability")
        err_console.print(FAILURE_MESSAGE)
        sys.exit(2)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, allow_nan=False))
        return

    display_result(result)
    display_breakdown(result)
    display_loan_details(result)
