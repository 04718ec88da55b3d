"""Online rate fetcher: FRED 30-year fixed mortgage rate.

Only used to pre-fill the interest rate when the user asks for it, and only
ever user-triggered. The fetched value goes through the same number parsing
as typed input, so a rate that reaches the CLI is always a finite fraction
in (0, MAX_RATE].
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from decimal import Decimal

import requests

from .config import FRED_API_KEY_ENV, HTTP_TIMEOUT_SECONDS, MAX_RATE, PERCENT, ZERO
from .resolver import InvalidInputError, parse_number

logger = logging.getLogger(__name__)

# Freddie Mac PMMS, weekly, percent
_FRED_SERIES = "MORTGAGE30US"
_FRED_URL = "https://api.stlouisfed.org/fred/series/observations"
_FRED_MISSING = "."


class FetchError(Exception):
    """Raised when an online rate fetch fails for any reason."""


def fetch_rate() -> Decimal:
    """Return the latest US 30-year fixed rate as a fraction (0.0675 for 6.75%).

    Raises FetchError on any error (missing key, network, parsing, missing data).
    """
    payload = _latest_observations(_api_key())
    rate = parse_observation(payload)
    logger.debug("FRED %s observation: %s", _FRED_SERIES, rate)
    return rate


def parse_observation(payload: object) -> Decimal:
    """Turn a FRED observations payload into an annual rate fraction."""
    if not isinstance(payload, Mapping) or "observations" not in payload:
        raise FetchError("Failed to parse FRED response: no 'observations' key.")

    observations = payload["observations"]
    if not observations:
        raise FetchError("FRED returned no observations.")

    raw = observations[0].get("value") if isinstance(observations[0], Mapping) else None
    if raw == _FRED_MISSING:
        raise FetchError("FRED returned missing value ('.').")
    try:
        percent = parse_number(raw)
    except InvalidInputError as exc:
        raise FetchError(f"Failed to parse FRED response: unexpected value {raw!r}") from exc

    rate = percent / PERCENT
    if not ZERO < rate <= MAX_RATE:
        raise FetchError(f"FRED returned an out-of-range rate: {raw}%")
    return rate


def _api_key() -> str:
    api_key = os.environ.get(FRED_API_KEY_ENV)
    if not api_key:
        raise FetchError(
            f"{FRED_API_KEY_ENV} environment variable is not set. "
            "Get a free key at https://fred.stlouisfed.org/docs/api/api_key.html"
        )
    return api_key


def _latest_observations(api_key: str) -> object:
    params = {
        "series_id": _FRED_SERIES,
        "api_key": api_key,
        "file_type": "json",
        "sort_order": "desc",
        "limit": 1,
    }
    logger.debug("Fetching %s from FRED", _FRED_SERIES)
    try:
        resp = requests.get(_FRED_URL, params=params, timeout=HTTP_TIMEOUT_SECONDS)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"FRED API request failed: {exc}") from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise FetchError(f"Failed to parse FRED response: {exc}") from exc
