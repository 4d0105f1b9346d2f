from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

import pandas as pd

Number = Union[int, float]

CURRENCY_BY_REGION = {
    "KE": "KES",
    "US": "USD",
    "GB": "GBP",
    "NG": "NGN",
    "ZA": "ZAR",
    "UG": "UGX",
    "TZ": "TZS",
    "GH": "GHS",
    "IN": "INR",
    "EU": "EUR",
    "DE": "EUR",
    "FR": "EUR",
    "CA": "CAD",
    "AU": "AUD",
}


def coerce_date(v: Optional[Union[str, date, datetime]]) -> Optional[date]:
    """Convert input to a calendar date; None/"" stay None, unparseable text raises ValueError."""
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if not isinstance(v, str):
        raise ValueError(f"Invalid date: {v!r}")
    ts = pd.to_datetime(v.strip(), errors="coerce")
    if pd.isna(ts):
        raise ValueError(f"Invalid date: {v!r}")
    return ts.date()


def currency_for_locale(locale: Optional[str]) -> str:
    """Infer an ISO currency code from the region part of a locale tag ("en-KE" -> "KES")."""
    parts = (locale or "en-US").replace("_", "-").split("-")
    region = parts[1].upper() if len(parts) > 1 else "US"
    return CURRENCY_BY_REGION.get(region, "USD")


def format_currency(amount: Optional[Number], locale: Optional[str] = "en-US") -> str:
    """Whole-unit amount with thousands separators, e.g. "KES 15,000" or "-USD 2,500"."""
    currency = currency_for_locale(locale)
    value = round(float(amount or 0))
    sign = "-" if value < 0 else ""
    return f"{sign}{currency} {abs(value):,}"
