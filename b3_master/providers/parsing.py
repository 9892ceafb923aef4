"""Value coercion shared by the quote adapters."""

from __future__ import annotations

import math
from datetime import datetime, timezone

from b3_master.portfolio.models import AssetType

DISTRIBUTIONS_PER_YEAR: dict[AssetType, int] = {
    AssetType.FII: 12,
    AssetType.STOCK: 4,
}


def _clean(value: object) -> str:
    return (
        str(value)
        .replace("%", "")
        .replace("BRL", "")
        .replace("R$", "")
        .replace(" ", "")
        .replace(",", ".")
        .strip()
    )


def optional_float(value: object) -> float | None:
    """Like :func:`parse_api_value` but keeps "missing" distinct from zero."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    try:
        out = float(_clean(value))
    except ValueError:
        return None
    return out if math.isfinite(out) else None


def parse_api_value(value: object) -> float:
    """Coerce vendor numbers like ``"12,34"``, ``"5.2%"`` or ``"BRL 10"`` to float (0 when unusable)."""
    out = optional_float(value)
    return out if out is not None else 0.0


def format_api_date(value: object) -> str | None:
    """Normalize ISO strings, ``dd/mm/yyyy`` or unix seconds to ``YYYY-MM-DD``."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if value <= 0:
            return None
        return datetime.fromtimestamp(float(value), tz=timezone.utc).date().isoformat()
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(text[:10], fmt).date().isoformat()
        except ValueError:
            continue
    return None


def infer_asset_type(symbol: str) -> AssetType:
    return AssetType.FII if symbol.upper().endswith("11") else AssetType.STOCK


def normalize_b3_symbol(symbol: str) -> str:
    clean = symbol.strip().upper()
    return clean[:-3] if clean.endswith(".SA") else clean


def annualize_dividend_yield(
    asset_type: AssetType,
    price: float,
    vendor_yield: float | None = None,
    last_dividend: float | None = None,
    vendor_yield_is_percent: bool = False,
) -> float | None:
    """Annual dividend yield as a fraction.

    A vendor-supplied annual yield wins; otherwise the last per-share dividend
    is scaled by how often the asset type distributes (FIIs monthly, stocks
    quarterly).
    """
    if vendor_yield is not None and vendor_yield > 0:
        return vendor_yield / 100.0 if vendor_yield_is_percent else vendor_yield
    if not last_dividend or last_dividend <= 0 or price <= 0:
        return None
    per_year = DISTRIBUTIONS_PER_YEAR.get(asset_type, 1)
    return (last_dividend * per_year) / price
