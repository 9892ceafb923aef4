"""Holdings file validation logic."""

from __future__ import annotations

import math

import pandas as pd

from b3_master.portfolio.data_loader import OPTIONAL_COLUMNS, REQUIRED_COLUMNS
from b3_master.portfolio.models import AssetType, ValidationIssue
from b3_master.services.base import validate_symbol


def _missing_columns(frame: pd.DataFrame) -> list[str]:
    return [col for col in REQUIRED_COLUMNS if col not in frame.columns]


def _as_number(value: object) -> float | None:
    if isinstance(value, bool) or not pd.api.types.is_number(value):
        return None
    out = float(value)
    return out if math.isfinite(out) else None


def validate_holdings_frame(frame: pd.DataFrame) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    missing = _missing_columns(frame)
    if missing:
        for col in missing:
            issues.append(
                ValidationIssue(
                    field=col,
                    code="missing_column",
                    message=f"Required column is missing: {col}",
                )
            )
        return issues

    null_cols = [col for col in REQUIRED_COLUMNS if frame[col].isnull().any()]
    for col in null_cols:
        issues.append(ValidationIssue(field=col, code="null_value", message=f"Null values found in {col}."))

    for idx, row in frame.iterrows():
        row_num = int(idx) + 2
        symbol = str(row["Symbol"]).strip().upper()
        try:
            validate_symbol(symbol)
        except ValueError:
            issues.append(
                ValidationIssue(field="Symbol", row=row_num, code="invalid_symbol", message=f"Invalid ticker: {symbol}")
            )

        quantity = _as_number(row["Quantity"])
        if quantity is None or quantity <= 0:
            issues.append(
                ValidationIssue(
                    field="Quantity",
                    row=row_num,
                    code="invalid_quantity",
                    message="Quantity must be a positive number.",
                )
            )

        average_price = _as_number(row["Average_Price"])
        if average_price is None or average_price < 0:
            issues.append(
                ValidationIssue(
                    field="Average_Price",
                    row=row_num,
                    code="invalid_average_price",
                    message="Average_Price must be a non-negative number.",
                )
            )

        raw_type = row["Type"] if "Type" in frame.columns else None
        if raw_type is not None and not pd.isna(raw_type):
            try:
                AssetType.parse(raw_type)
            except ValueError:
                issues.append(
                    ValidationIssue(
                        field="Type",
                        row=row_num,
                        code="invalid_type",
                        message=f"Type must be one of {[member.name for member in AssetType]}.",
                    )
                )

        purchase = row["Purchase_Date"] if "Purchase_Date" in frame.columns else None
        if purchase is not None and not pd.isna(purchase):
            try:
                pd.Timestamp(purchase)
            except ValueError:
                issues.append(
                    ValidationIssue(
                        field="Purchase_Date",
                        row=row_num,
                        code="invalid_date",
                        message="Purchase_Date must be an ISO date (YYYY-MM-DD).",
                    )
                )

    unknown = [col for col in frame.columns if col not in REQUIRED_COLUMNS + OPTIONAL_COLUMNS]
    for col in unknown:
        issues.append(ValidationIssue(field=str(col), code="unknown_column", message=f"Ignoring unknown column: {col}"))
    return issues


def blocking_issues(issues: list[ValidationIssue]) -> list[ValidationIssue]:
    return [issue for issue in issues if issue.code != "unknown_column"]
