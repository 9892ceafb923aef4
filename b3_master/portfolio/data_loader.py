"""Initial holdings file loading helpers."""

from __future__ import annotations

import os
from datetime import date

import pandas as pd

from b3_master.portfolio.models import Asset, AssetType, PortfolioItem
from b3_master.providers.mock import find_mock_asset
from b3_master.providers.parsing import infer_asset_type

REQUIRED_COLUMNS = ["Symbol", "Quantity", "Average_Price"]
OPTIONAL_COLUMNS = ["Type", "Name", "Purchase_Date"]
SUPPORTED_EXTENSIONS = {".json", ".csv", ".xlsx", ".xls"}


def load_holdings_frame(file_path: str) -> pd.DataFrame:
    absolute_path = file_path if os.path.isabs(file_path) else os.path.abspath(file_path)
    ext = os.path.splitext(absolute_path)[1].lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValueError("Holdings file must be .json, .csv, .xlsx or .xls.")
    if ext == ".json":
        return pd.read_json(absolute_path, orient="records", dtype=False)
    if ext == ".csv":
        return pd.read_csv(absolute_path)
    return pd.read_excel(absolute_path, sheet_name=0)


def _cell(row: pd.Series, column: str) -> object | None:
    if column not in row.index:
        return None
    value = row[column]
    return None if pd.isna(value) else value


def _resolve_asset(symbol: str, row: pd.Series, average_price: float) -> Asset:
    known = find_mock_asset(symbol)
    if known is not None:
        return known
    raw_type = _cell(row, "Type")
    return Asset(
        symbol=symbol,
        name=str(_cell(row, "Name") or symbol),
        type=AssetType.parse(raw_type, default=infer_asset_type(symbol)),
        price=average_price,
    )


def frame_to_items(frame: pd.DataFrame) -> list[PortfolioItem]:
    """Build holdings from a validated frame; unknown tickers start priced at their average cost."""
    items: list[PortfolioItem] = []
    for idx, row in frame.iterrows():
        symbol = str(row["Symbol"]).strip().upper()
        average_price = float(row["Average_Price"])
        purchase = _cell(row, "Purchase_Date")
        items.append(
            PortfolioItem(
                id=f"seed-{int(idx) + 1}",
                asset=_resolve_asset(symbol, row, average_price),
                quantity=float(row["Quantity"]),
                average_price=average_price,
                purchase_date=str(pd.Timestamp(purchase).date()) if purchase else date.today().isoformat(),
            )
        )
    return items
