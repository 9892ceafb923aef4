"""Static B3 catalog used as offline quote source and ticker suggestion list."""

from __future__ import annotations

from b3_master.portfolio.models import Asset, AssetType
from b3_master.providers.models import QuoteRecord, SourceCitation
from b3_master.providers.parsing import normalize_b3_symbol

MOCK_ASSETS: tuple[Asset, ...] = (
    Asset("PETR4", "Petrobras PN", AssetType.STOCK, 38.42, 1.12, 0.142, 1.12, "2025-12-19"),
    Asset("VALE3", "Vale ON", AssetType.STOCK, 61.80, -0.45, 0.098, 2.14, "2025-12-10"),
    Asset("ITUB4", "Itaú Unibanco PN", AssetType.STOCK, 35.15, 0.37, 0.071, 0.0179, "2025-12-01"),
    Asset("BBAS3", "Banco do Brasil ON", AssetType.STOCK, 22.09, -0.81, 0.094, 0.45, "2025-11-28"),
    Asset("WEGE3", "WEG ON", AssetType.STOCK, 44.73, 0.22, 0.017, 0.19, None),
    Asset("TAEE11", "Taesa UNT", AssetType.STOCK, 35.60, 0.10, 0.087, 0.77, "2025-11-27"),
    Asset("HGLG11", "CSHG Logística FII", AssetType.FII, 158.20, 0.05, 0.083, 1.10, "2025-11-14"),
    Asset("MXRF11", "Maxi Renda FII", AssetType.FII, 9.61, -0.10, 0.124, 0.10, "2025-11-14"),
    Asset("KNRI11", "Kinea Renda Imobiliária FII", AssetType.FII, 141.02, 0.21, 0.071, 1.00, "2025-11-14"),
    Asset("XPML11", "XP Malls FII", AssetType.FII, 103.55, -0.33, 0.107, 0.92, "2025-11-25"),
    Asset("BTC", "Bitcoin", AssetType.CRYPTO, 352000.0, 2.45, None, None, None),
    Asset("TESOURO_SELIC", "Tesouro Selic", AssetType.FIXED_INCOME, 16250.0, 0.04, None, None, None),
)


def find_mock_asset(symbol: str) -> Asset | None:
    clean = normalize_b3_symbol(symbol)
    for asset in MOCK_ASSETS:
        if asset.symbol == clean:
            return asset
    return None


def search_catalog(term: str, limit: int = 5) -> list[Asset]:
    needle = term.strip().lower()
    if not needle:
        return []
    matches = [asset for asset in MOCK_ASSETS if needle in asset.symbol.lower() or needle in asset.name.lower()]
    return matches[: max(0, limit)]


def _to_record(asset: Asset) -> QuoteRecord:
    return QuoteRecord(
        symbol=asset.symbol,
        price=asset.price,
        percent_change=asset.change,
        name=asset.name,
        asset_type=asset.type,
        dividend_yield=asset.dividend_yield,
        last_dividend_amount=asset.last_dividend_value,
        next_payment_date=asset.next_payment_date,
        source="mock",
    )


class MockQuoteProvider:
    """Serves the static catalog; unknown symbols are simply absent."""

    name = "mock"

    def get_quotes(self, symbols: list[str]) -> list[QuoteRecord]:
        records = []
        for symbol in symbols:
            asset = find_mock_asset(symbol)
            if asset is not None:
                records.append(_to_record(asset))
        return records

    def get_quote(self, symbol: str) -> QuoteRecord | None:
        asset = find_mock_asset(symbol)
        return _to_record(asset) if asset else None

    def citations(self) -> list[SourceCitation]:
        return [SourceCitation(title="Offline B3 catalog", uri="local://mock")]
