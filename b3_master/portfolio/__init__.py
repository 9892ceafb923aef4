"""Portfolio domain package."""

from b3_master.portfolio.models import Asset, AssetType, PortfolioItem, PortfolioSummary

__all__ = ["Asset", "AssetType", "PortfolioItem", "PortfolioSummary"]
