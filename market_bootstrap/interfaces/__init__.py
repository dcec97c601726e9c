"""Protocol interfaces for market bootstrapping."""
from .chain import MarketAdminClient

__all__ = ["MarketAdminClient"]
