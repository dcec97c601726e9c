"""Asset catalog — symbol to mint / external oracle address."""
from __future__ import annotations

from collections.abc import Mapping

from solders.pubkey import Pubkey

from .errors import ConfigError, UnknownSymbolError
from .models import Asset

MAINNET_MINTS: dict[str, str] = {
    "USDC": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "BTC": "9n4nbM75f5Ui33ZbPYXn59EwSgE8CGsHtAeTH5YFeJ9E",
    "SOL": "So11111111111111111111111111111111111111112",
}

MAINNET_ORACLES: dict[str, str] = {
    "BTC": "GVXRSBjFk6e6J3NbVPXohDJetcTjaeeuykUpbQF8UoMU",
    "SOL": "H6ARHf6YXhGYeQfUzQNGk6rDNnLBQKrenN712K4AQJEG",
}


def _check_address(symbol: str, kind: str, address: str) -> str:
    try:
        Pubkey.from_string(address)
    except ValueError as e:
        raise ConfigError(f"Invalid {kind} address for {symbol}: {address!r}") from e
    return address


class AssetCatalog:
    """Static lookup table of known assets."""

    def __init__(self, assets: Mapping[str, Asset]) -> None:
        self._assets = dict(assets)

    @classmethod
    def from_mappings(
        cls, mints: Mapping[str, str], oracles: Mapping[str, str] | None = None
    ) -> AssetCatalog:
        oracles = oracles or {}
        unknown = set(oracles) - set(mints)
        if unknown:
            raise ConfigError(f"Oracles configured for unknown mints: {sorted(unknown)}")

        assets: dict[str, Asset] = {}
        for symbol, mint in mints.items():
            oracle = oracles.get(symbol)
            assets[symbol] = Asset(
                symbol=symbol,
                mint=_check_address(symbol, "mint", mint),
                oracle=_check_address(symbol, "oracle", oracle) if oracle else None,
            )
        return cls(assets)

    @classmethod
    def mainnet(cls) -> AssetCatalog:
        return cls.from_mappings(MAINNET_MINTS, MAINNET_ORACLES)

    def lookup(self, symbol: str) -> Asset:
        """Return the asset for ``symbol``; raises UnknownSymbolError."""
        try:
            return self._assets[symbol]
        except KeyError:
            raise UnknownSymbolError(symbol) from None
