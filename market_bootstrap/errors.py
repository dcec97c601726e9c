"""Error taxonomy for market bootstrapping."""
from __future__ import annotations


class BootstrapError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Preconditions (fatal, raised before any network call)
# ---------------------------------------------------------------------------


class PreconditionError(BootstrapError):
    """Programmer or operator error detected before touching the chain."""


class UnknownSymbolError(PreconditionError, KeyError):
    def __init__(self, symbol: str) -> None:
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self) -> str:
        return f"Symbol not found in asset catalog: {self.symbol!r}"


class ConfigError(PreconditionError, ValueError):
    """Malformed or incomplete configuration."""


# ---------------------------------------------------------------------------
# Chain client failures (tolerated at the step boundary)
# ---------------------------------------------------------------------------


class ChainClientError(BootstrapError):
    """A chain client operation failed."""


class DuplicateResourceError(ChainClientError):
    """The resource being created already exists."""


class ResourceNotFoundError(ChainClientError):
    """A read-back did not find the requested resource."""


class TransientChainError(ChainClientError):
    """Network or RPC failure; re-running the sequence may succeed."""


class DependencyError(BootstrapError):
    """A step's prerequisite did not produce a usable value."""
