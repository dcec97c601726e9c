"""Chain client implementations."""
from .memory import InMemoryMarketClient
from .rpc import RpcMarketClient

__all__ = ["InMemoryMarketClient", "RpcMarketClient"]
