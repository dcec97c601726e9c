"""Provision a lending market group and register its collateral tokens."""

__version__ = "0.1.0"
