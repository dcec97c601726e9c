#!/usr/bin/env python3
"""
Market bootstrap
Entry point: python -m market_bootstrap.main
"""
from .cli import main

if __name__ == "__main__":
    main()
