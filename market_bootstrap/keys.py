"""Admin keypair loading."""
from __future__ import annotations

import json
import logging
from pathlib import Path

from solders.keypair import Keypair

from .errors import ConfigError

logger = logging.getLogger(__name__)


def load_keypair(path: str | Path) -> Keypair:
    """Load a Solana CLI style keypair file (JSON array of 64 bytes)."""
    path = Path(path).expanduser()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Keypair file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Keypair file is not valid JSON: {path}") from e

    if not isinstance(data, list) or len(data) != 64:
        raise ConfigError(f"Keypair file must hold a 64-byte array: {path}")

    try:
        keypair = Keypair.from_bytes(bytes(data))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid keypair bytes in {path}: {e}") from e

    logger.debug("Loaded admin keypair %s from %s", keypair.pubkey(), path)
    return keypair
