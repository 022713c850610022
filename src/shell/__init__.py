"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- PHIVOLCS page client (HTTP)
- Matrix client (HTTP)
- Ledger store (JSON files)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from src.shell.phivolcs_client import PhivolcsClient
from src.shell.matrix_client import MatrixClient
from src.shell.ledger_store import JsonLedgerStore
from src.shell.config_loader import load_config, load_config_from_env, Config

__all__ = [
    "PhivolcsClient",
    "MatrixClient",
    "JsonLedgerStore",
    "load_config",
    "load_config_from_env",
    "Config",
]
