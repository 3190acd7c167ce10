"""HTTP adapter (FastAPI) exposing ledger commands and queries."""

from .app import create_app

__all__ = ["create_app"]
