"""Database helpers (client/collection export)."""

from .mongo import get_client, get_collection

__all__ = ["get_client", "get_collection"]
