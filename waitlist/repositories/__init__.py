"""
Persistence adapters.

These modules encapsulate how signup records are stored/retrieved (MongoDB in
production, an in-memory list for local development and tests). Services
depend on the SignupRepository protocol rather than on a concrete driver.
"""

from .base import DuplicateRecord, PersistenceError, SignupRepository, StoreUnavailable, WriteFailed

__all__ = ["DuplicateRecord", "PersistenceError", "SignupRepository", "StoreUnavailable", "WriteFailed"]
