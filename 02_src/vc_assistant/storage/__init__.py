"""Storage module."""

from .storage import IDataStore, ISessionStore, Storage

__all__ = ["IDataStore", "ISessionStore", "Storage"]
