"""Function dispatch module."""

from .dispatcher import DispatchResult, FunctionDispatcher

__all__ = ["DispatchResult", "FunctionDispatcher"]
