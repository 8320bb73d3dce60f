"""Classifier module."""

from .classifier import FunctionRouterClassifier, IClassifier, decode_router_output

__all__ = ["FunctionRouterClassifier", "IClassifier", "decode_router_output"]
