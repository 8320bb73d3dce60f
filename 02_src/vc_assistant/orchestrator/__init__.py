"""Orchestrator module."""

from .orchestrator import IRouterOrchestrator, RouterOrchestrator

__all__ = ["IRouterOrchestrator", "RouterOrchestrator"]
