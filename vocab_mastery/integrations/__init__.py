"""Adapters for external collaborators."""

from .progress_client import ProgressClient

__all__ = ["ProgressClient"]
