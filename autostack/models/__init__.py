"""Data models for autostack."""
from autostack.models.stack import StackSettings

__all__ = ["StackSettings"]
