"""
Trade Journal - Python package initialization.

Exports the global settings instance for easy import across the project:
  from tradejournal import settings
"""

from .config import settings

__all__ = ["settings"]
