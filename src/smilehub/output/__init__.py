"""Output module - JSON export."""

from .export import export_json

__all__ = ["export_json"]
