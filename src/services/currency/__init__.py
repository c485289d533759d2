"""Currency conversion package."""

from src.services.currency.conversion import to_base

__all__ = ["to_base"]
