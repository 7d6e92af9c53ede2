"""
Freezer inventory package.

Tracks frozen food items, groups them into meal sets, manages storage boxes and
keeps a recipe catalog. Items are taken out oldest-frozen first.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
