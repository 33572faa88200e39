"""
Value objects for the domain layer.

Value objects are immutable and defined only by their attributes.
"""

from .money import Money

__all__ = ["Money"]
