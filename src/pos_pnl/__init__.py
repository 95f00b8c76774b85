"""Profit & Loss analytics for a retail liquor store point of sale."""

__version__ = "1.0.0"
