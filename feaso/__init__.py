"""Property development feasibility engine."""

__version__ = "0.1.0"
