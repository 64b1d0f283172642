"""Apiary - ownership-scoped hive and queen records over HTTP."""

__version__ = "0.1.0"
