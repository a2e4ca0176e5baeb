"""Insight and alert detection over athlete power profiles."""

__version__ = "0.1.0"
