"""Merge RSS/Atom feeds into one recency-sorted timeline."""

__version__ = "0.1.0"
