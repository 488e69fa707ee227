"""Merge and summarize HAR (HTTP Archive) captures."""

__version__ = "0.3.0"
