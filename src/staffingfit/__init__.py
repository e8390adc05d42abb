"""Candidate fit scoring and rate composition engine."""

__version__ = "0.1.0"
