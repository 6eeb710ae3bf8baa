"""Gatepass: ticket booking backend for a single event."""

__version__ = "1.0.0"
