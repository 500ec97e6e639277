"""Operator toolkit for the booking management backend."""

__version__ = "0.3.0"
