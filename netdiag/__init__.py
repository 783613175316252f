"""Connectivity check types, status helpers, templates, event recorders, metrics and a check-target server."""

__version__ = "0.1.0"