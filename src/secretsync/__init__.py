"""Reconcile repository secrets against a desired set, sealed end-to-end."""

__version__ = "0.1.0"
