"""Readiness polling for OpenStack servers and images."""

__version__ = "0.3.0"
