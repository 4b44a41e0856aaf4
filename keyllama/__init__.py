"""Keyllama - live editing-session telemetry and authenticity scoring."""

__version__ = "1.0.0"
