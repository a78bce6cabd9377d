"""Sunnah Assistant backend: geocoding with provider fallback behind an access gate."""

__version__ = "0.1.0"
