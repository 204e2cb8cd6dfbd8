"""Trailarr: resolves YouTube trailers into directly playable stream URLs."""

__version__ = "0.1.0"
