# src/__init__.py — v1
"""assetpipe — incremental file pipeline builder."""

from assetpipe.version import __version__

__all__ = ["__version__"]
