# src/project/fingerprint.py — v2
"""Configuration fingerprinting and fingerprint-scoped temp dir naming."""

from __future__ import annotations

import hashlib

from assetpipe.config.digest import DigestAdditions


def compute_digest(source: str | bytes) -> str:
    """SHA-256 hex digest of the exact configuration content."""
    if isinstance(source, str):
        source = source.encode("utf-8")
    return hashlib.sha256(source).hexdigest()


def digested_tmpdir_name(
    prefix: str, digest: str, additions: DigestAdditions | None = None
) -> str:
    """Return ``<prefix>-<digest>[-<token>...]`` with tokens in sorted order."""
    suffix = digest
    extra = additions.suffix() if additions is not None else ""
    if extra:
        suffix += f"-{extra}"
    return f"{prefix}-{suffix}"
