# src/config/digest.py — v1
"""Digest additions — extra tokens appended to the fingerprinted temp dir name.

Libraries and plugins register their version strings or feature flags here so
that bumping them invalidates cached temp state even when the Assetfile text
is unchanged. Tokens are always kept in lexicographic order.

Example:
    from assetpipe.config.digest import add_to_digest
    add_to_digest("my-filters-1.4.0")
"""

from __future__ import annotations

import threading
from collections.abc import Iterable


class DigestAdditions:
    """Sorted collection of digest tokens passed to a Project."""

    def __init__(self, tokens: Iterable[object] = ()) -> None:
        self._lock = threading.Lock()
        self._tokens: list[str] = sorted(str(t) for t in tokens)

    @property
    def tokens(self) -> list[str]:
        """Return a sorted copy of the registered tokens."""
        with self._lock:
            return list(self._tokens)

    def add(self, token: object) -> None:
        """Register a token; the list stays sorted."""
        with self._lock:
            self._tokens.append(str(token))
            self._tokens.sort()

    def replace(self, tokens: Iterable[object]) -> None:
        """Replace all tokens with a sorted copy of ``tokens``."""
        with self._lock:
            self._tokens = sorted(str(t) for t in tokens)

    def suffix(self) -> str:
        """Return the hyphen-joined tokens, or "" when there are none."""
        with self._lock:
            return "-".join(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return f"DigestAdditions({self._tokens!r})"


_default = DigestAdditions()


def default_digest_additions() -> DigestAdditions:
    """Return the process-wide registry used when a Project gets none."""
    return _default


def add_to_digest(token: object) -> None:
    """Add a token to the process-wide registry."""
    _default.add(token)
