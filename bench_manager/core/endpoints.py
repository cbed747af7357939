"""Stable per-tool endpoint assignment.

A tool's debugging endpoint (e.g. Chromium's remote-debugging port) is
derived from its name so it never has to be stored. Two names may land on
the same endpoint; no probing for a free port is done.
"""

import hashlib

DEFAULT_BASE = 9222
DEFAULT_SPAN = 1000


def stable_hash(key: str) -> int:
    """Unseeded 64-bit hash of a string, identical across processes."""
    digest = hashlib.blake2b(key.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big")


def stable_endpoint(key: str, base: int = DEFAULT_BASE, span: int = DEFAULT_SPAN) -> int:
    """Map a key into [base, base + span).

    Examples:
        >>> port = stable_endpoint("tool-x", 9222, 1000)
        >>> 9222 <= port < 10222
        True
        >>> port == stable_endpoint("tool-x", 9222, 1000)
        True
    """
    if span <= 0:
        raise ValueError(f"Endpoint span must be positive, got {span}")
    return base + stable_hash(key) % span
