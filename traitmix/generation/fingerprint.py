"""Canonical fingerprints for resolved combinations.

Labels are "<layer>-<trait>", encoded as UTF-8 and sorted bytewise before
hashing, so the fingerprint does not depend on the order layers were
visited. Only visual selections contribute labels.
"""

import hashlib
from typing import Iterable


def trait_label(layer: str, name: str) -> str:
    return f"{layer}-{name}"


def fingerprint(resolved: Iterable[tuple[str, str]]) -> str:
    """SHA3-256 hex digest of the sorted, concatenated trait labels."""
    labels = sorted(
        {trait_label(layer, name).encode("utf-8") for layer, name in resolved}
    )
    hasher = hashlib.sha3_256()
    hasher.update(b"".join(labels))
    return hasher.hexdigest()
