"""Source digests.

Artifacts record the Ethereum keccak-256 of the exact source text. This is
the original Keccak padding, not NIST SHA3-256, so ``hashlib.sha3_256``
would give different digests.
"""

from __future__ import annotations

from Crypto.Hash import keccak


def keccak256_hex(text: str) -> str:
    """Return ``0x`` + hex keccak-256 of the UTF-8 encoding of *text*.

    Example:
        >>> keccak256_hex("")
        '0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    digest = keccak.new(digest_bits=256, data=text.encode("utf-8"))
    return f"0x{digest.hexdigest()}"
