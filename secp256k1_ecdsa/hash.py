"""
Digests accepted by the signing engine.

The core signs and verifies 32-byte digests only; hashing arbitrary-length
content is the caller's concern.  ``Digest.sha256`` is the single
convenience entry point (SHA-256 is what Bitcoin-style ECDSA uses), and
``Digest.from_hasher`` accepts any ``hashlib``-style constructor.
"""

from __future__ import annotations

import hashlib
from typing import Callable, Union

from .curve import SCALAR_BYTES
from .errors import InvalidLength

DIGEST_BYTES = SCALAR_BYTES


class Digest:
    """Immutable 32-byte message digest."""

    __slots__ = ("_b",)

    def __init__(self, data: Union[bytes, bytearray, memoryview]) -> None:
        data = bytes(data)
        if len(data) != DIGEST_BYTES:
            raise InvalidLength.expected("digest", DIGEST_BYTES, len(data))
        self._b = data

    @classmethod
    def sha256(cls, data: bytes) -> Digest:
        return cls(hashlib.sha256(data).digest())

    @classmethod
    def from_hasher(cls, data: bytes, hasher: Callable = hashlib.sha256) -> Digest:
        """Hash *data* with a ``hashlib`` constructor yielding 32 bytes."""
        return cls(hasher(data).digest())

    def to_bytes(self) -> bytes:
        return self._b

    def __bytes__(self) -> bytes:
        return self._b

    def __eq__(self, o: object) -> bool:
        if isinstance(o, Digest):
            return self._b == o._b
        if isinstance(o, bytes):
            return self._b == o
        return False

    def __hash__(self) -> int:
        return hash(self._b)

    def __repr__(self) -> str:
        return f"Digest({self._b.hex()})"


DigestLike = Union[Digest, bytes, bytearray]


def as_digest(value: DigestLike) -> Digest:
    return value if isinstance(value, Digest) else Digest(value)


def ecdh_sha256(compressed_point: bytes) -> bytes:
    """libsecp256k1's default ECDH hash:  SHA-256(0x02|0x03 ‖ x)."""
    return hashlib.sha256(compressed_point).digest()
