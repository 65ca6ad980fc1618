"""
Scoped holders for secret bytes.

Python gives no hard guarantee about when (or whether) an object's memory
is reused, and immutable ``bytes`` can never be overwritten.  Key material
is therefore kept in a ``bytearray`` that is zeroed explicitly: on
``wipe()``, on leaving a ``with`` block (normal return, early error,
unwinding) and, as a last resort, on garbage collection.

Copies handed to ``coincurve`` as ``bytes`` are short-lived temporaries
created inside a single operation (best-effort in Python).
"""

from __future__ import annotations

import hmac
from contextlib import contextmanager
from typing import Iterator, Union

BytesLike = Union[bytes, bytearray, memoryview]


class SecretBytes:
    """Mutable buffer that is overwritten with zeros when released."""

    __slots__ = ("_buf", "__weakref__")

    def __init__(self, data: BytesLike) -> None:
        self._buf = bytearray(data)

    def reveal(self) -> bytes:
        """Short-lived immutable copy, for passing into the C library."""
        if self.wiped:
            raise ValueError("secret has been wiped")
        return bytes(self._buf)

    def wipe(self) -> None:
        for i in range(len(self._buf)):
            self._buf[i] = 0
        self._buf = bytearray()

    @property
    def wiped(self) -> bool:
        return not self._buf

    def __len__(self) -> int:
        return len(self._buf)

    def __enter__(self) -> SecretBytes:
        return self

    def __exit__(self, *exc) -> None:
        self.wipe()

    def __del__(self) -> None:
        buf = getattr(self, "_buf", None)
        if buf:
            for i in range(len(buf)):
                buf[i] = 0

    # constant-time comparison ------------------------------------------------
    def __eq__(self, o: object) -> bool:
        if isinstance(o, SecretBytes):
            return hmac.compare_digest(self._buf, o._buf)
        if isinstance(o, (bytes, bytearray)):
            return hmac.compare_digest(self._buf, o)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        if self.wiped:
            return "SecretBytes(<wiped>)"
        return f"SecretBytes(<{len(self._buf)} bytes redacted>)"


@contextmanager
def scoped_secret(data: BytesLike) -> Iterator[SecretBytes]:
    """Yield a ``SecretBytes`` that is wiped on every exit path."""
    secret = SecretBytes(data)
    try:
        yield secret
    finally:
        secret.wipe()
