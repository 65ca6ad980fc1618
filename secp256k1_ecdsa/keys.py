"""
Private and public keys on secp256k1.

Both key types are immutable value objects.  Arithmetic is delegated to
``coincurve``; a native key object is built for the duration of a single
operation against the caller's :class:`~.context.Context` and then
dropped, so no key ever keeps a destroyed context alive.

- ``PrivateKey`` holds its scalar in a :class:`~.secret.SecretBytes`
  (zeroed on ``wipe()``, on leaving a ``with`` block, and on collection).
  Equality is constant-time, ``repr`` is redacted.
- ``PublicKey`` holds the canonical SEC 1 encodings of its point, so
  serialisation needs no context and equality is byte equality.

Tweaks
------
``tweak_add(t)``      k' = k + t  (mod n)      P' = P + t·G
``tweak_multiply(t)`` k' = k · t  (mod n)      P' = t·P

Applying the same tweak to both halves of a key pair yields a key pair.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Union

from coincurve import PrivateKey as _SK, PublicKey as _PK

from .context import Capability, Context, resolve
from .curve import (
    COMPRESSED_BYTES,
    PREFIX_EVEN,
    PREFIX_ODD,
    PREFIX_UNCOMPRESSED,
    SCALAR_BYTES,
    UNCOMPRESSED_BYTES,
    int_from_bytes32,
    is_valid_scalar,
)
from .errors import (
    InvalidKeySize,
    InvalidKeyValue,
    InvalidTweak,
    MalformedEncoding,
    PointNotOnCurve,
    ResultingKeyInvalid,
)
from .secret import SecretBytes

if TYPE_CHECKING:
    from .hash import DigestLike
    from .signature import RecoverableSignature, Signature

BytesLike = Union[bytes, bytearray, memoryview]


# ── PrivateKey ──────────────────────────────────────────────────────────
class PrivateKey:
    """A scalar  k  with  0 < k < n."""

    __slots__ = ("_secret",)

    def __init__(self, data: BytesLike) -> None:
        if len(data) != SCALAR_BYTES:
            raise InvalidKeySize.expected("private key", SCALAR_BYTES, len(data))
        if not is_valid_scalar(int_from_bytes32(bytes(data))):
            raise InvalidKeyValue("private key scalar must satisfy 0 < k < n")
        self._secret = SecretBytes(data)

    # constructors -----------------------------------------------------------
    @classmethod
    def from_bytes(cls, data: BytesLike) -> PrivateKey:
        return cls(data)

    @classmethod
    def generate(cls, context: Optional[Context] = None) -> PrivateKey:
        """Uniform in [1, n-1] via rejection sampling."""
        resolve(context).handle  # raises ContextDestroyed
        while True:
            with SecretBytes(secrets.token_bytes(SCALAR_BYTES)) as candidate:
                raw = candidate.reveal()
                if is_valid_scalar(int_from_bytes32(raw)):
                    return cls(raw)

    # derivation -------------------------------------------------------------
    def public_key(self, context: Optional[Context] = None) -> PublicKey:
        """Compute  k·G."""
        handle = resolve(context).require(Capability.SIGN)
        return PublicKey._from_native(self._native(handle).public_key)

    def tweak_add(self, tweak: BytesLike, context: Optional[Context] = None) -> PrivateKey:
        tweak = _check_tweak(tweak, allow_zero=True)
        handle = resolve(context).require(Capability.SIGN)
        try:
            tweaked = self._native(handle).add(tweak)
        except ValueError as exc:
            raise ResultingKeyInvalid(
                "additive tweak produced the zero scalar", cause=exc,
            ) from exc
        return PrivateKey(tweaked.secret)

    def tweak_multiply(self, tweak: BytesLike, context: Optional[Context] = None) -> PrivateKey:
        tweak = _check_tweak(tweak, allow_zero=False)
        handle = resolve(context).require(Capability.SIGN)
        try:
            tweaked = self._native(handle).multiply(tweak)
        except ValueError as exc:
            raise ResultingKeyInvalid(
                "multiplicative tweak produced an invalid scalar", cause=exc,
            ) from exc
        return PrivateKey(tweaked.secret)

    # protocol shortcuts -----------------------------------------------------
    def sign(
        self,
        digest: DigestLike,
        context: Optional[Context] = None,
        aux_rand: Optional[bytes] = None,
    ) -> Signature:
        from .ecdsa import sign
        return sign(digest, self, context, aux_rand=aux_rand)

    def sign_recoverable(
        self,
        digest: DigestLike,
        context: Optional[Context] = None,
        aux_rand: Optional[bytes] = None,
    ) -> RecoverableSignature:
        from .ecdsa import sign_recoverable
        return sign_recoverable(digest, self, context, aux_rand=aux_rand)

    def ecdh(
        self,
        peer: PublicKey,
        context: Optional[Context] = None,
        hasher: Optional[Callable[[bytes], bytes]] = None,
    ) -> bytes:
        from .ecdh import agree
        return agree(self, peer, context, hasher=hasher)

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        return self._reveal()

    # secret handling --------------------------------------------------------
    def wipe(self) -> None:
        self._secret.wipe()

    def __enter__(self) -> PrivateKey:
        return self

    def __exit__(self, *exc) -> None:
        self.wipe()

    def _reveal(self) -> bytes:
        if self._secret.wiped:
            raise InvalidKeyValue("private key has been wiped")
        return self._secret.reveal()

    def _native(self, handle) -> _SK:
        return _SK(self._reveal(), context=handle)

    def __eq__(self, o: object) -> bool:
        if not isinstance(o, PrivateKey):
            return NotImplemented
        return self._secret == o._secret

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "PrivateKey(<redacted>)"


# ── PublicKey ───────────────────────────────────────────────────────────
class PublicKey:
    """
    A point  P ≠ O  on secp256k1.

    Accepts SEC 1 compressed (33 B, prefix 0x02/0x03) or uncompressed
    (65 B, prefix 0x04) encodings.  Hybrid encodings (0x06/0x07) are
    rejected even though libsecp256k1 would parse them.
    """

    __slots__ = ("_compressed", "_uncompressed")

    def __init__(self, data: BytesLike, context: Optional[Context] = None) -> None:
        data = bytes(data)
        _check_sec1_prefix(data)
        handle = resolve(context).handle
        try:
            native = _PK(data, context=handle)
        except ValueError as exc:
            raise PointNotOnCurve(
                "public key is not a point on secp256k1",
                context={"length": len(data)},
                cause=exc,
            ) from exc
        self._compressed = native.format(compressed=True)
        self._uncompressed = native.format(compressed=False)

    # constructors -----------------------------------------------------------
    @classmethod
    def from_bytes(cls, data: BytesLike, context: Optional[Context] = None) -> PublicKey:
        return cls(data, context)

    @classmethod
    def _from_native(cls, native: _PK) -> PublicKey:
        obj = cls.__new__(cls)
        obj._compressed = native.format(compressed=True)
        obj._uncompressed = native.format(compressed=False)
        return obj

    @classmethod
    def combine(
        cls,
        keys: Iterable[PublicKey],
        context: Optional[Context] = None,
    ) -> PublicKey:
        """Point sum  P₁ + … + Pₙ  (single libsecp256k1 call)."""
        keys = list(keys)
        if not keys:
            raise InvalidKeyValue("cannot combine an empty list of public keys")
        handle = resolve(context).require(Capability.VERIFY)
        try:
            native = _PK.combine_keys([k._native(handle) for k in keys], context=handle)
        except ValueError as exc:
            raise ResultingKeyInvalid(
                "public keys sum to the point at infinity", cause=exc,
            ) from exc
        return cls._from_native(native)

    # serialisation ----------------------------------------------------------
    def serialize(self, compressed: bool = True) -> bytes:
        return self._compressed if compressed else self._uncompressed

    format = serialize

    def to_bytes(self) -> bytes:
        return self._compressed

    @property
    def x(self) -> int:
        return int_from_bytes32(self._uncompressed[1:33])

    @property
    def y(self) -> int:
        return int_from_bytes32(self._uncompressed[33:65])

    def point(self) -> tuple:
        return self.x, self.y

    # tweaks -----------------------------------------------------------------
    def tweak_add(self, tweak: BytesLike, context: Optional[Context] = None) -> PublicKey:
        tweak = _check_tweak(tweak, allow_zero=True)
        handle = resolve(context).require(Capability.VERIFY)
        try:
            native = self._native(handle).add(tweak)
        except ValueError as exc:
            raise ResultingKeyInvalid(
                "additive tweak produced the point at infinity", cause=exc,
            ) from exc
        return PublicKey._from_native(native)

    def tweak_multiply(self, tweak: BytesLike, context: Optional[Context] = None) -> PublicKey:
        tweak = _check_tweak(tweak, allow_zero=False)
        handle = resolve(context).require(Capability.VERIFY)
        try:
            native = self._native(handle).multiply(tweak)
        except ValueError as exc:
            raise ResultingKeyInvalid(
                "multiplicative tweak produced an invalid point", cause=exc,
            ) from exc
        return PublicKey._from_native(native)

    # protocol shortcuts -----------------------------------------------------
    def verify(
        self,
        signature: Signature,
        digest: DigestLike,
        context: Optional[Context] = None,
        enforce_low_s: Optional[bool] = None,
    ) -> bool:
        from .ecdsa import verify
        return verify(signature, digest, self, context, enforce_low_s=enforce_low_s)

    def _native(self, handle) -> _PK:
        return _PK(self._compressed, context=handle)

    # comparison / hashing ---------------------------------------------------
    def __eq__(self, o: object) -> bool:
        if not isinstance(o, PublicKey):
            return NotImplemented
        return self._compressed == o._compressed

    def __hash__(self) -> int:
        return hash(self._compressed)

    def __repr__(self) -> str:
        return f"PublicKey({self._compressed.hex()})"


# ── KeyPair ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class KeyPair:
    """A private key together with its public key  P = k·G."""

    private_key: PrivateKey
    public_key: PublicKey

    @classmethod
    def generate(cls, context: Optional[Context] = None) -> KeyPair:
        return cls.from_private_key(PrivateKey.generate(context), context)

    @classmethod
    def from_private_key(
        cls,
        private_key: PrivateKey,
        context: Optional[Context] = None,
    ) -> KeyPair:
        return cls(private_key, private_key.public_key(context))

    def tweak_add(self, tweak: BytesLike, context: Optional[Context] = None) -> KeyPair:
        return KeyPair(
            self.private_key.tweak_add(tweak, context),
            self.public_key.tweak_add(tweak, context),
        )

    def tweak_multiply(self, tweak: BytesLike, context: Optional[Context] = None) -> KeyPair:
        return KeyPair(
            self.private_key.tweak_multiply(tweak, context),
            self.public_key.tweak_multiply(tweak, context),
        )


# ── helpers ─────────────────────────────────────────────────────────────
def _check_sec1_prefix(data: bytes) -> None:
    n = len(data)
    if n == COMPRESSED_BYTES:
        if data[0] not in (PREFIX_EVEN, PREFIX_ODD):
            raise MalformedEncoding(
                f"compressed public key prefix must be 0x02 or 0x03, got 0x{data[0]:02x}",
                context={"prefix": data[0]},
            )
    elif n == UNCOMPRESSED_BYTES:
        if data[0] != PREFIX_UNCOMPRESSED:
            raise MalformedEncoding(
                f"uncompressed public key prefix must be 0x04, got 0x{data[0]:02x}",
                context={"prefix": data[0]},
            )
    else:
        raise InvalidKeySize.expected(
            "public key", f"{COMPRESSED_BYTES} or {UNCOMPRESSED_BYTES}", n,
        )


def _check_tweak(tweak: BytesLike, allow_zero: bool) -> bytes:
    tweak = bytes(tweak)
    if len(tweak) != SCALAR_BYTES:
        raise InvalidTweak(
            f"tweak must be {SCALAR_BYTES} bytes, got {len(tweak)}",
            context={"expected": SCALAR_BYTES, "actual": len(tweak)},
        )
    if not is_valid_scalar(int_from_bytes32(tweak), allow_zero=allow_zero):
        bound = "0 ≤ t < n" if allow_zero else "0 < t < n"
        raise InvalidTweak(f"tweak must satisfy {bound}")
    return tweak
