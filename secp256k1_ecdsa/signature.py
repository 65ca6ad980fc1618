"""
ECDSA signature value types and their wire encodings.

One canonical in-memory form — the integer pair  (r, s)  plus, for
recoverable signatures, the recovery id — and a pair of pure
encode/decode functions per wire format:

============  =======  ==================================================
format        bytes    validation on decode
============  =======  ==================================================
raw           64       length only (r ‖ s)
compact       64       length, then libsecp256k1 ``parse_compact``;
                       r and s must lie in [1, n-1]
DER           8..72    strict DER (see :mod:`.der`)
recoverable   65       length, recovery id ∈ {0, 1, 2, 3}
============  =======  ==================================================

Raw and compact share the same byte layout; they differ only in how much
is checked on the way in.

Malleability
------------
(r, s) and (r, n − s) verify under the same key.  ``normalize()`` returns
the low-S member of the pair; the signing engine only ever produces
low-S signatures.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from coincurve.ecdsa import deserialize_compact, serialize_compact

from .context import Context, resolve
from .curve import (
    RECOVERABLE_BYTES,
    SCALAR_BYTES,
    SIGNATURE_BYTES,
    int_from_bytes32,
    int_to_bytes32,
    is_low_s,
    is_valid_scalar,
    negate_scalar,
)
from .der import decode_der, encode_der
from .errors import InvalidLength, InvalidRecoveryId, MalformedEncoding

if TYPE_CHECKING:
    from .hash import DigestLike
    from .keys import PublicKey

RECOVERY_IDS = (0, 1, 2, 3)
_UINT256 = 1 << (8 * SCALAR_BYTES)


@dataclass(frozen=True)
class Signature:
    """An ECDSA signature  (r, s)  without recovery information."""

    r: int
    s: int

    def __post_init__(self) -> None:
        if not (0 <= self.r < _UINT256 and 0 <= self.s < _UINT256):
            raise MalformedEncoding("signature components must fit in 256 bits")

    # decoders ---------------------------------------------------------------
    @classmethod
    def from_raw(cls, data: bytes) -> Signature:
        if len(data) != SIGNATURE_BYTES:
            raise InvalidLength.expected("raw signature", SIGNATURE_BYTES, len(data))
        return cls(int_from_bytes32(data[:32]), int_from_bytes32(data[32:]))

    @classmethod
    def from_compact(cls, data: bytes, context: Optional[Context] = None) -> Signature:
        if len(data) != SIGNATURE_BYTES:
            raise InvalidLength.expected("compact signature", SIGNATURE_BYTES, len(data))
        sig = cls.from_raw(data)
        return cls.from_raw(_compact_roundtrip(sig, context))

    @classmethod
    def from_der(cls, data: bytes) -> Signature:
        r, s = decode_der(data)
        return cls(r, s)

    # encoders ---------------------------------------------------------------
    def to_raw(self) -> bytes:
        return int_to_bytes32(self.r) + int_to_bytes32(self.s)

    def to_compact(self, context: Optional[Context] = None) -> bytes:
        return _compact_roundtrip(self, context)

    def to_der(self) -> bytes:
        return encode_der(self.r, self.s)

    # malleability -----------------------------------------------------------
    @property
    def is_low_s(self) -> bool:
        return is_low_s(self.s)

    def normalize(self) -> Signature:
        """Low-S counterpart  (r, n − s)  or ``self`` if already low-S."""
        if self.is_low_s:
            return self
        return Signature(self.r, negate_scalar(self.s))

    def in_range(self) -> bool:
        return is_valid_scalar(self.r) and is_valid_scalar(self.s)

    # recovery ---------------------------------------------------------------
    def with_recovery_id(
        self,
        digest: DigestLike,
        public_key: PublicKey,
        context: Optional[Context] = None,
    ) -> RecoverableSignature:
        """
        Attach the recovery id identifying *public_key*.

        The id cannot be derived from (r, s) alone; each candidate is
        recovered and compared against *public_key*.
        """
        from .ecdsa import recovery_id_for
        recid = recovery_id_for(self, digest, public_key, context)
        return RecoverableSignature(self.r, self.s, recid)

    def __repr__(self) -> str:
        return f"Signature(r=0x{self.r:064x}, s=0x{self.s:064x})"


@dataclass(frozen=True)
class RecoverableSignature:
    """``(r, s)`` plus the recovery id  v ∈ {0, 1, 2, 3}.

    Bit 0 of *v* is the parity of R.y; bit 1 is set when R.x ≥ n.
    """

    r: int
    s: int
    recovery_id: int

    def __post_init__(self) -> None:
        if self.recovery_id not in RECOVERY_IDS:
            raise InvalidRecoveryId(
                f"recovery id must be 0..3, got {self.recovery_id}",
                context={"recovery_id": self.recovery_id},
            )
        if not (0 <= self.r < _UINT256 and 0 <= self.s < _UINT256):
            raise MalformedEncoding("signature components must fit in 256 bits")

    @classmethod
    def from_bytes(cls, data: bytes) -> RecoverableSignature:
        """Parse  r (32) ‖ s (32) ‖ v (1)."""
        if len(data) != RECOVERABLE_BYTES:
            raise InvalidLength.expected(
                "recoverable signature", RECOVERABLE_BYTES, len(data),
            )
        return cls(
            int_from_bytes32(data[:32]),
            int_from_bytes32(data[32:64]),
            data[64],
        )

    @classmethod
    def from_signature(cls, signature: Signature, recovery_id: int) -> RecoverableSignature:
        return cls(signature.r, signature.s, recovery_id)

    def to_bytes(self) -> bytes:
        return int_to_bytes32(self.r) + int_to_bytes32(self.s) + bytes([self.recovery_id])

    def to_signature(self) -> Signature:
        """Drop the recovery id."""
        return Signature(self.r, self.s)

    def to_raw(self) -> bytes:
        return self.to_signature().to_raw()

    def to_compact(self, context: Optional[Context] = None) -> bytes:
        return self.to_signature().to_compact(context)

    def to_der(self) -> bytes:
        return self.to_signature().to_der()

    @property
    def is_low_s(self) -> bool:
        return is_low_s(self.s)

    def normalize(self) -> RecoverableSignature:
        """Negating s negates R, which flips the parity bit of *v*."""
        if self.is_low_s:
            return self
        return RecoverableSignature(self.r, negate_scalar(self.s), self.recovery_id ^ 1)


# ── helpers ─────────────────────────────────────────────────────────────
def _compact_roundtrip(sig: Signature, context: Optional[Context]) -> bytes:
    """Parse and re-serialise r ‖ s through libsecp256k1."""
    if not sig.in_range():
        raise MalformedEncoding("compact signature r and s must lie in [1, n-1]")
    handle = resolve(context).handle
    try:
        native = deserialize_compact(sig.to_raw(), handle)
        return bytes(serialize_compact(native, handle))
    except Exception as exc:
        raise MalformedEncoding(
            "libsecp256k1 rejected compact signature", cause=exc,
        ) from exc
