"""
secp256k1 domain parameters and scalar helpers.

All group arithmetic is delegated to ``coincurve`` (Bitcoin Core's
libsecp256k1).  This module only carries the constants the rest of the
package needs to validate byte encodings *before* handing them to the C
library, plus a handful of integer helpers for the signature model.

References
----------
- SEC 2 v2 §2.4.1  secp256k1 domain parameters
- SEC 1 v2 §2.3    point and octet-string conversions
"""

from __future__ import annotations

# ── secp256k1 constants ─────────────────────────────────────────────────
ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
HALF_ORDER = ORDER // 2
FIELD_PRIME = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
GX = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
GY = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8

# ── byte sizes ──────────────────────────────────────────────────────────
SCALAR_BYTES = 32
COMPRESSED_BYTES = 33
UNCOMPRESSED_BYTES = 65
SIGNATURE_BYTES = 64
RECOVERABLE_BYTES = 65
MAX_DER_BYTES = 72          # 0x30 len (0x02 33 r) (0x02 33 s)
MIN_DER_BYTES = 8

# ── SEC 1 prefixes ──────────────────────────────────────────────────────
PREFIX_EVEN = 0x02
PREFIX_ODD = 0x03
PREFIX_UNCOMPRESSED = 0x04

GENERATOR_COMPRESSED = bytes([PREFIX_EVEN]) + GX.to_bytes(SCALAR_BYTES, "big")
GENERATOR_UNCOMPRESSED = (
    bytes([PREFIX_UNCOMPRESSED])
    + GX.to_bytes(SCALAR_BYTES, "big")
    + GY.to_bytes(SCALAR_BYTES, "big")
)


# ── integer helpers ─────────────────────────────────────────────────────
def int_from_bytes32(data: bytes) -> int:
    return int.from_bytes(data, "big")


def int_to_bytes32(value: int) -> bytes:
    return value.to_bytes(SCALAR_BYTES, "big")


def is_valid_scalar(value: int, allow_zero: bool = False) -> bool:
    """True for  0 < value < ORDER  (or  0 ≤ value  with *allow_zero*)."""
    lower = 0 if allow_zero else 1
    return lower <= value < ORDER


def is_low_s(s: int) -> bool:
    """BIP-62 / libsecp256k1 low-S rule:  s ≤ ⌊n/2⌋."""
    return s <= HALF_ORDER


def negate_scalar(value: int) -> int:
    """n − value  in Z_n."""
    return (-value) % ORDER
