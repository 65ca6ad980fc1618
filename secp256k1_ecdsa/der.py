"""
Strict DER codec for ECDSA signatures.

    Ecdsa-Sig-Value ::= SEQUENCE { r INTEGER, s INTEGER }

Encoding is canonical: each INTEGER is the minimal big-endian two's
complement form of a non-negative value (a single 0x00 is prepended only
when the top bit of the magnitude is set).  A signature never exceeds
72 bytes, so every length fits the short form.

Decoding accepts exactly that canonical form and nothing else: wrong
tags, long-form or inconsistent lengths, negative or zero-padded
INTEGERs, values wider than 256 bits, and trailing bytes are all
``MalformedEncoding``.  Hence  ``encode_der(*decode_der(x)) == x``  for
every input that decodes.

References
----------
- ITU-T X.690 §8.3, §10.1   INTEGER encoding, DER length rules
- BIP-66                    strict DER signatures
"""

from __future__ import annotations

from typing import Tuple

from .curve import MAX_DER_BYTES, MIN_DER_BYTES, SCALAR_BYTES
from .errors import MalformedEncoding

TAG_SEQUENCE = 0x30
TAG_INTEGER = 0x02


# ── encode ──────────────────────────────────────────────────────────────
def _encode_integer(value: int) -> bytes:
    if value < 0 or value.bit_length() > 8 * SCALAR_BYTES:
        raise MalformedEncoding("DER INTEGER out of range for a 256-bit scalar")
    body = value.to_bytes(SCALAR_BYTES, "big").lstrip(b"\x00") or b"\x00"
    if body[0] & 0x80:
        body = b"\x00" + body
    return bytes([TAG_INTEGER, len(body)]) + body


def encode_der(r: int, s: int) -> bytes:
    content = _encode_integer(r) + _encode_integer(s)
    return bytes([TAG_SEQUENCE, len(content)]) + content


# ── decode ──────────────────────────────────────────────────────────────
def _decode_integer(data: bytes, offset: int) -> Tuple[int, int]:
    """Parse one INTEGER at *offset*; return (value, next offset)."""
    if offset + 2 > len(data):
        raise MalformedEncoding("truncated DER INTEGER header")
    if data[offset] != TAG_INTEGER:
        raise MalformedEncoding(
            f"expected INTEGER tag 0x02, got 0x{data[offset]:02x}",
            context={"offset": offset},
        )
    length = data[offset + 1]
    if length == 0:
        raise MalformedEncoding("empty DER INTEGER", context={"offset": offset})
    if length & 0x80:
        raise MalformedEncoding("long-form length in DER INTEGER", context={"offset": offset})
    start = offset + 2
    end = start + length
    if end > len(data):
        raise MalformedEncoding("DER INTEGER overruns signature", context={"offset": offset})
    body = data[start:end]
    if body[0] & 0x80:
        raise MalformedEncoding("negative DER INTEGER", context={"offset": offset})
    if length > 1 and body[0] == 0x00 and not body[1] & 0x80:
        raise MalformedEncoding("non-minimal DER INTEGER padding", context={"offset": offset})
    if length > SCALAR_BYTES + 1 or (length == SCALAR_BYTES + 1 and body[0] != 0x00):
        raise MalformedEncoding("DER INTEGER wider than 256 bits", context={"offset": offset})
    return int.from_bytes(body, "big"), end


def decode_der(data: bytes) -> Tuple[int, int]:
    """Parse a strict-DER signature into  (r, s)."""
    data = bytes(data)
    n = len(data)
    if not MIN_DER_BYTES <= n <= MAX_DER_BYTES:
        raise MalformedEncoding(
            f"DER signature must be {MIN_DER_BYTES}..{MAX_DER_BYTES} bytes, got {n}",
            context={"actual": n},
        )
    if data[0] != TAG_SEQUENCE:
        raise MalformedEncoding(f"expected SEQUENCE tag 0x30, got 0x{data[0]:02x}")
    if data[1] & 0x80:
        raise MalformedEncoding("long-form length in DER SEQUENCE")
    if data[1] != n - 2:
        raise MalformedEncoding(
            "DER SEQUENCE length does not match signature length",
            context={"declared": data[1], "actual": n - 2},
        )
    r, offset = _decode_integer(data, 2)
    s, offset = _decode_integer(data, offset)
    if offset != n:
        raise MalformedEncoding("trailing bytes inside DER SEQUENCE")
    return r, s
