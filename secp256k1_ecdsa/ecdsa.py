"""
ECDSA signing, verification and public-key recovery over secp256k1.

**Signing** uses libsecp256k1's RFC 6979 nonce function: the nonce is a
deterministic function of the private key and the digest, so signing the
same digest twice yields the same signature.  Optional ``aux_rand`` is fed
to the nonce function as extra data; it hardens against fault and
side-channel attacks but is never the sole source of the nonce.
Signatures are always low-S.

**Verification** is a pure predicate.  It returns False for any signature
that does not verify (including out-of-range r or s); only malformed
*inputs* — a digest of the wrong length, an unusable context — raise.

    u₁ = z·s⁻¹,  u₂ = r·s⁻¹,  accept iff  x(u₁·G + u₂·P) ≡ r  (mod n)

**Recovery** recomputes  P = r⁻¹·(s·R − z·G)  from the candidate point R
selected by the recovery id, then checks the signature against P.

References
----------
- SEC 1 v2 §4.1      ECDSA
- RFC 6979           deterministic nonces
- BIP-62 / BIP-146   low-S normalisation
"""

from __future__ import annotations

import hashlib
import logging
from typing import Optional, Union

from coincurve import PublicKey as _PK
from coincurve._libsecp256k1 import ffi

from .config import get_settings
from .context import Capability, Context, resolve
from .curve import SCALAR_BYTES
from .errors import InvalidLength, RecoveryFailed, SigningFailed
from .hash import DigestLike, as_digest
from .keys import PrivateKey, PublicKey
from .signature import RECOVERY_IDS, RecoverableSignature, Signature

log = logging.getLogger(__name__)

_RETRY_TAG = b"secp256k1_ecdsa/nonce-retry"

AnySignature = Union[Signature, RecoverableSignature]


# ── signing ─────────────────────────────────────────────────────────────
def sign(
    digest: DigestLike,
    private_key: PrivateKey,
    context: Optional[Context] = None,
    aux_rand: Optional[bytes] = None,
) -> Signature:
    """Sign a 32-byte digest; returns a low-S ``Signature``."""
    der = _sign(digest, private_key, context, aux_rand, recoverable=False)
    return Signature.from_der(der)


def sign_recoverable(
    digest: DigestLike,
    private_key: PrivateKey,
    context: Optional[Context] = None,
    aux_rand: Optional[bytes] = None,
) -> RecoverableSignature:
    """Sign a 32-byte digest; the result also identifies the public key."""
    data = _sign(digest, private_key, context, aux_rand, recoverable=True)
    return RecoverableSignature.from_bytes(data)


def _sign(
    digest: DigestLike,
    private_key: PrivateKey,
    context: Optional[Context],
    aux_rand: Optional[bytes],
    recoverable: bool,
) -> bytes:
    msg = as_digest(digest).to_bytes()
    if aux_rand is not None and len(aux_rand) != SCALAR_BYTES:
        raise InvalidLength.expected("auxiliary randomness", SCALAR_BYTES, len(aux_rand))

    settings = get_settings()
    ctx = resolve(context)
    last_exc: Optional[Exception] = None

    with ctx.signing(randomize=settings.randomize_before_sign) as handle:
        native = private_key._native(handle)
        for counter in range(settings.sign_attempts):
            nonce = _custom_nonce(aux_rand, counter)
            try:
                if recoverable:
                    return native.sign_recoverable(msg, hasher=None, custom_nonce=nonce)
                return native.sign(msg, hasher=None, custom_nonce=nonce)
            except ValueError as exc:
                last_exc = exc
                log.debug("signing attempt %d failed, advancing nonce counter", counter)

    raise SigningFailed(
        f"no valid signature after {settings.sign_attempts} nonce attempts",
        context={"attempts": settings.sign_attempts},
        cause=last_exc,
    ) from last_exc


def _custom_nonce(aux_rand: Optional[bytes], counter: int) -> tuple:
    """(nonce function, extra data) for ``coincurve``; NULL = RFC 6979."""
    if counter == 0:
        extra = aux_rand
    else:
        h = hashlib.sha256(_RETRY_TAG)
        h.update(aux_rand or b"")
        h.update(counter.to_bytes(4, "big"))
        extra = h.digest()
    if extra is None:
        return (ffi.NULL, ffi.NULL)
    return (ffi.NULL, ffi.new("unsigned char [32]", extra))


# ── verification ────────────────────────────────────────────────────────
def verify(
    signature: AnySignature,
    digest: DigestLike,
    public_key: PublicKey,
    context: Optional[Context] = None,
    enforce_low_s: Optional[bool] = None,
) -> bool:
    """
    Check *signature* over *digest* against *public_key*.

    Parameters
    ----------
    enforce_low_s : bool | None
        True rejects  s > n/2  (libsecp256k1 / Bitcoin policy); False
        accepts both members of a malleable pair by normalising first.
        None uses ``Settings.enforce_low_s``.
    """
    msg = as_digest(digest).to_bytes()
    handle = resolve(context).require(Capability.VERIFY)
    if isinstance(signature, RecoverableSignature):
        signature = signature.to_signature()

    if not signature.in_range():
        return False
    if enforce_low_s is None:
        enforce_low_s = get_settings().enforce_low_s
    if not signature.is_low_s:
        if enforce_low_s:
            return False
        signature = signature.normalize()

    return bool(public_key._native(handle).verify(signature.to_der(), msg, hasher=None))


# ── recovery ────────────────────────────────────────────────────────────
def recover(
    signature: RecoverableSignature,
    digest: DigestLike,
    context: Optional[Context] = None,
) -> PublicKey:
    """
    Recover the signer's public key.

    The recovery id is validated when the ``RecoverableSignature`` is
    built (``InvalidRecoveryId``).  Raises ``RecoveryFailed`` when no
    point exists for (r, v) or the recovered key does not verify.
    """
    msg = as_digest(digest).to_bytes()
    ctx = resolve(context)
    handle = ctx.require(Capability.VERIFY)
    plain = signature.to_signature()
    if not plain.in_range():
        raise RecoveryFailed("signature r and s must lie in [1, n-1]")

    try:
        native = _PK.from_signature_and_message(
            signature.to_bytes(), msg, hasher=None, context=handle,
        )
    except Exception as exc:
        raise RecoveryFailed(
            "libsecp256k1 could not recover a public key",
            context={"recovery_id": signature.recovery_id},
            cause=exc,
        ) from exc

    key = PublicKey._from_native(native)
    if not verify(plain, msg, key, ctx, enforce_low_s=False):
        raise RecoveryFailed(
            "recovered public key does not verify the signature",
            context={"recovery_id": signature.recovery_id},
        )
    return key


def recovery_id_for(
    signature: Signature,
    digest: DigestLike,
    public_key: PublicKey,
    context: Optional[Context] = None,
) -> int:
    """Find the recovery id under which *signature* recovers *public_key*."""
    ctx = resolve(context)
    for recid in RECOVERY_IDS:
        candidate = RecoverableSignature(signature.r, signature.s, recid)
        try:
            recovered = recover(candidate, digest, ctx)
        except RecoveryFailed:
            continue
        if recovered == public_key:
            log.debug("recovery id %d matches public key", recid)
            return recid
    raise RecoveryFailed("no recovery id reproduces the given public key")
