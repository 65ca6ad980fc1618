"""
secp256k1-ecdsa: ECDSA signatures and ECDH key agreement on secp256k1.

Safe value types for private keys, public keys, digests and signatures
on top of ``coincurve`` (Bitcoin Core's libsecp256k1), with lossless
conversion between the signature encodings found in the wild:

- **raw / compact** — 64 bytes,  r ‖ s
- **DER** — strict ASN.1  SEQUENCE { INTEGER r, INTEGER s }
- **recoverable** — 65 bytes,  r ‖ s ‖ v

Quick start
-----------
::

    from secp256k1_ecdsa import Context, Digest, KeyPair, Signature, sign, verify

    ctx = Context.create()
    pair = KeyPair.generate(ctx)

    digest = Digest.sha256(b"transfer 1 BTC to Alice")
    sig = sign(digest, pair.private_key, ctx)
    assert verify(sig, digest, pair.public_key, ctx)

    der = sig.to_der()
    assert Signature.from_der(der) == sig
"""

__version__ = "0.1.0"

# ── contexts & configuration ────────────────────────────────────────────
from .context import Capability, Context, default_context
from .config import Settings, configure, get_settings, reset_settings

# ── data model ──────────────────────────────────────────────────────────
from .curve import ORDER, HALF_ORDER, FIELD_PRIME
from .hash import Digest
from .keys import PrivateKey, PublicKey, KeyPair
from .secret import SecretBytes, scoped_secret
from .signature import Signature, RecoverableSignature

# ── protocols ───────────────────────────────────────────────────────────
from .ecdsa import sign, sign_recoverable, verify, recover, recovery_id_for
from .ecdh import agree

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    ErrorCode,
    Secp256k1Error,
    MalformedEncoding,
    InvalidLength,
    InvalidKeySize,
    InvalidRecoveryId,
    InvalidKeyValue,
    PointNotOnCurve,
    ResultingKeyInvalid,
    InvalidTweak,
    ContextError,
    ContextCreationFailed,
    RandomizationFailed,
    ContextDestroyed,
    MissingCapability,
    SigningFailed,
    RecoveryFailed,
    AgreementFailed,
)

__all__ = [
    # version
    "__version__",
    # contexts & configuration
    "Capability", "Context", "default_context",
    "Settings", "configure", "get_settings", "reset_settings",
    # data model
    "ORDER", "HALF_ORDER", "FIELD_PRIME",
    "Digest", "PrivateKey", "PublicKey", "KeyPair",
    "SecretBytes", "scoped_secret",
    "Signature", "RecoverableSignature",
    # protocols
    "sign", "sign_recoverable", "verify", "recover", "recovery_id_for",
    "agree",
    # errors
    "ErrorCode", "Secp256k1Error", "MalformedEncoding", "InvalidLength",
    "InvalidKeySize", "InvalidRecoveryId", "InvalidKeyValue",
    "PointNotOnCurve", "ResultingKeyInvalid", "InvalidTweak",
    "ContextError", "ContextCreationFailed", "RandomizationFailed",
    "ContextDestroyed", "MissingCapability", "SigningFailed",
    "RecoveryFailed", "AgreementFailed",
]
