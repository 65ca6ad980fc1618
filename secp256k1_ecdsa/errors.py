"""
Structured exceptions for the secp256k1 core.

Every failure that reaches a caller is one of the classes below, carrying
a stable integer code so that higher layers (RPC, wallets, tests) can
classify it without string matching.  Exceptions raised by ``coincurve``
are never propagated raw; they are wrapped with ``raise ... from exc``.

All classes derive from ``ValueError`` because malformed input is the
overwhelmingly common cause, and callers that already catch ``ValueError``
around key parsing keep working.

A failed ECDSA verification is *not* an error: ``verify`` returns False.

NOTE: never place key material, nonces or shared secrets in ``context``.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Mapping, Optional


class ErrorCode(IntEnum):
    """Stable error codes."""
    GENERIC                 = 3000
    MALFORMED_ENCODING      = 3001
    INVALID_LENGTH          = 3002
    INVALID_KEY_SIZE        = 3003
    INVALID_RECOVERY_ID     = 3004
    INVALID_KEY_VALUE       = 3010
    POINT_NOT_ON_CURVE      = 3011
    RESULTING_KEY_INVALID   = 3012
    INVALID_TWEAK           = 3013
    CONTEXT                 = 3020
    CONTEXT_CREATION_FAILED = 3021
    RANDOMIZATION_FAILED    = 3022
    CONTEXT_DESTROYED       = 3023
    MISSING_CAPABILITY      = 3024
    SIGNING_FAILED          = 3030
    RECOVERY_FAILED         = 3031
    AGREEMENT_FAILED        = 3032


class Secp256k1Error(ValueError):
    """
    Base class for every error raised by this package.

    Parameters
    ----------
    message : str
        Human-readable description.
    context : Mapping[str, Any] | None
        Optional structured fields (lengths, prefixes, recovery ids…).
    cause : BaseException | None
        Underlying exception; also set via ``raise ... from ...``.
    """

    code: ErrorCode = ErrorCode.GENERIC

    def __init__(
        self,
        message: str,
        *,
        context: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.context: Dict[str, Any] = dict(context) if context else {}
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        tail = f" context={self.context}" if self.context else ""
        return f"[{int(self.code)}] {self.message}{tail}"

    def to_dict(self) -> Dict[str, Any]:
        """Structured view suitable for logs or JSON error payloads."""
        out: Dict[str, Any] = {
            "code": int(self.code),
            "error": type(self).__name__,
            "message": self.message,
        }
        if self.context:
            out["context"] = self.context
        return out


# ── encodings ───────────────────────────────────────────────────────────

class MalformedEncoding(Secp256k1Error):
    """Bytes do not form a valid encoding (bad DER, bad prefix, bad length)."""
    code = ErrorCode.MALFORMED_ENCODING


class InvalidLength(MalformedEncoding):
    """A fixed-size encoding was given the wrong number of bytes."""
    code = ErrorCode.INVALID_LENGTH

    @classmethod
    def expected(cls, what: str, expected: Any, actual: int) -> "InvalidLength":
        return cls(
            f"{what}: expected {expected} bytes, got {actual}",
            context={"expected": expected, "actual": actual},
        )


class InvalidKeySize(InvalidLength):
    """Private or public key bytes of the wrong length."""
    code = ErrorCode.INVALID_KEY_SIZE


class InvalidRecoveryId(MalformedEncoding):
    """Recovery id outside {0, 1, 2, 3}."""
    code = ErrorCode.INVALID_RECOVERY_ID


# ── key values ──────────────────────────────────────────────────────────

class InvalidKeyValue(Secp256k1Error):
    """Scalar outside (0, n) or point that is not a valid public key."""
    code = ErrorCode.INVALID_KEY_VALUE


class PointNotOnCurve(InvalidKeyValue):
    code = ErrorCode.POINT_NOT_ON_CURVE


class ResultingKeyInvalid(InvalidKeyValue):
    """A tweak produced the zero scalar or the point at infinity."""
    code = ErrorCode.RESULTING_KEY_INVALID


class InvalidTweak(Secp256k1Error):
    code = ErrorCode.INVALID_TWEAK


# ── contexts ────────────────────────────────────────────────────────────

class ContextError(Secp256k1Error):
    code = ErrorCode.CONTEXT


class ContextCreationFailed(ContextError):
    """Fatal for the requesting operation; never retried automatically."""
    code = ErrorCode.CONTEXT_CREATION_FAILED


class RandomizationFailed(ContextError):
    """The context stays usable after this error."""
    code = ErrorCode.RANDOMIZATION_FAILED


class ContextDestroyed(ContextError):
    code = ErrorCode.CONTEXT_DESTROYED


class MissingCapability(ContextError):
    """The context was created without a capability the operation needs."""
    code = ErrorCode.MISSING_CAPABILITY


# ── protocols ───────────────────────────────────────────────────────────

class SigningFailed(Secp256k1Error):
    code = ErrorCode.SIGNING_FAILED


class RecoveryFailed(Secp256k1Error):
    code = ErrorCode.RECOVERY_FAILED


class AgreementFailed(Secp256k1Error):
    code = ErrorCode.AGREEMENT_FAILED
