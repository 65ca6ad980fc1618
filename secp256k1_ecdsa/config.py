"""
Library-wide policy knobs.

Defaults are safe; each one can be overridden from the environment
(``SECP256K1_*``) or programmatically via :func:`configure`.

    SECP256K1_ENFORCE_LOW_S          1 | 0   (default 1)
    SECP256K1_RANDOMIZE_BEFORE_SIGN  1 | 0   (default 1)
    SECP256K1_SIGN_ATTEMPTS          int ≥ 1 (default 4)
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, replace
from typing import Mapping, Optional

ENV_PREFIX = "SECP256K1_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """
    Policy applied when a call does not pass an explicit value.

    enforce_low_s
        ``verify`` rejects signatures with  s > n/2  (BIP-62 / libsecp256k1
        behaviour).  When False, high-S signatures are normalised first.
    randomize_before_sign
        Refresh the context's blinding before every signing operation.
    sign_attempts
        Number of nonce counters tried before ``SigningFailed``.
    """

    enforce_low_s: bool = True
    randomize_before_sign: bool = True
    sign_attempts: int = 4

    def __post_init__(self) -> None:
        if self.sign_attempts < 1:
            raise ValueError("sign_attempts must be ≥ 1")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            enforce_low_s=_env_bool(env, "ENFORCE_LOW_S", defaults.enforce_low_s),
            randomize_before_sign=_env_bool(
                env, "RANDOMIZE_BEFORE_SIGN", defaults.randomize_before_sign,
            ),
            sign_attempts=_env_int(env, "SIGN_ATTEMPTS", defaults.sign_attempts),
        )


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{ENV_PREFIX}{name}: expected a boolean, got {raw!r}")


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}{name}: expected an integer, got {raw!r}") from exc


# ── process-wide settings ───────────────────────────────────────────────
_lock = threading.Lock()
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    with _lock:
        if _settings is None:
            _settings = Settings.from_env()
        return _settings


def configure(**overrides) -> Settings:
    """Replace individual fields of the active settings and return them."""
    global _settings
    current = get_settings()
    updated = replace(current, **overrides)
    with _lock:
        _settings = updated
    return updated


def reset_settings() -> None:
    """Forget overrides; the next ``get_settings`` re-reads the environment."""
    global _settings
    with _lock:
        _settings = None
