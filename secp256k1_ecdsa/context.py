"""
libsecp256k1 context lifecycle.

Every curve operation borrows a :class:`Context`.  A context wraps a
``coincurve`` context (the precomputed multiplication tables plus the
blinding state) and adds

- **capabilities** — which families of operations it may be used for.
  A verify-only context handed to the signing engine fails with
  ``MissingCapability`` instead of silently working.
- **randomisation** — ``randomize()`` re-seeds the side-channel blinding.
  It mutates the context and is the one operation requiring a lock.
- **explicit destruction** — ``destroy()`` runs
  ``secp256k1_context_destroy`` immediately (tables zeroed) rather than
  waiting for garbage collection.

Concurrency
-----------
Verification never touches the blinding state, so any number of threads
may verify against one shared context.  Concurrent signers must either
own a context each, or wrap randomise + sign in ``with ctx.signing():``,
which holds the context lock for the pair.
"""

from __future__ import annotations

import logging
import secrets
import threading
from contextlib import contextmanager
from enum import Flag
from typing import Iterator, Optional

from coincurve._libsecp256k1 import ffi
from coincurve.context import Context as _CContext

from .errors import (
    ContextCreationFailed,
    ContextDestroyed,
    MissingCapability,
    RandomizationFailed,
)

log = logging.getLogger(__name__)

SEED_BYTES = 32


class Capability(Flag):
    """Operation families a context may be used for."""

    NONE = 0
    SIGN = 1       # key derivation, private tweaks, signing, ECDH
    VERIFY = 2     # verification, recovery, public tweaks
    ALL = SIGN | VERIFY


class Context:
    """
    Shared, read-mostly handle to libsecp256k1 state.

    Prefer :meth:`create`; the constructor raises the same errors.
    """

    def __init__(
        self,
        capabilities: Capability = Capability.ALL,
        seed: Optional[bytes] = None,
        name: str = "",
    ) -> None:
        self.capabilities = capabilities
        self.name = name
        self._lock = threading.RLock()
        _check_seed(seed, ContextCreationFailed)
        try:
            self._handle: Optional[_CContext] = _CContext(
                seed=seed or secrets.token_bytes(SEED_BYTES), name=name,
            )
        except Exception as exc:
            raise ContextCreationFailed(
                "libsecp256k1 context creation failed",
                context={"name": name},
                cause=exc,
            ) from exc
        log.debug("created context %r capabilities=%s", name, capabilities)

    # factories --------------------------------------------------------------
    @classmethod
    def create(
        cls,
        capabilities: Capability = Capability.ALL,
        seed: Optional[bytes] = None,
        name: str = "",
    ) -> Context:
        return cls(capabilities, seed=seed, name=name)

    @classmethod
    def verify_only(cls, name: str = "") -> Context:
        return cls(Capability.VERIFY, name=name)

    # lifecycle --------------------------------------------------------------
    def randomize(self, seed: Optional[bytes] = None) -> None:
        """
        Refresh the blinding state with *seed* (32 bytes) or fresh entropy.

        On failure the previous blinding stays in effect and the context
        remains usable.
        """
        _check_seed(seed, RandomizationFailed)
        with self._lock:
            handle = self.handle
            try:
                handle.reseed(seed or secrets.token_bytes(SEED_BYTES))
            except Exception as exc:
                raise RandomizationFailed(
                    "libsecp256k1 context randomisation failed",
                    context={"name": self.name},
                    cause=exc,
                ) from exc
        log.debug("randomised context %r", self.name)

    def destroy(self) -> None:
        """Release the native context now.  Idempotent."""
        with self._lock:
            handle, self._handle = self._handle, None
            if handle is None:
                return
            ffi.release(handle.ctx)
        log.debug("destroyed context %r", self.name)

    @property
    def destroyed(self) -> bool:
        return self._handle is None

    @property
    def handle(self) -> _CContext:
        """The underlying ``coincurve`` context."""
        handle = self._handle
        if handle is None:
            raise ContextDestroyed(
                "context has been destroyed", context={"name": self.name},
            )
        return handle

    # capabilities -----------------------------------------------------------
    def can(self, capability: Capability) -> bool:
        return (self.capabilities & capability) == capability

    def require(self, capability: Capability) -> _CContext:
        """Return the native handle if this context permits *capability*."""
        if not self.can(capability):
            raise MissingCapability(
                f"context lacks {capability.name} capability",
                context={
                    "name": self.name,
                    "required": capability.name,
                    "available": str(self.capabilities),
                },
            )
        return self.handle

    @contextmanager
    def signing(self, seed: Optional[bytes] = None, randomize: bool = True) -> Iterator[_CContext]:
        """
        Hold the context lock for a randomise + sign pair.

        Yields the native handle, already checked for ``SIGN``.
        """
        with self._lock:
            handle = self.require(Capability.SIGN)
            if randomize:
                self.randomize(seed)
            yield handle

    # protocol ---------------------------------------------------------------
    def __enter__(self) -> Context:
        return self

    def __exit__(self, *exc) -> None:
        self.destroy()

    def __repr__(self) -> str:
        state = "destroyed" if self.destroyed else "live"
        return f"Context({self.name!r}, {self.capabilities}, {state})"


def _check_seed(seed: Optional[bytes], error: type) -> None:
    if seed is not None and len(seed) != SEED_BYTES:
        raise error(
            f"seed must be {SEED_BYTES} bytes, got {len(seed)}",
            context={"expected": SEED_BYTES, "actual": len(seed)},
        )


# ── process-wide default ────────────────────────────────────────────────
_default_lock = threading.Lock()
_default: Optional[Context] = None


def default_context() -> Context:
    """Lazily created ``Capability.ALL`` context shared by the process."""
    global _default
    with _default_lock:
        if _default is None or _default.destroyed:
            _default = Context(Capability.ALL, name="default")
        return _default


def resolve(context: Optional[Context]) -> Context:
    return default_context() if context is None else context
