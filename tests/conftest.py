"""
Shared pytest fixtures:
- live contexts (full and verify-only), destroyed after each test
- a fixed key pair and a freshly generated one
- a digest
- settings isolated from the caller's SECP256K1_* environment
"""
from __future__ import annotations

import pytest

from secp256k1_ecdsa import (
    Capability,
    Context,
    Digest,
    KeyPair,
    PrivateKey,
    reset_settings,
)

FIXED_SECRET = bytes.fromhex(
    "c28a9f80738f770d527803a566cf6fc3edf6cea586c4fc4a5223a5ad797e1ac3"
)
ENV_VARS = (
    "SECP256K1_ENFORCE_LOW_S",
    "SECP256K1_RANDOMIZE_BEFORE_SIGN",
    "SECP256K1_SIGN_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def ctx():
    with Context.create(Capability.ALL, name="test") as c:
        yield c


@pytest.fixture
def verify_ctx():
    with Context.create(Capability.VERIFY, name="test-verify") as c:
        yield c


@pytest.fixture
def sign_ctx():
    with Context.create(Capability.SIGN, name="test-sign") as c:
        yield c


@pytest.fixture
def keypair(ctx) -> KeyPair:
    return KeyPair.from_private_key(PrivateKey(FIXED_SECRET), ctx)


@pytest.fixture
def other_keypair(ctx) -> KeyPair:
    return KeyPair.generate(ctx)


@pytest.fixture
def digest() -> Digest:
    return Digest.sha256(b"secp256k1-ecdsa test message")
