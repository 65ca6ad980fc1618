import hashlib

import coincurve
import pytest

from secp256k1_ecdsa import (
    ORDER,
    Context,
    Digest,
    InvalidLength,
    KeyPair,
    PrivateKey,
    Signature,
    SigningFailed,
    configure,
    sign,
    verify,
)


def test_sign_verify_many(ctx):
    for i in range(10):
        pair = KeyPair.generate(ctx)
        d = Digest.sha256(b"message %d" % i)
        sig = sign(d, pair.private_key, ctx)
        assert verify(sig, d, pair.public_key, ctx)


def test_shortcuts(ctx, keypair, digest):
    sig = keypair.private_key.sign(digest, ctx)
    assert keypair.public_key.verify(sig, digest, ctx)
    rsig = keypair.private_key.sign_recoverable(digest, ctx)
    assert keypair.public_key.verify(rsig, digest, ctx)


def test_accepts_raw_digest_bytes(ctx, keypair, digest):
    sig = sign(digest.to_bytes(), keypair.private_key, ctx)
    assert verify(sig, bytearray(digest.to_bytes()), keypair.public_key, ctx)


def test_signing_sha256_of_empty_is_deterministic(ctx, keypair):
    empty = Digest(hashlib.sha256(b"").digest())
    first = sign(empty, keypair.private_key, ctx)
    second = sign(empty, keypair.private_key, ctx)
    assert first == second
    with Context.create(seed=b"\x07" * 32) as other:
        assert sign(empty, keypair.private_key, other) == first


def test_matches_libsecp256k1(ctx, keypair, digest):
    sig = sign(digest, keypair.private_key, ctx)
    reference = coincurve.PrivateKey(keypair.private_key.to_bytes()).sign(
        digest.to_bytes(), hasher=None,
    )
    assert sig == Signature.from_der(reference)


def test_signatures_are_always_low_s(ctx, keypair):
    for i in range(64):
        sig = sign(Digest.sha256(bytes([i])), keypair.private_key, ctx)
        assert sig.is_low_s


def test_aux_rand_hardens_but_still_verifies(ctx, keypair, digest):
    plain = sign(digest, keypair.private_key, ctx)
    hedged = sign(digest, keypair.private_key, ctx, aux_rand=b"\x01" * 32)
    assert hedged != plain
    assert hedged == sign(digest, keypair.private_key, ctx, aux_rand=b"\x01" * 32)
    assert verify(hedged, digest, keypair.public_key, ctx)


def test_aux_rand_must_be_32_bytes(ctx, keypair, digest):
    with pytest.raises(InvalidLength):
        sign(digest, keypair.private_key, ctx, aux_rand=b"\x01" * 16)


def test_digest_must_be_32_bytes(ctx, keypair, digest):
    sig = sign(digest, keypair.private_key, ctx)
    with pytest.raises(InvalidLength):
        sign(b"\x00" * 31, keypair.private_key, ctx)
    with pytest.raises(InvalidLength):
        verify(sig, b"\x00" * 33, keypair.public_key, ctx)


# ── negative verification ───────────────────────────────────────────────

def test_flipping_any_signature_bit_fails(ctx, keypair, digest):
    raw = bytearray(sign(digest, keypair.private_key, ctx).to_raw())
    for bit in range(len(raw) * 8):
        mutated = bytearray(raw)
        mutated[bit // 8] ^= 1 << (bit % 8)
        sig = Signature.from_raw(bytes(mutated))
        assert not verify(sig, digest, keypair.public_key, ctx), bit


def test_flipping_any_digest_bit_fails(ctx, keypair, digest):
    sig = sign(digest, keypair.private_key, ctx)
    raw = digest.to_bytes()
    for bit in range(256):
        mutated = bytearray(raw)
        mutated[bit // 8] ^= 1 << (bit % 8)
        assert not verify(sig, bytes(mutated), keypair.public_key, ctx), bit


def test_wrong_key_fails(ctx, keypair, other_keypair, digest):
    sig = sign(digest, keypair.private_key, ctx)
    assert not verify(sig, digest, other_keypair.public_key, ctx)


@pytest.mark.parametrize("r, s", [(0, 1), (1, 0), (ORDER, 1), (1, ORDER)])
def test_out_of_range_components_return_false(ctx, keypair, digest, r, s):
    assert verify(Signature(r, s), digest, keypair.public_key, ctx) is False


# ── low-S policy ────────────────────────────────────────────────────────

def test_high_s_rejected_by_default(ctx, keypair, digest):
    sig = sign(digest, keypair.private_key, ctx)
    high = Signature(sig.r, ORDER - sig.s)
    assert not verify(high, digest, keypair.public_key, ctx)
    assert not verify(high, digest, keypair.public_key, ctx, enforce_low_s=True)


def test_high_s_accepted_when_not_enforced(ctx, keypair, digest):
    sig = sign(digest, keypair.private_key, ctx)
    high = Signature(sig.r, ORDER - sig.s)
    assert verify(high, digest, keypair.public_key, ctx, enforce_low_s=False)
    assert verify(high.normalize(), digest, keypair.public_key, ctx)


def test_low_s_default_comes_from_settings(ctx, keypair, digest):
    sig = sign(digest, keypair.private_key, ctx)
    high = Signature(sig.r, ORDER - sig.s)
    configure(enforce_low_s=False)
    assert verify(high, digest, keypair.public_key, ctx)
    assert not verify(high, digest, keypair.public_key, ctx, enforce_low_s=True)


# ── retries ─────────────────────────────────────────────────────────────

def test_signing_retries_with_next_counter(ctx, keypair, digest, monkeypatch):
    original = coincurve.PrivateKey.sign
    calls = []

    def flaky(self, message, hasher=None, custom_nonce=None):
        calls.append(custom_nonce)
        if len(calls) == 1:
            raise ValueError("nonce generation failed")
        return original(self, message, hasher=hasher, custom_nonce=custom_nonce)

    monkeypatch.setattr(coincurve.PrivateKey, "sign", flaky)
    sig = sign(digest, keypair.private_key, ctx)
    assert len(calls) == 2
    assert verify(sig, digest, keypair.public_key, ctx)


def test_signing_fails_after_exhausting_attempts(ctx, keypair, digest, monkeypatch):
    calls = []

    def broken(self, message, hasher=None, custom_nonce=None):
        calls.append(1)
        raise ValueError("nonce generation failed")

    configure(sign_attempts=3)
    monkeypatch.setattr(coincurve.PrivateKey, "sign", broken)
    with pytest.raises(SigningFailed) as info:
        sign(digest, keypair.private_key, ctx)
    assert len(calls) == 3
    assert info.value.context == {"attempts": 3}
    assert isinstance(info.value.__cause__, ValueError)

    monkeypatch.undo()
    assert verify(sign(digest, keypair.private_key, ctx), digest, keypair.public_key, ctx)


def test_signing_without_randomization(ctx, keypair, digest):
    configure(randomize_before_sign=False)
    sig = sign(digest, keypair.private_key, ctx)
    assert sig == sign(digest, PrivateKey(keypair.private_key.to_bytes()), ctx)
