from concurrent.futures import ThreadPoolExecutor

import pytest

from secp256k1_ecdsa import (
    Capability,
    Context,
    ContextCreationFailed,
    ContextDestroyed,
    Digest,
    KeyPair,
    MissingCapability,
    PrivateKey,
    RandomizationFailed,
    default_context,
    sign,
    verify,
)


def test_create_defaults_to_all_capabilities():
    with Context.create() as ctx:
        assert ctx.can(Capability.SIGN)
        assert ctx.can(Capability.VERIFY)
        assert ctx.can(Capability.ALL)


def test_create_with_seed():
    with Context.create(seed=b"\x11" * 32, name="seeded") as ctx:
        assert not ctx.destroyed
        assert "seeded" in repr(ctx)


def test_create_rejects_bad_seed_length():
    with pytest.raises(ContextCreationFailed):
        Context.create(seed=b"\x11" * 31)


def test_randomize_accepts_seed_and_entropy(ctx):
    ctx.randomize()
    ctx.randomize(b"\x42" * 32)


def test_randomize_failure_leaves_context_usable(ctx, keypair, digest):
    with pytest.raises(RandomizationFailed):
        ctx.randomize(b"short")
    sig = sign(digest, keypair.private_key, ctx)
    assert verify(sig, digest, keypair.public_key, ctx)


def test_verify_only_context_cannot_sign(verify_ctx, keypair, digest):
    with pytest.raises(MissingCapability) as info:
        sign(digest, keypair.private_key, verify_ctx)
    assert info.value.context["required"] == "SIGN"


def test_verify_only_context_cannot_derive_public_key(verify_ctx):
    with pytest.raises(MissingCapability):
        PrivateKey.generate(verify_ctx).public_key(verify_ctx)


def test_sign_only_context_cannot_verify(sign_ctx, keypair, digest):
    sig = sign(digest, keypair.private_key, sign_ctx)
    with pytest.raises(MissingCapability):
        verify(sig, digest, keypair.public_key, sign_ctx)


def test_verify_only_context_verifies(ctx, verify_ctx, keypair, digest):
    sig = sign(digest, keypair.private_key, ctx)
    assert verify(sig, digest, keypair.public_key, verify_ctx)


def test_destroy_is_idempotent_and_final(keypair, digest):
    ctx = Context.create(name="short-lived")
    sig = sign(digest, keypair.private_key, ctx)
    ctx.destroy()
    ctx.destroy()
    assert ctx.destroyed
    with pytest.raises(ContextDestroyed):
        verify(sig, digest, keypair.public_key, ctx)
    with pytest.raises(ContextDestroyed):
        ctx.randomize()


def test_with_block_destroys():
    with Context.create() as ctx:
        pass
    assert ctx.destroyed


def test_keys_outlive_their_context(digest):
    with Context.create() as ctx:
        pair = KeyPair.generate(ctx)
    with Context.create() as other:
        sig = sign(digest, pair.private_key, other)
        assert verify(sig, digest, pair.public_key, other)
    assert len(pair.public_key.serialize()) == 33


def test_default_context_is_shared_and_recreated():
    first = default_context()
    assert default_context() is first
    first.destroy()
    second = default_context()
    assert second is not first
    assert not second.destroyed


def test_concurrent_verification_on_shared_context(ctx, verify_ctx):
    pairs = [KeyPair.generate(ctx) for _ in range(8)]
    digests = [Digest.sha256(bytes([i])) for i in range(8)]
    sigs = [sign(d, p.private_key, ctx) for d, p in zip(digests, pairs)]

    def check(i):
        return verify(sigs[i], digests[i], pairs[i].public_key, verify_ctx)

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(check, list(range(8)) * 4))
    assert all(results)


def test_concurrent_signing_on_shared_context(ctx, keypair, digest):
    def work(_):
        return sign(digest, keypair.private_key, ctx)

    with ThreadPoolExecutor(max_workers=4) as pool:
        sigs = list(pool.map(work, range(16)))
    assert len(set(sigs)) == 1
    assert verify(sigs[0], digest, keypair.public_key, ctx)
