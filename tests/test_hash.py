import hashlib

import pytest

from secp256k1_ecdsa import Digest, InvalidLength


def test_sha256_of_empty():
    assert Digest.sha256(b"").to_bytes().hex() == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


def test_from_hasher():
    d = Digest.from_hasher(b"abc", hashlib.sha3_256)
    assert bytes(d) == hashlib.sha3_256(b"abc").digest()


@pytest.mark.parametrize("size", [0, 31, 33, 64])
def test_rejects_wrong_length(size):
    with pytest.raises(InvalidLength):
        Digest(b"\x00" * size)
    with pytest.raises(InvalidLength):
        Digest.from_hasher(b"abc", hashlib.sha512)


def test_equality_and_hashing():
    a = Digest.sha256(b"x")
    assert a == Digest(hashlib.sha256(b"x").digest())
    assert a == hashlib.sha256(b"x").digest()
    assert len({a, Digest.sha256(b"x")}) == 1
    assert "Digest(" in repr(a)
