"""
Elliptic-curve Diffie-Hellman over secp256k1.

    S = k_A · P_B = k_B · P_A

The raw shared point is never returned.  By default the secret is
libsecp256k1's ECDH output, SHA-256 over the compressed encoding of  S
(0x02/0x03 ‖ x).  A protocol that needs its own key-derivation step
passes ``hasher``, which receives those same 33 bytes.
"""

from __future__ import annotations

from typing import Callable, Optional

from .context import Capability, Context, resolve
from .errors import AgreementFailed
from .keys import PrivateKey, PublicKey

Hasher = Callable[[bytes], bytes]


def agree(
    private_key: PrivateKey,
    public_key: PublicKey,
    context: Optional[Context] = None,
    hasher: Optional[Hasher] = None,
) -> bytes:
    """Derive the shared secret between *private_key* and a peer's key."""
    handle = resolve(context).require(Capability.SIGN)

    if hasher is None:
        try:
            return bytes(private_key._native(handle).ecdh(public_key.serialize()))
        except ValueError as exc:
            raise AgreementFailed("libsecp256k1 ECDH failed", cause=exc) from exc

    try:
        shared = public_key._native(handle).multiply(private_key._reveal())
    except ValueError as exc:
        raise AgreementFailed(
            "shared point is not a valid public key", cause=exc,
        ) from exc
    return bytes(hasher(shared.format(compressed=True)))
