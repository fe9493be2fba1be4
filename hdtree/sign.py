#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Message hash signing with extended keys.

ECDSA (DER encoded, RFC6979 deterministic nonce, low-s, optional low-r)
and BIP340 Schnorr signatures, computed by libsecp256k1 (coincurve).

Signing requires a private extended key;
verification works with both private and public extended keys.
"""

import secrets
from typing import Optional

from coincurve import PrivateKey, PublicKey, PublicKeyXOnly
from coincurve._libsecp256k1 import (  # type: ignore # pylint: disable=no-name-in-module
    ffi,
)

from hdtree.alias import Octets
from hdtree.bip32.bip32 import BIP32Key, XPrv, xkey_from_bip32_key
from hdtree.exceptions import PrivateKeyRequired
from hdtree.utils import bytes_from_octets


def _xprv(xkey: BIP32Key) -> XPrv:

    xkey = xkey_from_bip32_key(xkey)
    if not isinstance(xkey, XPrv):
        raise PrivateKeyRequired(f"not a private key: {xkey.b58encode()}")
    return xkey


def _is_low_r(der_sig: bytes) -> bool:
    # 0x30 len 0x02 r_len r: r needs 33 bytes only when its highest bit is set
    return der_sig[3] <= 32


def ecdsa_sign(xkey: BIP32Key, msg_hash: Octets, low_r: bool = False) -> bytes:
    """Return the DER encoded ECDSA signature of a 32 bytes message hash.

    With low_r, the RFC6979 nonce is regenerated with a counter
    as extra entropy until r is below 0x80 << 248,
    saving one byte of signature.
    """

    msg_hash = bytes_from_octets(msg_hash, 32)
    prv_key = PrivateKey(_xprv(xkey).secret_key)
    sig = prv_key.sign(msg_hash, hasher=None)
    counter = 0
    while low_r and not _is_low_r(sig):
        counter += 1
        extra_entropy = bytes([counter & 0xFF]) * 6 + b"\x00" * 26
        ndata = ffi.new("unsigned char[32]", list(extra_entropy))
        # NULL nonce function: default RFC6979 with extra entropy
        sig = prv_key.sign(msg_hash, hasher=None, custom_nonce=(ffi.NULL, ndata))
    return sig


def ecdsa_verify(xkey: BIP32Key, msg_hash: Octets, sig: Octets) -> bool:
    "Verify a DER encoded ECDSA signature of a 32 bytes message hash."

    # all kind of Exceptions are catched because
    # verify must always return a bool
    try:
        msg_hash = bytes_from_octets(msg_hash, 32)
        pub_key = xkey_from_bip32_key(xkey).public_key  # type: ignore
        return PublicKey(pub_key).verify(bytes_from_octets(sig), msg_hash, hasher=None)
    except Exception:  # pylint: disable=broad-except
        return False


def ssa_sign(xkey: BIP32Key, msg_hash: Octets, aux: Optional[Octets] = None) -> bytes:
    """Return the 64 bytes BIP340 signature of a 32 bytes message hash.

    If not provided, the 32 bytes auxiliary randomness is random.
    """

    msg_hash = bytes_from_octets(msg_hash, 32)
    aux = secrets.token_bytes(32) if aux is None else bytes_from_octets(aux, 32)
    prv_key = PrivateKey(_xprv(xkey).secret_key)
    return prv_key.sign_schnorr(msg_hash, aux)


def ssa_verify(xkey: BIP32Key, msg_hash: Octets, sig: Octets) -> bool:
    "Verify a BIP340 signature with the x-only public key of xkey."

    # all kind of Exceptions are catched because
    # verify must always return a bool
    try:
        msg_hash = bytes_from_octets(msg_hash, 32)
        pub_key = xkey_from_bip32_key(xkey).public_key  # type: ignore
        x_only = PublicKeyXOnly(pub_key[1:])
        return x_only.verify(bytes_from_octets(sig, 64), msg_hash)
    except Exception:  # pylint: disable=broad-except
        return False
