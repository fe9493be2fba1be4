#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdtree.sign` module."

import pytest

from hdtree.bip32 import XPrv, derive_path
from hdtree.exceptions import HDTreeValueError, PrivateKeyRequired
from hdtree.hashes import sha256
from hdtree.sign import ecdsa_sign, ecdsa_verify, ssa_sign, ssa_verify

ROOTXPRV = "xprv9s21ZrQH143K3QTDL4LXw2F7HEK3wJUD2nW2nRk4stbPy6cq3jPPqjiChkVvvNKmPGJxWUtg6LnF5kejMRNNU3TGtRBeJgk33yuGBxrMPHi"


def test_ecdsa() -> None:

    xprv = derive_path(ROOTXPRV, "m/44'/0'/0'/0/0")
    xpub = xprv.neutered()  # type: ignore
    msg_hash = sha256(b"Satoshi Nakamoto")

    sig = ecdsa_sign(xprv, msg_hash)
    # deterministic nonce
    assert sig == ecdsa_sign(xprv, msg_hash)
    # DER encoding
    assert sig[0] == 0x30
    assert len(sig) <= 72

    assert ecdsa_verify(xprv, msg_hash, sig)
    assert ecdsa_verify(xpub, msg_hash, sig)
    assert ecdsa_verify(xpub.b58encode(), msg_hash, sig)
    assert not ecdsa_verify(xpub, sha256(b"Satoshi"), sig)

    other_xkey = derive_path(ROOTXPRV, "m/44'/0'/0'/0/1")
    assert not ecdsa_verify(other_xkey, msg_hash, sig)

    # malformed signature
    assert not ecdsa_verify(xpub, msg_hash, sig[:-1])
    assert not ecdsa_verify(xpub, msg_hash, "not a signature")

    with pytest.raises(PrivateKeyRequired, match="not a private key: "):
        ecdsa_sign(xpub, msg_hash)
    with pytest.raises(HDTreeValueError, match="invalid size: "):
        ecdsa_sign(xprv, msg_hash[:-1])


def test_ecdsa_low_r() -> None:

    xprv = derive_path(ROOTXPRV, "m/44'/0'/0'/0/0")
    xpub = xprv.neutered()  # type: ignore

    high_r_count = 0
    for i in range(32):
        msg_hash = sha256(i.to_bytes(4, byteorder="big"))
        sig = ecdsa_sign(xprv, msg_hash, low_r=True)
        # DER r-value: 0x30 len 0x02 r_len r
        assert sig[2] == 0x02
        assert sig[3] <= 32
        assert sig[4] <= 0x7F
        assert len(sig) <= 71
        assert ecdsa_verify(xpub, msg_hash, sig)
        assert sig == ecdsa_sign(xprv, msg_hash, low_r=True)

        default_sig = ecdsa_sign(xprv, msg_hash)
        if default_sig[3] <= 32:
            # already low-r: no extra entropy needed
            assert sig == default_sig
        else:
            high_r_count += 1
            assert sig != default_sig
    # half of the RFC6979 signatures have a high r
    assert high_r_count > 0

def test_ssa() -> None:

    xprv = derive_path(ROOTXPRV, "m/86'/0'/0'/0/0")
    xpub = xprv.neutered()  # type: ignore
    msg_hash = sha256(b"Satoshi Nakamoto")

    sig = ssa_sign(xprv, msg_hash)
    assert len(sig) == 64
    assert ssa_verify(xprv, msg_hash, sig)
    assert ssa_verify(xpub, msg_hash, sig)
    assert not ssa_verify(xpub, sha256(b"Satoshi"), sig)
    assert not ssa_verify(xpub, msg_hash, sig[:-1])

    aux = b"\x01" * 32
    assert ssa_sign(xprv, msg_hash, aux) == ssa_sign(xprv, msg_hash, aux)

    with pytest.raises(PrivateKeyRequired, match="not a private key: "):
        ssa_sign(xpub, msg_hash)


def test_bip340_vector() -> None:
    "https://github.com/bitcoin/bips/blob/master/bip-0340/test-vectors.csv"

    secret_key = (3).to_bytes(32, byteorder="big")
    xprv = XPrv.from_private_key(secret_key, b"\x00" * 32)
    pub_key = "F9308A019258C31049344F85F89D5229B531C845836F99B08601F113BCE036F9"
    assert xprv.public_key[1:] == bytes.fromhex(pub_key)

    msg_hash = b"\x00" * 32
    aux = b"\x00" * 32
    sig = (
        "E907831F80848D1069A5371B402410364BDF1C5F8307B0084C55F1CE2DCA8215"
        "25F66A4A85EA8B71E482A74F382D2CE5EBEEE8FDB2172F477DF4900D310536C0"
    )
    assert ssa_sign(xprv, msg_hash, aux) == bytes.fromhex(sig)
    assert ssa_verify(xprv.neutered(), msg_hash, sig)
