#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdtree.hashes` module."

import hashlib
import hmac

import pytest

from hdtree.exceptions import HDTreeValueError
from hdtree.hashes import hash160, hash256, hmac_sha512, ripemd160, sha256


def test_hashes() -> None:

    assert sha256(b"").hex() == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )
    assert ripemd160(b"").hex() == "9c1185a5c5e9fc54612808977ee8f548b2258d31"
    assert hash256(b"") == hashlib.sha256(hashlib.sha256(b"").digest()).digest()
    assert hash160(b"") == ripemd160(sha256(b""))

    # hex-strings are octets, not text
    assert sha256("00") == sha256(b"\x00")
    with pytest.raises(HDTreeValueError, match="invalid hex-string: "):
        sha256("not hex")


def test_hash160() -> None:
    # compressed public key of the secret key 1
    pub_key = "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
    assert hash160(pub_key).hex() == "751e76e8199196d454941c45d1b3a323f1433bd6"


def test_hmac_sha512() -> None:

    seed = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
    expected = hmac.new(b"Bitcoin seed", seed, "sha512").digest()
    assert hmac_sha512(b"Bitcoin seed", seed) == expected
    assert len(expected) == 64
