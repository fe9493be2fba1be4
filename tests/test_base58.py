#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdtree.base58` module."

import pytest

from hdtree.base58 import _b58decode, _b58encode, b58decode, b58encode
from hdtree.exceptions import (
    ChecksumMismatch,
    HDTreeValueError,
    InvalidBase58,
    InvalidRecordLength,
)


def test_empty() -> None:
    assert _b58encode(b"") == b""
    assert _b58decode(_b58encode(b"")) == b""

    assert b58decode(b58encode(b""), 0) == b""


def test_hello_world() -> None:
    assert _b58encode(b"hello world") == b"StV1DL6CwTryKyV"
    assert _b58decode(b"StV1DL6CwTryKyV") == b"hello world"

    assert b58decode(b58encode(b"hello world"), 11) == b"hello world"


def test_leading_zeros() -> None:
    assert _b58encode(b"\x00\x00hello world") == b"11StV1DL6CwTryKyV"
    assert _b58decode(b"11StV1DL6CwTryKyV") == b"\x00\x00hello world"

    assert b58decode(b58encode(b"\x00\x00hello world"), 13) == b"\x00\x00hello world"


def test_exceptions() -> None:

    encoded = b58encode(b"hello world")
    b58decode(encoded, 11)

    wrong_length = len(encoded) - 1
    with pytest.raises(InvalidRecordLength, match="invalid decoded size: "):
        b58decode(encoded, wrong_length)

    invalid_checksum = encoded[:-4] + b"1111"
    with pytest.raises(ChecksumMismatch, match="invalid checksum: "):
        b58decode(invalid_checksum, 4)

    for invalid in ("hèllo world", "0OIl", b"+/"):
        with pytest.raises(InvalidBase58, match="invalid characters"):
            b58decode(invalid)

    err_msg = "not enough bytes for checksum, invalid base58 decoded size: "
    with pytest.raises(InvalidRecordLength, match=err_msg):
        b58decode(_b58encode(b"123"))

    with pytest.raises(HDTreeValueError, match="invalid size: "):
        b58encode(b"hello world", 12)


def test_wif() -> None:
    # https://en.bitcoin.it/wiki/Wallet_import_format
    prv = 0xC28FCA386C7A227600B2FE50B7CAE11EC86D3BF1FBE471BE89827E19D72AA1D

    uncompressed_key = b"\x80" + prv.to_bytes(32, byteorder="big", signed=False)
    uncompressed_wif = b"5HueCGU8rMjxEXxiPuD5BDku4MkFqeZyd4dZ1jvhTVqvbTLvyTJ"
    assert b58encode(uncompressed_key) == uncompressed_wif
    assert b58decode(uncompressed_wif) == uncompressed_key

    compressed_key = b"\x80" + prv.to_bytes(32, byteorder="big", signed=False) + b"\x01"
    compressed_wif = "KwdMAjGmerYanjeui5SHS7JkmpZvVipYvB2LJGU1ZxJwYvP98617"
    assert b58encode(compressed_key).decode("ascii") == compressed_wif
    assert b58decode(compressed_wif) == compressed_key
