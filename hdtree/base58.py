#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Base58Check encoding and decoding functions.

Base58 omits the similar-looking letters
0 (zero), O (capital o), I (capital i), and l (lower case L)
to avoid ambiguity when printed; moreover, it removes '+' and '/'
so that a double-click does select the whole string.

Base58Check is the checksummed version of Base58, using
hash256(v)[:4] as checksum suffix before encoding;
at the decoding stage the checksum validity ensure data integrity.

The interface mimics the native python3 base64 interface, i.e.
it supports encoding bytes-like objects to ASCII bytes,
and decoding ASCII bytes-like objects or ASCII strings to bytes.
"""

from typing import Optional

from hdtree.alias import Octets, String
from hdtree.exceptions import ChecksumMismatch, InvalidBase58, InvalidRecordLength
from hdtree.hashes import hash256
from hdtree.utils import bytes_from_octets

_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE = len(_ALPHABET)


def _b58encode(v: bytes) -> bytes:

    # leading-0s become base58 leading-1s
    n_pad = len(v)
    v = v.lstrip(b"\0")
    n_pad -= len(v)

    i = int.from_bytes(v, byteorder="big", signed=False)
    result = b""
    while i:
        i, idx = divmod(i, _BASE)
        result = _ALPHABET[idx : idx + 1] + result

    return _ALPHABET[:1] * n_pad + result


def _b58decode(v: bytes) -> bytes:

    if any(x not in _ALPHABET for x in v):
        raise InvalidBase58("Base58 string contains invalid characters")

    # base58 leading-1s become leading-0s
    n_pad = len(v)
    v = v.lstrip(_ALPHABET[:1])
    n_pad -= len(v)

    i = 0
    for char in v:
        i = i * _BASE + _ALPHABET.index(char)
    nbytes = (i.bit_length() + 7) // 8
    return b"\0" * n_pad + i.to_bytes(nbytes, byteorder="big", signed=False)


def checksum(v: bytes) -> bytes:
    "Return the 4 bytes double-SHA256 checksum of v."
    return hash256(v)[:4]


def b58encode(v: Octets, in_size: Optional[int] = None) -> bytes:
    """Encode a bytes-like object using Base58Check."""

    v = bytes_from_octets(v, in_size)
    return _b58encode(v + checksum(v))


def b58decode(v: String, out_size: Optional[int] = None) -> bytes:
    """Decode a Base58Check encoded bytes-like object or ASCII string.

    Optionally, it also ensures required output size.
    """

    if isinstance(v, str):
        # do not trim spaces
        try:
            v = v.encode("ascii")
        except UnicodeEncodeError as e:
            raise InvalidBase58("Base58 string contains invalid characters") from e

    result = _b58decode(v)
    if len(result) < 4:
        err_msg = "not enough bytes for checksum, "
        err_msg += f"invalid base58 decoded size: {len(result)}"
        raise InvalidRecordLength(err_msg)

    result, checksum_ = result[:-4], result[-4:]
    expected = checksum(result)
    if checksum_ != expected:
        err_msg = f"invalid checksum: 0x{checksum_.hex()} instead of 0x{expected.hex()}"
        raise ChecksumMismatch(err_msg)

    if out_size is None or len(result) == out_size:
        return result

    err_msg = "valid checksum, invalid decoded size: "
    err_msg += f"{len(result)} bytes instead of {out_size}"
    raise InvalidRecordLength(err_msg)
