#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Wallet Import Format (WIF) of private keys.

A WIF is the Base58Check encoding of the network prefix (1 byte),
the secret key (32 bytes) and, for compressed public keys,
a trailing 0x01 byte.
"""

from typing import Tuple

from hdtree import base58, ec
from hdtree.alias import String
from hdtree.bip32.bip32 import BIP32Key, XPrv, xkey_from_bip32_key
from hdtree.exceptions import (
    InvalidRecordLength,
    InvalidScalarRange,
    MalformedPrivateKey,
    NoPrivateKeyForWIF,
    UnknownVersionPrefix,
)
from hdtree.versions import key_versions_from_filters


def wif_from_xprv(xprv: BIP32Key) -> str:
    """Return the compressed WIF of an extended private key.

    The WIF prefix is the one of the extended key network.
    """

    xkey = xkey_from_bip32_key(xprv)
    if not isinstance(xkey, XPrv):
        raise NoPrivateKeyForWIF(f"not a private key: {xkey.b58encode()}")

    payload = b"".join([xkey.version.wif, xkey.secret_key, b"\x01"])
    return base58.b58encode(payload).decode("ascii")


def secret_key_from_wif(wif: String) -> Tuple[bytes, bool, str]:
    "Return the (secret key, compressed, network) tuple of a WIF."

    if isinstance(wif, str):
        wif = wif.strip()

    payload = base58.b58decode(wif)

    versions = key_versions_from_filters(wif=payload[:1])
    if not versions:
        raise UnknownVersionPrefix(f"invalid wif prefix: 0x{payload[:1].hex()}")
    network = versions[0].network

    if len(payload) == 34:  # compressed WIF
        compressed = True
        if payload[-1] != 0x01:  # must have a trailing 0x01
            raise MalformedPrivateKey("not a compressed WIF: missing trailing 0x01")
        secret_key = payload[1:-1]
    elif len(payload) == 33:  # uncompressed WIF
        compressed = False
        secret_key = payload[1:]
    else:
        raise InvalidRecordLength(f"wrong WIF size: {len(payload)}")

    if not ec.is_valid_scalar(secret_key):
        err_msg = f"private key 0x{secret_key.hex()} not in 1..n-1"
        raise InvalidScalarRange(err_msg)

    return secret_key, compressed, network
