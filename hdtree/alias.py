#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Aliases

mypy aliases, documenting also coding input conventions.
"""

from io import BytesIO
from typing import Union

# Octets are a sequence of eight-bit bytes or a hex-string (not text string)
#
# hex-strings are strings that can be converted to bytes using bytes.fromhex,
# e.g.:
# "000102030405060708090a0b0c0d0e0f"
# "0488ade4"
# "02 cc71eb30d653c0c3163990c47b976f3fb3f37cccdcbedb169a1dfef58bbfbfaf"
#
# use hdtree.utils.bytes_from_octets to convert Octets to bytes
#
# Octets are used for seeds, chain codes, secret and public keys,
# version prefixes, hash-derivation material, message hashes, etc.
Octets = Union[bytes, str]

# bytes or 'ascii' text string (not hex-string)
#
# e.g. Base58Check encoded extended keys or WIFs:
# "KwdMAjGmerYanjeui5SHS7JkmpZvVipYvB2LJGU1ZxJwYvP98617"
# "xprv9s21ZrQH143K3QTDL4LXw2F7HEK3wJUD2nW2nRk4stbPy6cq3jPPqjiChkVvvNKmPGJxWUtg6LnF5kejMRNNU3TGtRBeJgk33yuGBxrMPHi"
#
# leading/trailing blanks should always be stripped
String = Union[bytes, str]

# binary data, usually to be cosumed as byte stream,
# but possibily provided as Octets too
BinaryData = Union[BytesIO, Octets]
