#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Variable-length byte strings, as appended to labelled extended keys.

The length is a Bitcoin var_int: up to 0xfc it is just 1 byte;
otherwise a 1 byte prefix announces the size of the little-endian length:

* prefix 0xfd markes the next two bytes as the length;
* prefix 0xfe markes the next four bytes as the length;
* prefix 0xff markes the next eight bytes as the length.
"""

from hdtree.alias import BinaryData, Octets
from hdtree.exceptions import HDTreeValueError, InvalidRecordLength
from hdtree.utils import bytes_from_octets, bytesio_from_binarydata

_PREFIX_SIZES = {0xFD: 2, 0xFE: 4, 0xFF: 8}


def parse_var_int(stream: BinaryData) -> int:
    """Return the variable-length integer read from a stream."""

    stream = bytesio_from_binarydata(stream)

    prefix = stream.read(1)
    if not prefix:
        raise InvalidRecordLength("missing var_int")
    i = prefix[0]
    if i < 0xFD:
        return i

    size = _PREFIX_SIZES[i]
    data = stream.read(size)
    if len(data) != size:
        raise InvalidRecordLength(f"truncated var_int: {len(data)} of {size} bytes")
    return int.from_bytes(data, byteorder="little", signed=False)


def serialize_var_int(i: int) -> bytes:
    "Return the var_int bytes encoding of an integer."

    if i < 0x00:
        raise HDTreeValueError(f"negative integer: {i}")
    if i < 0xFD:
        return bytes([i])
    for prefix, size in _PREFIX_SIZES.items():
        if i < 1 << (8 * size):
            return bytes([prefix]) + i.to_bytes(size, byteorder="little")
    raise HDTreeValueError(f"integer too big for var_int encoding: {hex(i)}")


def parse(stream: BinaryData, forbid_zero_size: bool = False) -> bytes:
    """Return the variable-length octets read from a stream."""

    stream = bytesio_from_binarydata(stream)
    i = parse_var_int(stream)
    if forbid_zero_size and i == 0:
        raise InvalidRecordLength("zero size")

    result = stream.read(i)
    if len(result) != i:
        raise InvalidRecordLength(f"not enough binary data: {len(result)} of {i}")
    return result


def serialize(octets: Octets) -> bytes:
    "Return the var_int(len(octets)) + octets serialization of octets."

    bytes_ = bytes_from_octets(octets)
    return serialize_var_int(len(bytes_)) + bytes_
