#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""secp256k1 scalar and point operations.

Thin helpers around the libsecp256k1 python bindings (coincurve).
Scalars are 32 bytes big-endian, points are 33 bytes SEC compressed:
invalid results are signalled by returning None, not by raising,
so that callers can apply their own retry policy.
"""

from typing import Optional

from coincurve import PrivateKey, PublicKey

from hdtree.alias import Octets
from hdtree.utils import bytes_from_octets

# secp256k1 group order
n = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


def int_from_scalar(scalar: Octets) -> int:
    return int.from_bytes(bytes_from_octets(scalar), byteorder="big", signed=False)


def scalar_from_int(i: int) -> bytes:
    return i.to_bytes(32, byteorder="big", signed=False)


def is_valid_scalar(scalar: Octets) -> bool:
    "Return True if scalar is 32 bytes in [1, n-1]."

    scalar = bytes_from_octets(scalar)
    return len(scalar) == 32 and 0 < int_from_scalar(scalar) < n


def scalar_add(a: Octets, b: Octets) -> Optional[bytes]:
    "Return (a + b) mod n, or None if the sum is zero or the inputs invalid."

    a = bytes_from_octets(a)
    b = bytes_from_octets(b)
    if not is_valid_scalar(a) or len(b) != 32 or int_from_scalar(b) >= n:
        return None
    try:
        return PrivateKey(a).add(b).secret
    except ValueError:
        return None


def scalar_negate(a: Octets) -> bytes:
    "Return (n - a) mod n."

    return scalar_from_int((n - int_from_scalar(a)) % n)


def point_from_scalar(scalar: Octets) -> bytes:
    "Return the compressed point scalar*G."

    return PublicKey.from_secret(bytes_from_octets(scalar, 32)).format(compressed=True)


def point_is_on_curve(point: Octets) -> bool:
    "Return True if point is a valid compressed SEC point."

    point = bytes_from_octets(point)
    if len(point) != 33 or point[0] not in (2, 3):
        return False
    try:
        PublicKey(point)
    except ValueError:
        return False
    return True


def point_add_scalar(point: Octets, scalar: Octets) -> Optional[bytes]:
    "Return point + scalar*G compressed, or None for the point at infinity."

    point = bytes_from_octets(point)
    scalar = bytes_from_octets(scalar)
    if not point_is_on_curve(point) or len(scalar) != 32:
        return None
    if int_from_scalar(scalar) >= n:
        return None
    try:
        return PublicKey(point).add(scalar).format(compressed=True)
    except ValueError:
        return None


def has_even_y(point: Octets) -> bool:
    return bytes_from_octets(point)[0] == 2


def point_from_x_only(x_only: Octets) -> Optional[bytes]:
    "Return the even-y compressed point for a 32 bytes x-coordinate."

    point = b"\x02" + bytes_from_octets(x_only, 32)
    return point if point_is_on_curve(point) else None
