#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Child key derivation.

Each derivation step appends its material (a 4 bytes index,
raw bytes, or the SHA256 digest of a text) to the parent key
and computes HMAC-SHA512 keyed with the parent chain code:
the left half tweaks the parent key, the right half is the child chain code.

Hardened steps use the parent secret key and require a private parent;
non-hardened steps use the parent public key, so that they can be
performed on public keys as well.

If the left half is not a valid scalar, or the child key is invalid,
the material is incremented as a big-endian integer and the step retried.
"""

import logging
from dataclasses import replace
from typing import Optional, Tuple

from hdtree import ec
from hdtree.alias import Octets
from hdtree.bip32.bip32 import (
    LABEL_INDEX,
    BIP32Key,
    ExtendedKey,
    XPrv,
    XPub,
    xkey_from_bip32_key,
)
from hdtree.bip32.der_path import (
    HARDENED,
    DerivationStep,
    DerPath,
    StepKind,
    parsed_path_from_der_path,
)
from hdtree.exceptions import (
    DerivationExhausted,
    ExpectedMasterKey,
    HDTreeValueError,
    IndexOutOfRange,
    InvalidExtendedKey,
    InvalidScalarRange,
    PointNotOnCurve,
    PrivateKeyRequired,
    UnknownKeyFamily,
)
from hdtree.hashes import hash160, hmac_sha512, sha256
from hdtree.utils import bytes_from_octets
from hdtree.versions import KeyVersion

logger = logging.getLogger(__name__)

MAX_DERIVATION_ATTEMPTS = 256

_BIP48_SCRIPT_TYPES = {"p2wsh-p2sh": 1, "p2wsh": 2}


def _increment(data: bytes, hardened: bool) -> bytes:
    "Return data + 1 as a big-endian integer, keeping its hardening bit."

    buffer = bytearray(data)
    for i in reversed(range(len(buffer))):
        if buffer[i] != 0xFF:
            buffer[i] += 1
            break
        buffer[i] = 0x00
    else:
        raise DerivationExhausted(f"derivation material overflow: 0x{data.hex()}")

    if (buffer[0] & 0x80 != 0) != hardened:
        raise DerivationExhausted(f"derivation material overflow: 0x{data.hex()}")
    return bytes(buffer)


def _child_key(
    xkey: ExtendedKey, parent_pub_key: bytes, data: bytes, hardened: bool
) -> Optional[Tuple[bytes, bytes]]:
    "Return the (child key, chain code) tuple, None if invalid."

    if hardened:
        hmac_ = hmac_sha512(xkey.chain_code, xkey.key + data)
    else:
        hmac_ = hmac_sha512(xkey.chain_code, parent_pub_key + data)
    offset, chain_code = hmac_[:32], hmac_[32:]
    if not ec.is_valid_scalar(offset):
        return None

    if isinstance(xkey, XPrv):
        key = ec.scalar_add(xkey.secret_key, offset)
    else:
        key = ec.point_add_scalar(parent_pub_key, offset)
    return None if key is None else (key, chain_code)


def ckd(xkey: ExtendedKey, data: Octets, hardened: bool) -> ExtendedKey:
    """Return the child key derived with the given material.

    The hardening bit (i.e. the highest bit of the first byte)
    of the material must match the hardened flag.
    4 bytes material is the child index; any other length
    results in index 0xFFFFFFFF, with the material as label.
    """

    data = bytes_from_octets(data)
    if not data:
        raise HDTreeValueError("empty derivation material")
    if (data[0] & 0x80 != 0) != hardened:
        err_msg = f"inconsistent hardening for derivation material: 0x{data.hex()}"
        raise HDTreeValueError(err_msg)
    if hardened and not isinstance(xkey, XPrv):
        raise PrivateKeyRequired("invalid hardened derivation from public key")
    if xkey.depth == 0xFF:
        raise InvalidExtendedKey("depth greater than 255")

    parent_pub_key: bytes = xkey.public_key  # type: ignore
    for _ in range(MAX_DERIVATION_ATTEMPTS):
        child = _child_key(xkey, parent_pub_key, data, hardened)
        if child is not None:
            break
        logger.debug("invalid child key for material 0x%s: retrying", data.hex())
        data = _increment(data, hardened)
    else:
        err_msg = f"no valid child key in {MAX_DERIVATION_ATTEMPTS} attempts"
        raise DerivationExhausted(err_msg)

    key, chain_code = child
    marker = int.from_bytes(hash160(parent_pub_key)[:4], byteorder="big")
    if len(data) == 4:
        index = int.from_bytes(data, byteorder="big", signed=False)
        label = None
    else:
        index = LABEL_INDEX
        label = data

    if isinstance(xkey, XPrv):
        return XPrv(
            xkey.version, xkey.depth + 1, marker, index, chain_code, key, label
        )
    return XPub(xkey.version, xkey.depth + 1, marker, index, chain_code, key, label)


def derive_step(xkey: ExtendedKey, step: DerivationStep) -> ExtendedKey:
    return ckd(xkey, step.data, step.hardened)


def derive_index(xkey: ExtendedKey, i: int) -> ExtendedKey:
    "Return the non-hardened child at index i, with 0 <= i < 0x80000000."
    return derive_step(xkey, DerivationStep(StepKind.INDEX, False, i))


def derive_hardened_index(xkey: ExtendedKey, i: int) -> ExtendedKey:
    "Return the hardened child at index i + 0x80000000, with 0 <= i < 0x80000000."
    return derive_step(xkey, DerivationStep(StepKind.INDEX, True, i))


def derive_hash(xkey: ExtendedKey, data: Octets) -> ExtendedKey:
    """Return the non-hardened child for arbitrary material.

    The highest bit of the material is cleared.
    """
    data = bytes_from_octets(data)
    return derive_step(xkey, DerivationStep(StepKind.HEX, False, data))


def derive_hardened_hash(xkey: ExtendedKey, data: Octets) -> ExtendedKey:
    """Return the hardened child for arbitrary material.

    The highest bit of the material is set.
    """
    data = bytes_from_octets(data)
    return derive_step(xkey, DerivationStep(StepKind.HEX, True, data))


def derive_text(xkey: ExtendedKey, text: str, hardened: bool = False) -> ExtendedKey:
    "Return the child for the SHA256 digest of the UTF-8 encoded text."

    if not text:
        raise HDTreeValueError("empty text")
    data = sha256(text.encode("utf-8"))
    return derive_step(xkey, DerivationStep(StepKind.HEX, hardened, data))


def derive_path(xkey: BIP32Key, der_path: DerPath) -> ExtendedKey:
    """Derive a key across a path spanning multiple depth levels.

    Valid DerPath examples:

    - string like "m/44h/0'/1H/0/10" or "m/#deadbeef'/alice"
    - iterable integer indexes
    - one single integer index

    A leading "m" requires a master key. No partial result is returned:
    the first invalid step fails the whole derivation.
    """

    xkey = xkey_from_bip32_key(xkey)
    parsed_path = parsed_path_from_der_path(der_path)

    if parsed_path.from_master and xkey.marker != 0:
        err_msg = "master key required for a path starting with 'm': "
        err_msg += f"parent marker 0x{xkey.marker:08x}"
        raise ExpectedMasterKey(err_msg)

    final_depth = xkey.depth + len(parsed_path)
    if final_depth > 255:
        raise InvalidExtendedKey(f"final depth greater than 255: {final_depth}")

    for step in parsed_path:
        xkey = derive_step(xkey, step)
    return xkey


def derive(xkey: BIP32Key, der_path: DerPath) -> str:
    "Return the Base58 extended key derived across a path."
    return derive_path(xkey, der_path).b58encode()


def _derive_from_account(
    account_xkey: BIP32Key,
    branch: int,
    address_index: int,
    branches_0_1_only: bool = True,
    max_index: int = 0xFFFF,
) -> ExtendedKey:

    account_xkey = xkey_from_bip32_key(account_xkey)

    if not account_xkey.is_hardened:
        raise InvalidExtendedKey("unhardened account/master key")

    if branch >= HARDENED:
        raise IndexOutOfRange("invalid private derivation at branch level")
    if branch > max_index:
        raise IndexOutOfRange(f"too high branch: {branch}")
    if branches_0_1_only and branch not in (0, 1):
        raise IndexOutOfRange(f"invalid branch: {branch} not in (0, 1)")

    if address_index >= HARDENED:
        raise IndexOutOfRange("invalid private derivation at address index level")
    if address_index > max_index:
        raise IndexOutOfRange(f"too high address index: {address_index}")

    return derive_path(account_xkey, [branch, address_index])


def derive_from_account(
    account_xkey: BIP32Key,
    branch: int,
    address_index: int,
    branches_0_1_only: bool = True,
    max_index: int = 0xFFFF,
) -> str:
    """Derive a key with public derivation at the given branch and index.

    It also ensures that the account key is hardened,
    that the branch is a standard receive or change,
    and that the index is not arbitrarily high.
    """

    return _derive_from_account(
        account_xkey, branch, address_index, branches_0_1_only, max_index
    ).b58encode()


def account_der_path(version: KeyVersion, account: int = 0) -> str:
    """Return the BIP43 m/purpose'/coin_type'/account' path of a key version.

    BIP48 multisig families (purpose 48) have an additional
    script_type' level: 1' for p2wsh-p2sh, 2' for p2wsh.
    """

    if not 0 <= account < HARDENED:
        raise IndexOutOfRange(f"invalid account: {account}")
    der_path = f"m/{version.purpose}'/{version.coin_type}'/{account}'"
    if version.purpose == 48:
        if version.family not in _BIP48_SCRIPT_TYPES:
            raise UnknownKeyFamily(f"no BIP48 script type for: {version.family}")
        der_path += f"/{_BIP48_SCRIPT_TYPES[version.family]}'"
    return der_path


def derive_account(
    root_xkey: BIP32Key, account: int = 0, version: Optional[KeyVersion] = None
) -> ExtendedKey:
    """Return the account key of a root key.

    The result has the requested key version (i.e. key family and network),
    defaulting to the version of the root key.
    """

    root_xkey = xkey_from_bip32_key(root_xkey)
    version = root_xkey.version if version is None else version
    xkey = derive_path(root_xkey, account_der_path(version, account))
    return replace(xkey, version=version)


def crack_prv_key(parent_xpub: BIP32Key, child_xprv: BIP32Key) -> str:
    """Return the parent private key from the parent public key and a child.

    The child private key must be a non-hardened child of the parent.
    """

    p = xkey_from_bip32_key(parent_xpub)
    if not isinstance(p, XPub):
        err_msg = "extended parent key is not a public key: "
        err_msg += f"{p.b58encode()}"
        raise InvalidExtendedKey(err_msg)

    c = xkey_from_bip32_key(child_xprv)
    if not isinstance(c, XPrv):
        err_msg = "extended child key is not a private key: "
        err_msg += f"{c.b58encode()}"
        raise PrivateKeyRequired(err_msg)

    # check depth
    if c.depth != p.depth + 1:
        raise InvalidExtendedKey("not a parent's child: wrong depths")

    # check marker
    if c.marker != int.from_bytes(p.fingerprint, byteorder="big"):
        raise InvalidExtendedKey("not a parent's child: wrong parent marker")

    if c.is_hardened:
        raise InvalidExtendedKey("hardened child derivation")

    data = c.label if c.label is not None else c.index.to_bytes(4, byteorder="big")
    offset = hmac_sha512(p.chain_code, p.public_key + data)[:32]
    secret_key = ec.scalar_add(c.secret_key, ec.scalar_negate(offset))
    if secret_key is None:
        raise InvalidScalarRange("invalid parent private key")

    xprv = XPrv(c.version, p.depth, p.marker, p.index, p.chain_code, secret_key, p.label)
    if xprv.public_key != p.public_key:
        raise InvalidExtendedKey("not a parent's child: wrong parent public key")
    return xprv.b58encode()


def tweak(xkey: BIP32Key, t: Octets) -> ExtendedKey:
    """Return the key tweaked as a BIP341 x-only key.

    The key is first lifted to its even-y representative,
    then the tweak t is added: t for private keys, t*G for public keys.
    The result keeps all the other fields of the input key.
    """

    xkey = xkey_from_bip32_key(xkey)
    t = bytes_from_octets(t, 32)
    if ec.int_from_scalar(t) >= ec.n:
        raise InvalidScalarRange(f"invalid tweak not in 0..n-1: 0x{t.hex()}")

    if isinstance(xkey, XPrv):
        secret_key = xkey.secret_key
        if not ec.has_even_y(xkey.public_key):
            secret_key = ec.scalar_negate(secret_key)
        tweaked = ec.scalar_add(secret_key, t)
        if tweaked is None:
            raise InvalidScalarRange("invalid tweaked private key")
        return replace(xkey, secret_key=tweaked)

    point = ec.point_from_x_only(xkey.public_key[1:])  # type: ignore
    tweaked = None if point is None else ec.point_add_scalar(point, t)
    if tweaked is None:
        raise PointNotOnCurve("invalid tweaked public key")
    return replace(xkey, public_key=tweaked)
