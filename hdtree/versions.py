#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Extended key versions: key families and their serialization prefixes.

A key family (e.g. p2pkh, p2wpkh-p2sh, p2wpkh on mainnet or testnet)
selects the 4 bytes prefix of serialized private and public extended keys,
the WIF prefix, and the BIP43 purpose of its account level derivation.

https://github.com/satoshilabs/slips/blob/master/slip-0132.md

The table is loaded once from the package data and never mutated.
"""

import json
from dataclasses import InitVar, dataclass, field, fields
from functools import lru_cache
from os import path
from typing import Any, List, Tuple

from dataclasses_json import DataClassJsonMixin, config

from hdtree.alias import Octets
from hdtree.exceptions import (
    HDTreeValueError,
    UnknownKeyFamily,
    UnknownVersionPrefix,
)
from hdtree.utils import bytes_from_octets

DEFAULT_FAMILY = "p2pkh"
DEFAULT_NETWORK = "mainnet"

_ALIASES = {"default": DEFAULT_FAMILY, "legacy": DEFAULT_FAMILY}
_COIN_TYPES = {"mainnet": 0, "testnet": 1}

_KEY_SIZE: List[Tuple[str, int]] = [
    ("prv", 4),
    ("pub", 4),
    ("wif", 1),
]


def _hex_field() -> Any:
    return field(metadata=config(encoder=lambda v: v.hex(), decoder=bytes.fromhex))


@dataclass(frozen=True)
class KeyVersion(DataClassJsonMixin):
    family: str
    network: str
    # private extended key prefix, e.g. xprv
    prv: bytes = _hex_field()
    # public extended key prefix, e.g. xpub
    pub: bytes = _hex_field()
    # WIF starts with {K,L} on mainnet, c on testnet
    wif: bytes = _hex_field()
    # BIP43 purpose, e.g. 44h for p2pkh
    purpose: int = 44
    check_validity: InitVar[bool] = True

    def __post_init__(self, check_validity: bool) -> None:
        if check_validity:
            self.assert_valid()

    @property
    def coin_type(self) -> int:
        "Return the SLIP44 coin type used at the account level."
        return _COIN_TYPES[self.network]

    def assert_valid(self) -> None:

        for key, size in _KEY_SIZE:
            value = getattr(self, key)
            if not isinstance(value, bytes) or len(value) != size:
                err_msg = f"invalid {key}: {value!r} instead of {size} bytes"
                raise HDTreeValueError(err_msg)

        if self.prv == self.pub:
            raise HDTreeValueError(f"same private and public prefix: {self.prv.hex()}")
        if self.network not in _COIN_TYPES:
            raise HDTreeValueError(f"unknown network: {self.network}")
        if not 0 <= self.purpose < 0x80000000:
            raise HDTreeValueError(f"invalid purpose: {self.purpose}")


@lru_cache(maxsize=None)
def key_versions() -> Tuple[KeyVersion, ...]:
    "Return the (immutable) table of all known key versions."

    filename = path.join(path.dirname(__file__), "_data", "key_versions.json")
    with open(filename, "r", encoding="ascii") as file_:
        return tuple(KeyVersion.from_dict(dict_) for dict_ in json.load(file_))


def _normalize_family(family: str) -> str:
    family = family.strip().lower()
    return _ALIASES.get(family, family)


def key_versions_from_filters(**filters: Any) -> List[KeyVersion]:
    """Return the key versions matching all the filters.

    Filters are KeyVersion field names, e.g. family="p2wpkh", network="testnet"
    or purpose=49; the result is sorted by purpose, highest first.
    """

    names = {f.name for f in fields(KeyVersion)}
    unknown = sorted(set(filters) - names)
    if unknown:
        raise HDTreeValueError(f"invalid key version filter: {', '.join(unknown)}")
    if "family" in filters:
        filters["family"] = _normalize_family(filters["family"])
    if "network" in filters:
        filters["network"] = filters["network"].strip().lower()
    if "prv" in filters:
        filters["prv"] = bytes_from_octets(filters["prv"])
    if "pub" in filters:
        filters["pub"] = bytes_from_octets(filters["pub"])

    result = [
        version
        for version in key_versions()
        if all(getattr(version, k) == v for k, v in filters.items())
    ]
    return sorted(result, key=lambda version: version.purpose, reverse=True)


def get_key_version(
    family: str = DEFAULT_FAMILY, network: str = DEFAULT_NETWORK
) -> KeyVersion:
    "Return the key version of a key family on a network."

    versions = key_versions_from_filters(family=family, network=network)
    if not versions:
        raise UnknownKeyFamily(f"unknown key family: '{family}' on '{network}'")
    return versions[0]


def key_version_from_prefix(prefix: Octets) -> Tuple[KeyVersion, bool]:
    """Return the (key version, is_private) tuple for a 4 bytes prefix.

    The prefixes of the table are all distinct, so the lookup is
    never ambiguous.
    """

    prefix = bytes_from_octets(prefix)
    for version in key_versions():
        if prefix == version.prv:
            return version, True
        if prefix == version.pub:
            return version, False
    raise UnknownVersionPrefix(f"unknown extended key version: 0x{prefix.hex()}")
