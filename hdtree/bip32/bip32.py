#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Extended keys and their serialization.

A hierarchical deterministic wallet is a tree of key pairs,
derived from a single root, allowing for selective sharing of keypair
chains: see https://github.com/bitcoin/bips/blob/master/bip-0032.mediawiki.

An extended key is either private (XPrv) or public (XPub);
the public key of an XPrv is always computed from its secret key.

A serialized extended key is 78 bytes:

- [  : 4] version
- [ 4: 5] depth in the derivation path
- [ 5: 9] parent marker (first 4 bytes of the parent identifier)
- [ 9:13] index
- [13:45] chain code
- [45:78] compressed public key or [0x00][secret key]

Keys derived with arbitrary length material (instead of a 4 bytes index)
have index 0xFFFFFFFF and carry the material as label,
serialized after the 78 bytes as var_int(len(label)) + label.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Optional, Tuple, Type, TypeVar, Union

from hdtree import base58, ec, var_bytes
from hdtree.alias import BinaryData, Octets, String
from hdtree.bip32.der_path import HARDENED
from hdtree.exceptions import (
    InvalidExtendedKey,
    InvalidRecordLength,
    InvalidScalarRange,
    InvalidSeedLength,
    MalformedPrivateKey,
    MalformedPublicKey,
    PointNotOnCurve,
    PrivateKeyRequired,
    TrailingData,
)
from hdtree.hashes import hash160, hmac_sha512
from hdtree.utils import bytes_from_octets, bytesio_from_binarydata, hex_string
from hdtree.versions import KeyVersion, get_key_version, key_version_from_prefix

# index of the keys derived with non 4 bytes material
LABEL_INDEX = 0xFFFFFFFF

_RECORD_SIZE = 78

_INT_RANGE: List[Tuple[str, int]] = [
    ("depth", 0xFF),
    ("marker", 0xFFFFFFFF),
    ("index", 0xFFFFFFFF),
]

_XKey = TypeVar("_XKey", bound="ExtendedKey")


@dataclass(frozen=True, init=False)
class ExtendedKey(ABC):
    version: KeyVersion
    depth: int
    # big-endian int of the first 4 bytes of the parent identifier
    marker: int
    # index is an int, not bytes, to avoid any byteorder ambiguity
    index: int
    chain_code: bytes
    label: Optional[bytes]

    def _set_fields(
        self,
        version: KeyVersion,
        depth: int,
        marker: int,
        index: int,
        chain_code: Octets,
        label: Optional[Octets],
    ) -> None:
        object.__setattr__(self, "version", version)
        object.__setattr__(self, "depth", depth)
        object.__setattr__(self, "marker", marker)
        object.__setattr__(self, "index", index)
        object.__setattr__(self, "chain_code", bytes_from_octets(chain_code))
        if label is not None:
            label = bytes_from_octets(label)
        object.__setattr__(self, "label", label)

    @property
    @abstractmethod
    def is_private(self) -> bool:
        ...

    @property
    @abstractmethod
    def key(self) -> bytes:
        "Return the 33 bytes key field of the serialization."

    @property
    def is_hardened(self) -> bool:
        if self.label is not None:
            return self.label[0] & 0x80 != 0
        return self.index >= HARDENED

    @property
    def is_root(self) -> bool:
        return self.depth == 0 and self.marker == 0 and self.index == 0

    @property
    def identifier(self) -> bytes:
        # public_key is a field of XPub, a property of XPrv
        return hash160(self.public_key)  # type: ignore

    @property
    def fingerprint(self) -> bytes:
        return self.identifier[:4]

    def assert_valid(self) -> None:

        if not isinstance(self.version, KeyVersion):
            raise InvalidExtendedKey(f"invalid version: {self.version!r}")

        for name, max_value in _INT_RANGE:
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= max_value:
                raise InvalidExtendedKey(f"invalid {name}: {value!r}")

        if len(self.chain_code) != 32:
            err_msg = f"invalid chain_code length: {len(self.chain_code)} bytes"
            err_msg += " instead of 32"
            raise InvalidExtendedKey(err_msg)

        if self.depth == 0:
            if self.marker != 0:
                err_msg = "zero depth with non-zero parent marker: "
                err_msg += f"0x{self.marker:08x}"
                raise InvalidExtendedKey(err_msg)
            if self.index != 0:
                raise InvalidExtendedKey(f"zero depth with non-zero index: {self.index}")

        if self.label is not None:
            if not self.label:
                raise InvalidExtendedKey("empty label")
            if self.index != LABEL_INDEX:
                err_msg = f"label with index {self.index} "
                err_msg += f"instead of 0x{LABEL_INDEX:08X}"
                raise InvalidExtendedKey(err_msg)

    def serialize(self, check_validity: bool = True) -> bytes:

        if check_validity:
            self.assert_valid()

        prefix = self.version.prv if self.is_private else self.version.pub
        result = b"".join(
            [
                prefix,
                self.depth.to_bytes(1, byteorder="big", signed=False),
                self.marker.to_bytes(4, byteorder="big", signed=False),
                self.index.to_bytes(4, byteorder="big", signed=False),
                self.chain_code,
                self.key,
            ]
        )
        if self.label is not None:
            result += var_bytes.serialize(self.label)
        return result

    def b58encode(self, check_validity: bool = True) -> str:
        data_binary = self.serialize(check_validity)
        return base58.b58encode(data_binary).decode("ascii")

    @classmethod
    def parse(
        cls: Type[_XKey], xkey_bin: BinaryData, check_validity: bool = True
    ) -> _XKey:
        """Return an extended key by parsing binary data.

        The whole stream is consumed: the serialization is 78 bytes,
        plus the label for keys with index 0xFFFFFFFF.
        """

        stream = bytesio_from_binarydata(xkey_bin)
        xkey_bin = stream.read(_RECORD_SIZE)
        if len(xkey_bin) != _RECORD_SIZE:
            err_msg = f"invalid decoded length: {len(xkey_bin)}"
            err_msg += f" instead of {_RECORD_SIZE}"
            raise InvalidRecordLength(err_msg)

        version, is_private = key_version_from_prefix(xkey_bin[:4])
        depth = xkey_bin[4]
        marker = int.from_bytes(xkey_bin[5:9], byteorder="big", signed=False)
        index = int.from_bytes(xkey_bin[9:13], byteorder="big", signed=False)
        chain_code = xkey_bin[13:45]
        key = xkey_bin[45:78]

        label = None
        extra = stream.read()
        if extra:
            if index != LABEL_INDEX:
                err_msg = f"invalid decoded length: {_RECORD_SIZE + len(extra)}"
                err_msg += f" instead of {_RECORD_SIZE}"
                raise InvalidRecordLength(err_msg)
            extra_stream = BytesIO(extra)
            label = var_bytes.parse(extra_stream, forbid_zero_size=True)
            trailing = extra_stream.read()
            if trailing:
                raise TrailingData(f"trailing data after label: 0x{trailing.hex()}")

        xkey: ExtendedKey
        if is_private:
            if key[0] != 0:
                raise MalformedPrivateKey(
                    f"invalid private key prefix: 0x{key[:1].hex()}"
                )
            xkey = XPrv(
                version, depth, marker, index, chain_code, key[1:], label, check_validity
            )
        else:
            xkey = XPub(
                version, depth, marker, index, chain_code, key, label, check_validity
            )

        if not isinstance(xkey, cls):
            err_msg = f"not a {'private' if cls is XPrv else 'public'} key: "
            err_msg += f"{xkey.b58encode(check_validity)}"
            raise InvalidExtendedKey(err_msg)
        # pylance cannot grok the following line
        return xkey  # type: ignore

    @classmethod
    def b58decode(
        cls: Type[_XKey], xkey_str: String, check_validity: bool = True
    ) -> _XKey:

        if isinstance(xkey_str, str):
            xkey_str = xkey_str.strip()

        xkey_bin = base58.b58decode(xkey_str)
        return cls.parse(xkey_bin, check_validity)


@dataclass(frozen=True, init=False)
class XPrv(ExtendedKey):
    secret_key: bytes = field(repr=False)

    def __init__(
        self,
        version: KeyVersion,
        depth: int,
        marker: int,
        index: int,
        chain_code: Octets,
        secret_key: Octets,
        label: Optional[Octets] = None,
        check_validity: bool = True,
    ) -> None:

        self._set_fields(version, depth, marker, index, chain_code, label)
        object.__setattr__(self, "secret_key", bytes_from_octets(secret_key))

        if check_validity:
            self.assert_valid()

    @property
    def is_private(self) -> bool:
        return True

    @property
    def public_key(self) -> bytes:
        return ec.point_from_scalar(self.secret_key)

    @property
    def key(self) -> bytes:
        return b"\x00" + self.secret_key

    def assert_valid(self) -> None:

        super().assert_valid()

        if len(self.secret_key) != 32:
            err_msg = f"invalid secret key length: {len(self.secret_key)} bytes"
            err_msg += " instead of 32"
            raise InvalidScalarRange(err_msg)
        if not ec.is_valid_scalar(self.secret_key):
            err_msg = "invalid private key not in 1..n-1: "
            err_msg += f"{hex_string(self.secret_key)}"
            raise InvalidScalarRange(err_msg)

    @classmethod
    def from_seed(cls, seed: Octets, version: Optional[KeyVersion] = None) -> "XPrv":
        """Return the root (master) private key of a seed.

        The seed must be from 128 to 512 bits.
        """

        seed = bytes_from_octets(seed)
        bitlength = len(seed) * 8
        if bitlength < 128:
            raise InvalidSeedLength(
                f"too few bits for seed: {bitlength} in '{hex_string(seed)}'"
            )
        if bitlength > 512:
            raise InvalidSeedLength(
                f"too many bits for seed: {bitlength} in '{hex_string(seed)}'"
            )
        hmac_ = hmac_sha512(b"Bitcoin seed", seed)
        version = get_key_version() if version is None else version
        return cls(version, 0, 0, 0, hmac_[32:], hmac_[:32])

    @classmethod
    def from_private_key(
        cls,
        secret_key: Octets,
        chain_code: Octets,
        version: Optional[KeyVersion] = None,
    ) -> "XPrv":
        "Return a root private key from its secret key and chain code."

        version = get_key_version() if version is None else version
        return cls(version, 0, 0, 0, chain_code, secret_key)

    def neutered(self) -> "XPub":
        """Neutered Derivation (ND).

        Return the extended public key corresponding to this private key,
        i.e. without the ability to sign transactions.
        """
        return XPub(
            self.version,
            self.depth,
            self.marker,
            self.index,
            self.chain_code,
            self.public_key,
            self.label,
        )


@dataclass(frozen=True, init=False)
class XPub(ExtendedKey):
    public_key: bytes

    def __init__(
        self,
        version: KeyVersion,
        depth: int,
        marker: int,
        index: int,
        chain_code: Octets,
        public_key: Octets,
        label: Optional[Octets] = None,
        check_validity: bool = True,
    ) -> None:

        self._set_fields(version, depth, marker, index, chain_code, label)
        object.__setattr__(self, "public_key", bytes_from_octets(public_key))

        if check_validity:
            self.assert_valid()

    @property
    def is_private(self) -> bool:
        return False

    @property
    def key(self) -> bytes:
        return self.public_key

    def assert_valid(self) -> None:

        super().assert_valid()

        if len(self.public_key) != 33 or self.public_key[0] not in (2, 3):
            err_msg = "invalid public key prefix not in (0x02, 0x03): "
            err_msg += f"0x{self.public_key[:1].hex()}"
            raise MalformedPublicKey(err_msg)
        if not ec.point_is_on_curve(self.public_key):
            raise PointNotOnCurve(f"invalid public key: 0x{self.public_key.hex()}")

    @classmethod
    def from_public_key(
        cls,
        public_key: Octets,
        chain_code: Octets,
        version: Optional[KeyVersion] = None,
    ) -> "XPub":
        "Return a root public key from its compressed point and chain code."

        version = get_key_version() if version is None else version
        return cls(version, 0, 0, 0, chain_code, public_key)


BIP32Key = Union[ExtendedKey, String]


def xkey_from_bip32_key(xkey: BIP32Key) -> ExtendedKey:
    "Return an ExtendedKey, decoding it if it is a Base58 string."

    if isinstance(xkey, ExtendedKey):
        return xkey
    return ExtendedKey.b58decode(xkey)


def rootxprv_from_seed(seed: Octets, version: Optional[KeyVersion] = None) -> str:
    """Return BIP32 root master extended private key from seed."""
    return XPrv.from_seed(seed, version).b58encode()


def xpub_from_xprv(xprv: BIP32Key) -> str:
    """Neutered Derivation (ND).

    Derivation of the extended public key corresponding to an extended
    private key (“neutered” as it removes the ability to sign transactions).
    """

    xkey = xkey_from_bip32_key(xprv)
    if not isinstance(xkey, XPrv):
        raise PrivateKeyRequired(f"not a private key: {xkey.b58encode()}")
    return xkey.neutered().b58encode()
