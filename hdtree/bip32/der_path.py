#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Derivation paths.

A derivation path is a "/" separated sequence of segments,
optionally starting with "m" to require a master (root) key:

- "m/44'/0'/1'/0/10": decimal indexes, "'" (or "h") marking hardening
- "m/#deadbeef/#0badc0de'": hex material after "#"
- "m/wallet'/alice": any other segment is text, whose SHA256 digest
  over its UTF-8 encoding is the derivation material

Each segment becomes a DerivationStep; a whole path is a ParsedPath.
A path can also be given as a single integer index
or as a sequence of integer indexes (hardened if >= 0x80000000).
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Sequence, Tuple, Union

from hdtree.exceptions import (
    HDTreeValueError,
    IndexOutOfRange,
    InvalidHexSegment,
    InvalidPathSyntax,
)
from hdtree.hashes import sha256

HARDENED = 0x80000000

# default hardening symbol among the possible ones: "'", "h", "H"
_HARDENING = "'"

_DECIMAL = re.compile(r"[0-9]+")
_DECIMAL_H = re.compile(r"([0-9]+)[hH]")
_HEX = re.compile(r"[0-9a-fA-F]*")


class StepKind(Enum):
    INDEX = "index"
    HEX = "hex"
    TEXT = "text"


def _harden_material(data: bytes, hardened: bool) -> bytes:
    "Set (hardened) or clear (soft) the highest bit of the material."
    first = data[0] | 0x80 if hardened else data[0] & 0x7F
    return bytes([first]) + data[1:]


@dataclass(frozen=True)
class DerivationStep:
    kind: StepKind
    hardened: bool
    # int for INDEX (without the hardening bit), bytes for HEX, str for TEXT
    value: Union[int, bytes, str]

    def __post_init__(self) -> None:
        self.assert_valid()

    def assert_valid(self) -> None:
        if self.kind is StepKind.INDEX:
            if not isinstance(self.value, int):
                raise HDTreeValueError(f"invalid index: {self.value!r}")
            if not 0 <= self.value < HARDENED:
                raise IndexOutOfRange(f"invalid index: {self.value}")
        elif self.kind is StepKind.HEX:
            if not isinstance(self.value, bytes) or not self.value:
                raise InvalidHexSegment(f"invalid hex material: {self.value!r}")
        elif self.kind is StepKind.TEXT:
            if not isinstance(self.value, str) or not self.value:
                raise InvalidPathSyntax(f"invalid text segment: {self.value!r}")
            # text must not be mistaken for something else once printed
            if "/" in self.value or self.value[0] == "#" or self.value in ("m", "M"):
                raise InvalidPathSyntax(f"invalid text segment: {self.value!r}")
            if self.value.endswith(_HARDENING) or _DECIMAL.fullmatch(self.value):
                raise InvalidPathSyntax(f"invalid text segment: {self.value!r}")
            if _DECIMAL_H.fullmatch(self.value):
                raise InvalidPathSyntax(f"invalid text segment: {self.value!r}")
        else:
            raise HDTreeValueError(f"invalid step kind: {self.kind!r}")

    @property
    def index(self) -> int:
        "Return the 32 bits index, hardening bit included (INDEX steps only)."
        if self.kind is not StepKind.INDEX:
            raise HDTreeValueError(f"not an index step: {self}")
        return self.value + (HARDENED if self.hardened else 0)

    @property
    def data(self) -> bytes:
        "Return the raw derivation material appended to the parent key."

        if self.kind is StepKind.INDEX:
            return self.index.to_bytes(4, byteorder="big", signed=False)
        if self.kind is StepKind.HEX:
            material = self.value
        else:
            material = sha256(self.value.encode("utf-8"))
        return _harden_material(material, self.hardened)

    def __str__(self) -> str:
        if self.kind is StepKind.INDEX:
            result = str(self.value)
        elif self.kind is StepKind.HEX:
            result = "#" + self.value.hex()
        else:
            result = self.value
        return result + (_HARDENING if self.hardened else "")


def int_from_index_str(s: str) -> int:
    "Return the 32 bits index of a decimal segment like 44, 44' or 44h."

    step = step_from_str(s)
    if step.kind is not StepKind.INDEX:
        raise InvalidPathSyntax(f"not a decimal index: '{s}'")
    return step.index


def str_from_index_int(i: int, hardening: str = _HARDENING) -> str:

    if hardening not in ("'", "h", "H"):
        raise HDTreeValueError(f"invalid hardening symbol: {hardening}")
    if not 0 <= i <= 0xFFFFFFFF:
        raise IndexOutOfRange(f"invalid index: {i}")
    if i < HARDENED:
        return str(i)
    return str(i - HARDENED) + hardening


def step_from_index_int(i: int) -> DerivationStep:
    if not isinstance(i, int) or not 0 <= i <= 0xFFFFFFFF:
        raise IndexOutOfRange(f"invalid index: {i}")
    return DerivationStep(StepKind.INDEX, i >= HARDENED, i & (HARDENED - 1))


def step_from_str(segment: str) -> DerivationStep:
    "Return the DerivationStep of a single path segment."

    hardened = segment.endswith(_HARDENING)
    body = segment[:-1] if hardened else segment
    if not body:
        raise InvalidPathSyntax(f"empty path segment: '{segment}'")

    if _DECIMAL.fullmatch(body):
        value = int(body)
        if value >= HARDENED:
            raise IndexOutOfRange(f"invalid index: {value}")
        return DerivationStep(StepKind.INDEX, hardened, value)

    match = _DECIMAL_H.fullmatch(body)
    if match:
        if hardened:
            raise InvalidPathSyntax(f"double hardening: '{segment}'")
        value = int(match.group(1))
        if value >= HARDENED:
            raise IndexOutOfRange(f"invalid index: {value}")
        return DerivationStep(StepKind.INDEX, True, value)

    if body.startswith("#"):
        hex_str = body[1:]
        if not hex_str or len(hex_str) % 2 or not _HEX.fullmatch(hex_str):
            raise InvalidHexSegment(f"invalid hex segment: '{segment}'")
        return DerivationStep(StepKind.HEX, hardened, bytes.fromhex(hex_str))

    return DerivationStep(StepKind.TEXT, hardened, body)


@dataclass(frozen=True)
class ParsedPath:
    # a leading "m" requires a master key to derive from
    from_master: bool
    steps: Tuple[DerivationStep, ...]

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[DerivationStep]:
        return iter(self.steps)

    def __str__(self) -> str:
        segments = [str(step) for step in self.steps]
        if self.from_master:
            segments.insert(0, "m")
        return "/".join(segments)


def parse(der_path: str) -> ParsedPath:
    """Return the ParsedPath of a derivation path string.

    Surrounding blanks are ignored, blanks inside segments are not.
    """

    if not isinstance(der_path, str):
        raise InvalidPathSyntax(f"not a derivation path string: {der_path!r}")

    path_str = der_path.strip()
    if not path_str:
        raise InvalidPathSyntax("empty derivation path")

    segments = path_str.split("/")
    from_master = segments[0] in ("m", "M")
    if from_master:
        segments = segments[1:]

    for segment in segments:
        if segment == "":
            raise InvalidPathSyntax(f"empty path segment in '{der_path}'")

    steps = tuple(step_from_str(segment) for segment in segments)
    return ParsedPath(from_master, steps)


DerPath = Union[str, int, Sequence[int], ParsedPath]


def parsed_path_from_der_path(der_path: DerPath) -> ParsedPath:
    """Return a ParsedPath from any supported derivation path representation.

    Integer indexes never require a master key.
    """

    if isinstance(der_path, ParsedPath):
        return der_path

    if isinstance(der_path, str):
        return parse(der_path)

    if isinstance(der_path, int):
        return ParsedPath(False, (step_from_index_int(der_path),))

    return ParsedPath(False, tuple(steps_from_indexes(der_path)))


def steps_from_indexes(indexes: Sequence[int]) -> List[DerivationStep]:
    return [step_from_index_int(i) for i in indexes]


def str_from_der_path(der_path: DerPath) -> str:
    "Return the canonical string representation of a derivation path."
    return str(parsed_path_from_der_path(der_path))
