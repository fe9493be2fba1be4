#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"Tests for the `hdtree.bip32.der_path` module."

import pytest

from hdtree.bip32.der_path import (
    HARDENED,
    DerivationStep,
    ParsedPath,
    StepKind,
    int_from_index_str,
    parse,
    parsed_path_from_der_path,
    step_from_index_int,
    str_from_der_path,
    str_from_index_int,
)
from hdtree.exceptions import (
    HDTreeValueError,
    IndexOutOfRange,
    InvalidHexSegment,
    InvalidPathSyntax,
)
from hdtree.hashes import sha256


def test_indexes() -> None:

    test_vectors = [
        # account 0, external branch, address_index 463
        ("m/0'/0/463", [HARDENED, 0, 463]),
        # account 0, internal branch, address_index 267
        ("m/0'/1/267", [HARDENED, 1, 267]),
        ("m/44'/0'/1'/0/10", [HARDENED + 44, HARDENED, HARDENED + 1, 0, 10]),
        ("m/2147483647'/2147483647", [0xFFFFFFFF, 0x7FFFFFFF]),
    ]

    for der_path, indexes in test_vectors:
        parsed_path = parse(der_path)
        assert parsed_path.from_master
        assert len(parsed_path) == len(indexes)
        assert [step.index for step in parsed_path] == indexes
        assert all(step.kind is StepKind.INDEX for step in parsed_path)
        assert str(parsed_path) == der_path
        assert parse(str(parsed_path)) == parsed_path

        # integer indexes never require a master key
        parsed_indexes = parsed_path_from_der_path(indexes)
        assert not parsed_indexes.from_master
        assert parsed_indexes.steps == parsed_path.steps
        assert "m/" + str_from_der_path(indexes) == der_path


def test_irregular_paths() -> None:

    test_vectors = [
        ("M/0h/0/463", "m/0'/0/463"),
        ("m/0H/1/267", "m/0'/1/267"),
        ("  m/44'/0'  ", "m/44'/0'"),
        ("44'/0'", "44'/0'"),
        ("m", "m"),
        ("M", "m"),
    ]
    for der_path, canonical in test_vectors:
        assert str_from_der_path(der_path) == canonical

    assert len(parse("m")) == 0
    assert not parse("0/1").from_master


def test_data() -> None:

    step = parse("0").steps[0]
    assert step.data == b"\x00\x00\x00\x00"
    assert not step.hardened
    step = parse("1'").steps[0]
    assert step.data == b"\x80\x00\x00\x01"
    assert step.hardened

    # the highest bit of hex material is set or cleared
    step = parse("#deadbeef").steps[0]
    assert step.kind is StepKind.HEX
    assert step.value == bytes.fromhex("deadbeef")
    assert step.data == bytes.fromhex("5eadbeef")
    assert str(step) == "#deadbeef"
    step = parse("#0badc0de'").steps[0]
    assert step.data == bytes.fromhex("8badc0de")
    assert str(step) == "#0badc0de'"

    # 4 bytes hex material is a numeric index
    assert parse("#00000001'").steps[0].data == parse("1'").steps[0].data

    step = parse("alice").steps[0]
    assert step.kind is StepKind.TEXT
    digest = sha256("alice".encode("utf-8"))
    assert step.data == bytes([digest[0] & 0x7F]) + digest[1:]
    step = parse("wallet'").steps[0]
    digest = sha256("wallet".encode("utf-8"))
    assert step.data == bytes([digest[0] | 0x80]) + digest[1:]
    assert str(step) == "wallet'"

    # any UTF-8 text
    parsed_path = parse("m/wallet'/名前/#ff'/3")
    assert [step.kind for step in parsed_path] == [
        StepKind.TEXT,
        StepKind.TEXT,
        StepKind.HEX,
        StepKind.INDEX,
    ]
    assert str(parsed_path) == "m/wallet'/名前/#ff'/3"


def test_syntax_exceptions() -> None:

    for der_path in ("", "  ", "m/", "m//0", "/0", "0/", "'", "m/'", "m/0/''"):
        with pytest.raises(InvalidPathSyntax):
            parse(der_path)

    with pytest.raises(InvalidPathSyntax, match="double hardening: "):
        parse("m/44h'")

    # "m" is reserved
    for der_path in ("m/m", "0/M", "m/m'"):
        with pytest.raises(InvalidPathSyntax, match="invalid text segment: "):
            parse(der_path)

    for der_path in ("2147483648", "m/2147483648'", "m/4294967295h"):
        with pytest.raises(IndexOutOfRange, match="invalid index: "):
            parse(der_path)

    for der_path in ("#", "#'", "#abc", "#zz", "m/#0x00"):
        with pytest.raises(InvalidHexSegment, match="invalid hex segment: "):
            parse(der_path)

    with pytest.raises(InvalidPathSyntax, match="not a derivation path string: "):
        parse(0)  # type: ignore


def test_step_validation() -> None:

    for text in ("", "a/b", "#ab", "12", "12h", "x'", "m", "M"):
        with pytest.raises(InvalidPathSyntax, match="invalid text segment: "):
            DerivationStep(StepKind.TEXT, False, text)

    for i in (-1, HARDENED):
        with pytest.raises(IndexOutOfRange, match="invalid index: "):
            DerivationStep(StepKind.INDEX, False, i)

    with pytest.raises(InvalidHexSegment, match="invalid hex material: "):
        DerivationStep(StepKind.HEX, False, b"")

    with pytest.raises(HDTreeValueError, match="not an index step: "):
        DerivationStep(StepKind.TEXT, False, "alice").index

    for i in (-1, 0xFFFFFFFF + 1):
        with pytest.raises(IndexOutOfRange, match="invalid index: "):
            step_from_index_int(i)


def test_index_str() -> None:

    assert int_from_index_str("44") == 44
    assert int_from_index_str("44'") == HARDENED + 44
    assert int_from_index_str("44h") == HARDENED + 44
    assert int_from_index_str("44H") == HARDENED + 44
    with pytest.raises(InvalidPathSyntax, match="not a decimal index: "):
        int_from_index_str("alice")

    assert str_from_index_int(44) == "44"
    assert str_from_index_int(HARDENED + 44) == "44'"
    assert str_from_index_int(HARDENED + 44, "h") == "44h"
    assert str_from_index_int(0xFFFFFFFF, "H") == "2147483647H"
    with pytest.raises(HDTreeValueError, match="invalid hardening symbol: "):
        str_from_index_int(HARDENED + 44, "x")
    for i in (-1, 0xFFFFFFFF + 1):
        with pytest.raises(IndexOutOfRange, match="invalid index: "):
            str_from_index_int(i)


def test_parsed_path() -> None:

    parsed_path = parse("m/1/2")
    assert parsed_path_from_der_path(parsed_path) is parsed_path
    assert parsed_path_from_der_path(HARDENED + 1) == ParsedPath(
        False, (DerivationStep(StepKind.INDEX, True, 1),)
    )
    assert str_from_der_path(HARDENED + 1) == "1'"
    assert str_from_der_path([]) == ""
