#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Exception classes.

Every failure raised by hdtree is typed, so that callers can tell
a malformed path from a corrupted record or an invalid key
without parsing error messages.

All of them derive from the regular ValueError or RuntimeError:
callers not interested in the details can just catch those.
"""


class HDTreeValueError(ValueError):
    pass


class HDTreeRuntimeError(RuntimeError):
    pass


# derivation path syntax


class InvalidPathSyntax(HDTreeValueError):
    pass


class IndexOutOfRange(HDTreeValueError):
    pass


class InvalidHexSegment(InvalidPathSyntax):
    pass


# structural and state errors


class ExpectedMasterKey(HDTreeValueError):
    pass


class PrivateKeyRequired(HDTreeValueError):
    pass


class NoPrivateKeyForWIF(PrivateKeyRequired):
    pass


class InvalidExtendedKey(HDTreeValueError):
    pass


class InvalidSeedLength(HDTreeValueError):
    pass


class UnknownKeyFamily(HDTreeValueError):
    pass


# cryptographic invalidity


class InvalidScalarRange(HDTreeValueError):
    pass


class PointNotOnCurve(HDTreeValueError):
    pass


class DerivationExhausted(HDTreeRuntimeError):
    pass


# wire format


class InvalidRecordLength(HDTreeValueError):
    pass


class UnknownVersionPrefix(HDTreeValueError):
    pass


class MalformedPrivateKey(HDTreeValueError):
    pass


class MalformedPublicKey(HDTreeValueError):
    pass


class ChecksumMismatch(HDTreeValueError):
    pass


class TrailingData(HDTreeValueError):
    pass


class InvalidBase58(HDTreeValueError):
    pass
