#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"""Module hdtree.bip32."""

from hdtree.bip32.bip32 import (
    BIP32Key,
    ExtendedKey,
    XPrv,
    XPub,
    rootxprv_from_seed,
    xkey_from_bip32_key,
    xpub_from_xprv,
)
from hdtree.bip32.der_path import (
    DerivationStep,
    DerPath,
    ParsedPath,
    StepKind,
    int_from_index_str,
    parse,
    str_from_der_path,
    str_from_index_int,
)
from hdtree.bip32.derivation import (
    account_der_path,
    ckd,
    crack_prv_key,
    derive,
    derive_account,
    derive_from_account,
    derive_hardened_hash,
    derive_hardened_index,
    derive_hash,
    derive_index,
    derive_path,
    derive_step,
    derive_text,
    tweak,
)

__all__ = [
    "BIP32Key",
    "ExtendedKey",
    "XPrv",
    "XPub",
    "rootxprv_from_seed",
    "xkey_from_bip32_key",
    "xpub_from_xprv",
    "DerivationStep",
    "DerPath",
    "ParsedPath",
    "StepKind",
    "int_from_index_str",
    "parse",
    "str_from_der_path",
    "str_from_index_int",
    "account_der_path",
    "ckd",
    "crack_prv_key",
    "derive",
    "derive_account",
    "derive_from_account",
    "derive_hardened_hash",
    "derive_hardened_index",
    "derive_hash",
    "derive_index",
    "derive_path",
    "derive_step",
    "derive_text",
    "tweak",
]
