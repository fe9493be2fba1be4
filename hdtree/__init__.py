#!/usr/bin/env python3

# Copyright (C) 2023 The hdtree developers
#
# This file is part of hdtree. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdtree including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"__init__ module for the hdtree package."

name = "hdtree"
__version__ = "2023.6.1"
__author__ = "The hdtree developers"
__author_email__ = "devs@hdtree.org"
__copyright__ = "Copyright (C) 2023 The hdtree developers"
__license__ = "MIT License"
