# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""ChainMPS init file.

ChainMPS evaluates batches of parameterized quantum circuits on a one-dimensional qubit chain against Pauli-sum
observables, using a bond-dimension-limited Matrix Product State.
"""

from __future__ import annotations

import logging

from ._version import version as __version__
from ._version import version_tuple as version_info

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["__version__", "version_info"]
