# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Version information."""

from __future__ import annotations

version = "0.1.0"
version_tuple = (0, 1, 0)
