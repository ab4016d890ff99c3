# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for the ExpectationSimParams class.

This module verifies that:
  - ExpectationSimParams instances are created with the documented defaults.
  - Explicit values are stored.
  - Out-of-range bond dimensions, cutoffs and worker counts raise a ValueError.
"""

from __future__ import annotations

import pytest

from chainmps.core.data_structures.simulation_parameters import ExpectationSimParams


def test_defaults() -> None:
    """Test that ExpectationSimParams has the documented defaults."""
    sim_params = ExpectationSimParams()
    assert sim_params.bond_dim == 2
    assert sim_params.singular_value_cutoff == 0.0
    assert sim_params.fuse_gates is True
    assert sim_params.parallel is True
    assert sim_params.max_workers is None
    assert sim_params.show_progress is False


def test_explicit_values() -> None:
    """Test that explicit arguments are stored."""
    sim_params = ExpectationSimParams(
        8, singular_value_cutoff=1e-10, fuse_gates=False, parallel=False, max_workers=3, show_progress=True
    )
    assert sim_params.bond_dim == 8
    assert sim_params.singular_value_cutoff == 1e-10
    assert sim_params.fuse_gates is False
    assert sim_params.parallel is False
    assert sim_params.max_workers == 3
    assert sim_params.show_progress is True
    assert "bond_dim=8" in repr(sim_params)


def test_only_bond_dim_is_positional() -> None:
    """Every option after the bond dimension must be passed by keyword."""
    with pytest.raises(TypeError):
        ExpectationSimParams(8, 1e-10)  # type: ignore[misc]


@pytest.mark.parametrize("bond_dim", [1, 0, -4, 2.5, True])
def test_invalid_bond_dim(bond_dim: object) -> None:
    """Bond dimensions must be integers of at least 2."""
    with pytest.raises(ValueError, match="bond_dim"):
        ExpectationSimParams(bond_dim)


@pytest.mark.parametrize("cutoff", [-0.1, 1.0, 2.0])
def test_invalid_cutoff(cutoff: float) -> None:
    """The relative cutoff must lie in [0, 1)."""
    with pytest.raises(ValueError, match="singular_value_cutoff"):
        ExpectationSimParams(singular_value_cutoff=cutoff)


def test_invalid_max_workers() -> None:
    """At least one worker is required."""
    with pytest.raises(ValueError, match="max_workers"):
        ExpectationSimParams(max_workers=0)
