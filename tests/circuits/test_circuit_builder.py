# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for gate fusion.

Fusion must never change the circuit: every test compares either the fused matrices directly or the final state of
the fused and unfused gate lists.
"""

from __future__ import annotations

import numpy as np
import pytest
from scipy.stats import unitary_group

from chainmps.circuits.circuit_builder import build_circuit, fuse_gates
from chainmps.core.data_structures.networks import MPS
from chainmps.core.data_structures.program import ResolvedGate
from chainmps.core.libraries.gate_library import CX, H, X, Z

I2 = np.eye(2)


def gate(sites: tuple[int, ...], matrix: np.ndarray, name: str = "unitary") -> ResolvedGate:
    """Shorthand for a resolved gate."""
    return ResolvedGate(sites, matrix, name)


def final_state(gates: list[ResolvedGate], length: int) -> np.ndarray:
    """Dense final state of a gate list, simulated without truncation."""
    mps = MPS(length, max_bond_dim=2**length)
    for g in gates:
        mps.apply_gate(g)
    return mps.to_vec()


def test_single_qubit_gates_merge() -> None:
    """Consecutive single-qubit gates on one qubit become one gate."""
    out = build_circuit([gate((0,), H().matrix, "h"), gate((0,), X().matrix, "x")])
    assert len(out) == 1
    assert out[0].name == "fused"
    np.testing.assert_allclose(out[0].matrix, X().matrix @ H().matrix)


def test_single_gate_keeps_name() -> None:
    """A lone gate is passed through."""
    out = build_circuit([gate((1,), Z().matrix, "z")])
    assert [(g.sites, g.name) for g in out] == [((1,), "z")]


def test_fold_into_two_qubit_gate() -> None:
    """Pending single-qubit gates are absorbed by the next two-qubit gate on their qubit."""
    out = build_circuit([gate((0,), H().matrix, "h"), gate((0, 1), CX().matrix, "cx")])
    assert len(out) == 1
    assert out[0].sites == (0, 1)
    np.testing.assert_allclose(out[0].matrix, CX().matrix @ np.kron(H().matrix, I2))


def test_two_qubit_gates_on_same_pair_merge() -> None:
    """CX twice on the same pair, in either orientation, fuses into a single gate."""
    out = build_circuit([gate((0, 1), CX().matrix), gate((0, 1), CX().matrix)])
    assert len(out) == 1
    np.testing.assert_allclose(out[0].matrix, np.eye(4), atol=1e-14)

    out = build_circuit([gate((0, 1), CX().matrix), gate((1, 0), CX().matrix)])
    assert len(out) == 1
    assert out[0].sites == (0, 1)


def test_sandwiched_single_qubit_gate() -> None:
    """A single-qubit gate between two gates on the same pair ends up inside the fused gate."""
    out = build_circuit([gate((0, 1), CX().matrix), gate((1,), H().matrix), gate((0, 1), CX().matrix)])
    assert len(out) == 1
    expected = CX().matrix @ np.kron(I2, H().matrix) @ CX().matrix
    np.testing.assert_allclose(out[0].matrix, expected, atol=1e-14)


def test_no_merge_across_overlapping_gate() -> None:
    """A gate sharing a qubit in between prevents merging."""
    gates = [gate((0, 1), CX().matrix), gate((1, 2), CX().matrix), gate((0, 1), CX().matrix)]
    out = build_circuit(gates)
    assert [g.sites for g in out] == [(0, 1), (1, 2), (0, 1)]


def test_leftover_gates_in_ascending_order() -> None:
    """Single-qubit gates never followed by a two-qubit gate are emitted by qubit."""
    out = build_circuit([gate((2,), X().matrix, "x"), gate((0,), H().matrix, "h"), gate((2,), Z().matrix, "z")])
    assert [g.sites for g in out] == [(0,), (2,)]
    np.testing.assert_allclose(out[1].matrix, Z().matrix @ X().matrix)


def test_without_fusion() -> None:
    """With fusion disabled only the site order of two-qubit gates changes."""
    gates = [gate((0,), H().matrix), gate((1, 0), CX().matrix), gate((0,), X().matrix)]
    out = build_circuit(gates, fuse=False)
    assert [g.sites for g in out] == [(0,), (0, 1), (0,)]


def test_fusion_preserves_random_circuits() -> None:
    """Fused and unfused gate lists prepare the same state."""
    rng = np.random.default_rng(1)
    length = 4
    gates = []
    for _ in range(40):
        site = int(rng.integers(length))
        if rng.random() < 0.5 or site == length - 1:
            gates.append(gate((site,), unitary_group.rvs(2, random_state=rng)))
        elif rng.random() < 0.5:
            gates.append(gate((site, site + 1), unitary_group.rvs(4, random_state=rng)))
        else:
            gates.append(gate((site + 1, site), unitary_group.rvs(4, random_state=rng)))
    fused = build_circuit(gates)
    assert len(fused) < len(gates)
    np.testing.assert_allclose(final_state(fused, length), final_state(gates, length), atol=1e-10)


def test_fuse_gates_requires_same_sites() -> None:
    """Only gates on the same sites can be multiplied."""
    product = fuse_gates(gate((0,), H().matrix), gate((0,), Z().matrix))
    np.testing.assert_allclose(product.matrix, Z().matrix @ H().matrix)
    with pytest.raises(ValueError, match="Cannot fuse"):
        fuse_gates(gate((0,), H().matrix), gate((1,), H().matrix))
