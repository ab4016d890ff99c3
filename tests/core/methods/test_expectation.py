# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for expectation values of Pauli strings and sums.

Reference values are computed with qiskit's Statevector for the same circuit, so these tests also check that the
qubit ordering of circuits and observables is handled consistently.
"""

from __future__ import annotations

import numpy as np
import pytest
from qiskit.circuit import QuantumCircuit
from qiskit.quantum_info import SparsePauliOp, Statevector

from chainmps.circuits.program_resolver import resolve_program
from chainmps.core.data_structures.networks import MPS
from chainmps.core.data_structures.observables import PauliSum
from chainmps.core.libraries.gate_library import H, X
from chainmps.core.methods.expectation import expect_pauli_string, expect_pauli_sum, state_norm_squared
from chainmps.exceptions import SimulationError, TopologyError


def random_chain_circuit(num_qubits: int, depth: int, seed: int) -> QuantumCircuit:
    """Random nearest-neighbor circuit.

    Args:
        num_qubits: Number of qubits.
        depth: Number of layers.
        seed: Seed of the random angles.

    Returns:
        QuantumCircuit: The circuit.
    """
    rng = np.random.default_rng(seed)
    qc = QuantumCircuit(num_qubits)
    for layer in range(depth):
        for qubit in range(num_qubits):
            qc.u(*rng.uniform(-np.pi, np.pi, 3), qubit)
        for qubit in range(layer % 2, num_qubits - 1, 2):
            if layer % 3:
                qc.cx(qubit, qubit + 1)
            else:
                qc.cx(qubit + 1, qubit)
            qc.rzz(rng.uniform(-np.pi, np.pi), qubit, qubit + 1)
    return qc


def prepare(qc: QuantumCircuit, bond_dim: int) -> MPS:
    """Simulate a circuit on a fresh MPS."""
    state = MPS(qc.num_qubits, bond_dim)
    for gate in resolve_program(qc, {}).gates:
        state.apply_gate(gate)
    return state


def test_zero_state() -> None:
    """On |0...0>, Z has expectation +1 and X has expectation 0."""
    state = MPS(3)
    scratch = MPS(3)
    assert expect_pauli_string(state, scratch, {0: "Z"}) == pytest.approx(1.0)
    assert expect_pauli_string(state, scratch, {0: "X"}) == pytest.approx(0.0)
    assert expect_pauli_string(state, scratch, {2: "Z", 1: "Z"}) == pytest.approx(1.0)


def test_identity_term() -> None:
    """All-identity terms contribute their coefficient without touching the scratch buffer."""
    state = MPS(2)
    scratch = MPS(2)
    scratch.apply_single_qubit_gate(0, X().matrix)
    assert expect_pauli_string(state, scratch, {}) == 1.0
    assert expect_pauli_string(state, scratch, {1: "I"}) == 1.0
    np.testing.assert_allclose(scratch.to_vec(), [0, 0, 1, 0])
    pauli_sum = PauliSum.from_terms([({}, 0.25), ({0: "Z"}, 2.0)])
    assert expect_pauli_sum(state, scratch, pauli_sum) == pytest.approx(2.25)


def test_empty_sum_is_zero() -> None:
    """The empty Pauli sum is the zero operator."""
    assert expect_pauli_sum(MPS(2), MPS(2), PauliSum()) == 0.0


def test_state_is_not_modified() -> None:
    """Evaluating observables leaves the state untouched."""
    state = MPS(2)
    state.apply_single_qubit_gate(0, H().matrix)
    before = state.to_vec()
    expect_pauli_sum(state, MPS(2), PauliSum.from_label("X0 Y1"))
    np.testing.assert_allclose(state.to_vec(), before)


@pytest.mark.parametrize("label", ["ZIIII", "IXIIY", "ZZIII", "XYZXY", "IIIIX", "YYIZI"])
def test_matches_statevector(label: str) -> None:
    """Pauli strings agree with dense qiskit simulation when the bond dimension is exact."""
    qc = random_chain_circuit(5, 6, seed=11)
    state = prepare(qc, bond_dim=4)
    op = SparsePauliOp(label)
    expected = Statevector(qc).expectation_value(op).real
    value = expect_pauli_sum(state, MPS(5, 4), PauliSum.from_sparse_pauli_op(op))
    assert value == pytest.approx(expected, abs=1e-10)


def test_weighted_sum_matches_statevector() -> None:
    """A weighted sum is the weighted sum of its strings."""
    qc = random_chain_circuit(4, 5, seed=5)
    state = prepare(qc, bond_dim=4)
    op = SparsePauliOp.from_list([("ZZII", 0.5), ("IXXI", -1.5), ("YIIY", 0.25), ("IIII", 2.0)])
    expected = Statevector(qc).expectation_value(op).real
    value = expect_pauli_sum(state, MPS(4, 4), PauliSum.from_sparse_pauli_op(op))
    assert value == pytest.approx(expected, abs=1e-10)


def test_qubit_outside_chain() -> None:
    """Observables outside of the chain are a topology error."""
    with pytest.raises(TopologyError, match="outside"):
        expect_pauli_string(MPS(2), MPS(2), {2: "Z"})


def test_vanished_state() -> None:
    """A state with zero norm cannot be evaluated."""
    state = MPS(2)
    for tensor in state.tensors:
        tensor.fill(0)
    with pytest.raises(SimulationError, match="norm"):
        state_norm_squared(state)
