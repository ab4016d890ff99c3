# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tests for program resolution.

This module verifies that circuit parameters are bound by name from the symbol map, that missing symbols and
circuits which do not fit onto a chain are reported with the batch index, and that the chain is sized to reach every
qubit an observable acts on.
"""

from __future__ import annotations

import numpy as np
import pytest
from qiskit.circuit import Parameter, QuantumCircuit
from qiskit.circuit.library import ECRGate
from qiskit.quantum_info import Operator

from chainmps.circuits.program_resolver import (
    bind_symbols,
    check_qubits_in_1d,
    observable_num_qubits,
    resolve_program,
)
from chainmps.circuits.utils.dag_utils import little_to_big_endian
from chainmps.core.data_structures.observables import PauliSum
from chainmps.core.libraries.gate_library import CX, H, Rx, Rz
from chainmps.exceptions import ChainMPSError, TopologyError, UnresolvedSymbolError


def test_resolve_fixed_circuit() -> None:
    """Gates come out in order with their sites and library matrices."""
    qc = QuantumCircuit(3)
    qc.h(0)
    qc.cx(0, 1)
    qc.cx(2, 1)
    resolved = resolve_program(qc, {})
    assert resolved.num_qubits == 3
    assert [g.name for g in resolved.gates] == ["h", "cx", "cx"]
    assert [g.sites for g in resolved.gates] == [(0,), (0, 1), (2, 1)]
    np.testing.assert_allclose(resolved.gates[0].matrix, H().matrix)
    np.testing.assert_allclose(resolved.gates[2].matrix, CX().matrix)


def test_symbols_bound_by_name() -> None:
    """Parameters and parameter expressions are bound from the symbol map; extra names are ignored."""
    theta = Parameter("theta")
    phi = Parameter("phi")
    qc = QuantumCircuit(1)
    qc.rx(theta, 0)
    qc.rz(2 * phi + 0.5, 0)
    resolved = resolve_program(qc, {"theta": 0.3, "phi": -0.1, "unused": 9.0})
    np.testing.assert_allclose(resolved.gates[0].matrix, Rx([0.3]).matrix)
    np.testing.assert_allclose(resolved.gates[1].matrix, Rz([0.3]).matrix)


def test_bind_symbols_without_parameters() -> None:
    """A circuit without parameters is returned as is."""
    qc = QuantumCircuit(1)
    qc.x(0)
    assert bind_symbols(qc, {"a": 1.0}) is qc


def test_missing_symbols() -> None:
    """Every missing symbol is reported, sorted, together with the batch index."""
    qc = QuantumCircuit(2)
    qc.ry(Parameter("b"), 0)
    qc.rzz(Parameter("a"), 0, 1)
    qc.rx(Parameter("c"), 1)
    with pytest.raises(UnresolvedSymbolError) as excinfo:
        resolve_program(qc, {"c": 1.0}, batch_index=3)
    err = excinfo.value
    assert err.symbols == ["a", "b"]
    assert err.batch_index == 3
    assert str(err) == "[batch item 3] Could not resolve symbol(s) a, b."
    assert isinstance(err, KeyError)
    assert isinstance(err, ChainMPSError)


def test_measure_and_barrier_are_ignored() -> None:
    """Non-unitary bookkeeping instructions do not produce gates."""
    qc = QuantumCircuit(2, 2)
    qc.h(0)
    qc.barrier()
    qc.cx(0, 1)
    qc.measure([0, 1], [0, 1])
    resolved = resolve_program(qc, {})
    assert [g.name for g in resolved.gates] == ["h", "cx"]


def test_operator_fallback() -> None:
    """Gates outside of the library are converted through qiskit's Operator."""
    qc = QuantumCircuit(2)
    qc.append(ECRGate(), [0, 1])
    resolved = resolve_program(qc, {})
    expected = little_to_big_endian(Operator(ECRGate()).data, 2)
    np.testing.assert_allclose(resolved.gates[0].matrix, expected)


def test_reset_is_rejected() -> None:
    """Instructions without a unitary cannot be simulated."""
    qc = QuantumCircuit(1)
    qc.reset(0)
    with pytest.raises(ValueError, match="no unitary"):
        resolve_program(qc, {})


def test_non_adjacent_gate() -> None:
    """Two-qubit gates must act on neighboring qubits."""
    qc = QuantumCircuit(3)
    qc.cx(0, 1)
    qc.cx(0, 2)
    with pytest.raises(TopologyError, match="non-adjacent") as excinfo:
        resolve_program(qc, {}, batch_index=1)
    assert excinfo.value.batch_index == 1


def test_three_qubit_gate() -> None:
    """Gates on three or more qubits cannot be placed on the chain."""
    qc = QuantumCircuit(3)
    qc.ccx(0, 1, 2)
    with pytest.raises(TopologyError, match="3 qubits"):
        check_qubits_in_1d(qc)


def test_wide_barrier_is_allowed() -> None:
    """Barriers may span any number of qubits."""
    qc = QuantumCircuit(4)
    qc.barrier()
    check_qubits_in_1d(qc)


def test_observable_num_qubits() -> None:
    """The chain must reach the highest qubit any observable acts on."""
    assert observable_num_qubits([PauliSum.from_label("Z0 Z2")]) == 3
    assert observable_num_qubits([PauliSum.from_label("Z0"), PauliSum.from_label("X3")]) == 4
    assert observable_num_qubits([PauliSum.from_terms([({}, 0.5)])]) == 0
    assert observable_num_qubits([]) == 0
