# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Program resolution.

This module turns one batch item, a possibly parameterized QuantumCircuit together with its symbol map, into a
ResolvedProgram: an ordered list of fully numeric gates on chain sites. It also validates that the circuit fits onto a
one-dimensional chain and sizes the chain for the observables of the item.

Resolution has no side effects, so independent batch items can be resolved concurrently.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from qiskit.converters import circuit_to_dag

from ..core.data_structures.program import ResolvedProgram
from ..exceptions import TopologyError, UnresolvedSymbolError
from .utils.dag_utils import IGNORED_INSTRUCTIONS, convert_dag_to_gates

if TYPE_CHECKING:
    from collections.abc import Iterable

    from qiskit.circuit import QuantumCircuit

    from ..core.data_structures.observables import PauliSum
    from ..core.data_structures.program import SymbolMap

logger = logging.getLogger(__name__)


def check_qubits_in_1d(program: QuantumCircuit, batch_index: int | None = None) -> None:
    """Checks that every gate of the circuit fits onto the chain.

    Qubit k of the circuit is site k of the chain, so two-qubit gates must act on neighboring indices.

    Args:
        program: The circuit.
        batch_index: Index of the batch item, attached to the error.

    Raises:
        TopologyError: If a gate acts on three or more qubits or a two-qubit gate acts on non-neighboring qubits.
    """
    for instruction in program.data:
        name = instruction.operation.name
        if name in IGNORED_INSTRUCTIONS:
            continue
        qubits = [program.find_bit(qubit).index for qubit in instruction.qubits]
        if len(qubits) > 2:
            msg = f"Gate {name} acts on {len(qubits)} qubits {qubits}; only one- and two-qubit gates are supported."
            raise TopologyError(msg, batch_index)
        if len(qubits) == 2 and abs(qubits[0] - qubits[1]) != 1:
            msg = f"Gate {name} acts on non-adjacent qubits {qubits[0]} and {qubits[1]}; the circuit is not 1D."
            raise TopologyError(msg, batch_index)


def observable_num_qubits(pauli_sums: Iterable[PauliSum]) -> int:
    """Number of chain sites the observables reach.

    Qubits an observable touches but the circuit never declares stay in |0> and still take part in the contraction.

    Args:
        pauli_sums: Observables of one batch item.

    Returns:
        int: One past the highest qubit with a non-identity factor, 0 if there is none.
    """
    return max((q + 1 for pauli_sum in pauli_sums for q in pauli_sum.qubits), default=0)


def bind_symbols(program: QuantumCircuit, symbol_map: SymbolMap, batch_index: int | None = None) -> QuantumCircuit:
    """Assign every circuit parameter from the symbol map, matching by parameter name.

    Args:
        program: The circuit.
        symbol_map: Values by symbol name. Names the circuit does not use are ignored.
        batch_index: Index of the batch item, attached to the error.

    Returns:
        QuantumCircuit: A bound copy, or the circuit itself if it has no parameters.

    Raises:
        UnresolvedSymbolError: If a parameter has no value.
    """
    if not program.parameters:
        return program
    values = {}
    missing = []
    for parameter in program.parameters:
        if parameter.name in symbol_map:
            values[parameter] = float(symbol_map[parameter.name])
        else:
            missing.append(parameter.name)
    if missing:
        raise UnresolvedSymbolError(missing, batch_index)
    return program.assign_parameters(values, inplace=False)


def resolve_program(
    program: QuantumCircuit, symbol_map: SymbolMap, batch_index: int | None = None
) -> ResolvedProgram:
    """Resolve one batch item into numeric gates.

    Args:
        program: The circuit, possibly parameterized.
        symbol_map: Values for the circuit's symbols.
        batch_index: Index of the batch item, attached to errors and logs.

    Returns:
        ResolvedProgram: The gates in topological order and the circuit's qubit count.

    Raises:
        TopologyError: If the circuit does not fit onto a chain.
        UnresolvedSymbolError: If a symbol has no value.
    """
    check_qubits_in_1d(program, batch_index)
    bound = bind_symbols(program, symbol_map, batch_index)
    gates = convert_dag_to_gates(circuit_to_dag(bound))
    logger.debug("Resolved batch item %s: %d gates on %d qubits", batch_index, len(gates), program.num_qubits)
    return ResolvedProgram(gates, program.num_qubits)
