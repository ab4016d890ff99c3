# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""This module implements conversion functions for quantum circuits using their DAG representations.

It provides utilities to:
  - Convert a DAGCircuit into an ordered list of ResolvedGate objects.
  - Obtain dense, big-endian matrices for instructions, through the GateLibrary where possible.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from qiskit.quantum_info import Operator

from ...core.data_structures.program import ResolvedGate
from ...core.libraries.gate_library import GateLibrary

if TYPE_CHECKING:
    from numpy.typing import NDArray
    from qiskit.dagcircuit import DAGCircuit, DAGOpNode

#: Instructions that carry no unitary action on the state.
IGNORED_INSTRUCTIONS = frozenset({"measure", "barrier", "delay"})


def little_to_big_endian(matrix: NDArray[np.complex128], num_qubits: int) -> NDArray[np.complex128]:
    """Reorder a qiskit (little-endian) matrix so the first qubit becomes the most significant bit.

    Args:
        matrix: Matrix of shape (2**num_qubits, 2**num_qubits) in qiskit ordering.
        num_qubits: The number of qubits.

    Returns:
        NDArray[np.complex128]: The reordered matrix.
    """
    if num_qubits == 1:
        return matrix
    tensor = matrix.reshape([2] * (2 * num_qubits))
    outs = list(reversed(range(num_qubits)))
    ins = [num_qubits + axis for axis in outs]
    dim = 2**num_qubits
    return tensor.transpose(outs + ins).reshape(dim, dim)


def instruction_matrix(node: DAGOpNode) -> NDArray[np.complex128]:
    """Dense matrix of a DAG node in big-endian qubit order.

    Gates registered in the GateLibrary are built from their numeric parameters; anything else is converted through
    qiskit's Operator.

    Args:
        node: The node of a fully bound circuit.

    Returns:
        NDArray[np.complex128]: The gate matrix.

    Raises:
        ValueError: If the instruction has no unitary matrix.
    """
    name = node.op.name
    if GateLibrary.has(name):
        params = [float(p) for p in node.op.params]
        return GateLibrary.create(name, params).matrix
    try:
        matrix = Operator(node.op).data
    except Exception as err:
        msg = f"Instruction {name} has no unitary matrix and cannot be simulated."
        raise ValueError(msg) from err
    return little_to_big_endian(np.asarray(matrix, dtype=np.complex128), len(node.qargs))


def convert_dag_to_gates(dag: DAGCircuit) -> list[ResolvedGate]:
    """Convert a DAGCircuit into an ordered list of ResolvedGate objects.

    This function traverses the input DAGCircuit in topological order and creates one gate per operation node,
    skipping measurements, barriers and delays.

    Args:
        dag: The DAGCircuit of a fully bound circuit.

    Returns:
        list[ResolvedGate]: The gates in application order.
    """
    algorithm = []
    for node in dag.topological_op_nodes():
        if node.op.name in IGNORED_INSTRUCTIONS:
            continue
        sites = tuple(dag.find_bit(qubit).index for qubit in node.qargs)
        algorithm.append(ResolvedGate(sites, instruction_matrix(node), node.op.name))
    return algorithm
