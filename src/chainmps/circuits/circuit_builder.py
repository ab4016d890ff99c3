# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Gate fusion.

Reduces the number of MPS updates by multiplying gates that can be combined without changing the circuit:
  - consecutive single-qubit gates on the same qubit,
  - single-qubit gates into the next two-qubit gate on that qubit,
  - consecutive two-qubit gates on the same pair of qubits.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ..core.data_structures.program import ResolvedGate

if TYPE_CHECKING:
    from collections.abc import Iterable

_ID = np.eye(2, dtype=np.complex128)


def fuse_gates(first: ResolvedGate, second: ResolvedGate) -> ResolvedGate:
    """Product of two gates acting on the same sites, ``first`` applied first.

    Args:
        first: The earlier gate.
        second: The later gate.

    Returns:
        ResolvedGate: The gate ``second @ first``.

    Raises:
        ValueError: If the gates act on different sites.
    """
    first, second = first.ordered(), second.ordered()
    if first.sites != second.sites:
        msg = f"Cannot fuse gates on sites {first.sites} and {second.sites}."
        raise ValueError(msg)
    return ResolvedGate(first.sites, second.matrix @ first.matrix, "fused")


def build_circuit(gates: Iterable[ResolvedGate], *, fuse: bool = True) -> list[ResolvedGate]:
    """Prepare resolved gates for simulation.

    Two-qubit gates are rewritten on ascending sites. With ``fuse`` the gate list is compressed as described in the
    module docstring; the product of the returned gates equals the product of the inputs.

    Args:
        gates: Gates in application order.
        fuse: Whether to fuse gates.

    Returns:
        list[ResolvedGate]: The gates to apply, in order.
    """
    ordered = [gate.ordered() for gate in gates]
    if not fuse:
        return ordered

    pending: dict[int, ResolvedGate] = {}
    circuit: list[ResolvedGate] = []
    # Index in ``circuit`` of the last emitted gate touching each qubit.
    last_touch: dict[int, int] = {}

    for gate in ordered:
        if gate.num_qubits == 1:
            qubit = gate.sites[0]
            pending[qubit] = fuse_gates(pending[qubit], gate) if qubit in pending else gate
            continue
        if gate.num_qubits > 2:
            for qubit in gate.sites:
                if qubit in pending:
                    circuit.append(pending.pop(qubit))
                    last_touch[qubit] = len(circuit) - 1
            circuit.append(gate)
            for qubit in gate.sites:
                last_touch[qubit] = len(circuit) - 1
            continue

        first, second = gate.sites
        merged = gate
        if first in pending or second in pending:
            before = np.kron(
                pending.pop(first).matrix if first in pending else _ID,
                pending.pop(second).matrix if second in pending else _ID,
            )
            merged = ResolvedGate(gate.sites, gate.matrix @ before, "fused")

        index = last_touch.get(first)
        if index is not None and index == last_touch.get(second) and circuit[index].sites == gate.sites:
            circuit[index] = fuse_gates(circuit[index], merged)
        else:
            circuit.append(merged)
            last_touch[first] = last_touch[second] = len(circuit) - 1

    circuit.extend(pending[qubit] for qubit in sorted(pending))
    return circuit
