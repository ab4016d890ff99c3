# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Expectation values of Pauli sums.

The expectation of a Pauli string is computed the same way a local observable is measured on an MPS: the state is
copied into a scratch buffer, the single-qubit Pauli matrices are contracted into the scratch tensors, and the scalar
product with the untouched state is taken. Dividing by <psi|psi> removes any residual norm drift from truncation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from ...exceptions import SimulationError, TopologyError
from ..data_structures.observables import PAULI_MATRICES

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..data_structures.networks import MPS
    from ..data_structures.observables import PauliSum

#: Norms below this value are treated as a vanished state.
NORM_TOLERANCE = 1e-24


def state_norm_squared(state: MPS) -> np.float64:
    """Return <psi|psi>.

    Args:
        state: The state.

    Returns:
        np.float64: The squared norm.

    Raises:
        SimulationError: If the state vanished or is not finite.
    """
    norm_sq = np.float64(state.scalar_product(state).real)
    if not np.isfinite(norm_sq) or norm_sq < NORM_TOLERANCE:
        msg = f"State norm degenerated to {norm_sq}; cannot evaluate observables."
        raise SimulationError(msg)
    return norm_sq


def expect_pauli_string(
    state: MPS,
    scratch: MPS,
    paulis: Mapping[int, str],
    norm_sq: np.float64 | None = None,
) -> np.complex128:
    """Expectation value of a single Pauli string.

    Args:
        state: The state. It is not modified.
        scratch: Buffer of the same size as ``state``; overwritten.
        paulis: Mapping from qubit index to "X", "Y" or "Z". Identity factors may be omitted.
        norm_sq: Precomputed <psi|psi>, computed if None.

    Returns:
        np.complex128: <psi|P|psi> / <psi|psi>.

    Raises:
        TopologyError: If a Pauli acts outside the chain.
    """
    if norm_sq is None:
        norm_sq = state_norm_squared(state)
    active = {q: p for q, p in paulis.items() if p != "I"}
    if not active:
        return np.complex128(1.0)

    for qubit in active:
        if not 0 <= qubit < state.length:
            msg = f"Observable acts on qubit {qubit} outside of the chain with {state.length} sites."
            raise TopologyError(msg)

    scratch.copy_from(state)
    for qubit, label in active.items():
        scratch.apply_single_qubit_gate(qubit, PAULI_MATRICES[label])
    return np.complex128(state.scalar_product(scratch) / norm_sq)


def expect_pauli_sum(state: MPS, scratch: MPS, pauli_sum: PauliSum) -> np.float64:
    """Expectation value of a weighted Pauli sum.

    Args:
        state: The state. It is not modified.
        scratch: Buffer of the same size as ``state``; overwritten.
        pauli_sum: The observable.

    Returns:
        np.float64: The real expectation value. An empty sum gives 0.
    """
    if not pauli_sum.terms:
        return np.float64(0.0)
    norm_sq = state_norm_squared(state)
    total = 0.0
    for term in pauli_sum.terms:
        if term.coeff == 0.0:
            continue
        total += term.coeff * expect_pauli_string(state, scratch, term.paulis, norm_sq).real
    return np.float64(total)
