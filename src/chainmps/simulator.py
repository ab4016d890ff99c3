# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""High-level simulator module for using ChainMPS.

This module evaluates a batch of circuits against Pauli-sum observables and returns the expectation values as a dense
(N, M) matrix. A run has two phases:
  - Resolution: every batch item is bound to its symbol map, checked against the 1D chain, converted to numeric gates
    and fused. Items are independent, so this phase runs on a thread pool with chunks balanced by estimated cost.
  - Simulation: a single MPS (plus a scratch MPS for observables) is reset and reused for every item in order. The
    buffers grow when an item needs more qubits and are never shrunk within a batch.

The whole batch fails with the error of the lowest failing batch index; no partial output is returned.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# 1) STANDARD/LIB IMPORTS
# ---------------------------------------------------------------------------
import logging
import multiprocessing
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

# ---------------------------------------------------------------------------
# 2) THIRD-PARTY IMPORTS
# ---------------------------------------------------------------------------
import numpy as np
from qiskit.quantum_info import SparsePauliOp
from tqdm import tqdm

# ---------------------------------------------------------------------------
# 3) LOCAL IMPORTS
# ---------------------------------------------------------------------------
from .circuits.circuit_builder import build_circuit
from .circuits.program_resolver import observable_num_qubits, resolve_program
from .core.data_structures.networks import MPS
from .core.data_structures.observables import PauliSum
from .core.data_structures.simulation_parameters import ExpectationSimParams
from .core.methods.expectation import expect_pauli_sum
from .exceptions import BatchSizeMismatchError, ChainMPSError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray
    from qiskit.circuit import QuantumCircuit

    from .core.data_structures.program import ResolvedGate, SymbolMap

__all__ = ["available_cpus", "grow_capacity", "run"]  # public API of this module

logger = logging.getLogger(__name__)

#: Number of chunks handed to each resolution worker on average.
CHUNKS_PER_WORKER = 4


# ---------------------------------------------------------------------------
# 4) CPU DISCOVERY: respects SLURM and CPU affinity limits.
# ---------------------------------------------------------------------------
def available_cpus() -> int:
    """Determine the number of available CPU cores for parallel execution.

    This function checks the SLURM_CPUS_PER_TASK and SLURM_CPUS_ON_NODE environment variables (indicating a
    SLURM-managed cluster job). If either holds a positive integer, it is returned. Otherwise the CPU affinity of the
    process is used where the platform reports it, falling back to multiprocessing.cpu_count().

    Returns:
        int: The number of available CPU cores for parallel execution.
    """
    for var in ("SLURM_CPUS_PER_TASK", "SLURM_CPUS_ON_NODE"):
        value = os.environ.get(var, "").strip()
        if value:
            try:
                n = int(value)
            except ValueError:
                continue
            if n > 0:
                return n

    try:
        return len(os.sched_getaffinity(0))
    except AttributeError:
        pass

    return multiprocessing.cpu_count() or 1


# ---------------------------------------------------------------------------
# 5) CAPACITY POLICY
# ---------------------------------------------------------------------------
def grow_capacity(current: int, requested: int) -> int:
    """Number of sites the shared MPS buffers must hold for the next batch item.

    The capacity only ever grows: smaller circuits reuse the larger buffer with their unused sites left in |0>.

    Args:
        current: Current number of sites, 0 before the first allocation.
        requested: Number of qubits of the next circuit.

    Returns:
        int: The new capacity, at least 1.
    """
    return max(current, requested, 1)


# ---------------------------------------------------------------------------
# 6) RESOLUTION PHASE
# ---------------------------------------------------------------------------
@dataclass
class _BatchItem:
    gates: list[ResolvedGate]
    num_qubits: int
    observables: list[PauliSum]


def _as_pauli_sum(observable: PauliSum | SparsePauliOp) -> PauliSum:
    if isinstance(observable, PauliSum):
        return observable
    if isinstance(observable, SparsePauliOp):
        return PauliSum.from_sparse_pauli_op(observable)
    msg = f"Observables must be PauliSum or SparsePauliOp, got {type(observable).__name__}."
    raise TypeError(msg)


def _estimate_cost(program: QuantumCircuit) -> int:
    return max(1, len(program.data)) * max(1, program.num_qubits)


def _resolve_item(
    index: int,
    program: QuantumCircuit,
    symbol_map: SymbolMap,
    observables: Sequence[PauliSum | SparsePauliOp],
    sim_params: ExpectationSimParams,
) -> _BatchItem:
    resolved = resolve_program(program, symbol_map, batch_index=index)
    pauli_sums = [_as_pauli_sum(obs) for obs in observables]
    num_qubits = max(resolved.num_qubits, observable_num_qubits(pauli_sums))
    gates = build_circuit(resolved.gates, fuse=sim_params.fuse_gates)
    return _BatchItem(gates, num_qubits, pauli_sums)


def _partition_by_cost(costs: Sequence[int], num_chunks: int) -> list[range]:
    """Split the batch into contiguous index ranges of roughly equal total cost.

    Args:
        costs: Estimated cost per batch item.
        num_chunks: Target number of chunks.

    Returns:
        list[range]: Non-empty, contiguous ranges covering every index once.
    """
    target = sum(costs) / max(1, num_chunks)
    chunks = []
    start = 0
    acc = 0
    for i, cost in enumerate(costs):
        acc += cost
        if acc >= target:
            chunks.append(range(start, i + 1))
            start = i + 1
            acc = 0
    if start < len(costs):
        chunks.append(range(start, len(costs)))
    return chunks


def _resolve_batch(
    programs: Sequence[QuantumCircuit],
    symbol_maps: Sequence[SymbolMap],
    pauli_sums: Sequence[Sequence[PauliSum | SparsePauliOp]],
    sim_params: ExpectationSimParams,
) -> list[_BatchItem]:
    """Resolve all batch items, in parallel if requested.

    Each item writes only its own result slot. Once every worker has finished, the error of the lowest failing batch
    index is raised.

    Returns:
        list[_BatchItem]: One resolved item per batch index.

    Raises:
        Exception: The error of the lowest failing batch index.
    """
    n = len(programs)
    items: list[_BatchItem | None] = [None] * n
    errors: list[Exception | None] = [None] * n

    def resolve_chunk(indices: range) -> None:
        for i in indices:
            try:
                items[i] = _resolve_item(i, programs[i], symbol_maps[i], pauli_sums[i], sim_params)
            except Exception as err:  # noqa: BLE001
                errors[i] = err

    max_workers = min(sim_params.max_workers or available_cpus(), n)
    if sim_params.parallel and max_workers > 1:
        chunks = _partition_by_cost([_estimate_cost(p) for p in programs], max_workers * CHUNKS_PER_WORKER)
        logger.debug("Resolving %d programs in %d chunks on %d threads", n, len(chunks), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            # result() propagates errors outside of the per-item slots
            for fut in [ex.submit(resolve_chunk, chunk) for chunk in chunks]:
                fut.result()
    else:
        resolve_chunk(range(n))

    for i, err in enumerate(errors):
        if err is not None:
            if isinstance(err, ChainMPSError):
                raise err.with_batch_index(i)
            if type(err) in (ValueError, TypeError):
                msg = f"[batch item {i}] {err}"
                raise type(err)(msg) from err
            raise err
    return [item for item in items if item is not None]


# ---------------------------------------------------------------------------
# 7) SIMULATION PHASE
# ---------------------------------------------------------------------------
def _simulate_batch(
    items: Sequence[_BatchItem], num_columns: int, sim_params: ExpectationSimParams
) -> NDArray[np.float64]:
    """Evolve every batch item on the shared buffers and evaluate its observables.

    Args:
        items: The resolved batch.
        num_columns: Width of the output matrix.
        sim_params: Simulation parameters.

    Returns:
        NDArray[np.float64]: The (N, M) expectation values.

    Raises:
        ChainMPSError: Tagged with the failing batch index.
    """
    results = np.zeros((len(items), num_columns), dtype=np.float64)
    capacity = 0
    state: MPS | None = None
    scratch: MPS | None = None

    progress = tqdm(items, desc="Simulating batch", ncols=80, disable=not sim_params.show_progress)
    for i, item in enumerate(progress):
        new_capacity = grow_capacity(capacity, item.num_qubits)
        if state is None or scratch is None:
            state = MPS(new_capacity, sim_params.bond_dim, singular_value_cutoff=sim_params.singular_value_cutoff)
            scratch = MPS(new_capacity, sim_params.bond_dim, singular_value_cutoff=sim_params.singular_value_cutoff)
        elif new_capacity != capacity:
            state.grow(new_capacity)
            scratch.grow(new_capacity)
        capacity = new_capacity

        state.set_zero()
        try:
            for gate in item.gates:
                state.apply_gate(gate)
            for j, pauli_sum in enumerate(item.observables):
                results[i, j] = expect_pauli_sum(state, scratch, pauli_sum)
        except ChainMPSError as err:
            err.with_batch_index(i)
            raise
        logger.debug("Batch item %d: %d gates, truncation error %.3e", i, len(item.gates), state.truncation_error)
    return results


# ---------------------------------------------------------------------------
# 8) PUBLIC ENTRY POINT
# ---------------------------------------------------------------------------
def run(
    programs: Sequence[QuantumCircuit],
    symbol_maps: Sequence[SymbolMap],
    pauli_sums: Sequence[Sequence[PauliSum | SparsePauliOp]],
    sim_params: ExpectationSimParams | None = None,
) -> NDArray[np.float64]:
    """Evaluate a batch of circuits against Pauli-sum observables.

    Row i, column j of the result holds the expectation of ``pauli_sums[i][j]`` in the final state of
    ``programs[i]`` with its symbols bound from ``symbol_maps[i]``. The number of columns is the largest number of
    observables of any item; cells of items with fewer observables are 0.

    Args:
        programs: The circuits, one per batch item. Qubit k is site k of the chain.
        symbol_maps: Parameter values by name, one per batch item.
        pauli_sums: Observables, one sequence per batch item.
        sim_params: Simulation parameters. Defaults to ExpectationSimParams().

    Returns:
        NDArray[np.float64]: The expectation values, shape (len(programs), max observables per item).

    Raises:
        BatchSizeMismatchError: If the three inputs have different lengths.
        UnresolvedSymbolError: If a circuit parameter has no value.
        TopologyError: If a circuit does not fit onto the chain.
        SimulationError: If the numerics break down.
    """
    if sim_params is None:
        sim_params = ExpectationSimParams()

    n = len(programs)
    if len(symbol_maps) != n:
        msg = f"Got {n} programs but {len(symbol_maps)} symbol maps."
        raise BatchSizeMismatchError(msg)
    if len(pauli_sums) != n:
        msg = f"Got {n} programs but {len(pauli_sums)} observable rows."
        raise BatchSizeMismatchError(msg)

    num_columns = max((len(row) for row in pauli_sums), default=0)
    if n == 0:
        return np.zeros((0, num_columns), dtype=np.float64)

    logger.debug("Running batch of %d programs with %r", n, sim_params)
    items = _resolve_batch(programs, symbol_maps, pauli_sums, sim_params)
    return _simulate_batch(items, num_columns, sim_params)
