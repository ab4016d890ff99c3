# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Resolved circuit structures.

A program enters the package as a qiskit QuantumCircuit whose parameters may still be symbolic. Resolution turns it
into a sequence of ResolvedGate objects that only hold site indices and dense matrices.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

#: Mapping from symbol name to its value for one batch item.
SymbolMap = Mapping[str, float]


@dataclass(frozen=True)
class ResolvedGate:
    """A fully numeric gate ready to be applied to an MPS.

    Attributes:
        sites: The sites the gate acts on. For two-qubit gates the first site is the most significant bit of
            ``matrix``.
        matrix: Dense unitary of shape (2**len(sites), 2**len(sites)).
        name: Name of the originating instruction, ``"fused"`` after fusion.
    """

    sites: tuple[int, ...]
    matrix: NDArray[np.complex128] = field(repr=False)
    name: str = "unitary"

    def __post_init__(self) -> None:
        """Normalizes the site tuple and checks the matrix shape.

        Raises:
            ValueError: If the matrix does not match the number of sites.
        """
        object.__setattr__(self, "sites", tuple(int(s) for s in self.sites))
        matrix = np.asarray(self.matrix, dtype=np.complex128)
        dim = 2 ** len(self.sites)
        if matrix.shape != (dim, dim):
            msg = f"Gate {self.name} on sites {self.sites} needs a {dim}x{dim} matrix, got {matrix.shape}."
            raise ValueError(msg)
        object.__setattr__(self, "matrix", matrix)

    @property
    def num_qubits(self) -> int:
        """Number of sites the gate acts on."""
        return len(self.sites)

    def ordered(self) -> ResolvedGate:
        """Return the equivalent gate with ascending sites.

        Two-qubit gates given on (j, i) with j > i are rewritten on (i, j) by swapping the significance of the two
        qubits in the matrix.

        Returns:
            ResolvedGate: Gate with sorted sites.
        """
        if self.num_qubits != 2 or self.sites[0] < self.sites[1]:
            return self
        tensor = self.matrix.reshape(2, 2, 2, 2).transpose(1, 0, 3, 2)
        return ResolvedGate((self.sites[1], self.sites[0]), tensor.reshape(4, 4), self.name)


@dataclass
class ResolvedProgram:
    """Output of resolving one batch item.

    Attributes:
        gates: Ordered gate sequence.
        num_qubits: Number of qubits owned by the program.
    """

    gates: list[ResolvedGate]
    num_qubits: int
