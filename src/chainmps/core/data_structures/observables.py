# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Pauli-sum observables.

A PauliSum is a real-weighted sum of Pauli strings. Each PauliTerm stores only its non-identity factors as a mapping
from qubit index to one of "X", "Y", "Z", so identity factors never cost a contraction.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from ..libraries.gate_library import X, Y, Z

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from numpy.typing import NDArray
    from qiskit.quantum_info import SparsePauliOp

PAULI_LABELS = frozenset({"I", "X", "Y", "Z"})

PAULI_MATRICES: dict[str, NDArray[np.complex128]] = {
    "X": X().matrix,
    "Y": Y().matrix,
    "Z": Z().matrix,
}

_FACTOR = re.compile(r"^([IXYZ])(\d+)$")


@dataclass(frozen=True)
class PauliTerm:
    """A single weighted Pauli string.

    Attributes:
        paulis: Mapping from qubit index to "X", "Y" or "Z". Identity factors are dropped.
        coeff: Real coefficient.
    """

    paulis: Mapping[int, str] = field(default_factory=dict)
    coeff: float = 1.0

    def __post_init__(self) -> None:
        """Validates labels and drops identities.

        Raises:
            ValueError: If a label is not a Pauli label or a qubit index is negative.
        """
        cleaned: dict[int, str] = {}
        for qubit, label in sorted(self.paulis.items()):
            upper = str(label).upper()
            if upper not in PAULI_LABELS:
                msg = f"Invalid Pauli label {label!r} on qubit {qubit}. Must be one of {sorted(PAULI_LABELS)}."
                raise ValueError(msg)
            if int(qubit) < 0:
                msg = f"Qubit indices must be non-negative, got {qubit}."
                raise ValueError(msg)
            if upper != "I":
                cleaned[int(qubit)] = upper
        object.__setattr__(self, "paulis", cleaned)
        object.__setattr__(self, "coeff", float(self.coeff))

    @property
    def qubits(self) -> list[int]:
        """Qubits with a non-identity factor, ascending."""
        return list(self.paulis)

    def is_identity(self) -> bool:
        """Whether the term is proportional to the identity."""
        return not self.paulis

    def __str__(self) -> str:
        """Compact representation such as ``0.5*X0 Z1``."""
        body = " ".join(f"{p}{q}" for q, p in self.paulis.items()) or "I"
        return f"{self.coeff:g}*{body}"


@dataclass
class PauliSum:
    """A weighted sum of Pauli strings.

    Attributes:
        terms: The terms of the sum. An empty sum is the zero operator.
    """

    terms: list[PauliTerm] = field(default_factory=list)

    @classmethod
    def from_terms(cls, terms: Iterable[tuple[Mapping[int, str], float] | PauliTerm]) -> PauliSum:
        """Build a sum from ``(paulis, coeff)`` pairs or PauliTerm instances.

        Args:
            terms: The terms.

        Returns:
            PauliSum: The resulting sum.
        """
        built = [t if isinstance(t, PauliTerm) else PauliTerm(t[0], t[1]) for t in terms]
        return cls(built)

    @classmethod
    def from_label(cls, label: str, coeff: float = 1.0) -> PauliSum:
        """Build a single-term sum from a label such as ``"Z0 Z1"`` or ``"X3"``.

        Args:
            label: Whitespace separated factors, each a Pauli letter followed by a qubit index.
            coeff: The coefficient.

        Returns:
            PauliSum: The resulting sum.

        Raises:
            ValueError: If a factor cannot be parsed or a qubit appears twice.
        """
        paulis: dict[int, str] = {}
        for token in label.split():
            match = _FACTOR.match(token.upper())
            if match is None:
                msg = f"Cannot parse Pauli factor {token!r}."
                raise ValueError(msg)
            qubit = int(match.group(2))
            if qubit in paulis:
                msg = f"Qubit {qubit} appears twice in {label!r}."
                raise ValueError(msg)
            paulis[qubit] = match.group(1)
        return cls([PauliTerm(paulis, coeff)])

    @classmethod
    def from_sparse_pauli_op(cls, operator: SparsePauliOp, atol: float = 1e-12) -> PauliSum:
        """Convert a qiskit SparsePauliOp.

        qiskit labels are little-endian: the rightmost character acts on qubit 0.

        Args:
            operator: The operator to convert.
            atol: Tolerance on the imaginary part of the coefficients.

        Returns:
            PauliSum: The equivalent sum.

        Raises:
            ValueError: If a coefficient is not real.
        """
        terms = []
        for label, coeff in operator.to_list():
            coeff_c = complex(coeff)
            if abs(coeff_c.imag) > atol:
                msg = f"Observable coefficients must be real, got {coeff_c} for {label}."
                raise ValueError(msg)
            paulis = {q: p for q, p in enumerate(reversed(label)) if p != "I"}
            terms.append(PauliTerm(paulis, coeff_c.real))
        return cls(terms)

    @property
    def qubits(self) -> set[int]:
        """All qubits acted on non-trivially by some term."""
        return {q for term in self.terms for q in term.paulis}

    def __add__(self, other: PauliSum) -> PauliSum:
        """Concatenate the terms of two sums."""
        return PauliSum([*self.terms, *other.terms])

    def __mul__(self, scalar: float) -> PauliSum:
        """Scale every coefficient."""
        return PauliSum([PauliTerm(t.paulis, t.coeff * float(scalar)) for t in self.terms])

    __rmul__ = __mul__

    def __len__(self) -> int:
        """Number of terms."""
        return len(self.terms)

    def __str__(self) -> str:
        """Human readable sum of terms."""
        return " + ".join(str(t) for t in self.terms) or "0"
