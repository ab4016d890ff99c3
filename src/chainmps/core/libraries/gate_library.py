# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Library of quantum gates.

This module defines the gates that can be applied to a chain MPS. Each gate is a class derived from BaseGate that
holds its dense matrix. Two-qubit matrices are written in big-endian order with respect to the sites they are set on,
i.e. the first site is the most significant bit. The GateLibrary class maps qiskit instruction names to gate classes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


class BaseGate:
    """Base class representing a quantum gate.

    Attributes:
        name: The name of the gate.
        matrix: The matrix representation of the gate.
        interaction: The number of qubits the gate acts on.
    """

    name: str = "unitary"
    matrix: NDArray[np.complex128]
    interaction: int

    def __init__(self, mat: NDArray[np.complex128]) -> None:
        """Initializes a BaseGate instance with the given matrix.

        Args:
            mat: The matrix representation of the gate.

        Raises:
            ValueError: If the matrix is not square.
            ValueError: If the matrix size is not a power of 2.
        """
        mat = np.asarray(mat, dtype=np.complex128)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            msg = "Matrix must be square"
            raise ValueError(msg)

        log = np.log2(mat.shape[0])
        if not float(log).is_integer() or log < 1:
            msg = f"Matrix dimension {mat.shape[0]} is not a power of 2"
            raise ValueError(msg)

        self.matrix = mat
        self.interaction = int(log)


class X(BaseGate):
    """Pauli-X (NOT) gate."""

    name = "x"

    def __init__(self) -> None:
        """Initializes the Pauli-X gate."""
        super().__init__(np.array([[0, 1], [1, 0]]))


class Y(BaseGate):
    """Pauli-Y gate."""

    name = "y"

    def __init__(self) -> None:
        """Initializes the Pauli-Y gate."""
        super().__init__(np.array([[0, -1j], [1j, 0]]))


class Z(BaseGate):
    """Pauli-Z gate."""

    name = "z"

    def __init__(self) -> None:
        """Initializes the Pauli-Z gate."""
        super().__init__(np.array([[1, 0], [0, -1]]))


class Id(BaseGate):
    """Identity gate."""

    name = "id"

    def __init__(self) -> None:
        """Initializes the identity gate."""
        super().__init__(np.eye(2))


class H(BaseGate):
    """Hadamard gate."""

    name = "h"

    def __init__(self) -> None:
        """Initializes the Hadamard gate."""
        super().__init__(np.array([[1, 1], [1, -1]]) / np.sqrt(2))


class S(BaseGate):
    """Phase gate S = sqrt(Z)."""

    name = "s"

    def __init__(self) -> None:
        """Initializes the S gate."""
        super().__init__(np.diag([1, 1j]))


class Sdg(BaseGate):
    """Inverse of the S gate."""

    name = "sdg"

    def __init__(self) -> None:
        """Initializes the S-dagger gate."""
        super().__init__(np.diag([1, -1j]))


class T(BaseGate):
    """T gate = sqrt(S)."""

    name = "t"

    def __init__(self) -> None:
        """Initializes the T gate."""
        super().__init__(np.diag([1, np.exp(1j * np.pi / 4)]))


class Tdg(BaseGate):
    """Inverse of the T gate."""

    name = "tdg"

    def __init__(self) -> None:
        """Initializes the T-dagger gate."""
        super().__init__(np.diag([1, np.exp(-1j * np.pi / 4)]))


class SX(BaseGate):
    """Square-root of X gate."""

    name = "sx"

    def __init__(self) -> None:
        """Initializes the square-root X gate."""
        super().__init__(0.5 * np.array([[1 + 1j, 1 - 1j], [1 - 1j, 1 + 1j]]))


class SXdg(BaseGate):
    """Inverse of the square-root of X gate."""

    name = "sxdg"

    def __init__(self) -> None:
        """Initializes the inverse square-root X gate."""
        super().__init__(0.5 * np.array([[1 - 1j, 1 + 1j], [1 + 1j, 1 - 1j]]))


class Rx(BaseGate):
    """Rotation about the x-axis, exp(-i theta X / 2).

    Attributes:
        theta: The rotation angle.
    """

    name = "rx"

    def __init__(self, params: list[float]) -> None:
        """Initializes the RX gate.

        Args:
            params: A list containing the single rotation angle.
        """
        self.theta = params[0]
        c, s = np.cos(self.theta / 2), np.sin(self.theta / 2)
        super().__init__(np.array([[c, -1j * s], [-1j * s, c]]))


class Ry(BaseGate):
    """Rotation about the y-axis, exp(-i theta Y / 2).

    Attributes:
        theta: The rotation angle.
    """

    name = "ry"

    def __init__(self, params: list[float]) -> None:
        """Initializes the RY gate.

        Args:
            params: A list containing the single rotation angle.
        """
        self.theta = params[0]
        c, s = np.cos(self.theta / 2), np.sin(self.theta / 2)
        super().__init__(np.array([[c, -s], [s, c]]))


class Rz(BaseGate):
    """Rotation about the z-axis, exp(-i theta Z / 2).

    Attributes:
        theta: The rotation angle.
    """

    name = "rz"

    def __init__(self, params: list[float]) -> None:
        """Initializes the RZ gate.

        Args:
            params: A list containing the single rotation angle.
        """
        self.theta = params[0]
        super().__init__(np.diag([np.exp(-1j * self.theta / 2), np.exp(1j * self.theta / 2)]))


class Phase(BaseGate):
    """Phase gate diag(1, exp(i theta))."""

    name = "p"

    def __init__(self, params: list[float]) -> None:
        """Initializes the phase gate.

        Args:
            params: A list containing the phase angle.
        """
        self.theta = params[0]
        super().__init__(np.diag([1, np.exp(1j * self.theta)]))


class U2(BaseGate):
    """U2 gate with parameters (phi, lambda)."""

    name = "u2"

    def __init__(self, params: list[float]) -> None:
        """Initializes the U2 gate.

        Args:
            params: A list containing two rotation angles [phi, lambda].
        """
        self.phi, self.lam = params
        mat = np.array(
            [[1, -np.exp(1j * self.lam)], [np.exp(1j * self.phi), np.exp(1j * (self.phi + self.lam))]],
        ) / np.sqrt(2)
        super().__init__(mat)


class U(BaseGate):
    """U3 gate with parameters (theta, phi, lambda).

    Attributes:
        theta: The first rotation parameter.
        phi: The second rotation parameter.
        lam: The third rotation parameter.
    """

    name = "u"

    def __init__(self, params: list[float]) -> None:
        """Initializes the U3 gate.

        Args:
            params: A list containing three rotation angles (theta, phi, lambda).
        """
        self.theta, self.phi, self.lam = params
        mat = np.array([
            [np.cos(self.theta / 2), -np.exp(1j * self.lam) * np.sin(self.theta / 2)],
            [
                np.exp(1j * self.phi) * np.sin(self.theta / 2),
                np.exp(1j * (self.phi + self.lam)) * np.cos(self.theta / 2),
            ],
        ])
        super().__init__(mat)


class CX(BaseGate):
    """Controlled-NOT gate, control on the first site."""

    name = "cx"

    def __init__(self) -> None:
        """Initializes the controlled-NOT (CX) gate."""
        super().__init__(np.array([[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 0, 1], [0, 0, 1, 0]]))


class CY(BaseGate):
    """Controlled-Y gate, control on the first site."""

    name = "cy"

    def __init__(self) -> None:
        """Initializes the controlled-Y (CY) gate."""
        super().__init__(np.array([[1, 0, 0, 0], [0, 1, 0, 0], [0, 0, 0, -1j], [0, 0, 1j, 0]]))


class CZ(BaseGate):
    """Controlled-Z gate."""

    name = "cz"

    def __init__(self) -> None:
        """Initializes the controlled-Z (CZ) gate."""
        super().__init__(np.diag([1, 1, 1, -1]))


class CPhase(BaseGate):
    """Controlled phase gate diag(1, 1, 1, exp(i theta))."""

    name = "cp"

    def __init__(self, params: list[float]) -> None:
        """Initializes the controlled phase gate.

        Args:
            params: A list containing the phase angle.
        """
        self.theta = params[0]
        super().__init__(np.diag([1, 1, 1, np.exp(1j * self.theta)]))


class SWAP(BaseGate):
    """SWAP gate."""

    name = "swap"

    def __init__(self) -> None:
        """Initializes the SWAP gate."""
        super().__init__(np.array([[1, 0, 0, 0], [0, 0, 1, 0], [0, 1, 0, 0], [0, 0, 0, 1]]))


class ISWAP(BaseGate):
    """iSWAP gate."""

    name = "iswap"

    def __init__(self) -> None:
        """Initializes the iSWAP gate."""
        super().__init__(np.array([[1, 0, 0, 0], [0, 0, 1j, 0], [0, 1j, 0, 0], [0, 0, 0, 1]]))


class Rxx(BaseGate):
    """Two-qubit XX rotation, exp(-i theta XX / 2)."""

    name = "rxx"

    def __init__(self, params: list[float]) -> None:
        """Initializes the RXX gate.

        Args:
            params: A list containing the rotation angle.
        """
        self.theta = params[0]
        c, s = np.cos(self.theta / 2), -1j * np.sin(self.theta / 2)
        mat = np.array([[c, 0, 0, s], [0, c, s, 0], [0, s, c, 0], [s, 0, 0, c]])
        super().__init__(mat)


class Ryy(BaseGate):
    """Two-qubit YY rotation, exp(-i theta YY / 2)."""

    name = "ryy"

    def __init__(self, params: list[float]) -> None:
        """Initializes the RYY gate.

        Args:
            params: A list containing the rotation angle.
        """
        self.theta = params[0]
        c, s = np.cos(self.theta / 2), 1j * np.sin(self.theta / 2)
        mat = np.array([[c, 0, 0, s], [0, c, -s, 0], [0, -s, c, 0], [s, 0, 0, c]])
        super().__init__(mat)


class Rzz(BaseGate):
    """Two-qubit ZZ rotation, exp(-i theta ZZ / 2)."""

    name = "rzz"

    def __init__(self, params: list[float]) -> None:
        """Initializes the RZZ gate.

        Args:
            params: A list containing the rotation angle.
        """
        self.theta = params[0]
        phase = np.exp(-1j * self.theta / 2)
        super().__init__(np.diag([phase, np.conj(phase), np.conj(phase), phase]))


class GateLibrary:
    """A collection of quantum gate classes keyed by their qiskit instruction name.

    Gates without parameters are constructed without arguments; parameterized gates take the list of their numeric
    parameters.
    """

    x = X
    y = Y
    z = Z
    id = Id
    h = H
    s = S
    sdg = Sdg
    t = T
    tdg = Tdg
    sx = SX
    sxdg = SXdg
    rx = Rx
    ry = Ry
    rz = Rz
    p = Phase
    u = U
    u3 = U
    u2 = U2
    cx = CX
    cy = CY
    cz = CZ
    cp = CPhase
    swap = SWAP
    iswap = ISWAP
    rxx = Rxx
    ryy = Ryy
    rzz = Rzz

    @classmethod
    def has(cls, name: str) -> bool:
        """Whether a gate class is registered under ``name``.

        Args:
            name: qiskit instruction name.

        Returns:
            bool: True if the library provides the gate.
        """
        gate_class = getattr(cls, name, None)
        return isinstance(gate_class, type) and issubclass(gate_class, BaseGate)

    @classmethod
    def create(cls, name: str, params: list[float] | None = None) -> BaseGate:
        """Instantiate the gate registered under ``name``.

        Args:
            name: qiskit instruction name.
            params: Numeric gate parameters, if the gate is parameterized.

        Returns:
            BaseGate: The gate instance.

        Raises:
            KeyError: If no gate is registered under ``name``.
        """
        if not cls.has(name):
            msg = f"Gate {name} not found in GateLibrary."
            raise KeyError(msg)
        gate_class = getattr(cls, name)
        if params:
            return gate_class(params)
        return gate_class()
