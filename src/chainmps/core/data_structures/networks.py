# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tensor Network Data Structures.

This module implements the Matrix Product State (MPS) used to simulate circuits on a one-dimensional qubit chain.
The MPS owns a fixed set of site buffers whose bond dimensions follow a capacity profile capped by the maximum bond
dimension. Gates are contracted into these buffers in place, and two-qubit gates are followed by a truncated SVD that
brings the shared bond back to its capacity. Keeping the shapes fixed allows one MPS to be reset and reused across many
circuits without reallocating.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import opt_einsum as oe

from ...exceptions import TopologyError
from ..methods.decompositions import left_qr, right_qr, truncated_two_site_svd

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from .program import ResolvedGate

logger = logging.getLogger(__name__)


class MPS:
    """Matrix Product State (MPS) class for representing the state of a qubit chain.

    The index order of every site tensor is (sigma, chi_l-1, chi_l). The bond between sites i and i+1 has the fixed
    capacity min(max_bond_dim, 2**min(i+1, length-1-i)), i.e. it is 1 at the edges and grows toward the interior.

    Attributes:
    length (int): The number of sites in the MPS.
    max_bond_dim (int): The bond dimension cap.
    tensors (list[NDArray[np.complex128]]): List of rank-3 tensors representing the MPS.
    orthogonality_center (int): Site currently holding the norm of the state.
    truncation_error (float): Accumulated discarded weight since the last reset.

    Methods:
    set_zero() -> None:
        Resets the buffers to |0...0> without reallocating.
    grow(length: int) -> None:
        Reallocates the buffers for a longer chain.
    apply_gate(gate: ResolvedGate) -> None:
        Applies a single- or two-qubit gate, truncating the affected bond.
    scalar_product(other: MPS) -> np.complex128:
        Computes <self|other>.
    to_vec() -> NDArray[np.complex128]:
        Converts the MPS to a dense state vector (debugging only).
    """

    def __init__(
        self,
        length: int,
        max_bond_dim: int = 2,
        tensors: list[NDArray[np.complex128]] | None = None,
        singular_value_cutoff: float = 0.0,
    ) -> None:
        """Initializes a Matrix Product State (MPS) in |0...0>.

        Args:
            length: Number of sites (qubits) in the MPS.
            max_bond_dim: Maximum bond dimension. Must be at least 2.
            tensors: Predefined tensors matching the capacity profile. If None, buffers are allocated in |0...0>.
            singular_value_cutoff: Relative cutoff applied to kept singular values after two-qubit gates.

        Raises:
            ValueError: If the length or bond dimension is invalid, or predefined tensors do not fit the profile.
        """
        if length < 1:
            msg = f"An MPS needs at least one site, got {length}."
            raise ValueError(msg)
        if max_bond_dim < 2:
            msg = f"max_bond_dim must be at least 2, got {max_bond_dim}."
            raise ValueError(msg)

        self.length = length
        self.max_bond_dim = max_bond_dim
        self.singular_value_cutoff = singular_value_cutoff
        self.orthogonality_center = 0
        self.truncation_error = 0.0

        if tensors is not None:
            assert len(tensors) == length
            self.tensors = [np.array(t, dtype=np.complex128) for t in tensors]
            self.check_if_valid_mps()
        else:
            self.tensors = self._allocate()
            self.set_zero()

    def bond_capacity(self, bond: int) -> int:
        """Capacity of the bond between sites ``bond`` and ``bond + 1``.

        Bonds outside the chain (the open boundaries) have capacity 1.

        Args:
            bond: Index of the bond, -1 and length-1 denote the boundaries.

        Returns:
            int: The capacity.
        """
        if bond < 0 or bond >= self.length - 1:
            return 1
        return min(self.max_bond_dim, 2 ** min(bond + 1, self.length - 1 - bond))

    def _allocate(self) -> list[NDArray[np.complex128]]:
        return [
            np.zeros((2, self.bond_capacity(site - 1), self.bond_capacity(site)), dtype=np.complex128)
            for site in range(self.length)
        ]

    def set_zero(self) -> None:
        """Reset every site to |0> in place.

        The buffers keep their shapes; only the bond component 0 is populated afterwards.
        """
        for tensor in self.tensors:
            tensor.fill(0)
            tensor[0, 0, 0] = 1
        self.orthogonality_center = 0
        self.truncation_error = 0.0

    def grow(self, length: int) -> None:
        """Reallocate the buffers for a longer chain and reset them to |0...0>.

        Args:
            length: The new number of sites.

        Raises:
            ValueError: If ``length`` is smaller than the current length.
        """
        if length < self.length:
            msg = f"Cannot shrink an MPS from {self.length} to {length} sites."
            raise ValueError(msg)
        logger.debug("Growing MPS from %d to %d sites (bond_dim=%d)", self.length, length, self.max_bond_dim)
        self.length = length
        self.tensors = self._allocate()
        self.set_zero()

    def copy_from(self, other: MPS) -> None:
        """Copy the state of an equally sized MPS into this one without reallocating.

        Args:
            other: The MPS to copy.

        Raises:
            ValueError: If the two buffers have different shapes.
        """
        if other.length != self.length or other.max_bond_dim != self.max_bond_dim:
            msg = (
                f"Cannot copy an MPS with {other.length} sites and bond_dim {other.max_bond_dim} into one with "
                f"{self.length} sites and bond_dim {self.max_bond_dim}."
            )
            raise ValueError(msg)
        for target, source in zip(self.tensors, other.tensors):
            np.copyto(target, source)
        self.orthogonality_center = other.orthogonality_center
        self.truncation_error = other.truncation_error

    def _store(self, site: int, tensor: NDArray[np.complex128]) -> None:
        np.copyto(self.tensors[site], tensor)

    def get_max_bond(self) -> int:
        """Return the largest bond dimension of the network."""
        return max(max(tensor.shape[1], tensor.shape[2]) for tensor in self.tensors)

    def shift_orthogonality_center_right(self, current_orthogonality_center: int) -> None:
        """Shifts orthogonality center right.

        This function performs a QR decomposition to shift the known current center to the right.

        Args:
            current_orthogonality_center (int): current center
        """
        site = current_orthogonality_center
        site_tensor, bond_tensor = right_qr(self.tensors[site])
        self._store(site, site_tensor)
        self._store(site + 1, oe.contract("ij, ajc->aic", bond_tensor, self.tensors[site + 1]))
        self.orthogonality_center = site + 1

    def shift_orthogonality_center_left(self, current_orthogonality_center: int) -> None:
        """Shifts orthogonality center left.

        This function performs a QR decomposition of the transposed tensor to shift the known current center
        to the left.

        Args:
            current_orthogonality_center (int): current center
        """
        site = current_orthogonality_center
        site_tensor, bond_tensor = left_qr(self.tensors[site])
        self._store(site, site_tensor)
        self._store(site - 1, oe.contract("abj, ji->abi", self.tensors[site - 1], bond_tensor))
        self.orthogonality_center = site - 1

    def move_orthogonality_center(self, site: int) -> None:
        """Move the orthogonality center to ``site`` by QR sweeps.

        Args:
            site: Target site.
        """
        while self.orthogonality_center < site:
            self.shift_orthogonality_center_right(self.orthogonality_center)
        while self.orthogonality_center > site:
            self.shift_orthogonality_center_left(self.orthogonality_center)

    def _check_site(self, site: int) -> None:
        if not 0 <= site < self.length:
            msg = f"Site {site} is outside of the chain with {self.length} sites."
            raise ValueError(msg)

    def apply_single_qubit_gate(self, site: int, matrix: NDArray[np.complex128]) -> None:
        """Contract a 2x2 matrix into the physical leg of one site.

        Args:
            site: Target site.
            matrix: The gate matrix.
        """
        self._check_site(site)
        self._store(site, oe.contract("ab, bcd->acd", matrix, self.tensors[site]))

    def apply_two_qubit_gate(self, sites: tuple[int, int], matrix: NDArray[np.complex128]) -> None:
        """Apply a 4x4 matrix to two neighboring sites and truncate their shared bond.

        The orthogonality center is moved to the left site first so that discarding the smallest singular values
        is the optimal truncation. Afterwards the center sits on the right site.

        Args:
            sites: The two sites, in the order matching the significance of ``matrix``.
            matrix: The gate matrix in big-endian order with respect to ``sites``.

        Raises:
            TopologyError: If the sites are not neighbors.
        """
        first, second = sites
        self._check_site(first)
        self._check_site(second)
        if abs(first - second) != 1:
            msg = f"Two-qubit gate on sites {first} and {second} does not act on neighbors."
            raise TopologyError(msg)

        tensor = np.asarray(matrix, dtype=np.complex128).reshape(2, 2, 2, 2)
        if first > second:
            first, second = second, first
            tensor = tensor.transpose(1, 0, 3, 2)

        self.move_orthogonality_center(first)
        theta = oe.contract("abcd, cef, dfg->abeg", tensor, self.tensors[first], self.tensors[second])
        a_new, b_new, discarded = truncated_two_site_svd(
            theta, self.bond_capacity(first), cutoff=self.singular_value_cutoff
        )
        self._store(first, a_new)
        self._store(second, b_new)
        self.orthogonality_center = second
        self.truncation_error += float(discarded)

    def apply_gate(self, gate: ResolvedGate) -> None:
        """Apply a resolved gate.

        Args:
            gate: The gate to apply.

        Raises:
            TopologyError: If the gate acts on more than two qubits.
        """
        if gate.num_qubits == 1:
            self.apply_single_qubit_gate(gate.sites[0], gate.matrix)
        elif gate.num_qubits == 2:
            self.apply_two_qubit_gate((gate.sites[0], gate.sites[1]), gate.matrix)
        else:
            msg = f"Gate {gate.name} acts on {gate.num_qubits} qubits; only one- and two-qubit gates are supported."
            raise TopologyError(msg)

    def scalar_product(self, other: MPS) -> np.complex128:
        """Compute the scalar (inner) product <self|other>.

        The contraction sweeps from left to right carrying a (chi_self, chi_other) transfer matrix, so the
        dense state vector is never formed.

        Args:
            other: The second Matrix Product State. Must have the same length.

        Returns:
            np.complex128: The resulting scalar product.
        """
        assert other.length == self.length, "Scalar product requires equally long chains."
        env = np.ones((1, 1), dtype=np.complex128)
        for a, b in zip(self.tensors, other.tensors):
            env = oe.contract("ab, sac, sbd->cd", env, np.conj(a), b)
        return np.complex128(env[0, 0])

    def norm(self) -> np.float64:
        """Return the 2-norm of the state."""
        return np.float64(np.sqrt(max(self.scalar_product(self).real, 0.0)))

    def check_if_valid_mps(self) -> None:
        """MPS validity check.

        Checks that every tensor matches the capacity profile of the chain.
        """
        for site, tensor in enumerate(self.tensors):
            expected = (2, self.bond_capacity(site - 1), self.bond_capacity(site))
            assert tensor.shape == expected, f"Tensor at site {site} has shape {tensor.shape}, expected {expected}."

    def to_vec(self) -> NDArray[np.complex128]:
        r"""Converts the MPS to a full state vector representation.

        Site 0 is the most significant bit of the returned index.

        Returns:
                A one-dimensional NumPy array of length \(2^L\) representing the state vector.
        """
        vec = self.tensors[0][:, 0, :]
        for tensor in self.tensors[1:]:
            vec = oe.contract("xa, sab->xsb", vec, tensor).reshape(-1, tensor.shape[2])
        return vec[:, 0].copy()
