# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Tensor Network Decompositions.

This module implements left and right moving versions of the QR decomposition and the truncated two-site SVD
which are used to keep the MPS in mixed canonical form with a fixed bond capacity.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import scipy.linalg

from ...exceptions import SimulationError

if TYPE_CHECKING:
    from numpy.typing import NDArray


def right_qr(mps_tensor: NDArray[np.complex128]) -> tuple[NDArray[np.complex128], NDArray[np.complex128]]:
    """Right QR.

    Performs the QR decomposition of an MPS tensor moving to the right.

    Args:
        mps_tensor: The tensor to be decomposed.

    Returns:
        q_tensor: The Q tensor with the left virtual leg and the physical
            leg (phys,left,new).
        r_mat: The R matrix with the right virtual leg (new,right).
    """
    old_shape = mps_tensor.shape
    qr_shape = (old_shape[0] * old_shape[1], old_shape[2])
    mps_tensor = mps_tensor.reshape(qr_shape)
    q_mat, r_mat = np.linalg.qr(mps_tensor)
    new_shape = (old_shape[0], old_shape[1], -1)
    q_tensor = q_mat.reshape(new_shape)
    return q_tensor, r_mat


def left_qr(mps_tensor: NDArray[np.complex128]) -> tuple[NDArray[np.complex128], NDArray[np.complex128]]:
    """Left QR.

    Performs the QR decomposition of an MPS tensor moving to the left.

    Args:
        mps_tensor: The tensor to be decomposed.

    Returns:
        q_tensor: The Q tensor with the physical leg and the right virtual
            leg (phys,new,right).
        r_mat: The R matrix with the left virtual leg (left,new).

    """
    old_shape = mps_tensor.shape
    mps_tensor = mps_tensor.transpose(0, 2, 1)
    qr_shape = (old_shape[0] * old_shape[2], old_shape[1])
    mps_tensor = mps_tensor.reshape(qr_shape)
    q_mat, r_mat = np.linalg.qr(mps_tensor)
    q_tensor = q_mat.reshape((old_shape[0], old_shape[2], -1))
    q_tensor = q_tensor.transpose(0, 2, 1)
    r_mat = r_mat.T
    return q_tensor, r_mat


def stable_svd(
    matrix: NDArray[np.complex128],
) -> tuple[NDArray[np.complex128], NDArray[np.float64], NDArray[np.complex128]]:
    """Thin SVD that falls back to the slower but more robust LAPACK driver.

    numpy uses ``gesdd`` which occasionally fails to converge on ill-conditioned blocks. In that case the
    decomposition is retried with ``gesvd`` through scipy. The result is deterministic for a given input.

    Args:
        matrix: The matrix to be decomposed.

    Returns:
        u_mat: Left singular vectors.
        s_vec: Singular values in descending order.
        v_mat: Right singular vectors (rows).

    Raises:
        SimulationError: If the matrix holds non-finite values or neither driver converges.
    """
    if not np.all(np.isfinite(matrix)):
        msg = "Encountered non-finite values in a two-site block."
        raise SimulationError(msg)
    try:
        return np.linalg.svd(matrix, full_matrices=False)
    except np.linalg.LinAlgError:
        pass
    try:
        return scipy.linalg.svd(matrix, full_matrices=False, lapack_driver="gesvd")
    except (np.linalg.LinAlgError, ValueError) as err:
        msg = f"SVD of a {matrix.shape[0]}x{matrix.shape[1]} two-site block did not converge."
        raise SimulationError(msg) from err


def truncated_two_site_svd(
    theta: NDArray[np.complex128],
    keep: int,
    cutoff: float = 0.0,
) -> tuple[NDArray[np.complex128], NDArray[np.complex128], np.float64]:
    """Split a two-site tensor back into two sites with a fixed shared bond.

    The two-site tensor Θ has index order (phys_i, phys_j, left, right). It is reshaped to the matrix
    (phys_i*left) × (phys_j*right) and decomposed. Exactly ``keep`` singular values survive: the smallest ones are
    discarded first and, if fewer than ``keep`` exist, the bond is padded with zeros. The kept spectrum is rescaled so
    the norm of the block is unchanged.

    Args:
        theta: Two-site tensor (phys_i, phys_j, left, right).
        keep: Dimension of the shared bond after the split.
        cutoff: Kept singular values below ``cutoff * s_max`` are set to zero.

    Returns:
        a_new: Left-orthonormal tensor (phys_i, left, keep).
        b_new: Tensor holding the singular values (phys_j, keep, right).
        discarded: Discarded weight, i.e. the sum of the squared discarded singular values relative to the total.

    Raises:
        SimulationError: If the block cannot be decomposed or vanishes completely.
    """
    phys_i, phys_j, left, right = theta.shape
    theta_mat = theta.transpose(0, 2, 1, 3).reshape(phys_i * left, phys_j * right)
    u_mat, s_vec, v_mat = stable_svd(theta_mat)

    total = np.sum(s_vec**2, dtype=np.float64)
    if total == 0.0:
        msg = "Two-site block vanished during gate application."
        raise SimulationError(msg)

    rank = min(keep, len(s_vec))
    s_kept = s_vec[:rank].copy()
    if cutoff > 0.0:
        s_kept[s_kept < cutoff * s_kept[0]] = 0.0
    kept = np.sum(s_kept**2, dtype=np.float64)
    discarded = np.float64(max(0.0, 1.0 - kept / total))
    # Renormalize to the pre-truncation norm
    s_kept *= np.sqrt(total / kept)

    u_kept = np.zeros((phys_i * left, keep), dtype=np.complex128)
    v_kept = np.zeros((keep, phys_j * right), dtype=np.complex128)
    u_kept[:, :rank] = u_mat[:, :rank]
    v_kept[:rank, :] = s_kept[:, None] * v_mat[:rank, :]

    a_new = u_kept.reshape(phys_i, left, keep)
    b_new = v_kept.reshape(keep, phys_j, right).transpose(1, 0, 2)
    return a_new, b_new, discarded
