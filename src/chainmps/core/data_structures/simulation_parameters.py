# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Simulation parameters for batched expectation-value simulation.

This module provides the ExpectationSimParams class which configures a batch run: the MPS bond dimension cap,
truncation cutoff, gate fusion, and how the resolution phase is parallelized.
"""

from __future__ import annotations


class ExpectationSimParams:
    """Expectation Simulation Parameters.

    A class to represent the parameters for evaluating a batch of circuits against Pauli-sum observables.

    Attributes:
    -----------
    bond_dim : int
        The maximum bond dimension of the MPS. Default is 2.
    singular_value_cutoff : float
        Relative cutoff below which kept singular values are set to zero. Default is 0 (disabled).
    fuse_gates : bool
        If True, adjacent gates sharing qubits are fused before simulation.
    parallel : bool
        If True, programs are resolved on a thread pool.
    max_workers : int or None
        Upper bound on resolution workers. None uses all available CPUs.
    show_progress : bool
        If True, a progress bar is shown for the simulation phase.
    """

    def __init__(
        self,
        bond_dim: int = 2,
        *,
        singular_value_cutoff: float = 0.0,
        fuse_gates: bool = True,
        parallel: bool = True,
        max_workers: int | None = None,
        show_progress: bool = False,
    ) -> None:
        """Expectation simulation parameters initialization.

        Parameters
        ----------
        bond_dim : int, optional
            Maximum bond dimension of the MPS, by default 2. Must be at least 2.
        singular_value_cutoff : float, optional
            Relative singular value cutoff in [0, 1), by default 0.
        fuse_gates : bool, optional
            Whether to fuse gates before simulation, by default True.
        parallel : bool, optional
            Whether to resolve programs in parallel, by default True.
        max_workers : int | None, optional
            Maximum number of resolution workers, by default None.
        show_progress : bool, optional
            Whether to display a tqdm progress bar, by default False.

        Raises:
            ValueError: If a parameter is out of range.
        """
        if isinstance(bond_dim, bool) or int(bond_dim) != bond_dim or bond_dim < 2:
            msg = f"bond_dim must be an integer >= 2, got {bond_dim}."
            raise ValueError(msg)
        if not 0.0 <= singular_value_cutoff < 1.0:
            msg = f"singular_value_cutoff must lie in [0, 1), got {singular_value_cutoff}."
            raise ValueError(msg)
        if max_workers is not None and max_workers < 1:
            msg = f"max_workers must be positive, got {max_workers}."
            raise ValueError(msg)

        self.bond_dim = int(bond_dim)
        self.singular_value_cutoff = float(singular_value_cutoff)
        self.fuse_gates = fuse_gates
        self.parallel = parallel
        self.max_workers = max_workers
        self.show_progress = show_progress

    def __repr__(self) -> str:
        """Readable summary of the configuration."""
        return (
            f"ExpectationSimParams(bond_dim={self.bond_dim}, singular_value_cutoff={self.singular_value_cutoff}, "
            f"fuse_gates={self.fuse_gates}, parallel={self.parallel}, max_workers={self.max_workers}, "
            f"show_progress={self.show_progress})"
        )
