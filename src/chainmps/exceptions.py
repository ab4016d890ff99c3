# Copyright (c) 2025 Chair for Design Automation, TUM
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Errors raised while evaluating a batch of circuits.

Every error carries the index of the failing batch item when it is known, so that a single terminal failure
can point the caller at the offending circuit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ChainMPSError(Exception):
    """Base class of all errors raised by ChainMPS.

    Attributes:
        batch_index: Index of the batch item that failed, or None if the failure is not tied to one item.
    """

    def __init__(self, message: str, batch_index: int | None = None) -> None:
        """Initializes the error.

        Args:
            message: Human readable description.
            batch_index: Index of the failing batch item, if known.
        """
        self.message = message
        self.batch_index = batch_index
        super().__init__(self._format())

    def _format(self) -> str:
        if self.batch_index is None:
            return self.message
        return f"[batch item {self.batch_index}] {self.message}"

    def __str__(self) -> str:
        """Returns the formatted message (KeyError would otherwise repr() it)."""
        return self._format()

    def with_batch_index(self, batch_index: int) -> ChainMPSError:
        """Attach a batch index to an error raised without one.

        Args:
            batch_index: Index of the failing batch item.

        Returns:
            ChainMPSError: The same error instance, now tagged.
        """
        if self.batch_index is None:
            self.batch_index = batch_index
            self.args = (self._format(),)
        return self


class BatchSizeMismatchError(ChainMPSError, ValueError):
    """Programs, symbol maps and observables disagree on the batch size."""


class UnresolvedSymbolError(ChainMPSError, KeyError):
    """A circuit parameter references a symbol missing from its symbol map."""

    def __init__(self, symbols: Iterable[str], batch_index: int | None = None) -> None:
        """Initializes the error.

        Args:
            symbols: Names of the symbols without a value.
            batch_index: Index of the failing batch item, if known.
        """
        self.symbols = sorted(symbols)
        super().__init__(f"Could not resolve symbol(s) {', '.join(self.symbols)}.", batch_index)


class TopologyError(ChainMPSError, ValueError):
    """The qubits of a program (or observable) cannot be laid out on a 1D chain."""


class SimulationError(ChainMPSError, ArithmeticError):
    """Numerical failure while applying a gate, truncating a bond, or contracting an observable."""
