"""Shared utilities for food-web flux computations.

This module provides common functions used across the package:
- Tolerance constant for floating point comparisons
- Shape validation (square matrices, index-aligned vectors)
- Diet-preference normalization
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .errors import DomainError, ShapeError


# =============================================================================
# Tolerance constant for floating point comparisons
# =============================================================================
FLOAT_TOL = 1e-12


# =============================================================================
# Shape validation
# =============================================================================
def as_square_matrix(mat: NDArray[np.float64], *, name: str = "mat") -> NDArray[np.float64]:
    """Coerce to a float (n, n) array or raise ShapeError."""
    M = np.asarray(mat, dtype=float)
    if M.ndim != 2 or M.shape[0] != M.shape[1]:
        raise ShapeError(f"{name} must be square, got shape {M.shape}")
    return M


def as_vector(
    values: Sequence[float] | NDArray[np.float64],
    n: int,
    *,
    name: str,
) -> NDArray[np.float64]:
    """Coerce to a float (n,) array or raise ShapeError.

    Never truncates or broadcasts: a scalar or a vector of the wrong length
    is an error.
    """
    v = np.asarray(values, dtype=float)
    if v.shape != (n,):
        raise ShapeError(f"{name} must have shape ({n},), got {v.shape}")
    return v


def read_only(a: np.ndarray) -> np.ndarray:
    """Private, non-writable copy of an array (for frozen records)."""
    out = np.array(a, copy=True)
    out.setflags(write=False)
    return out


def as_mask(mask: Sequence[bool] | NDArray[np.bool_], n: int) -> NDArray[np.bool_]:
    """Coerce to a boolean (n,) mask or raise ShapeError."""
    m = np.asarray(mask, dtype=bool)
    if m.shape != (n,):
        raise ShapeError(f"mask must have shape ({n},), got {m.shape}")
    return m


# =============================================================================
# Diet preferences
# =============================================================================
def normalize_columns(W: NDArray[np.float64], *, tol: float = FLOAT_TOL) -> NDArray[np.float64]:
    """Scale each column to sum to one.

    Columns summing to (numerically) zero are left as zeros; in a
    resource-by-consumer matrix these are species without resources.

    Args:
        W: (n, n) non-negative matrix
        tol: Tolerance for zero comparison

    Returns:
        Column-normalized copy of W
    """
    W = np.array(W, dtype=float)
    colsums = W.sum(axis=0)
    has_diet = colsums > tol
    W[:, has_diet] = W[:, has_diet] / colsums[has_diet]
    W[:, ~has_diet] = 0.0
    return W


# =============================================================================
# Efficiency validation
# =============================================================================
def check_efficiencies(eff: NDArray[np.float64]) -> None:
    """Assimilation efficiencies must be finite and lie in (0, 1]."""
    eff = np.asarray(eff, dtype=float)
    if np.any(~((eff > 0) & (eff <= 1))):
        raise DomainError(f"efficiencies must lie in (0, 1], got {eff[~((eff > 0) & (eff <= 1))].tolist()}")


def check_link_efficiencies(eff: NDArray[np.float64], mat: NDArray[np.float64]) -> None:
    """Link efficiencies lie in [0, 1] and are > 0 on every existing link."""
    eff = np.asarray(eff, dtype=float)
    if np.any(~((eff >= 0) & (eff <= 1))):
        raise DomainError("link efficiencies must be finite and lie in [0, 1]")
    if np.any((np.asarray(mat) > 0) & ~(eff > 0)):
        raise DomainError("link efficiencies must be > 0 on every link")
