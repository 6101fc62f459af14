"""Equilibrium energy fluxes in a trophic network, and their stability.

Fluxes follow the biomass-balance assumption: at equilibrium each species'
assimilated ingoing flux balances its metabolic losses plus the flux it
loses to its consumers,

  e_j * F_j = L_j + sum_k W[j, k] * F_k

where
  F_j      total ingoing flux of species j
  W[j, k]  share of consumer k's diet made of species j (columns sum to 1)
  e_j      assimilation efficiency of consumer j (diet-weighted if the
           efficiencies are resource- or link-defined)
  L_j      metabolic losses of species j

Basal species have no diet; their efficiency is set to 1 so that F_j is the
primary production sustaining them. The linear system (diag(e) - W) F = L
is solved with scipy.linalg.solve; the flux from i to j is W[i, j] * F_j.

Stability is assessed from the Jacobian of a type-I consumer-resource model
parameterized from the equilibrium fluxes (attack rates a_ij = F_ij/(B_i B_j)):

  J[i, m] = (eff_mi * F[m, i] - F[i, m]) / B_m  -  s_i * delta_im

with s_i the self-regulation of species i.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

import numpy as np
from numpy.typing import NDArray
from scipy import linalg
from scipy.optimize import brentq

from .errors import DomainError, FluxSolveError, ShapeError
from .utils import (
    FLOAT_TOL,
    as_square_matrix,
    as_vector,
    check_efficiencies,
    check_link_efficiencies,
    normalize_columns,
)

logger = logging.getLogger(__name__)

EfficiencyLevel = Literal["prey", "pred", "link"]
EF_LEVELS = ("prey", "pred", "link")


@dataclass(frozen=True)
class FluxSolution:
    fluxes: NDArray[np.float64]        # (n, n) flux from resource i to consumer j
    ingoing: NDArray[np.float64]       # (n,) F_j; primary production for basal species
    efficiencies: NDArray[np.float64]  # (n,) effective e_j used in the balance
    preferences: NDArray[np.float64]   # (n, n) W, column-normalized diets


def diet_preferences(
    mat: NDArray[np.float64],
    biomasses: NDArray[np.float64],
    *,
    bioms_prefs: bool = True,
) -> NDArray[np.float64]:
    """Column-normalized diet matrix W.

    If bioms_prefs, each resource row is weighted by its biomass before
    normalization (consumers feed in proportion to prey availability).
    """
    W = np.asarray(mat, dtype=float)
    if bioms_prefs:
        W = W * biomasses[:, None]
    return normalize_columns(W)


def effective_efficiencies(
    W: NDArray[np.float64],
    efficiencies: NDArray[np.float64],
    ef_level: EfficiencyLevel,
) -> NDArray[np.float64]:
    """Per-consumer efficiency e_j; basal species get 1."""
    n = W.shape[0]
    if ef_level == "prey":
        eff = as_vector(efficiencies, n, name="efficiencies")
        check_efficiencies(eff)
        e = W.T @ eff
    elif ef_level == "pred":
        e = as_vector(efficiencies, n, name="efficiencies").copy()
        check_efficiencies(e)
    elif ef_level == "link":
        eff = np.asarray(efficiencies, dtype=float)
        if eff.shape != (n, n):
            raise ShapeError(f"link efficiencies must have shape ({n}, {n}), got {eff.shape}")
        check_link_efficiencies(eff, W)
        e = (W * eff).sum(axis=0)
    else:
        raise DomainError(f"ef_level must be one of {EF_LEVELS}, got {ef_level!r}")

    basal = W.sum(axis=0) <= FLOAT_TOL
    e[basal] = 1.0
    if np.any(~(e > 0)):
        bad = np.flatnonzero(~(e > 0)).tolist()
        raise DomainError(f"consumers {bad} have zero effective efficiency")
    return e


def solve_fluxes(
    mat: NDArray[np.float64],
    biomasses: NDArray[np.float64],
    losses: NDArray[np.float64],
    efficiencies: NDArray[np.float64],
    *,
    bioms_prefs: bool = True,
    bioms_losses: bool = True,
    ef_level: EfficiencyLevel = "prey",
) -> FluxSolution:
    """Solve the biomass-balance system for equilibrium fluxes.

    Args:
        mat: (n, n) resource-by-consumer interaction matrix (>= 0)
        biomasses: (n,) standing biomasses (> 0)
        losses: (n,) metabolic losses; per unit biomass if bioms_losses
        efficiencies: (n,) for "prey"/"pred", (n, n) for "link"
        bioms_prefs: weight diet preferences by resource biomass
        bioms_losses: multiply losses by biomass
        ef_level: whether efficiencies are resource-, consumer- or link-defined

    Returns:
        FluxSolution

    Raises:
        ShapeError, DomainError: invalid inputs
        FluxSolveError: singular system or negative ingoing flux
    """
    M = as_square_matrix(mat)
    n = M.shape[0]
    B = as_vector(biomasses, n, name="biomasses")
    X = as_vector(losses, n, name="losses")

    if not np.all(np.isfinite(M)):
        raise DomainError("interaction matrix entries must be finite")
    if np.any(M < 0):
        raise DomainError("interaction matrix entries must be non-negative")
    if np.any(~(B > 0) | ~np.isfinite(B)):
        raise DomainError("biomasses must be positive and finite")
    if np.any(~(X >= 0) | ~np.isfinite(X)):
        raise DomainError("losses must be non-negative and finite")

    W = diet_preferences(M, B, bioms_prefs=bioms_prefs)
    e = effective_efficiencies(W, efficiencies, ef_level)
    L = X * B if bioms_losses else X

    if n == 0:
        return FluxSolution(fluxes=np.zeros((0, 0)), ingoing=np.zeros(0), efficiencies=e, preferences=W)

    A = np.diag(e) - W
    try:
        F = linalg.solve(A, L)
    except linalg.LinAlgError as err:
        raise FluxSolveError(f"flux balance system is singular: {err}") from err

    scale = max(1.0, float(np.max(np.abs(F))))
    if np.any(F < -FLOAT_TOL * scale):
        bad = np.flatnonzero(F < -FLOAT_TOL * scale).tolist()
        raise FluxSolveError(
            f"no non-negative fluxes for species {bad}; losses cannot be balanced with these efficiencies"
        )
    F = np.maximum(F, 0.0)

    fluxes = W * F[None, :]
    logger.debug("solved fluxes for %d species, total flux %.6g", n, float(fluxes.sum()))
    return FluxSolution(fluxes=fluxes, ingoing=F, efficiencies=e, preferences=W)


def fluxing(
    mat: NDArray[np.float64],
    biomasses: NDArray[np.float64],
    losses: NDArray[np.float64],
    efficiencies: NDArray[np.float64],
    *,
    bioms_prefs: bool = True,
    bioms_losses: bool = True,
    ef_level: EfficiencyLevel = "prey",
) -> NDArray[np.float64]:
    """Equilibrium flux matrix (n, n); see solve_fluxes()."""
    return solve_fluxes(
        mat,
        biomasses,
        losses,
        efficiencies,
        bioms_prefs=bioms_prefs,
        bioms_losses=bioms_losses,
        ef_level=ef_level,
    ).fluxes


# =============================================================================
# Stability
# =============================================================================
def _link_efficiencies(efficiencies: NDArray[np.float64], n: int, ef_level: EfficiencyLevel) -> NDArray[np.float64]:
    """Efficiency of each link i -> j as an (n, n) matrix."""
    if ef_level == "prey":
        eff = as_vector(efficiencies, n, name="efficiencies")
        check_efficiencies(eff)
        return np.repeat(eff[:, None], n, axis=1)
    if ef_level == "pred":
        eff = as_vector(efficiencies, n, name="efficiencies")
        check_efficiencies(eff)
        return np.repeat(eff[None, :], n, axis=0)
    if ef_level == "link":
        eff = np.asarray(efficiencies, dtype=float)
        if eff.shape != (n, n):
            raise ShapeError(f"link efficiencies must have shape ({n}, {n}), got {eff.shape}")
        check_link_efficiencies(eff, np.zeros((n, n)))
        return eff
    raise DomainError(f"ef_level must be one of {EF_LEVELS}, got {ef_level!r}")


def jacobian(
    fluxes: NDArray[np.float64],
    biomasses: NDArray[np.float64],
    efficiencies: NDArray[np.float64],
    self_regulation: NDArray[np.float64],
    *,
    ef_level: EfficiencyLevel = "prey",
) -> NDArray[np.float64]:
    """Community matrix at the flux equilibrium (see module docstring)."""
    F = as_square_matrix(fluxes, name="fluxes")
    n = F.shape[0]
    B = as_vector(biomasses, n, name="biomasses")
    s = as_vector(self_regulation, n, name="self_regulation")
    if np.any(~(B > 0)):
        raise DomainError("biomasses must be positive")

    E = _link_efficiencies(efficiencies, n, ef_level)
    # gains of i from resource m minus losses of i to consumer m, per unit B_m
    J = ((E * F).T - F) / B[None, :]
    J[np.diag_indices(n)] -= s
    return J


def stability_value(
    fluxes: NDArray[np.float64],
    biomasses: NDArray[np.float64],
    losses: NDArray[np.float64],
    efficiencies: NDArray[np.float64],
    growth_rate: float | NDArray[np.float64],
    *,
    mat: NDArray[np.float64],
    ef_level: EfficiencyLevel = "prey",
    self_regulation: float = 0.0,
) -> float:
    """Largest real part of the Jacobian eigenvalues (< 0 means stable).

    Basal species (no resources in mat, whatever their realised fluxes) are
    self-regulated by growth_rate; every species is additionally
    self-regulated by self_regulation * losses, losses being the
    per-unit-biomass metabolic rates.

    Raises:
        ShapeError: mat or growth_rate does not match the fluxes
    """
    F = as_square_matrix(fluxes, name="fluxes")
    n = F.shape[0]
    if n == 0:
        raise ShapeError("stability of an empty network is undefined")
    X = as_vector(losses, n, name="losses")
    M = as_square_matrix(mat)
    if M.shape != F.shape:
        raise ShapeError(f"mat has shape {M.shape} but fluxes have shape {F.shape}")
    g = np.asarray(growth_rate, dtype=float)
    if g.shape not in ((), (n,)):
        raise ShapeError(f"growth_rate must be a scalar or have shape ({n},), got {g.shape}")
    basal = ~np.any(M > 0, axis=0)

    s = self_regulation * X + np.where(basal, g, 0.0)
    J = jacobian(F, biomasses, efficiencies, s, ef_level=ef_level)
    return float(np.max(np.linalg.eigvals(J).real))


def make_stability(
    fluxes: NDArray[np.float64],
    biomasses: NDArray[np.float64],
    losses: NDArray[np.float64],
    efficiencies: NDArray[np.float64],
    growth_rate: float | NDArray[np.float64],
    *,
    mat: NDArray[np.float64],
    ef_level: EfficiencyLevel = "prey",
    s_max: float = 1e6,
) -> float:
    """Smallest self-regulation multiplier s making the equilibrium stable.

    s is the share of metabolic losses attributed to intraspecific
    interference; the Jacobian diagonal gets -s * losses. Returns 0 if the
    network is already stable. The returned s is the stability threshold:
    any larger value yields a negative stability_value().

    Raises:
        FluxSolveError: no s <= s_max stabilizes the network
    """

    def f(s: float) -> float:
        return stability_value(
            fluxes, biomasses, losses, efficiencies, growth_rate,
            mat=mat, ef_level=ef_level, self_regulation=s,
        )

    if f(0.0) < 0:
        return 0.0

    lo, hi = 0.0, 1.0
    while f(hi) >= 0:
        lo, hi = hi, 2.0 * hi
        if hi > s_max:
            raise FluxSolveError(f"no self-regulation up to {s_max} stabilizes the network")

    s = brentq(f, lo, hi, xtol=1e-12)
    logger.debug("stabilizing self-regulation s=%.6g", s)
    return float(s)
