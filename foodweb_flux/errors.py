"""Exception types raised before data reaches the flux solver."""

from __future__ import annotations


class DomainError(ValueError):
    """A scaling-law or model precondition is violated (e.g. mass <= 0)."""


class ShapeError(ValueError):
    """Attribute vectors and interaction matrix have inconsistent shapes."""


class FluxSolveError(RuntimeError):
    """The biomass-balance system has no non-negative solution."""
