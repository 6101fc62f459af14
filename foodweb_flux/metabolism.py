"""Metabolic loss rates from allometric and temperature scaling laws.

Two empirical laws are provided, as plain functions and as callable loss
models that scenario code selects explicitly:

  mass scaling:         X = x0 * M^b                       (x0=0.71, b=-0.25)
  temperature scaling:  X = B0 * M^b * exp(-E / (kB * T))  (B0=0.88, b=0.75)

with M the individual body mass, T the absolute temperature (K) and E the
activation energy (eV). The two exponents have opposite signs; they belong
to two different published parameterizations and are kept separate.

Rates are per unit biomass; the flux solver multiplies them by biomass when
population-level losses are requested.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .errors import DomainError, ShapeError


ABSOLUTE_ZERO_C = -273.15
BOLTZMANN_EV = 8.617e-5  # eV/K


def _positive_masses(bodymasses: Sequence[float] | NDArray[np.float64]) -> NDArray[np.float64]:
    M = np.asarray(bodymasses, dtype=float)
    # ~(M > 0) also catches NaN
    bad = ~(M > 0) | ~np.isfinite(M)
    if np.any(bad):
        raise DomainError(
            f"body masses must be positive and finite; got {M[bad].tolist()}"
        )
    return M


def celsius_to_kelvin(temperature: float | NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert to absolute temperature, rejecting values at or below 0 K."""
    T = np.asarray(temperature, dtype=float)
    bad = ~(T > ABSOLUTE_ZERO_C) | ~np.isfinite(T)
    if np.any(bad):
        raise DomainError(
            f"temperature must be above {ABSOLUTE_ZERO_C} C; got {T[bad].tolist()}"
        )
    return T - ABSOLUTE_ZERO_C


def mass_scaling_loss(
    bodymasses: Sequence[float] | NDArray[np.float64],
    normalization: float = 0.71,
    exponent: float = -0.25,
) -> NDArray[np.float64]:
    """Metabolic loss rate X = normalization * M**exponent, element-wise.

    Raises:
        DomainError: if any body mass is <= 0 or not finite.
    """
    M = _positive_masses(bodymasses)
    return normalization * M**exponent


def temperature_scaling_loss(
    bodymasses: Sequence[float] | NDArray[np.float64],
    temperature: float | NDArray[np.float64],
    normalization: float = 0.88,
    exponent: float = 0.75,
    activation_energy: float = 0.63,
    boltzmann: float = BOLTZMANN_EV,
) -> NDArray[np.float64]:
    """Metabolic loss rate X = B0 * M**b * exp(-E / (kB * (T + 273.15))).

    Args:
        bodymasses: individual body masses, all > 0
        temperature: Celsius, scalar or per-species array broadcastable to
            bodymasses
        normalization: B0
        exponent: allometric exponent b
        activation_energy: E (eV)
        boltzmann: kB (eV/K)

    Raises:
        DomainError: non-positive mass, or temperature at/below absolute zero
        ShapeError: temperature cannot be broadcast against bodymasses
    """
    M = _positive_masses(bodymasses)
    T_abs = celsius_to_kelvin(temperature)
    try:
        shape = np.broadcast_shapes(M.shape, T_abs.shape)
    except ValueError as e:
        raise ShapeError(
            f"temperature shape {T_abs.shape} does not match body masses {M.shape}"
        ) from e
    if shape != M.shape:
        raise ShapeError(
            f"temperature shape {T_abs.shape} would broadcast body masses {M.shape} to {shape}"
        )
    return normalization * M**exponent * np.exp(-activation_energy / (boltzmann * T_abs))


# =============================================================================
# Loss models (selectable variants)
# =============================================================================
@dataclass(frozen=True)
class MassScalingLoss:
    """Body-mass-only loss model; temperature is ignored."""

    normalization: float = 0.71
    exponent: float = -0.25

    uses_temperature = False

    def __call__(
        self,
        bodymasses: Sequence[float] | NDArray[np.float64],
        temperature: float | None = None,
    ) -> NDArray[np.float64]:
        return mass_scaling_loss(bodymasses, self.normalization, self.exponent)


@dataclass(frozen=True)
class TemperatureScalingLoss:
    """Temperature-corrected loss model (Boltzmann-Arrhenius term)."""

    normalization: float = 0.88
    exponent: float = 0.75
    activation_energy: float = 0.63
    boltzmann: float = BOLTZMANN_EV

    uses_temperature = True

    def __call__(
        self,
        bodymasses: Sequence[float] | NDArray[np.float64],
        temperature: float | NDArray[np.float64] | None = None,
    ) -> NDArray[np.float64]:
        if temperature is None:
            raise DomainError("TemperatureScalingLoss requires a temperature")
        return temperature_scaling_loss(
            bodymasses,
            temperature,
            normalization=self.normalization,
            exponent=self.exponent,
            activation_energy=self.activation_energy,
            boltzmann=self.boltzmann,
        )


LossModel = MassScalingLoss | TemperatureScalingLoss
