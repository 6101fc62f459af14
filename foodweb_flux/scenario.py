"""Scenario records for temperature and species-removal comparisons.

A scenario pairs a species collection with a temperature and the quantities
derived from them:

  collection -> losses (selected loss model) -> fluxes (flux solver)

build_scenario() is the only constructor; changing any input (temperature,
body masses, species set) means building a new scenario.

This module defines:
- Scenario dataclass
- build_scenario() entrypoint
- temperature_scenarios() / removal_scenarios() batch builders
- per-species flux statistics and compare_scenarios()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from .errors import DomainError
from .flux import EfficiencyLevel, fluxing
from .metabolism import LossModel
from .species import SpeciesCollection
from .utils import read_only

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scenario:
    name: str
    collection: SpeciesCollection           # with losses attached
    temperature: float | None               # Celsius; None for mass-only losses
    losses: NDArray[np.float64]             # (n,) per unit biomass
    fluxes: NDArray[np.float64]             # (n, n) resource -> consumer
    loss_model: LossModel

    def __post_init__(self):
        object.__setattr__(self, "losses", read_only(np.asarray(self.losses, dtype=float)))
        object.__setattr__(self, "fluxes", read_only(np.asarray(self.fluxes, dtype=float)))

    @property
    def names(self) -> NDArray[np.str_]:
        return self.collection.names

    @property
    def outgoing(self) -> NDArray[np.float64]:
        return outgoing_flux(self.fluxes)

    @property
    def incoming(self) -> NDArray[np.float64]:
        return incoming_flux(self.fluxes)

    @property
    def total_flux(self) -> float:
        return float(self.fluxes.sum())


def build_scenario(
    name: str,
    collection: SpeciesCollection,
    loss_model: LossModel,
    temperature: float | None = None,
    *,
    bioms_prefs: bool = True,
    bioms_losses: bool = True,
    ef_level: EfficiencyLevel = "prey",
) -> Scenario:
    """Compute losses and equilibrium fluxes for one scenario.

    The collection is validated on construction, so shape and domain errors
    surface here before the solver is called. With ef_level="link" the
    collection must carry link_efficiencies.
    """
    losses = loss_model(collection.bodymasses, temperature)
    with_losses = collection.with_losses(losses)
    if ef_level == "link":
        if with_losses.link_efficiencies is None:
            raise DomainError("ef_level=\"link\" requires a collection with link_efficiencies")
        efficiencies = with_losses.link_efficiencies
    else:
        efficiencies = with_losses.efficiencies
    fluxes = fluxing(
        with_losses.mat,
        with_losses.biomasses,
        with_losses.losses,
        efficiencies,
        bioms_prefs=bioms_prefs,
        bioms_losses=bioms_losses,
        ef_level=ef_level,
    )
    logger.debug(
        "scenario %r: %d species, T=%s, total flux %.6g",
        name, with_losses.n, temperature, float(fluxes.sum()),
    )
    return Scenario(
        name=name,
        collection=with_losses,
        temperature=temperature,
        losses=with_losses.losses,
        fluxes=fluxes,
        loss_model=loss_model,
    )


def temperature_scenarios(
    collection: SpeciesCollection,
    temperatures: Mapping[str, float],
    loss_model: LossModel,
    **solver_kw,
) -> dict[str, Scenario]:
    """One scenario per named temperature, e.g. {"cold": 4.0, "warm": 20.0}."""
    return {
        name: build_scenario(name, collection, loss_model, temperature, **solver_kw)
        for name, temperature in temperatures.items()
    }


def removal_scenarios(
    collection: SpeciesCollection,
    loss_model: LossModel,
    temperature: float | None = None,
    species: Iterable[str] | None = None,
    **solver_kw,
) -> dict[str, Scenario]:
    """Baseline plus one scenario per removed species.

    Keys are "baseline" and "without <name>". species defaults to every
    species in the collection.
    """
    out = {"baseline": build_scenario("baseline", collection, loss_model, temperature, **solver_kw)}
    for sp in (collection.names.tolist() if species is None else species):
        key = f"without {sp}"
        out[key] = build_scenario(key, collection.remove_species(sp), loss_model, temperature, **solver_kw)
    return out


# =============================================================================
# Flux statistics
# =============================================================================
def outgoing_flux(fluxes: NDArray[np.float64]) -> NDArray[np.float64]:
    """Total flux leaving each species to its consumers (row sums)."""
    return np.asarray(fluxes, dtype=float).sum(axis=1)


def incoming_flux(fluxes: NDArray[np.float64]) -> NDArray[np.float64]:
    """Total flux consumed by each species (column sums)."""
    return np.asarray(fluxes, dtype=float).sum(axis=0)


def realised_fluxes(fluxes: NDArray[np.float64]) -> NDArray[np.float64]:
    """Strictly positive flux values, flattened row-major."""
    F = np.asarray(fluxes, dtype=float).ravel()
    return F[F > 0]


def compare_scenarios(
    scenarios: Sequence[Scenario],
    *,
    statistic: str = "outgoing",
) -> tuple[list[str], NDArray[np.float64]]:
    """Align a per-species statistic across scenarios by species name.

    Returns:
        (names, table): names is the union of species in first-seen order;
        table has shape (len(names), len(scenarios)) with NaN where a species
        is absent from a scenario.
    """
    if statistic not in ("outgoing", "incoming", "losses"):
        raise DomainError(f"unknown statistic {statistic!r}")

    names: list[str] = []
    for sc in scenarios:
        for nm in sc.names.tolist():
            if nm not in names:
                names.append(nm)

    index = {nm: i for i, nm in enumerate(names)}
    table = np.full((len(names), len(scenarios)), np.nan)
    for col, sc in enumerate(scenarios):
        values = getattr(sc, statistic)
        for nm, v in zip(sc.names.tolist(), values):
            table[index[nm], col] = v
    return names, table
