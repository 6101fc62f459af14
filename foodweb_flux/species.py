from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

from .errors import DomainError, ShapeError
from .utils import (
    as_mask,
    as_square_matrix,
    as_vector,
    check_efficiencies,
    check_link_efficiencies,
    read_only,
)


@dataclass(frozen=True)
class SpeciesCollection:
    """Trophic network with index-aligned per-species attributes.

    Orientation follows the usual fluxing convention:
      mat[i, j] > 0  <=>  consumer j feeds on resource i
    so rows are resources and columns are consumers.

    Shapes:
      mat: (n, n)
      biomasses, bodymasses, efficiencies, names: (n,)
      losses: (n,) or None (derived; attached with with_losses())
      link_efficiencies: (n, n) or None (efficiency of each link i -> j)

    Names identify species and must be unique. Stored arrays are private
    read-only copies.

    Every subsetting operation applies one mask to both matrix axes and to
    every vector, and returns a new collection.
    """

    mat: np.ndarray
    biomasses: np.ndarray
    bodymasses: np.ndarray
    efficiencies: np.ndarray
    names: np.ndarray
    losses: np.ndarray | None = None
    link_efficiencies: np.ndarray | None = None

    def __post_init__(self):
        mat = read_only(as_square_matrix(self.mat))
        n = mat.shape[0]
        object.__setattr__(self, "mat", mat)
        for field in ("biomasses", "bodymasses", "efficiencies"):
            object.__setattr__(self, field, read_only(as_vector(getattr(self, field), n, name=field)))

        names = read_only(np.asarray(self.names, dtype=str))
        if names.shape != (n,):
            raise ShapeError(f"names must have shape ({n},), got {names.shape}")
        if np.unique(names).size != n:
            raise DomainError(f"species names must be unique, got {names.tolist()}")
        object.__setattr__(self, "names", names)

        if self.losses is not None:
            losses = read_only(as_vector(self.losses, n, name="losses"))
            if np.any(~(losses >= 0) | ~np.isfinite(losses)):
                raise DomainError("losses must be non-negative and finite")
            object.__setattr__(self, "losses", losses)

        if self.link_efficiencies is not None:
            link = read_only(np.asarray(self.link_efficiencies, dtype=float))
            if link.shape != (n, n):
                raise ShapeError(f"link_efficiencies must have shape ({n}, {n}), got {link.shape}")
            check_link_efficiencies(link, mat)
            object.__setattr__(self, "link_efficiencies", link)

        if not np.all(np.isfinite(mat)):
            raise DomainError("interaction matrix entries must be finite")
        if np.any(mat < 0):
            raise DomainError("interaction matrix entries must be non-negative")
        if np.any(~(self.biomasses > 0) | ~np.isfinite(self.biomasses)):
            raise DomainError("biomasses must be positive and finite")
        if np.any(~(self.bodymasses > 0) | ~np.isfinite(self.bodymasses)):
            raise DomainError("body masses must be positive and finite")
        check_efficiencies(self.efficiencies)

    @property
    def n(self) -> int:
        return int(self.mat.shape[0])

    def __len__(self) -> int:
        return self.n

    def index_of(self, name: str) -> int:
        hits = np.flatnonzero(self.names == name)
        if hits.size == 0:
            raise KeyError(name)
        return int(hits[0])

    def basal_mask(self) -> NDArray[np.bool_]:
        """Species without resources (all-zero column)."""
        return ~np.any(self.mat > 0, axis=0)

    def top_predator_mask(self) -> NDArray[np.bool_]:
        """Species without consumers (all-zero row)."""
        return ~np.any(self.mat > 0, axis=1)

    def with_losses(self, losses: Sequence[float] | NDArray[np.float64]) -> SpeciesCollection:
        return SpeciesCollection(
            mat=self.mat,
            biomasses=self.biomasses,
            bodymasses=self.bodymasses,
            efficiencies=self.efficiencies,
            names=self.names,
            losses=losses,
            link_efficiencies=self.link_efficiencies,
        )

    def subset(self, mask: Sequence[bool] | NDArray[np.bool_]) -> SpeciesCollection:
        """Keep species where mask is True; order is preserved."""
        m = as_mask(mask, self.n)
        return SpeciesCollection(
            mat=self.mat[np.ix_(m, m)],
            biomasses=self.biomasses[m],
            bodymasses=self.bodymasses[m],
            efficiencies=self.efficiencies[m],
            names=self.names[m],
            losses=None if self.losses is None else self.losses[m],
            link_efficiencies=(
                None if self.link_efficiencies is None else self.link_efficiencies[np.ix_(m, m)]
            ),
        )

    def filter_by_biomass(self, log_threshold: float) -> SpeciesCollection:
        """Keep species with ln(biomass) >= log_threshold."""
        return self.subset(np.log(self.biomasses) >= log_threshold)

    def remove_species(self, names: str | Iterable[str]) -> SpeciesCollection:
        """Drop the named species (row, column and attributes).

        Raises:
            KeyError: if a name is not in the collection
        """
        if isinstance(names, str):
            names = [names]
        keep = np.ones(self.n, dtype=bool)
        for name in names:
            keep[self.index_of(name)] = False
        return self.subset(keep)


def filter_by_biomass_threshold(
    collection: SpeciesCollection,
    log_threshold: float,
) -> SpeciesCollection:
    """Functional form of SpeciesCollection.filter_by_biomass()."""
    return collection.filter_by_biomass(log_threshold)
