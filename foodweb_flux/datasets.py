"""Species collections: a built-in example web and .npz archives.

Archive layout (numpy .npz, no pickled objects):
  mat           (n, n) resource-by-consumer interaction matrix
  biomasses     (n,)
  bodymasses    (n,)
  efficiencies  (n,)
  names         (n,) unicode
  link_efficiencies  (n, n), optional
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from .species import SpeciesCollection

ARCHIVE_KEYS = ("mat", "biomasses", "bodymasses", "efficiencies", "names")
OPTIONAL_KEYS = ("link_efficiencies",)

# resource-defined assimilation efficiencies by resource type
EFFICIENCY_DETRITUS = 0.158
EFFICIENCY_PLANT = 0.545
EFFICIENCY_ANIMAL = 0.906


def example_web() -> SpeciesCollection:
    """Ten-species soil food web (acyclic; detritus and algae are basal).

    Biomasses in g/m^2, body masses in mg.
    """
    names = [
        "detritus", "algae", "bacteria", "fungi", "protists",
        "nematodes", "collembola", "mites", "spiders", "centipedes",
    ]
    idx = {nm: i for i, nm in enumerate(names)}
    diets = {
        "bacteria": ["detritus"],
        "fungi": ["detritus"],
        "protists": ["bacteria"],
        "nematodes": ["bacteria", "fungi", "algae"],
        "collembola": ["fungi", "algae", "detritus"],
        "mites": ["nematodes", "collembola"],
        "spiders": ["collembola", "mites"],
        "centipedes": ["nematodes", "collembola", "mites", "spiders"],
    }
    mat = np.zeros((len(names), len(names)))
    for consumer, resources in diets.items():
        for res in resources:
            mat[idx[res], idx[consumer]] = 1.0

    biomasses = [500.0, 50.0, 40.0, 60.0, 5.0, 3.0, 4.0, 2.0, 0.8, 0.5]
    bodymasses = [1e-3, 1e-6, 1e-9, 1e-7, 1e-6, 1e-3, 1e-2, 3e-2, 5.0, 10.0]
    efficiencies = [EFFICIENCY_DETRITUS, EFFICIENCY_PLANT] + [EFFICIENCY_ANIMAL] * 8

    return SpeciesCollection(
        mat=mat,
        biomasses=biomasses,
        bodymasses=bodymasses,
        efficiencies=efficiencies,
        names=names,
    )


def load_collection(path: str | Path) -> SpeciesCollection:
    """Read a species collection from an .npz archive.

    Raises:
        KeyError: if a required array is missing
        ShapeError, DomainError: if the arrays are inconsistent
    """
    with np.load(Path(path), allow_pickle=False) as data:
        missing = [k for k in ARCHIVE_KEYS if k not in data.files]
        if missing:
            raise KeyError(f"{path}: missing arrays {missing}")
        arrays = {k: data[k] for k in ARCHIVE_KEYS + OPTIONAL_KEYS if k in data.files}
    return SpeciesCollection(**arrays)


def save_collection(collection: SpeciesCollection, path: str | Path) -> Path:
    """Write the collection (without derived losses) to an .npz archive."""
    path = Path(path)
    arrays = {k: getattr(collection, k) for k in ARCHIVE_KEYS}
    if collection.link_efficiencies is not None:
        arrays["link_efficiencies"] = collection.link_efficiencies
    np.savez(path, **arrays)
    # np.savez appends .npz when missing
    return path if path.suffix == ".npz" else path.with_name(path.name + ".npz")
