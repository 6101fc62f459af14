from __future__ import annotations

import numpy as np
import pytest

from foodweb_flux.datasets import example_web, load_collection, save_collection
from foodweb_flux.species import SpeciesCollection


def test_example_web_structure():
    web = example_web()
    assert web.n == 10
    assert web.basal_mask().sum() == 2
    assert web.names[web.basal_mask()].tolist() == ["detritus", "algae"]
    assert web.top_predator_mask()[web.index_of("centipedes")]
    # acyclic: the interaction matrix is nilpotent
    assert np.allclose(np.linalg.matrix_power(web.mat, web.n), 0.0)


def test_save_and_load(tmp_path):
    web = example_web().filter_by_biomass(1.0)
    path = save_collection(web, tmp_path / "web")
    assert path.suffix == ".npz"

    loaded = load_collection(path)
    assert loaded.names.tolist() == web.names.tolist()
    assert np.array_equal(loaded.mat, web.mat)
    assert np.allclose(loaded.biomasses, web.biomasses)
    assert np.allclose(loaded.bodymasses, web.bodymasses)
    assert np.allclose(loaded.efficiencies, web.efficiencies)
    assert loaded.losses is None


def test_load_missing_array(tmp_path):
    path = tmp_path / "partial.npz"
    np.savez(path, mat=np.zeros((2, 2)), biomasses=np.ones(2))
    with pytest.raises(KeyError):
        load_collection(path)


def test_save_and_load_link_efficiencies(tmp_path):
    web = example_web()
    link = np.repeat(web.efficiencies[:, None], web.n, axis=1)
    web = SpeciesCollection(
        web.mat, web.biomasses, web.bodymasses, web.efficiencies, web.names,
        link_efficiencies=link,
    )
    loaded = load_collection(save_collection(web, tmp_path / "web.npz"))
    assert np.allclose(loaded.link_efficiencies, link)
    assert load_collection(save_collection(example_web(), tmp_path / "plain.npz")).link_efficiencies is None
