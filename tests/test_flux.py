"""Equilibrium flux solver: balance equations, modes, failures, stability."""

from __future__ import annotations

import numpy as np
import pytest

from foodweb_flux.datasets import example_web
from foodweb_flux.errors import DomainError, FluxSolveError, ShapeError
from foodweb_flux.flux import (
    diet_preferences,
    fluxing,
    jacobian,
    make_stability,
    solve_fluxes,
    stability_value,
)
from foodweb_flux.metabolism import mass_scaling_loss


# plant -> herbivore -> carnivore
CHAIN = np.array([
    [0, 1, 0],
    [0, 0, 1],
    [0, 0, 0],
], dtype=float)
B = np.array([10.0, 2.0, 1.0])
X = np.array([0.1, 0.5, 0.2])
EFF = np.array([0.5, 0.8, 0.9])


def test_chain_prey_efficiencies():
    sol = solve_fluxes(CHAIN, B, X, EFF)
    # L = X*B = [1, 1, 0.2]; e = [1 (basal), 0.5, 0.8]
    assert np.allclose(sol.efficiencies, [1.0, 0.5, 0.8])
    assert np.allclose(sol.ingoing, [3.5, 2.5, 0.25])
    expected = np.array([
        [0, 2.5, 0],
        [0, 0, 0.25],
        [0, 0, 0],
    ])
    assert np.allclose(sol.fluxes, expected)
    assert np.allclose(fluxing(CHAIN, B, X, EFF), expected)


def test_chain_pred_efficiencies():
    F = fluxing(CHAIN, B, X, EFF, ef_level="pred")
    f_c = 0.2 / 0.9
    f_h = (1.0 + f_c) / 0.8
    assert F[1, 2] == pytest.approx(f_c)
    assert F[0, 1] == pytest.approx(f_h)


def test_chain_losses_not_scaled_by_biomass():
    F = fluxing(CHAIN, B, X, EFF, bioms_losses=False)
    assert F[1, 2] == pytest.approx(0.2 / 0.8)
    assert F[0, 1] == pytest.approx((0.5 + 0.25) / 0.5)


def test_link_efficiencies_match_prey_when_constant_per_resource():
    web = example_web()
    X_web = mass_scaling_loss(web.bodymasses)
    link = np.repeat(web.efficiencies[:, None], web.n, axis=1)
    F_prey = fluxing(web.mat, web.biomasses, X_web, web.efficiencies, ef_level="prey")
    F_link = fluxing(web.mat, web.biomasses, X_web, link, ef_level="link")
    assert np.allclose(F_prey, F_link)


def test_diet_preferences():
    mat = np.array([
        [0, 0, 1],
        [0, 0, 1],
        [0, 0, 0],
    ], dtype=float)
    biom = np.array([10.0, 2.0, 1.0])
    assert np.allclose(diet_preferences(mat, biom)[:, 2], [10 / 12, 2 / 12, 0])
    assert np.allclose(diet_preferences(mat, biom, bioms_prefs=False)[:, 2], [0.5, 0.5, 0])
    # basal columns stay empty
    assert np.allclose(diet_preferences(mat, biom)[:, :2], 0.0)


def test_example_web_balance():
    web = example_web()
    X_web = mass_scaling_loss(web.bodymasses)
    sol = solve_fluxes(web.mat, web.biomasses, X_web, web.efficiencies)
    F = sol.fluxes
    L = X_web * web.biomasses

    assert np.all(F >= 0)
    assert np.all(F[web.mat == 0] == 0)
    assert np.all(F[web.mat > 0] > 0)

    consumers = ~web.basal_mask()
    gains = sol.efficiencies * F.sum(axis=0)
    expenses = L + F.sum(axis=1)
    assert np.allclose(gains[consumers], expenses[consumers])
    # basal ingoing flux is the primary production balancing losses and predation
    basal = web.basal_mask()
    assert np.allclose(sol.ingoing[basal], expenses[basal])


def test_empty_network():
    F = fluxing(np.zeros((0, 0)), [], [], [])
    assert F.shape == (0, 0)


def test_invalid_inputs():
    with pytest.raises(ShapeError):
        fluxing(CHAIN, B[:2], X, EFF)
    with pytest.raises(ShapeError):
        fluxing(CHAIN[:, :2], B, X, EFF)
    with pytest.raises(ShapeError):
        fluxing(CHAIN, B, X, EFF, ef_level="link")
    with pytest.raises(DomainError):
        fluxing(CHAIN, B, -X, EFF)
    with pytest.raises(DomainError):
        fluxing(CHAIN, B, X, EFF, ef_level="consumer")
    with pytest.raises(DomainError):
        fluxing(CHAIN, [10.0, 0.0, 1.0], X, EFF)


def test_cannibal_without_balance_fails():
    # 0.5 F = 1 + F has no non-negative solution
    with pytest.raises(FluxSolveError):
        fluxing([[1.0]], [1.0], [1.0], [0.5])


def test_singular_system_fails():
    with pytest.raises(FluxSolveError):
        fluxing([[1.0]], [1.0], [1.0], [1.0])


def test_jacobian_two_species():
    f = 3.0
    F = np.array([[0.0, f], [0.0, 0.0]])
    biom = np.array([4.0, 2.0])
    eff = np.array([0.6, 0.9])
    J = jacobian(F, biom, eff, np.array([0.3, 0.1]))
    assert np.allclose(J, [
        [-0.3, -f / 2.0],
        [0.6 * f / 4.0, -0.1],
    ])


def test_plant_herbivore_stability():
    F = fluxing(CHAIN[:2, :2], B[:2], X[:2], EFF[:2])
    assert stability_value(F, B[:2], X[:2], EFF[:2], growth_rate=1.0, mat=CHAIN[:2, :2]) < 0
    # neutral oscillations without any self-regulation
    assert stability_value(F, B[:2], X[:2], EFF[:2], growth_rate=0.0, mat=CHAIN[:2, :2]) == pytest.approx(0.0, abs=1e-9)
    assert make_stability(F, B[:2], X[:2], EFF[:2], growth_rate=0.0, mat=CHAIN[:2, :2]) == pytest.approx(0.0, abs=1e-8)


def test_make_stability_example_web():
    web = example_web()
    X_web = mass_scaling_loss(web.bodymasses)
    F = fluxing(web.mat, web.biomasses, X_web, web.efficiencies)
    s = make_stability(F, web.biomasses, X_web, web.efficiencies, growth_rate=0.0, mat=web.mat)
    assert s >= 0
    assert stability_value(
        F, web.biomasses, X_web, web.efficiencies, growth_rate=0.0, mat=web.mat,
        self_regulation=1.1 * s + 1e-6,
    ) < 0


def test_non_finite_inputs_rejected():
    chain2 = CHAIN[:2, :2]
    with pytest.raises(DomainError):
        fluxing([[0.0, np.nan], [0.0, 0.0]], [10.0, 2.0], [0.1, 0.1], [0.5, 0.9])
    with pytest.raises(DomainError):
        fluxing(chain2, [np.inf, 2.0], [0.1, 0.1], [0.5, 0.9])
    with pytest.raises(DomainError):
        fluxing(chain2, [10.0, 2.0], [0.1, np.inf], [0.5, 0.9])
    with pytest.raises(DomainError):
        fluxing(chain2, [10.0, 2.0], [np.nan, 0.1], [0.5, 0.9])


def test_efficiencies_outside_unit_interval_rejected():
    chain2 = CHAIN[:2, :2]
    with pytest.raises(DomainError):
        fluxing(chain2, [10.0, 2.0], [0.1, 0.1], [1.5, 0.9])
    with pytest.raises(DomainError):
        fluxing(chain2, [10.0, 2.0], [0.1, 0.1], [0.5, 1.5], ef_level="pred")
    with pytest.raises(DomainError):
        fluxing(chain2, [10.0, 2.0], [0.1, 0.1], [[0.0, 1.5], [0.0, 0.0]], ef_level="link")
    # a link needs a positive efficiency
    with pytest.raises(DomainError):
        fluxing(chain2, [10.0, 2.0], [0.1, 0.1], [[0.0, 0.0], [0.0, 0.0]], ef_level="link")
    with pytest.raises(DomainError):
        jacobian(np.zeros((2, 2)), [10.0, 2.0], [1.5, 0.9], [0.0, 0.0])


def test_stability_shape_errors():
    F = fluxing(CHAIN[:2, :2], B[:2], X[:2], EFF[:2])
    with pytest.raises(ShapeError):
        stability_value(F, B[:2], X[:2], EFF[:2], growth_rate=[1.0, 1.0, 1.0], mat=CHAIN[:2, :2])
    with pytest.raises(ShapeError):
        stability_value(F, B[:2], X[:2], EFF[:2], growth_rate=1.0, mat=CHAIN)
    # per-species growth rates are accepted
    assert stability_value(F, B[:2], X[:2], EFF[:2], growth_rate=[1.0, 0.0], mat=CHAIN[:2, :2]) < 0


def test_basal_species_come_from_the_interaction_matrix():
    # herbivore with no losses takes in nothing, so every flux is zero
    chain2 = CHAIN[:2, :2]
    losses = np.array([0.1, 0.0])
    F = fluxing(chain2, B[:2], losses, EFF[:2])
    assert np.allclose(F, 0.0)
    # only the plant is regulated by growth_rate; the herbivore stays neutral
    assert stability_value(F, B[:2], losses, EFF[:2], growth_rate=5.0, mat=chain2) == pytest.approx(0.0, abs=1e-12)
