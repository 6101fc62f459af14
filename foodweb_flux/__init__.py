"""Equilibrium energy fluxes in trophic networks under warming and species loss.

Core contract:
- inputs: species collection (interaction matrix + index-aligned attributes)
- workflow: loss model -> metabolic losses -> equilibrium fluxes -> scenario
"""

from .errors import DomainError, ShapeError, FluxSolveError
from .metabolism import MassScalingLoss, TemperatureScalingLoss, mass_scaling_loss, temperature_scaling_loss
from .species import SpeciesCollection, filter_by_biomass_threshold
from .flux import fluxing, solve_fluxes
from .scenario import Scenario, build_scenario
