"""Simulation headless et parties d'évaluation parallèles.

`planestrike.sim.parallel` s'importe explicitement: il dépend de la couche RL,
qui dépend elle-même de l'environnement headless.
"""

from .runner import HeadlessEnv, StepResult

__all__ = ["HeadlessEnv", "StepResult"]
