"""Module RL pour Plane Strike.

Ce module contient les composants nécessaires à l'apprentissage par
renforcement (gradient de politique) :

- features.py : encodage du plateau observé en vecteur pour le réseau
- network.py : réseau de politique PyTorch (distribution sur les cases)
- policies.py : politiques de frappe (uniforme, réseau)
- rewards.py : récompenses actualisées avec soustraction d'une ligne de base
- self_play.py : simulation d'épisodes complets
- checkpoint.py : sauvegarde atomique et chargement des poids
- events.py : évènements publiés pendant l'entraînement
- trainer.py : boucle d'entraînement

Exemple :
    >>> from planestrike.rl.trainer import Trainer, TrainingConfig, TrainingSession
    >>>
    >>> config = TrainingConfig(iterations=200, checkpoint_interval=50, seed=7)
    >>> report = Trainer(TrainingSession.create(config)).run()
    >>> # report.running_average suit la longueur moyenne des parties
"""

from .features import encode_observation, legal_actions_mask
from .network import PlaneStrikePolicyNetwork
from .policies import NetworkPolicy, StrikePolicy, UniformPolicy

__all__ = [
    "NetworkPolicy",
    "PlaneStrikePolicyNetwork",
    "StrikePolicy",
    "UniformPolicy",
    "encode_observation",
    "legal_actions_mask",
]
