"""Réseau de politique pour Plane Strike.

Classifieur feed-forward: le plateau observé aplati en entrée, deux couches
cachées ReLU, puis un logit par case candidate. La distribution de frappe est
le softmax de ces logits.
"""

from typing import Any, Dict, Optional, Sequence

import torch
import torch.nn as nn

from planestrike.engine.rules import BOARD_SIZE, HIDDEN_SIZES


class PlaneStrikePolicyNetwork(nn.Module):
    """Réseau de politique pour l'agent Plane Strike.

    Architecture:
        - Entrée: plateau observé aplati (H*W valeurs dans {-1, 0, 1})
        - Couches cachées entièrement connectées avec activation ReLU
        - Sortie: logits sur les H*W cases (softmax = distribution de frappe)

    Args:
        input_size: longueur du vecteur d'observation
        action_size: nombre de cases candidates (dimension de sortie)
        hidden_sizes: dimensions des couches cachées
    """

    def __init__(
        self,
        *,
        input_size: int = BOARD_SIZE,
        action_size: Optional[int] = None,
        hidden_sizes: Optional[Sequence[int]] = None,
    ) -> None:
        super().__init__()

        if input_size <= 0:
            raise ValueError("input_size doit être strictement positif")
        resolved_action_size = input_size if action_size is None else action_size
        if resolved_action_size <= 0:
            raise ValueError("action_size doit être strictement positif")

        self.input_size = input_size
        self.action_size = resolved_action_size
        self.hidden_sizes = list(hidden_sizes or HIDDEN_SIZES)
        if any(size <= 0 for size in self.hidden_sizes):
            raise ValueError("Les couches cachées doivent avoir une taille positive")

        layers = []
        prev_size = self.input_size
        for hidden_size in self.hidden_sizes:
            layers.extend([nn.Linear(prev_size, hidden_size), nn.ReLU()])
            prev_size = hidden_size

        self.encoder = nn.Sequential(*layers)
        self.policy_head = nn.Linear(prev_size, self.action_size)

    def forward(self, observations: torch.Tensor) -> torch.Tensor:
        """Forward pass du réseau.

        Args:
            observations: (B, input_size) plateaux aplatis

        Returns:
            policy_logits: (B, action_size) logits pour chaque case
        """
        return self.policy_head(self.encoder(observations))

    def probabilities(self, observations: torch.Tensor) -> torch.Tensor:
        """Distribution softmax (B, action_size) sur les cases."""

        return torch.softmax(self.forward(observations), dim=-1)

    def masked_softmax(
        self, logits: torch.Tensor, mask: torch.Tensor, temperature: float = 1.0
    ) -> torch.Tensor:
        """Applique un softmax masqué pour obtenir une distribution de probabilité.

        Les cases interdites (mask=False) reçoivent une probabilité de 0. Une
        ligne entièrement masquée produit des NaN: l'appelant doit la traiter.

        Args:
            logits: (B, action_size) logits bruts
            mask: (B, action_size) masque booléen (True = case frappable)
            temperature: température pour contrôler l'entropie (défaut 1.0)

        Returns:
            probs: (B, action_size) distribution de probabilité normalisée
        """
        masked_logits = torch.where(
            mask, logits / temperature, torch.tensor(float("-inf"), device=logits.device)
        )
        return torch.softmax(masked_logits, dim=-1)

    def architecture(self) -> Dict[str, Any]:
        """Description sérialisable permettant de reconstruire le réseau."""

        return {
            "input_size": self.input_size,
            "action_size": self.action_size,
            "hidden_sizes": list(self.hidden_sizes),
        }


__all__ = ["PlaneStrikePolicyNetwork"]
