"""Évènements publiés par le service de frappe et les parties."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StrikeSelectedEvent:
    """Émis quand le sélecteur renvoie une case à frapper."""

    row: int
    column: int
    strategy: str


@dataclass(frozen=True)
class MatchEndedEvent:
    """Émis quand l'un des deux camps a détruit l'avion adverse."""

    winner: str
    user_hits: int
    agent_hits: int
    turns: Optional[int] = None


__all__ = ["MatchEndedEvent", "StrikeSelectedEvent"]
