"""Erreurs de sélection de frappe remontées à la couche conversationnelle."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Noms d'erreur exposés dans les réponses `{"error": ...}`."""

    STATE_INCONSISTENCY = "StateInconsistency"
    NO_ELIGIBLE_CELL = "NoEligibleCell"
    INVALID_REQUEST = "InvalidRequest"


class PlaneStrikeError(Exception):
    """Base des erreurs métier; `kind` donne le nom exposé à l'appelant."""

    kind: ErrorKind = ErrorKind.INVALID_REQUEST


class StateInconsistency(PlaneStrikeError):
    """Le compteur de touchés de la session ne correspond pas au plateau.

    L'état de session amont est corrompu: l'appelant doit relancer la partie.
    """

    kind = ErrorKind.STATE_INCONSISTENCY

    def __init__(self, *, recorded_hits: int, board_hits: int) -> None:
        super().__init__(
            f"Compteur de touchés incohérent: {recorded_hits} annoncés, {board_hits} sur le plateau"
        )
        self.recorded_hits = recorded_hits
        self.board_hits = board_hits


class StrategyUnavailable(PlaneStrikeError):
    """Une stratégie de la chaîne ne peut pas proposer de case."""

    kind = ErrorKind.NO_ELIGIBLE_CELL


class NoEligibleCell(StrategyUnavailable):
    """Plus aucune case candidate (partie terminée ou état corrompu)."""

    kind = ErrorKind.NO_ELIGIBLE_CELL


__all__ = [
    "ErrorKind",
    "NoEligibleCell",
    "PlaneStrikeError",
    "StateInconsistency",
    "StrategyUnavailable",
]
