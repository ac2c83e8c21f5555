"""Points d'entrée du service de frappe et orchestration d'une partie."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Mapping

from planestrike.app.errors import ErrorKind, PlaneStrikeError, StateInconsistency
from planestrike.app.events import MatchEndedEvent
from planestrike.app.selector import InferenceSelector, StrikeDecision
from planestrike.app.strategies import check_consistency
from planestrike.engine.board import TargetGenerator
from planestrike.engine.event_bus import EventBus
from planestrike.engine.rules import BOARD_HEIGHT, BOARD_WIDTH, PLANE_SIZE
from planestrike.engine.serialize import (
    board_to_snapshot,
    error_to_response,
    parse_outcome_request,
    parse_strike_request,
    strike_to_response,
)
from planestrike.engine.state import BoardState, StrikeResult, TargetBoard

logger = logging.getLogger(__name__)

USER = "user"
AGENT = "agent"


class StrikeService:
    """Façade sans état appelée par la couche conversationnelle.

    Les erreurs métier sont converties en `{"error": ...}` ici et nulle part
    ailleurs.
    """

    def __init__(
        self,
        selector: InferenceSelector,
        *,
        height: int = BOARD_HEIGHT,
        width: int = BOARD_WIDTH,
    ) -> None:
        self._selector = selector
        self._height = height
        self._width = width

    @property
    def selector(self) -> InferenceSelector:
        return self._selector

    def next_strike(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Renvoie `{"row", "column"}` ou `{"error": ...}`."""

        try:
            request = parse_strike_request(payload, height=self._height, width=self._width)
        except ValueError as exc:
            logger.warning("Requête de frappe invalide: %s", exc)
            return error_to_response(ErrorKind.INVALID_REQUEST.value)

        try:
            decision = self._selector.select(request.board, request.total_hits)
        except PlaneStrikeError as exc:
            logger.warning("Aucune frappe proposée (%s): %s", exc.kind.value, exc)
            return error_to_response(exc.kind.value)
        return strike_to_response(decision.row, decision.column)

    def record_outcome(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Enregistre un résultat confirmé et renvoie le plateau mis à jour."""

        try:
            request = parse_outcome_request(payload, height=self._height, width=self._width)
        except ValueError as exc:
            logger.warning("Résultat invalide: %s", exc)
            return error_to_response(ErrorKind.INVALID_REQUEST.value)

        board = request.board.copy()
        try:
            check_consistency(board, request.total_hits)
        except StateInconsistency as exc:
            logger.warning("%s", exc)
            return error_to_response(exc.kind.value)
        if not board.in_bounds(request.row, request.column):
            logger.warning("Case hors plateau: %s", (request.row, request.column))
            return error_to_response(ErrorKind.INVALID_REQUEST.value)

        before = board.hits
        board.record_outcome(request.row, request.column, request.hit)
        total_hits = request.total_hits + (board.hits - before)

        response = board_to_snapshot(board, total_hits)
        response["game_over"] = total_hits >= PLANE_SIZE
        return response


class PlaneStrikeMatch:
    """Partie utilisateur contre agent, chacun cherchant l'avion de l'autre.

    L'agent cache son avion sur `agent_target`; l'utilisateur garde le sien
    hors du système et confirme chaque frappe de l'agent par touché ou raté.
    """

    def __init__(
        self,
        selector: InferenceSelector,
        *,
        height: int = BOARD_HEIGHT,
        width: int = BOARD_WIDTH,
        seed: int | None = None,
        rng: random.Random | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        generator = TargetGenerator(height=height, width=width, seed=seed, rng=rng)
        self._selector = selector
        self._event_bus = event_bus or EventBus()
        self._agent_target = TargetBoard(generator.generate())
        self._agent_view = BoardState.empty(height, width)
        self._pending: StrikeDecision | None = None
        self._winner: str | None = None
        self._turns = 0

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def agent_target(self) -> TargetBoard:
        """Plateau caché de l'agent, frappé par l'utilisateur."""

        return self._agent_target

    @property
    def agent_view(self) -> BoardState:
        """Observation par l'agent de l'avion de l'utilisateur."""

        return self._agent_view

    @property
    def pending_strike(self) -> StrikeDecision | None:
        return self._pending

    @property
    def winner(self) -> str | None:
        return self._winner

    @property
    def finished(self) -> bool:
        return self._winner is not None

    @property
    def user_hits(self) -> int:
        return self._agent_target.hits_taken

    @property
    def agent_hits(self) -> int:
        return self._agent_view.hits

    def user_strike(self, row: int, column: int) -> StrikeResult:
        """Frappe de l'utilisateur sur l'avion caché de l'agent."""

        self._ensure_running()
        result = self._agent_target.strike(row, column)
        self._turns += 1
        if result.is_repeat:
            logger.info("Case %s déjà frappée par l'utilisateur", (row, column))
        if self._agent_target.destroyed:
            self._finish(USER)
        return result

    def agent_strike(self) -> StrikeDecision:
        """Propose la frappe de l'agent; elle reste en attente de confirmation."""

        self._ensure_running()
        decision = self._selector.select(self._agent_view, self._agent_view.hits)
        self._pending = decision
        return decision

    def confirm_agent_strike(self, hit: bool) -> bool:
        """Enregistre le résultat de la frappe en attente; True si la partie est finie."""

        if self._pending is None:
            raise RuntimeError("Aucune frappe de l'agent en attente de confirmation")
        decision, self._pending = self._pending, None
        self._agent_view.record_outcome(decision.row, decision.column, hit)
        self._turns += 1
        if self._agent_view.hits >= PLANE_SIZE:
            self._finish(AGENT)
        return self.finished

    def _ensure_running(self) -> None:
        if self.finished:
            raise RuntimeError(f"Partie terminée (vainqueur: {self._winner})")

    def _finish(self, winner: str) -> None:
        self._winner = winner
        logger.info("Partie gagnée par %s en %d tours", winner, self._turns)
        self._event_bus.publish(
            MatchEndedEvent(
                winner=winner,
                user_hits=self.user_hits,
                agent_hits=self.agent_hits,
                turns=self._turns,
            )
        )


__all__ = ["AGENT", "PlaneStrikeMatch", "StrikeService", "USER"]
