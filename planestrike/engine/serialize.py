"""Formats d'échange avec la couche conversationnelle.

Contrat JSON-friendly (listes/dicts primitifs):
- requête de frappe: `{"observation_board": [[-1|0|1, ...], ...],
  "total_hits_by_agent": int}`
- réponse: `{"row": int, "column": int}` ou `{"error": str}`
- enregistrement d'un résultat: requête de frappe + `row`, `column`, `hit`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from planestrike.engine.rules import BOARD_HEIGHT, BOARD_WIDTH
from planestrike.engine.state import BoardState

OBSERVATION_FIELD = "observation_board"
TOTAL_HITS_FIELD = "total_hits_by_agent"


@dataclass(frozen=True)
class StrikeRequest:
    """Requête décodée: observation + compteur de touchés côté session."""

    board: BoardState
    total_hits: int


@dataclass(frozen=True)
class OutcomeRequest:
    """Résultat confirmé d'une frappe de l'agent à enregistrer."""

    board: BoardState
    total_hits: int
    row: int
    column: int
    hit: bool


def parse_strike_request(
    payload: Mapping[str, Any],
    *,
    height: int = BOARD_HEIGHT,
    width: int = BOARD_WIDTH,
) -> StrikeRequest:
    """Décode et valide une requête de frappe.

    Lève ValueError si le plateau n'a pas la bonne forme ou si le compteur
    n'est pas un entier positif. La cohérence plateau/compteur n'est pas
    vérifiée ici.
    """

    if not isinstance(payload, Mapping):
        raise ValueError(f"La requête doit être un objet (reçu: {type(payload).__name__})")
    if OBSERVATION_FIELD not in payload:
        raise ValueError(f"Champ manquant: {OBSERVATION_FIELD!r}")
    if TOTAL_HITS_FIELD not in payload:
        raise ValueError(f"Champ manquant: {TOTAL_HITS_FIELD!r}")

    board = BoardState.from_grid(payload[OBSERVATION_FIELD])
    if (board.height, board.width) != (height, width):
        raise ValueError(
            f"Plateau {board.height}x{board.width} inattendu (attendu: {height}x{width})"
        )

    total_hits = _require_int(payload[TOTAL_HITS_FIELD], TOTAL_HITS_FIELD)
    if total_hits < 0:
        raise ValueError(f"{TOTAL_HITS_FIELD} doit être positif (reçu: {total_hits})")
    return StrikeRequest(board=board, total_hits=total_hits)


def parse_outcome_request(
    payload: Mapping[str, Any],
    *,
    height: int = BOARD_HEIGHT,
    width: int = BOARD_WIDTH,
) -> OutcomeRequest:
    """Décode une requête d'enregistrement de résultat."""

    request = parse_strike_request(payload, height=height, width=width)
    for name in ("row", "column", "hit"):
        if name not in payload:
            raise ValueError(f"Champ manquant: {name!r}")
    hit = payload["hit"]
    if not isinstance(hit, bool):
        raise ValueError(f"'hit' doit être un booléen (reçu: {hit!r})")

    return OutcomeRequest(
        board=request.board,
        total_hits=request.total_hits,
        row=_require_int(payload["row"], "row"),
        column=_require_int(payload["column"], "column"),
        hit=hit,
    )


def board_to_snapshot(board: BoardState, total_hits: int) -> Dict[str, Any]:
    """Convertit un plateau observé en snapshot JSON-friendly."""

    grid: List[List[int]] = board.grid.astype(int).tolist()
    return {OBSERVATION_FIELD: grid, TOTAL_HITS_FIELD: int(total_hits)}


def strike_to_response(row: int, column: int) -> Dict[str, int]:
    return {"row": int(row), "column": int(column)}


def error_to_response(kind: str) -> Dict[str, str]:
    return {"error": kind}


def _require_int(value: Any, name: str) -> int:
    # bool est une sous-classe d'int
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name!r} doit être un entier (reçu: {value!r})")
    return value


__all__ = [
    "OBSERVATION_FIELD",
    "TOTAL_HITS_FIELD",
    "OutcomeRequest",
    "StrikeRequest",
    "board_to_snapshot",
    "error_to_response",
    "parse_outcome_request",
    "parse_strike_request",
    "strike_to_response",
]
