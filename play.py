#!/usr/bin/env python3
"""Partie Plane Strike en terminal: l'utilisateur contre l'agent.

L'agent cache son avion sur un plateau 6x6; l'utilisateur place le sien sur
papier. À chaque tour l'utilisateur frappe une case (`ligne colonne`), puis
l'agent annonce sa frappe et l'utilisateur répond `o` (touché) ou `n` (raté).

Commandes:
- `ligne colonne` : frapper la case (indices à partir de 0)
- `q`             : quitter
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence, Tuple

from planestrike.app.errors import PlaneStrikeError
from planestrike.app.events import MatchEndedEvent
from planestrike.app.game_service import PlaneStrikeMatch, USER
from planestrike.app.model_store import ModelStore
from planestrike.app.selector import InferenceSelector
from planestrike.engine import rules
from planestrike.engine.board import ObserverCell, OwnerCell
from planestrike.engine.state import BoardState, StrikeResult

SYMBOLS = {ObserverCell.UNKNOWN: ".", ObserverCell.HIT: "X", ObserverCell.MISS: "o"}

RESULT_MESSAGES = {
    StrikeResult.HIT: "Touché !",
    StrikeResult.MISS: "Raté.",
    StrikeResult.REPEAT_HIT: "Déjà frappée (touché).",
    StrikeResult.REPEAT_MISS: "Déjà frappée (raté).",
}


def render(board: BoardState) -> str:
    header = "   " + " ".join(str(column) for column in range(board.width))
    lines = [header]
    for row in range(board.height):
        cells = " ".join(SYMBOLS[board.cell_state(row, column)] for column in range(board.width))
        lines.append(f"{row}  {cells}")
    return "\n".join(lines)


def parse_cell(text: str) -> Tuple[int, int]:
    parts = text.replace(",", " ").split()
    if len(parts) != 2:
        raise ValueError("Format attendu: ligne colonne")
    return int(parts[0]), int(parts[1])


def user_view(match: PlaneStrikeMatch) -> BoardState:
    """Plateau de l'agent tel que l'utilisateur le voit."""

    target = match.agent_target
    board = BoardState.empty(target.height, target.width)
    for row in range(target.height):
        for column in range(target.width):
            state = target.cell_state(row, column)
            if state == OwnerCell.COVERED_HIT:
                board.record_outcome(row, column, True)
            elif state == OwnerCell.STRUCK_MISS:
                board.record_outcome(row, column, False)
    return board


def ask(prompt: str) -> str:
    answer = input(prompt).strip().lower()
    if answer == "q":
        raise KeyboardInterrupt
    return answer


def play_turn(match: PlaneStrikeMatch) -> None:
    while True:
        try:
            row, column = parse_cell(ask("Votre frappe (ligne colonne): "))
            result = match.user_strike(row, column)
            break
        except ValueError as exc:
            print(f"Entrée invalide: {exc}")
    print(RESULT_MESSAGES[result])
    if match.finished:
        return

    decision = match.agent_strike()
    print(f"L'agent frappe ({decision.row}, {decision.column}) [{decision.strategy}]")
    while True:
        answer = ask("Touché ? (o/n): ")
        if answer in ("o", "n"):
            match.confirm_agent_strike(answer == "o")
            return
        print("Répondre par o ou n.")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Plane Strike en terminal")
    parser.add_argument("--checkpoint", default=rules.CHECKPOINT_FILE)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s [%(levelname)s] %(message)s")

    store = ModelStore(args.checkpoint)
    store.load()
    match = PlaneStrikeMatch(InferenceSelector.default(store, seed=args.seed), seed=args.seed)
    match.event_bus.subscribe(
        lambda event: print(
            "Vous avez gagné !" if event.winner == USER else "L'agent a gagné.",
            f"({event.turns} tours)",
        ),
        MatchEndedEvent,
    )

    try:
        while not match.finished:
            print(render(user_view(match)))
            play_turn(match)
    except (KeyboardInterrupt, EOFError):
        print("\nPartie abandonnée.")
        return 0
    except PlaneStrikeError as exc:
        print(f"Partie interrompue: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
