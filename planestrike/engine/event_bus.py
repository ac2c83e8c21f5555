"""Bus d'évènements synchrone partagé par l'entraînement et le service."""

from __future__ import annotations

from typing import Callable, List, Tuple, Type

Subscriber = Callable[[object], None]


class EventBus:
    """Publie des évènements aux observateurs enregistrés.

    Chaque publication appelle immédiatement, dans l'ordre d'enregistrement,
    les abonnés dont le filtre de type correspond. Une exception levée par un
    abonné interrompt la diffusion et remonte à l'émetteur.
    """

    __slots__ = ("_subscribers",)

    def __init__(self) -> None:
        self._subscribers: List[Tuple[Subscriber, Tuple[Type[object], ...]]] = []

    def subscribe(
        self, callback: Subscriber, *event_types: Type[object]
    ) -> Callable[[], None]:
        """Enregistre un abonné (optionnellement filtré) et retourne l'unsubscribe."""

        entry = (callback, tuple(event_types))
        self._subscribers.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    def publish(self, event: object) -> None:
        """Diffuse l'évènement aux abonnés concernés."""

        # Copie: un abonné peut se désinscrire pendant la diffusion.
        for callback, event_types in list(self._subscribers):
            if event_types and not isinstance(event, event_types):
                continue
            callback(event)
