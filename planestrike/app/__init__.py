"""Services d'application: sélection de frappe, modèle servi et parties."""

from planestrike.engine.event_bus import EventBus

from .errors import ErrorKind, NoEligibleCell, PlaneStrikeError, StateInconsistency, StrategyUnavailable
from .events import MatchEndedEvent, StrikeSelectedEvent
from .game_service import PlaneStrikeMatch, StrikeService
from .model_store import ModelStore
from .selector import InferenceSelector, StrikeDecision
from .strategies import NeighborhoodSearch, PolicyArgmaxStrategy, StrikeStrategy

__all__ = [
    "ErrorKind",
    "EventBus",
    "InferenceSelector",
    "MatchEndedEvent",
    "ModelStore",
    "NeighborhoodSearch",
    "NoEligibleCell",
    "PlaneStrikeError",
    "PlaneStrikeMatch",
    "PolicyArgmaxStrategy",
    "StateInconsistency",
    "StrategyUnavailable",
    "StrikeDecision",
    "StrikeSelectedEvent",
    "StrikeService",
    "StrikeStrategy",
]
