"""Engine package exposing rules, board geometry and board states."""

from . import rules  # re-export for convenience
from .board import ObserverCell, Orientation, OwnerCell, PlanePlacement, TargetGenerator
from .event_bus import EventBus
from .state import BoardState, StrikeResult, TargetBoard

__all__ = [
    "rules",
    "BoardState",
    "EventBus",
    "ObserverCell",
    "Orientation",
    "OwnerCell",
    "PlanePlacement",
    "StrikeResult",
    "TargetBoard",
    "TargetGenerator",
]
