"""Opponent AI.

The DecisionEngine owns one side. On offense it classifies the situation,
filters candidate actions by the handler's ratings and rolls once; on defense
it runs the team's scheme every tick.
"""

from .actions import ActionRunner, ActionType, choose_action, parse_action, viable_actions
from .defense import DefenseController
from .difficulty import DIFFICULTIES, DifficultyProfile, get_difficulty
from .engine import Decision, DecisionEngine, DecisionPhase
from .situation import (
    Situation,
    SituationType,
    calculate_shot_accuracy,
    classify,
    defensive_pressure,
)
from .tactics import Tactic, TacticRunner

__all__ = [
    "ActionRunner",
    "ActionType",
    "choose_action",
    "parse_action",
    "viable_actions",
    "DefenseController",
    "DIFFICULTIES",
    "DifficultyProfile",
    "get_difficulty",
    "Decision",
    "DecisionEngine",
    "DecisionPhase",
    "Situation",
    "SituationType",
    "calculate_shot_accuracy",
    "classify",
    "defensive_pressure",
    "Tactic",
    "TacticRunner",
]
