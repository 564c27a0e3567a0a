"""Combat engine module - handles initiative, status effects, action resolution and win detection."""

from .actions import INCAPACITATED, ActionExecutor, fallen_allies, living_allies, living_enemies
from .combat import Encounter, EncounterPhase
from .effects import EffectLedger
from .errors import ActionNotAvailable, CombatError, EncounterFinished, NotAwaitingDecision
from .logging import CombatLog, CombatLogger, LogEntry, LogEventType, StateSnapshot
from .participants import AutonomousCombatant, Combatant, Equipment, ExternalCombatant, Spell
from .turn import TurnScheduler, order_by_ids, roll_initiative
from .types import (
    Action,
    ActionType,
    ActiveEffect,
    CombatResult,
    Control,
    Decision,
    Effect,
    EffectKind,
    EncounterStep,
    SpellComponent,
    TurnState,
)

__all__ = [
    "Action",
    "ActionExecutor",
    "ActionNotAvailable",
    "ActionType",
    "ActiveEffect",
    "AutonomousCombatant",
    "CombatError",
    "CombatLog",
    "CombatLogger",
    "CombatResult",
    "Combatant",
    "Control",
    "Decision",
    "Effect",
    "EffectKind",
    "EffectLedger",
    "Encounter",
    "EncounterFinished",
    "EncounterPhase",
    "EncounterStep",
    "Equipment",
    "ExternalCombatant",
    "INCAPACITATED",
    "LogEntry",
    "LogEventType",
    "NotAwaitingDecision",
    "Spell",
    "SpellComponent",
    "StateSnapshot",
    "TurnScheduler",
    "TurnState",
    "fallen_allies",
    "living_allies",
    "living_enemies",
    "order_by_ids",
    "roll_initiative",
]
