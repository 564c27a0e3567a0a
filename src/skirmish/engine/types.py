"""Type definitions for the combat engine."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .effects import EffectLedger
    from .participants import Combatant


class Control(str, Enum):
    """Who decides what a combatant does on its turn."""

    AUTONOMOUS = "autonomous"  # Decision function consulted synchronously
    EXTERNAL = "external"  # Decision supplied by the caller via resume()


class ActionType(str, Enum):
    """Display/grouping tag for actions."""

    NULL = "null"  # Needs no target (pass, incapacitated)
    PHYSICAL_ATTACK = "physical_attack"
    SPELL = "spell"
    HEAL = "heal"
    HELP = "help"
    DOT = "dot"
    USE_ITEM = "use_item"


class EffectKind(str, Enum):
    """Closed set of status effect kinds. One record per kind per target."""

    STAGGERED = "staggered"
    BLOCKING = "blocking"
    BURNING = "burning"
    CASTING = "casting"


class SpellComponent(str, Enum):
    """Components a casting effect needs to stay uninterrupted."""

    SOMATIC = "somatic"
    VERBAL = "verbal"


ActionResult = float | int | bool | None


def no_targets(allies: Sequence[Combatant], enemies: Sequence[Combatant]) -> list[Combatant]:
    """Target selector for actions that don't take a target."""
    return []


@dataclass(frozen=True)
class Effect:
    """A status effect definition, as handed to the ledger by actions.

    Durations are in rounds. The ledger converts them to per-turn ticks.
    A duration of ``math.inf`` makes the effect permanent until removed;
    permanent effects fire ``on_tick`` on every tick.
    """

    kind: EffectKind
    duration: float
    blocks_action: bool = False
    blocks_somatic: bool = False
    blocks_verbal: bool = False
    components: frozenset[SpellComponent] = frozenset()
    magnitude: float | None = None  # Total amount over the whole duration (e.g. DoT damage)
    on_tick: Callable[[Combatant, TurnState], None] | None = None
    every_tick: bool = False
    on_expire: Callable[[TurnState], None] | None = None
    source_id: str | None = None  # Who applied it (the blocker, for BLOCKING)
    name: str = ""

    def __post_init__(self) -> None:
        if not self.duration > 0:
            raise ValueError(f"Effect duration must be positive, got {self.duration}")

    @property
    def is_permanent(self) -> bool:
        return math.isinf(self.duration)

    @property
    def rate(self) -> float | None:
        """Magnitude per round, or None if the effect carries no magnitude."""
        if self.magnitude is None:
            return None
        return self.magnitude / self.duration

    def blocks(self, component: SpellComponent) -> bool:
        """Check if this effect prevents the given spell component."""
        match component:
            case SpellComponent.SOMATIC:
                return self.blocks_somatic
            case SpellComponent.VERBAL:
                return self.blocks_verbal
        return False

    def interrupts(self, other: Effect) -> bool:
        """Check if this effect blocks any component the other effect requires."""
        return any(self.blocks(component) for component in other.components)


@dataclass(eq=False)
class ActiveEffect:
    """A live ledger record: an effect bound to a target with its countdown.

    Records compare by identity; the ledger never holds two records for the
    same (kind, target) pair.
    """

    effect: Effect
    target_id: str
    remaining_ticks: float

    @property
    def kind(self) -> EffectKind:
        return self.effect.kind

    @property
    def is_permanent(self) -> bool:
        """Check the countdown, not the definition: a merge may swap in a finite effect."""
        return math.isinf(self.remaining_ticks)

    def remaining_rounds(self, participant_count: int) -> int:
        """Remaining duration rounded up to whole rounds, for display."""
        if self.is_permanent:
            return -1
        return math.ceil(self.remaining_ticks / participant_count)


@dataclass(frozen=True)
class Action:
    """Something a combatant can do on its turn.

    ``execute`` receives the chosen target (None for untargeted actions) and
    the turn state, and returns:
    - a number: informational magnitude (damage dealt, HP healed); the turn is consumed
    - True or None: resolved; the turn is consumed
    - False: nothing was resolved; the same actor acts again
    """

    id: str
    name: str
    type: ActionType
    execute: Callable[[Combatant | None, TurnState], ActionResult]
    targets: Callable[[Sequence[Combatant], Sequence[Combatant]], list[Combatant]] = no_targets
    parent_id: str | None = None  # Set on sub-actions picked from an offered category
    related_skill: str | None = None
    description: str = ""

    def available_targets(self, allies: Sequence[Combatant], enemies: Sequence[Combatant]) -> list[Combatant]:
        """Get the combatants this action may be used on."""
        return list(self.targets(allies, enemies))

    def matches(self, offered: Action) -> bool:
        """Check if this action is the offered one, or a sub-action of it."""
        return self.id == offered.id or (self.parent_id is not None and self.parent_id == offered.id)


@dataclass(frozen=True)
class TurnState:
    """Per-turn view handed to the decision-maker.

    Holds a handle to the encounter's effect ledger. ``apply_effect`` and
    ``remove_effect`` are the only ways actions and effects may change
    engine state.
    """

    agent: Combatant
    available_actions: tuple[Action, ...]
    allies: tuple[Combatant, ...]
    enemies: tuple[Combatant, ...]
    ledger: EffectLedger = field(repr=False, compare=False)
    turn_number: int = 0

    @property
    def active_effects(self) -> tuple[ActiveEffect, ...]:
        return self.ledger.active

    @property
    def participants(self) -> tuple[Combatant, ...]:
        return self.allies + self.enemies

    def effects_on(self, target_id: str) -> list[ActiveEffect]:
        """Get all active effects on a combatant."""
        return self.ledger.for_target(target_id)

    def apply_effect(self, effect: Effect, target_id: str) -> ActiveEffect:
        """Apply (or merge) an effect on a combatant."""
        return self.ledger.apply(effect, target_id)

    def remove_effect(self, kind: EffectKind, target_id: str) -> ActiveEffect | None:
        """Remove an effect from a combatant. No-op if it isn't there."""
        return self.ledger.remove(kind, target_id)


@dataclass(frozen=True)
class Decision:
    """A decision-maker's answer for one turn."""

    action: Action | None = None
    target: Combatant | None = None


@dataclass(frozen=True)
class CombatResult:
    """Terminal result of an encounter."""

    winner: int  # Index of the winning party: 0 or 1

    def describe(self) -> str:
        party = "first" if self.winner == 0 else "second"
        return f"The {party} party wins"


@dataclass(frozen=True)
class EncounterStep:
    """What start()/resume() hand back: the next turn, or the result."""

    turn: TurnState | None = None
    result: CombatResult | None = None

    @property
    def done(self) -> bool:
        return self.result is not None
