"""Combatants - the minimal participant model the engine consumes."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import ClassVar

from .types import (
    Action,
    ActionResult,
    ActionType,
    Control,
    Decision,
    Effect,
    EffectKind,
    SpellComponent,
    TurnState,
    no_targets,
)


@dataclass
class Equipment:
    """An equipped item. Items without actions contribute nothing to the offer."""

    id: str
    name: str
    actions: list[Action] = field(default_factory=list)
    description: str = ""


@dataclass
class Spell:
    """A known spell. Offered to its caster as an action via ``as_action``."""

    id: str
    name: str
    effect: Callable[[Combatant | None, TurnState], ActionResult]
    mana_cost: int = 0
    components: frozenset[SpellComponent] = frozenset()
    casting_time: float = 0  # Rounds spent channelling before the spell goes off
    targets: Callable[[Sequence[Combatant], Sequence[Combatant]], list[Combatant]] = no_targets
    related_skill: str | None = None
    description: str = ""

    def is_blocked(self, caster: Combatant, turn_state: TurnState) -> bool:
        """Check if an effect on the caster blocks a component this spell needs."""
        return any(
            record.effect.blocks(component)
            for record in turn_state.effects_on(caster.id)
            for component in self.components
        )

    def as_action(self) -> Action:
        """Derive the castable action.

        Casting without enough mana, or while a required component is
        blocked, returns False, which hands the turn back to the caster
        instead of wasting it.

        With a ``casting_time`` the cast puts a CASTING effect on the caster
        that needs the spell's components and blocks the caster's actions.
        The spell resolves on the target when the effect runs out; blocking
        one of its components first interrupts the cast and the spell is lost.
        """

        def cast(target: Combatant | None, turn_state: TurnState) -> ActionResult:
            caster = turn_state.agent
            if self.is_blocked(caster, turn_state):
                return False
            if not caster.spend_mana(self.mana_cost):
                return False
            if self.casting_time <= 0:
                return self.effect(target, turn_state)

            def release(expiring: TurnState) -> None:
                self.effect(target, expiring)

            turn_state.apply_effect(
                Effect(
                    kind=EffectKind.CASTING,
                    duration=self.casting_time,
                    blocks_action=True,
                    components=self.components,
                    on_expire=release,
                    source_id=caster.id,
                    name=self.name,
                ),
                caster.id,
            )
            return True

        return Action(
            id=self.id,
            name=self.name,
            type=ActionType.SPELL,
            execute=cast,
            targets=self.targets,
            related_skill=self.related_skill,
            description=self.description,
        )


@dataclass(eq=False)
class Combatant:
    """A participant in an encounter.

    Base class: encounters take ``AutonomousCombatant`` or
    ``ExternalCombatant``, which set ``control``. Vitals start at their
    maximum unless given. Combatants compare by identity; the engine holds
    them only for the encounter's lifetime.
    """

    control: ClassVar[Control]

    id: str
    name: str
    max_hp: float
    max_mana: float = 0
    current_hp: float | None = None
    current_mana: float | None = None
    actions: list[Action] = field(default_factory=list)
    equipment: list[Equipment] = field(default_factory=list)
    spells: list[Spell] = field(default_factory=list)
    description: str = ""

    def __post_init__(self) -> None:
        if self.current_hp is None:
            self.current_hp = self.max_hp
        if self.current_mana is None:
            self.current_mana = self.max_mana

    def is_alive(self) -> bool:
        """Check if the combatant can still take turns."""
        return self.current_hp > 0

    def apply_damage(self, amount: float) -> float:
        """Apply damage. Returns actual damage dealt."""
        actual = min(self.current_hp, max(0, amount))
        self.current_hp -= actual
        return actual

    def apply_heal(self, amount: float) -> float:
        """Apply healing. Returns actual HP restored."""
        actual = max(0, min(self.max_hp - self.current_hp, amount))
        self.current_hp += actual
        return actual

    def spend_mana(self, amount: float) -> bool:
        """Spend mana. Returns True if there was enough."""
        if self.current_mana >= amount:
            self.current_mana -= amount
            return True
        return False

    def equip(self, item: Equipment) -> None:
        self.equipment.append(item)

    def learn(self, spell: Spell) -> None:
        self.spells.append(spell)


@dataclass(eq=False)
class AutonomousCombatant(Combatant):
    """A combatant whose decisions come from a synchronous strategy function."""

    control: ClassVar[Control] = Control.AUTONOMOUS

    strategy: Callable[[TurnState], Decision] | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.strategy is None:
            raise ValueError(f"Autonomous combatant {self.id} needs a strategy")

    def decide(self, turn_state: TurnState) -> Decision:
        """Consult the strategy for this turn."""
        return self.strategy(turn_state)


@dataclass(eq=False)
class ExternalCombatant(Combatant):
    """A combatant whose decisions are supplied by the caller of the encounter."""

    control: ClassVar[Control] = Control.EXTERNAL

    skills: dict[str, int] = field(default_factory=dict)

    def increase_skill(self, skill: str, amount: int = 1) -> int:
        """Record practice of a skill. Returns the new level."""
        self.skills[skill] = self.skills.get(skill, 0) + amount
        return self.skills[skill]
