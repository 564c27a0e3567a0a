"""Demo encounter - a hero against two boars, driven through the step protocol."""

import logging
from collections.abc import Callable

from .config import Settings
from .engine import (
    Action,
    ActionType,
    AutonomousCombatant,
    CombatLog,
    CombatLogger,
    CombatResult,
    Decision,
    Effect,
    EffectKind,
    Encounter,
    Equipment,
    ExternalCombatant,
    Spell,
    SpellComponent,
    TurnState,
    living_allies,
    living_enemies,
)

logger = logging.getLogger(__name__)

Chooser = Callable[[TurnState], Decision]


def strike(damage: float) -> Callable:
    """Action body dealing fixed damage to the target."""

    def execute(target, turn_state: TurnState) -> float:
        return target.apply_damage(damage)

    return execute


def burning(magnitude: float, duration: int, source_id: str) -> Effect:
    """Damage over time: ``magnitude`` spread over ``duration`` rounds."""
    per_round = magnitude / duration

    def burn(target, turn_state: TurnState) -> None:
        target.apply_damage(per_round)

    return Effect(
        kind=EffectKind.BURNING,
        duration=duration,
        magnitude=magnitude,
        on_tick=burn,
        source_id=source_id,
        name="Burning",
    )


def build_demo(settings: Settings, combat_logger: CombatLogger | None = None) -> tuple[Encounter, Chooser]:
    """Build the demo encounter and the scripted chooser playing the hero."""
    potions = {"POTION": 1}

    def block(target, turn_state: TurnState) -> bool:
        turn_state.apply_effect(
            Effect(kind=EffectKind.BLOCKING, duration=1, source_id=turn_state.agent.id, name="Blocking"),
            target.id,
        )
        return True

    def open_satchel(target, turn_state: TurnState) -> bool:
        # Choosing the category alone resolves nothing
        return False

    def drink_potion(target, turn_state: TurnState) -> float | bool:
        if potions["POTION"] == 0:
            return False
        potions["POTION"] -= 1
        return target.apply_heal(10)

    def fire_bolt(target, turn_state: TurnState) -> float:
        turn_state.apply_effect(burning(6, 2, turn_state.agent.id), target.id)
        return target.apply_damage(4)

    sword = Equipment(
        id="SWORD",
        name="Sword",
        actions=[
            Action(
                id="SLASH",
                name="Slash",
                type=ActionType.PHYSICAL_ATTACK,
                execute=strike(10),
                targets=living_enemies,
                related_skill="swords",
            )
        ],
    )
    shield = Equipment(
        id="SHIELD",
        name="Shield",
        actions=[
            Action(
                id="BLOCK",
                name="Block",
                type=ActionType.HELP,
                execute=block,
                targets=living_allies,
                related_skill="shields",
            )
        ],
    )
    satchel = Equipment(
        id="SATCHEL",
        name="Satchel",
        actions=[Action(id="ITEMS", name="Use item", type=ActionType.NULL, execute=open_satchel)],
    )
    potion = Action(
        id="POTION",
        name="Healing potion",
        type=ActionType.HEAL,
        execute=drink_potion,
        targets=living_allies,
        parent_id="ITEMS",
    )

    hero = ExternalCombatant(
        id="hero",
        name="Hero",
        max_hp=settings.demo_hp,
        max_mana=20,
        equipment=[sword, shield, satchel],
        spells=[
            Spell(
                id="FIRE_BOLT",
                name="Fire bolt",
                effect=fire_bolt,
                mana_cost=5,
                components=frozenset({SpellComponent.VERBAL, SpellComponent.SOMATIC}),
                casting_time=1,
                targets=living_enemies,
                related_skill="fire",
            )
        ],
    )

    def charge(turn_state: TurnState) -> Decision:
        targets = turn_state.available_actions[0].available_targets(turn_state.allies, turn_state.enemies)
        return Decision(action=turn_state.available_actions[0], target=targets[0] if targets else None)

    gore = Action(
        id="GORE",
        name="Gore",
        type=ActionType.PHYSICAL_ATTACK,
        execute=strike(4),
        targets=living_enemies,
    )
    boars = [
        AutonomousCombatant(id=f"boar{n}", name=f"Boar {n}", max_hp=15, actions=[gore], strategy=charge)
        for n in (1, 2)
    ]

    def choose(turn_state: TurnState) -> Decision:
        offered = {action.id: action for action in turn_state.available_actions}
        if "NULL" in offered:
            return Decision(action=offered["NULL"])

        enemy = living_enemies(turn_state.allies, turn_state.enemies)[0]
        if hero.current_hp <= 12 and potions["POTION"] > 0:
            return Decision(action=potion, target=hero)
        burning_now = any(record.kind == EffectKind.BURNING for record in turn_state.effects_on(enemy.id))
        if not burning_now and hero.current_mana >= 5:
            return Decision(action=offered["FIRE_BOLT"], target=enemy)
        return Decision(action=offered["SLASH"], target=enemy)

    encounter = Encounter([hero], boars, seed=settings.initiative_seed, logger=combat_logger)
    return encounter, choose


def run_demo(settings: Settings) -> tuple[CombatResult, CombatLog | None]:
    """Play the demo encounter to the end."""
    combat_logger = CombatLogger(encounter_id=1) if settings.combat_log else None
    encounter, choose = build_demo(settings, combat_logger)

    step = encounter.start()
    while not step.done:
        decision = choose(step.turn)
        logger.debug(
            "Turn %d: %s chooses %s",
            step.turn.turn_number,
            step.turn.agent.id,
            decision.action.id if decision.action else None,
        )
        step = encounter.resume(decision)

    logger.debug("Demo finished after %d turns", encounter.turn_number)
    return step.result, combat_logger.get_log() if combat_logger else None
