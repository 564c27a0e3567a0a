"""Shared fixtures for engine tests."""

import pytest

from skirmish.engine import (
    Action,
    ActionType,
    AutonomousCombatant,
    EffectLedger,
    ExternalCombatant,
    TurnState,
    living_enemies,
)

from helpers import deal, first_action_first_target, returns


@pytest.fixture
def punch() -> Action:
    """An attack dealing exactly 10 damage."""
    return Action(
        id="PUNCH",
        name="Punch",
        type=ActionType.PHYSICAL_ATTACK,
        execute=deal(10),
        targets=living_enemies,
        related_skill="unarmed",
    )


@pytest.fixture
def wait() -> Action:
    """A null-type action that just ends the turn."""
    return Action(id="WAIT", name="Wait", type=ActionType.NULL, execute=returns(True))


@pytest.fixture
def make_npc():
    """Factory for autonomous combatants."""

    def _make(combatant_id: str, hp: float = 10, actions=None, strategy=first_action_first_target, **kwargs):
        return AutonomousCombatant(
            id=combatant_id,
            name=combatant_id.upper(),
            max_hp=hp,
            actions=list(actions or []),
            strategy=strategy,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_player():
    """Factory for externally driven combatants."""

    def _make(combatant_id: str, hp: float = 10, actions=None, **kwargs):
        return ExternalCombatant(
            id=combatant_id,
            name=combatant_id.upper(),
            max_hp=hp,
            actions=list(actions or []),
            **kwargs,
        )

    return _make


@pytest.fixture
def duo(make_player):
    """Two combatants, 'a' and 'b', with 20 HP each."""
    return make_player("a", hp=20), make_player("b", hp=20)


@pytest.fixture
def ledger(duo) -> EffectLedger:
    """Ledger for a two-participant encounter."""
    return EffectLedger([c.id for c in duo])


@pytest.fixture
def turn_state(duo, ledger) -> TurnState:
    """Turn state with 'a' acting."""
    a, b = duo
    return TurnState(agent=a, available_actions=(), allies=(a,), enemies=(b,), ledger=ledger, turn_number=1)


@pytest.fixture
def lookup(duo):
    """ID -> combatant resolver for ledger ticks."""
    by_id = {c.id: c for c in duo}
    return by_id.__getitem__
