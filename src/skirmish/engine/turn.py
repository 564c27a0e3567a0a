"""Turn scheduler - initiative order and the active-participant pointer."""

import random
from collections.abc import Sequence
from typing import TYPE_CHECKING

from .effects import EffectLedger
from .types import TurnState

if TYPE_CHECKING:
    from .participants import Combatant


def roll_initiative(
    participants: Sequence["Combatant"],
    seed: int | None = None,
    rng: random.Random | None = None,
) -> list["Combatant"]:
    """Shuffle participants into a turn order.

    Args:
        participants: Everyone in the encounter
        seed: Seed for a fresh RNG (ignored if rng is given)
        rng: RNG to shuffle with

    Returns:
        A new list with the participants in initiative order
    """
    order = list(participants)
    (rng or random.Random(seed)).shuffle(order)
    return order


def order_by_ids(participants: Sequence["Combatant"], initiative: Sequence[str]) -> list["Combatant"]:
    """Arrange participants in an explicit initiative order.

    Raises:
        ValueError: If the IDs are not a permutation of the participants
    """
    by_id = {p.id: p for p in participants}
    if sorted(initiative) != sorted(by_id) or len(initiative) != len(participants):
        raise ValueError(f"Initiative {list(initiative)} is not a permutation of {sorted(by_id)}")
    return [by_id[pid] for pid in initiative]


class TurnScheduler:
    """Cycles through a fixed initiative queue, skipping downed participants.

    Every step along the queue is one tick of the effect ledger, including
    steps over downed participants, so effects keep decaying in turn order.
    """

    def __init__(self, order: Sequence["Combatant"], ledger: EffectLedger) -> None:
        if not order:
            raise ValueError("Initiative queue cannot be empty")
        self._order = tuple(order)
        self._by_id = {p.id: p for p in self._order}
        self._index = 0
        self.ledger = ledger

    @property
    def order(self) -> tuple["Combatant", ...]:
        return self._order

    @property
    def index(self) -> int:
        return self._index

    def current(self) -> "Combatant":
        """Get the participant whose turn it is."""
        return self._order[self._index]

    def lookup(self, participant_id: str) -> "Combatant":
        """Get a participant by ID."""
        return self._by_id[participant_id]

    def advance(self, turn_state: TurnState) -> "Combatant":
        """Move to the next living participant, ticking the ledger once per step.

        Never runs more than one full cycle; callers check for a finished
        encounter before advancing.

        Args:
            turn_state: The turn that just ended (passed to effect callbacks)

        Returns:
            The new current participant
        """
        for _ in range(len(self._order)):
            self.ledger.tick_all(turn_state, self.lookup)
            self._index = (self._index + 1) % len(self._order)
            if self.current().is_alive():
                break
        return self.current()
