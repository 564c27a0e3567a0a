"""Encounter controller - drives turns from start to result."""

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

from .actions import ActionExecutor
from .effects import EffectLedger
from .errors import ActionNotAvailable, EncounterFinished, NotAwaitingDecision
from .turn import TurnScheduler, order_by_ids, roll_initiative
from .types import ActionType, CombatResult, Control, Decision, EncounterStep, TurnState

if TYPE_CHECKING:
    from .logging import CombatLogger
    from .participants import Combatant


class EncounterPhase(str, Enum):
    """Where the encounter's state machine is."""

    PENDING = "pending"  # Not started
    AWAITING_DECISION = "awaiting_decision"  # Parked on an external participant
    RESOLVING = "resolving"
    FINISHED = "finished"


class Encounter:
    """A two-party encounter, advanced one external decision at a time.

    Usage:
        encounter = Encounter(heroes, monsters)
        step = encounter.start()
        while not step.done:
            step = encounter.resume(choose(step.turn))
        print(step.result.describe())

    Autonomous participants are resolved inside ``start``/``resume``; the
    encounter only stops when an external participant has to decide, or
    when one party's total HP reaches zero.
    """

    def __init__(
        self,
        party_a: Sequence["Combatant"],
        party_b: Sequence["Combatant"],
        *,
        seed: int | None = None,
        initiative: Sequence[str] | None = None,
        logger: "CombatLogger | None" = None,
    ) -> None:
        """Set up the encounter and roll initiative.

        Args:
            party_a: First party (index 0)
            party_b: Second party (index 1)
            seed: Seed for the initiative shuffle
            initiative: Explicit turn order as participant IDs; overrides seed
            logger: Optional combat logger for event tracking

        Raises:
            ValueError: On an empty party, duplicate IDs, a combatant without a
                control mode, or a bad initiative
        """
        self.parties: tuple[tuple["Combatant", ...], tuple["Combatant", ...]] = (tuple(party_a), tuple(party_b))
        if not self.parties[0] or not self.parties[1]:
            raise ValueError("Both parties need at least one combatant")

        roster = [*self.parties[0], *self.parties[1]]
        ids = [c.id for c in roster]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Combatant IDs must be unique, got {ids}")
        for combatant in roster:
            if not isinstance(getattr(combatant, "control", None), Control):
                raise ValueError(f"Combatant {combatant.id} has no control mode")

        order = order_by_ids(roster, initiative) if initiative is not None else roll_initiative(roster, seed)

        self.logger = logger
        self.ledger = EffectLedger(ids, logger=logger)
        self.scheduler = TurnScheduler(order, self.ledger)
        self.executor = ActionExecutor(logger=logger)
        self.phase = EncounterPhase.PENDING
        self.turn_number = 0
        self._party_of = {c.id: index for index, party in enumerate(self.parties) for c in party}
        self._result: CombatResult | None = None
        self._turn_state: TurnState | None = None

    @property
    def result(self) -> CombatResult | None:
        return self._result

    @property
    def order(self) -> tuple["Combatant", ...]:
        return self.scheduler.order

    @property
    def current(self) -> "Combatant":
        return self.scheduler.current()

    @property
    def turn_state(self) -> TurnState | None:
        """The snapshot of the turn in progress, if any."""
        return self._turn_state

    def start(self) -> EncounterStep:
        """Run until the first external decision is needed, or the encounter ends.

        An exception raised by an autonomous strategy or an action body
        propagates and leaves the encounter in ``RESOLVING`` for good; later
        calls raise ``NotAwaitingDecision``.

        Raises:
            NotAwaitingDecision: If the encounter was already started
        """
        if self.phase != EncounterPhase.PENDING:
            raise NotAwaitingDecision("Encounter already started")

        if self.logger:
            self.logger.log_encounter_start([c.id for c in self.order])

        return self._run()

    def resume(self, decision: Decision) -> EncounterStep:
        """Supply the pending external participant's decision and continue.

        A decision without an action, or without a target for an action that
        needs one, is not resolved; the same participant is asked again.

        As with ``start``, any other exception from an action body or an
        autonomous strategy propagates and leaves the encounter in
        ``RESOLVING``, where it can no longer be resumed.

        Raises:
            EncounterFinished: If the encounter already has a result
            NotAwaitingDecision: If no external decision is pending
            ActionNotAvailable: If the action is not on offer; the encounter
                keeps waiting for the same participant
        """
        if self.phase == EncounterPhase.FINISHED:
            raise EncounterFinished("Encounter is over")
        if self.phase != EncounterPhase.AWAITING_DECISION:
            raise NotAwaitingDecision(f"Encounter is {self.phase.value}")

        self.phase = EncounterPhase.RESOLVING
        try:
            self._resolve(decision)
        except ActionNotAvailable:
            self.phase = EncounterPhase.AWAITING_DECISION
            raise

        return self._run()

    def _run(self) -> EncounterStep:
        """Resolve autonomous turns until an external one comes up or someone wins."""
        while True:
            self._check_finish()
            if self._result is not None:
                self.phase = EncounterPhase.FINISHED
                self._turn_state = None
                return EncounterStep(result=self._result)

            turn_state = self._begin_turn()
            agent = turn_state.agent
            match agent.control:
                case Control.EXTERNAL:
                    self.phase = EncounterPhase.AWAITING_DECISION
                    return EncounterStep(turn=turn_state)
                case Control.AUTONOMOUS:
                    self.phase = EncounterPhase.RESOLVING
                    self._resolve(agent.decide(turn_state))

    def _begin_turn(self) -> TurnState:
        """Build a fresh snapshot for the current participant."""
        agent = self.scheduler.current()
        allies, enemies = self.sides_of(agent)
        self.turn_number += 1

        if self.logger:
            self.logger.log_turn_start(self.turn_number, agent, list(self.order))

        self._turn_state = TurnState(
            agent=agent,
            available_actions=tuple(self.executor.offer_actions(agent, self.ledger)),
            allies=allies,
            enemies=enemies,
            ledger=self.ledger,
            turn_number=self.turn_number,
        )
        return self._turn_state

    def _resolve(self, decision: Decision | None) -> None:
        """Carry out one decision for the current turn."""
        turn_state = self._turn_state
        agent = turn_state.agent
        action = decision.action if decision is not None else None
        target = decision.target if decision is not None else None

        if action is not None and action.related_skill and agent.control == Control.EXTERNAL:
            agent.increase_skill(action.related_skill)

        if action is None or (action.type != ActionType.NULL and target is None):
            if self.logger:
                self.logger.log_decision_rejected(agent.id, "no action" if action is None else "no target")
            return

        consumed = self.executor.validate_and_execute(action, target, turn_state)

        self._check_finish()
        if self._result is not None:
            return

        if consumed:
            self.scheduler.advance(turn_state)
        elif self.logger:
            self.logger.log_turn_repeated(agent.id, action.id)

    def _check_finish(self) -> None:
        """Set the result once a party's total HP reaches zero. Party 0 is checked first."""
        if self._result is not None:
            return

        if self.party_hp(0) <= 0:
            self._result = CombatResult(winner=1)
        elif self.party_hp(1) <= 0:
            self._result = CombatResult(winner=0)
        else:
            return

        if self.logger:
            self.logger.log_winner(self._result.winner, self._result.describe())

    def party_hp(self, index: int) -> float:
        """Sum a party's current HP."""
        return sum(c.current_hp for c in self.parties[index])

    def sides_of(self, combatant: "Combatant") -> tuple[tuple["Combatant", ...], tuple["Combatant", ...]]:
        """Get (allies, enemies) of a combatant by party membership."""
        index = self._party_of[combatant.id]
        return self.parties[index], self.parties[1 - index]
