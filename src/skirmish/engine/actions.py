"""Action executor - offers actions, validates choices and executes them."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from .errors import ActionNotAvailable
from .types import Action, ActionResult, ActionType, TurnState

if TYPE_CHECKING:
    from .effects import EffectLedger
    from .logging import CombatLogger
    from .participants import Combatant


def _pass_turn(target: Combatant | None, turn_state: TurnState) -> ActionResult:
    return True


INCAPACITATED = Action(
    id="NULL",
    name="ZzZz...",
    type=ActionType.NULL,
    execute=_pass_turn,
    description="Cannot act this turn",
)


def living_enemies(allies: Sequence[Combatant], enemies: Sequence[Combatant]) -> list[Combatant]:
    return [c for c in enemies if c.is_alive()]


def living_allies(allies: Sequence[Combatant], enemies: Sequence[Combatant]) -> list[Combatant]:
    return [c for c in allies if c.is_alive()]


def fallen_allies(allies: Sequence[Combatant], enemies: Sequence[Combatant]) -> list[Combatant]:
    return [c for c in allies if not c.is_alive()]


class ActionExecutor:
    """Decides what a participant may do, and carries out what it chose."""

    def __init__(self, logger: CombatLogger | None = None) -> None:
        """Initialize the action executor.

        Args:
            logger: Optional combat logger for event tracking
        """
        self.logger = logger

    def offer_actions(self, participant: Combatant, ledger: EffectLedger) -> list[Action]:
        """Get the actions offered to a participant this turn.

        An action-blocking effect reduces the offer to the single
        incapacitated no-op. Otherwise the offer is the participant's own
        actions, then actions from equipped items, then known spells.
        """
        if ledger.blocks_action(participant.id):
            return [INCAPACITATED]

        offered = list(participant.actions)
        for item in participant.equipment:
            offered.extend(item.actions)
        offered.extend(spell.as_action() for spell in participant.spells)
        return offered

    def find_offered(self, action: Action, offered: Sequence[Action]) -> Action | None:
        """Get the offered action the chosen one matches, directly or as its parent."""
        for candidate in offered:
            if action.matches(candidate):
                return candidate
        return None

    def validate_and_execute(
        self,
        action: Action,
        target: Combatant | None,
        turn_state: TurnState,
    ) -> bool:
        """Execute a chosen action if it is on offer.

        Args:
            action: The chosen action (or a sub-action of an offered one)
            target: The chosen target, None for untargeted actions
            turn_state: The current turn

        Returns:
            True if the turn is consumed, False if the actor acts again

        Raises:
            ActionNotAvailable: If the action is not on offer; nothing is executed
        """
        if self.find_offered(action, turn_state.available_actions) is None:
            raise ActionNotAvailable(action.id)

        state_before = None
        if self.logger and target is not None:
            state_before = self.logger.snapshot_state(target)

        result = action.execute(target, turn_state)

        if self.logger:
            self.logger.log_action_executed(
                participant_id=turn_state.agent.id,
                action_id=action.id,
                action_type=action.type.value,
                result=result,
                target=target,
                state_before=state_before,
            )

        return self.consumes_turn(result)

    @staticmethod
    def consumes_turn(result: ActionResult) -> bool:
        """Check if an execution result ends the turn. Only a literal False doesn't."""
        match result:
            case False:
                return False
            case _:
                return True
