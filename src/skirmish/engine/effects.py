"""Effect ledger - tracks active status effects, their countdowns and interactions."""

from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from .types import ActiveEffect, Effect, EffectKind, TurnState

if TYPE_CHECKING:
    from .logging import CombatLogger
    from .participants import Combatant


class EffectLedger:
    """Owns every active effect in an encounter.

    Durations are stored in ticks: one tick per individual turn advance,
    ``participant_count`` ticks per round. An effect applied for N rounds
    starts with ``N * participant_count`` ticks, so its per-round callback
    fires whenever the tick count is a multiple of the participant count.
    """

    def __init__(
        self,
        participant_ids: Iterable[str],
        logger: "CombatLogger | None" = None,
    ) -> None:
        """Initialize the ledger.

        Args:
            participant_ids: IDs of every combatant in the encounter
            logger: Optional combat logger for event tracking
        """
        self.participant_ids = frozenset(participant_ids)
        if not self.participant_ids:
            raise ValueError("Effect ledger needs at least one participant")
        self.participant_count = len(self.participant_ids)
        self.logger = logger
        self._effects: list[ActiveEffect] = []

    @property
    def active(self) -> tuple[ActiveEffect, ...]:
        """Read-only view of all active records."""
        return tuple(self._effects)

    def get(self, kind: EffectKind, target_id: str) -> ActiveEffect | None:
        """Get the record of a kind on a target, if any."""
        for record in self._effects:
            if record.kind == kind and record.target_id == target_id:
                return record
        return None

    def for_target(self, target_id: str) -> list[ActiveEffect]:
        """Get all active effects on a target."""
        return [record for record in self._effects if record.target_id == target_id]

    def blocks_action(self, target_id: str) -> bool:
        """Check if the target is prevented from acting."""
        return any(record.effect.blocks_action for record in self.for_target(target_id))

    def apply(self, effect: Effect, target_id: str) -> ActiveEffect:
        """Apply an effect to a target, merging into an existing record of the same kind.

        On merge, if both effects carry a magnitude and the incoming one has a
        strictly higher rate (magnitude per round), it takes over the record's
        magnitude, duration and tick callback. Either way the incoming
        duration is added to the remaining ticks.

        After applying, any other effect on the same target that requires a
        component the incoming effect blocks is interrupted (removed).

        Args:
            effect: The effect definition
            target_id: Combatant receiving the effect

        Returns:
            The ledger record now holding the effect
        """
        if target_id not in self.participant_ids:
            raise ValueError(f"Unknown effect target: {target_id}")

        ticks = effect.duration * self.participant_count
        record = self.get(effect.kind, target_id)
        if record is None:
            record = ActiveEffect(effect=effect, target_id=target_id, remaining_ticks=ticks)
            self._effects.append(record)
            if self.logger:
                self.logger.log_effect_applied(target_id, effect.kind.value, record.remaining_ticks)
        else:
            replaced = self._merge(record, effect)
            record.remaining_ticks += ticks
            if self.logger:
                self.logger.log_effect_merged(target_id, effect.kind.value, record.remaining_ticks, replaced)

        self._interrupt(effect, record)
        return record

    def _merge(self, record: ActiveEffect, incoming: Effect) -> bool:
        """Let a stronger incoming effect take over a record. Returns True if it did."""
        current_rate = record.effect.rate
        incoming_rate = incoming.rate
        if current_rate is None or incoming_rate is None:
            return False
        if incoming_rate <= current_rate:
            return False

        record.effect = replace(
            record.effect,
            magnitude=incoming.magnitude,
            duration=incoming.duration,
            on_tick=incoming.on_tick,
        )
        return True

    def _interrupt(self, incoming: Effect, applied: ActiveEffect) -> None:
        """Remove effects on the same target whose required components are now blocked."""
        for record in list(self._effects):
            if record is applied or record.target_id != applied.target_id:
                continue
            if incoming.interrupts(record.effect):
                self._effects.remove(record)
                if self.logger:
                    self.logger.log_effect_interrupted(
                        record.target_id,
                        record.kind.value,
                        interrupted_by=incoming.kind.value,
                    )

    def remove(self, kind: EffectKind, target_id: str) -> ActiveEffect | None:
        """Remove the record of a kind on a target. No-op if absent.

        Returns:
            The removed record, or None
        """
        record = self.get(kind, target_id)
        if record is None:
            return None

        self._effects.remove(record)
        if self.logger:
            self.logger.log_effect_removed(target_id, kind.value)
        return record

    def tick_all(
        self,
        turn_state: TurnState,
        lookup: "Callable[[str], Combatant]",
    ) -> None:
        """Advance every record by one tick.

        For each record present when the tick starts:
        1. Fire ``on_tick`` at round boundaries, or on every tick for
           ``every_tick`` and permanent effects
        2. Decrement the remaining ticks
        3. Fire ``on_expire`` if the record just ran out, with the target
           as the turn state's agent

        Records removed by a callback mid-tick are skipped. Records added by
        a callback start ticking on the next advance. A record is dropped in
        the same step its ticks run out.

        Args:
            turn_state: The turn during which the advance happens
            lookup: Resolves a combatant ID to the combatant
        """
        for record in list(self._effects):
            if not any(r is record for r in self._effects):
                continue

            target = lookup(record.target_id)
            effect = record.effect
            permanent = record.is_permanent
            round_boundary = not permanent and record.remaining_ticks % self.participant_count == 0
            if effect.on_tick is not None and (round_boundary or effect.every_tick or permanent):
                effect.on_tick(target, turn_state)
                if self.logger:
                    self.logger.log_effect_ticked(record.target_id, record.kind.value, record.remaining_ticks)

            record.remaining_ticks -= 1
            if record.remaining_ticks <= 0:
                # Drop before on_expire so a re-application starts a fresh record
                self._effects.remove(record)
                if self.logger:
                    self.logger.log_effect_expired(record.target_id, record.kind.value)
                if record.effect.on_expire is not None:
                    record.effect.on_expire(replace(turn_state, agent=target))
