"""Combat logging system for tracking and verifying engine output.

Provides structured logging of encounter events including:
- Initiative order and turn starts with state snapshots
- Action executions with before/after target state
- Effect ledger changes (applied, merged, ticked, expired, interrupted)
- The winner
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class LogEventType(str, Enum):
    """Types of log events."""

    # Encounter lifecycle
    ENCOUNTER_START = "encounter_start"
    TURN_START = "turn_start"

    # Decisions and actions
    DECISION_REJECTED = "decision_rejected"  # Missing action or target
    ACTION_EXECUTED = "action_executed"
    TURN_REPEATED = "turn_repeated"  # Action returned False

    # Effect ledger
    EFFECT_APPLIED = "effect_applied"
    EFFECT_MERGED = "effect_merged"
    EFFECT_REMOVED = "effect_removed"
    EFFECT_INTERRUPTED = "effect_interrupted"
    EFFECT_TICKED = "effect_ticked"
    EFFECT_EXPIRED = "effect_expired"

    # Win condition
    WINNER_DETERMINED = "winner_determined"


@dataclass
class StateSnapshot:
    """Snapshot of a combatant's vitals at a point in time."""

    participant_id: str
    name: str
    current_hp: float
    max_hp: float
    current_mana: float
    max_mana: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "participant_id": self.participant_id,
            "name": self.name,
            "current_hp": self.current_hp,
            "max_hp": self.max_hp,
            "current_mana": self.current_mana,
            "max_mana": self.max_mana,
        }


@dataclass
class LogEntry:
    """A single log entry representing a combat event."""

    event_type: LogEventType
    turn_number: int
    timestamp_order: int = 0  # Global order for deterministic sorting

    participant_id: str | None = None
    target_participant_id: str | None = None
    action_id: str | None = None
    action_type: str | None = None
    effect_kind: str | None = None
    remaining_ticks: float | None = None
    reason: str | None = None

    # State before/after for action events
    state_before: StateSnapshot | None = None
    state_after: StateSnapshot | None = None

    # Action result
    value: float | None = None
    description: str | None = None

    # For turn starts - all participants
    all_states: dict[str, StateSnapshot] | None = None

    initiative: list[str] | None = None
    winner: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "event_type": self.event_type.value,
            "turn_number": self.turn_number,
            "timestamp_order": self.timestamp_order,
        }

        if self.participant_id is not None:
            result["participant_id"] = self.participant_id
        if self.target_participant_id is not None:
            result["target_participant_id"] = self.target_participant_id
        if self.action_id is not None:
            result["action_id"] = self.action_id
        if self.action_type is not None:
            result["action_type"] = self.action_type
        if self.effect_kind is not None:
            result["effect_kind"] = self.effect_kind
        if self.remaining_ticks is not None:
            result["remaining_ticks"] = self.remaining_ticks
        if self.reason is not None:
            result["reason"] = self.reason
        if self.state_before is not None:
            result["state_before"] = self.state_before.to_dict()
        if self.state_after is not None:
            result["state_after"] = self.state_after.to_dict()
        if self.value is not None:
            result["value"] = self.value
        if self.description is not None:
            result["description"] = self.description
        if self.all_states is not None:
            result["all_states"] = {pid: state.to_dict() for pid, state in self.all_states.items()}
        if self.initiative is not None:
            result["initiative"] = list(self.initiative)
        if self.winner is not None:
            result["winner"] = self.winner

        return result


@dataclass
class CombatLog:
    """Complete log of an encounter."""

    encounter_id: int
    entries: list[LogEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "encounter_id": self.encounter_id,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    def get_entries_by_type(self, event_type: LogEventType) -> list[LogEntry]:
        """Get all entries of a specific type."""
        return [e for e in self.entries if e.event_type == event_type]

    def get_entries_for_turn(self, turn_number: int) -> list[LogEntry]:
        """Get all entries for a specific turn."""
        return [e for e in self.entries if e.turn_number == turn_number]

    def get_entries_for_participant(self, participant_id: str) -> list[LogEntry]:
        """Get all entries where the participant acted or was targeted."""
        return [
            e for e in self.entries if participant_id in (e.participant_id, e.target_participant_id)
        ]

    def format_readable(self) -> str:
        """Format the log in a human-readable format."""
        lines: list[str] = []
        lines.append(f"=== Combat Log (Encounter #{self.encounter_id}) ===\n")

        current_turn = -1
        for entry in self.entries:
            if entry.turn_number != current_turn:
                current_turn = entry.turn_number
                if current_turn > 0:
                    lines.append(f"\n--- Turn {current_turn} ---\n")

            lines.append(self._format_entry(entry))

        return "\n".join(lines)

    def _format_entry(self, entry: LogEntry) -> str:
        """Format a single log entry."""
        match entry.event_type:
            case LogEventType.ENCOUNTER_START:
                order = " → ".join(entry.initiative or [])
                return f"  Initiative: {order}"

            case LogEventType.TURN_START:
                state_lines = []
                for pid, state in (entry.all_states or {}).items():
                    marker = "*" if pid == entry.participant_id else " "
                    state_lines.append(
                        f"   {marker}{state.name}: HP={state.current_hp}/{state.max_hp}, "
                        f"MP={state.current_mana}/{state.max_mana}"
                    )
                return "\n".join(state_lines)

            case LogEventType.DECISION_REJECTED:
                return f"    ✗ Decision from {entry.participant_id} rejected ({entry.reason})"

            case LogEventType.ACTION_EXECUTED:
                hp_change = ""
                if entry.state_before and entry.state_after:
                    if entry.state_after.current_hp != entry.state_before.current_hp:
                        hp_change = f" [HP: {entry.state_before.current_hp} → {entry.state_after.current_hp}]"
                target = f" on {entry.target_participant_id}" if entry.target_participant_id else ""
                value = f" = {entry.value}" if entry.value is not None else ""
                return f"    → {entry.participant_id} uses {entry.action_id}{target}{value}{hp_change}"

            case LogEventType.TURN_REPEATED:
                return f"    ↺ {entry.participant_id} acts again ({entry.action_id} did not end the turn)"

            case LogEventType.EFFECT_APPLIED:
                return f"    + {entry.effect_kind} on {entry.target_participant_id} ({entry.remaining_ticks} ticks)"

            case LogEventType.EFFECT_MERGED:
                return (
                    f"    + {entry.effect_kind} on {entry.target_participant_id} extended "
                    f"to {entry.remaining_ticks} ticks ({entry.description})"
                )

            case LogEventType.EFFECT_REMOVED:
                return f"    - {entry.effect_kind} removed from {entry.target_participant_id}"

            case LogEventType.EFFECT_INTERRUPTED:
                return f"    ✗ {entry.effect_kind} on {entry.target_participant_id} interrupted by {entry.reason}"

            case LogEventType.EFFECT_TICKED:
                return f"    ~ {entry.effect_kind} ticks on {entry.target_participant_id}"

            case LogEventType.EFFECT_EXPIRED:
                return f"    - {entry.effect_kind} on {entry.target_participant_id} wears off"

            case LogEventType.WINNER_DETERMINED:
                return f"  *** {entry.description} ***"

            case _:
                return f"    {entry.event_type.value}: {entry.description or ''}"


class CombatLogger:
    """Logger for tracking encounter events.

    Usage:
        logger = CombatLogger(encounter_id=1)
        encounter = Encounter(heroes, monsters, logger=logger)
        # ... run the encounter ...
        print(logger.get_log().format_readable())

    The logger remembers the turn number of the last ``log_turn_start`` and
    stamps every later entry with it.
    """

    def __init__(self, encounter_id: int = 0) -> None:
        """Initialize the logger for an encounter."""
        self.encounter_id = encounter_id
        self.current_turn = 0
        self._log = CombatLog(encounter_id=encounter_id)
        self._order_counter = 0

    def _next_order(self) -> int:
        """Get the next timestamp order value."""
        self._order_counter += 1
        return self._order_counter

    def _append(self, event_type: LogEventType, **fields: Any) -> LogEntry:
        entry = LogEntry(
            event_type=event_type,
            turn_number=self.current_turn,
            timestamp_order=self._next_order(),
            **fields,
        )
        self._log.entries.append(entry)
        return entry

    def get_log(self) -> CombatLog:
        """Get the complete combat log."""
        return self._log

    def clear(self) -> None:
        """Clear all log entries."""
        self._log.entries.clear()
        self._order_counter = 0
        self.current_turn = 0

    @staticmethod
    def snapshot_state(combatant: Any) -> StateSnapshot:
        """Create a snapshot from a combatant."""
        return StateSnapshot(
            participant_id=combatant.id,
            name=combatant.name,
            current_hp=combatant.current_hp,
            max_hp=combatant.max_hp,
            current_mana=combatant.current_mana,
            max_mana=combatant.max_mana,
        )

    def log_encounter_start(self, initiative: list[str]) -> None:
        """Log the initiative order."""
        self._append(LogEventType.ENCOUNTER_START, initiative=list(initiative))

    def log_turn_start(self, turn_number: int, agent: Any, participants: list[Any]) -> None:
        """Log the start of a turn with a snapshot of every participant."""
        self.current_turn = turn_number
        self._append(
            LogEventType.TURN_START,
            participant_id=agent.id,
            all_states={p.id: self.snapshot_state(p) for p in participants},
        )

    def log_decision_rejected(self, participant_id: str, reason: str) -> None:
        """Log a decision that could not be resolved."""
        self._append(LogEventType.DECISION_REJECTED, participant_id=participant_id, reason=reason)

    def log_action_executed(
        self,
        participant_id: str,
        action_id: str,
        action_type: str,
        result: Any,
        target: Any = None,
        state_before: StateSnapshot | None = None,
    ) -> None:
        """Log an action execution with the target's before/after state."""
        value = None
        if isinstance(result, (int, float)) and not isinstance(result, bool):
            value = result
        self._append(
            LogEventType.ACTION_EXECUTED,
            participant_id=participant_id,
            target_participant_id=target.id if target is not None else None,
            action_id=action_id,
            action_type=action_type,
            value=value,
            description=repr(result),
            state_before=state_before,
            state_after=self.snapshot_state(target) if target is not None else None,
        )

    def log_turn_repeated(self, participant_id: str, action_id: str) -> None:
        """Log an action that did not consume the turn."""
        self._append(LogEventType.TURN_REPEATED, participant_id=participant_id, action_id=action_id)

    def log_effect_applied(self, target_id: str, kind: str, remaining_ticks: float) -> None:
        """Log a new ledger record."""
        self._append(
            LogEventType.EFFECT_APPLIED,
            target_participant_id=target_id,
            effect_kind=kind,
            remaining_ticks=remaining_ticks,
        )

    def log_effect_merged(self, target_id: str, kind: str, remaining_ticks: float, replaced: bool) -> None:
        """Log an application merged into an existing record."""
        self._append(
            LogEventType.EFFECT_MERGED,
            target_participant_id=target_id,
            effect_kind=kind,
            remaining_ticks=remaining_ticks,
            description="stronger effect replaced the old one" if replaced else "duration extended",
        )

    def log_effect_removed(self, target_id: str, kind: str) -> None:
        """Log an explicit removal."""
        self._append(LogEventType.EFFECT_REMOVED, target_participant_id=target_id, effect_kind=kind)

    def log_effect_interrupted(self, target_id: str, kind: str, interrupted_by: str) -> None:
        """Log an effect removed because a new effect blocked its components."""
        self._append(
            LogEventType.EFFECT_INTERRUPTED,
            target_participant_id=target_id,
            effect_kind=kind,
            reason=interrupted_by,
        )

    def log_effect_ticked(self, target_id: str, kind: str, remaining_ticks: float) -> None:
        """Log a per-tick callback firing."""
        self._append(
            LogEventType.EFFECT_TICKED,
            target_participant_id=target_id,
            effect_kind=kind,
            remaining_ticks=remaining_ticks,
        )

    def log_effect_expired(self, target_id: str, kind: str) -> None:
        """Log a record running out."""
        self._append(LogEventType.EFFECT_EXPIRED, target_participant_id=target_id, effect_kind=kind)

    def log_winner(self, winner: int, description: str) -> None:
        """Log the winner determination."""
        self._append(LogEventType.WINNER_DETERMINED, winner=winner, description=description)
