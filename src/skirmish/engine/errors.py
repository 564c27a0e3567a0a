"""Combat engine exceptions."""


class CombatError(Exception):
    """Base class for protocol violations by the caller of an encounter."""


class ActionNotAvailable(CombatError):
    """Raised when a chosen action is neither offered nor a sub-action of an offered one."""

    def __init__(self, action_id: str) -> None:
        super().__init__(f"Action '{action_id}' is not available this turn")
        self.action_id = action_id


class EncounterFinished(CombatError):
    """Raised when resuming an encounter that already has a result."""


class NotAwaitingDecision(CombatError):
    """Raised when a decision is supplied while none is pending."""
