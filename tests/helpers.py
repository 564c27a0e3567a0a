"""Small building blocks for test actions and strategies."""

from skirmish.engine import Decision, TurnState


def first_action_first_target(turn_state: TurnState) -> Decision:
    """Strategy: use the first offered action on its first available target."""
    action = turn_state.available_actions[0]
    targets = action.available_targets(turn_state.allies, turn_state.enemies)
    return Decision(action=action, target=targets[0] if targets else None)


def deal(amount: float):
    """Action body dealing fixed damage."""

    def execute(target, turn_state):
        return target.apply_damage(amount)

    return execute


def returns(value):
    """Action body returning a fixed result."""

    def execute(target, turn_state):
        return value

    return execute
