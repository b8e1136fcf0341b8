"""Gate controller state machine using the ``transitions`` library.

Defines 4 states and 3 transitions. A controller walks the states once,
in order, and is never reset.
"""

from __future__ import annotations

from typing import Any

from transitions import Machine, State

# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
STATES: list[State] = [
    State("not_started"),
    State("resolved"),
    State("evaluated"),
    State("done"),
]

# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------
TRANSITIONS: list[dict[str, Any]] = [
    {
        "trigger": "instance_resolved",
        "source": "not_started",
        "dest": "resolved",
    },
    {
        "trigger": "status_evaluated",
        "source": "resolved",
        "dest": "evaluated",
    },
    {
        "trigger": "finish",
        "source": ["resolved", "evaluated"],
        "dest": "done",
    },
]


def create_gate_machine(model: Any, initial_state: str = "not_started") -> Machine:
    """Create and return a ``Machine`` bound to *model*.

    Invalid triggers raise ``transitions.MachineError``.

    Args:
        model: The object whose state the machine manages.
        initial_state: The initial state for the machine.

    Returns:
        Configured ``Machine`` instance.
    """
    return Machine(
        model=model,
        states=STATES,
        transitions=TRANSITIONS,
        initial=initial_state,
        auto_transitions=False,
        ignore_invalid_triggers=False,
    )
