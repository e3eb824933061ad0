"""
core/engine - generic engines

- state_machine: declarative state transitions

Usage:
    >>> from core.engine import StateMachine, StateMachineConfig, state_machine_registry
"""
from core.engine.state_machine import (
    StateTransition,
    StateMachineConfig,
    TransitionRecord,
    StateMachine,
    StateMachineRegistry,
    state_machine_registry,
)

__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "TransitionRecord",
    "StateMachine",
    "StateMachineRegistry",
    "state_machine_registry",
]
