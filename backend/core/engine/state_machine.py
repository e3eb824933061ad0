"""
core/engine/state_machine.py

State machine engine - declarative transitions with trigger names.

A config describes the states, the allowed transitions and the terminal
states. A ``StateMachine`` instance walks one object through that config and
keeps a transition history for auditing.
"""
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateTransition:
    """
    Transition definition

    Attributes:
        from_state: source state
        to_state: target state
        trigger: action name that fires the transition
        condition: optional guard evaluated against the caller's context
    """

    from_state: str
    to_state: str
    trigger: str
    condition: Optional[Callable[[Dict[str, Any]], bool]] = None

    def is_allowed(self, context: Dict[str, Any]) -> bool:
        if self.condition is None:
            return True
        return bool(self.condition(context))


@dataclass(frozen=True)
class StateMachineConfig:
    """
    State machine configuration

    Attributes:
        name: machine name
        states: all states
        transitions: allowed transitions
        initial_state: state of a new object
        final_states: terminal states, no transition may leave them
    """

    name: str
    states: Tuple[str, ...]
    transitions: Tuple[StateTransition, ...]
    initial_state: str
    final_states: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.initial_state not in self.states:
            raise ValueError(f"{self.name}: unknown initial state {self.initial_state}")
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(f"{self.name}: transition {t.trigger} uses an unknown state")
            if t.from_state in self.final_states:
                raise ValueError(f"{self.name}: final state {t.from_state} cannot have outgoing transitions")

    def find(self, from_state: str, trigger: str) -> Optional[StateTransition]:
        for t in self.transitions:
            if t.from_state == from_state and t.trigger == trigger:
                return t
        return None

    def is_valid_transition(self, from_state: str, to_state: str) -> bool:
        return any(t.from_state == from_state and t.to_state == to_state for t in self.transitions)

    def triggers_from(self, state: str) -> List[str]:
        return [t.trigger for t in self.transitions if t.from_state == state]


@dataclass(frozen=True)
class TransitionRecord:
    """History entry"""

    previous_state: str
    current_state: str
    trigger: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class StateMachine:
    """
    State machine instance

    Example:
        >>> machine = StateMachine(ITEM_LIFECYCLE, state="paid")
        >>> if machine.can_fire("request_refund"):
        ...     machine.fire("request_refund")
        >>> machine.current_state
        'pending_refund'
    """

    def __init__(self, config: StateMachineConfig, state: Optional[str] = None):
        if state is not None and state not in config.states:
            raise ValueError(f"{config.name}: unknown state {state}")
        self._config = config
        self._current_state = state if state is not None else config.initial_state
        self._history: List[TransitionRecord] = []

    @property
    def current_state(self) -> str:
        return self._current_state

    @property
    def config(self) -> StateMachineConfig:
        return self._config

    @property
    def is_final(self) -> bool:
        return self._current_state in self._config.final_states

    def can_fire(self, trigger: str, context: Optional[Dict[str, Any]] = None) -> bool:
        transition = self._config.find(self._current_state, trigger)
        return transition is not None and transition.is_allowed(context or {})

    def fire(self, trigger: str, context: Optional[Dict[str, Any]] = None) -> bool:
        """
        Fire a trigger

        Returns:
            True if the transition happened, False if it is not allowed
        """
        if not self.can_fire(trigger, context):
            logger.warning(
                f"{self._config.name}: invalid trigger {trigger} in state {self._current_state}"
            )
            return False

        transition = self._config.find(self._current_state, trigger)
        previous_state = self._current_state
        self._current_state = transition.to_state
        self._history.append(TransitionRecord(previous_state, self._current_state, trigger))

        logger.info(f"{self._config.name}: {previous_state} -> {self._current_state} (trigger: {trigger})")
        return True

    def get_history(self) -> List[TransitionRecord]:
        return list(self._history)


class StateMachineRegistry:
    """Named state machine configurations"""

    def __init__(self):
        self._configs: Dict[str, StateMachineConfig] = {}

    def register(self, config: StateMachineConfig) -> None:
        self._configs[config.name] = config
        logger.debug(f"StateMachine config registered: {config.name}")

    def get(self, name: str) -> Optional[StateMachineConfig]:
        return self._configs.get(name)

    def names(self) -> List[str]:
        return sorted(self._configs)

    def clear(self) -> None:
        self._configs.clear()


state_machine_registry = StateMachineRegistry()


__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "TransitionRecord",
    "StateMachine",
    "StateMachineRegistry",
    "state_machine_registry",
]
