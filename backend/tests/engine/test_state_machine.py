"""
State machine engine
"""
import pytest

from core.engine import (
    StateMachine, StateMachineConfig, StateMachineRegistry, StateTransition,
)


@pytest.fixture
def door_config():
    return StateMachineConfig(
        name="Door",
        states=("closed", "open", "locked", "broken"),
        transitions=(
            StateTransition("closed", "open", "open"),
            StateTransition("open", "closed", "close"),
            StateTransition("closed", "locked", "lock", condition=lambda ctx: ctx.get("has_key", False)),
            StateTransition("locked", "closed", "unlock"),
            StateTransition("closed", "broken", "kick"),
        ),
        initial_state="closed",
        final_states=("broken",),
    )


class TestStateTransition:

    def test_no_condition_always_allowed(self):
        assert StateTransition("a", "b", "go").is_allowed({})

    def test_condition(self):
        transition = StateTransition("a", "b", "go", condition=lambda ctx: ctx.get("ok", False))
        assert transition.is_allowed({"ok": True})
        assert not transition.is_allowed({})


class TestStateMachineConfig:

    def test_unknown_initial_state(self):
        with pytest.raises(ValueError):
            StateMachineConfig(name="X", states=("a",), transitions=(), initial_state="b")

    def test_unknown_state_in_transition(self):
        with pytest.raises(ValueError):
            StateMachineConfig(
                name="X", states=("a",), transitions=(StateTransition("a", "z", "go"),), initial_state="a",
            )

    def test_final_state_cannot_be_left(self):
        with pytest.raises(ValueError):
            StateMachineConfig(
                name="X", states=("a", "b"),
                transitions=(StateTransition("b", "a", "back"),),
                initial_state="a", final_states=("b",),
            )

    def test_lookup(self, door_config):
        assert door_config.find("closed", "open").to_state == "open"
        assert door_config.find("open", "lock") is None
        assert door_config.is_valid_transition("locked", "closed")
        assert not door_config.is_valid_transition("open", "locked")
        assert door_config.triggers_from("closed") == ["open", "lock", "kick"]


class TestStateMachine:

    def test_initial_state(self, door_config):
        assert StateMachine(door_config).current_state == "closed"

    def test_start_in_given_state(self, door_config):
        assert StateMachine(door_config, state="open").current_state == "open"

    def test_unknown_start_state(self, door_config):
        with pytest.raises(ValueError):
            StateMachine(door_config, state="ajar")

    def test_fire(self, door_config):
        machine = StateMachine(door_config)
        assert machine.fire("open")
        assert machine.current_state == "open"

    def test_invalid_trigger_keeps_state(self, door_config):
        machine = StateMachine(door_config)
        assert not machine.fire("close")
        assert machine.current_state == "closed"

    def test_guarded_trigger(self, door_config):
        machine = StateMachine(door_config)
        assert not machine.can_fire("lock")
        assert machine.fire("lock", {"has_key": True})
        assert machine.current_state == "locked"

    def test_final(self, door_config):
        machine = StateMachine(door_config)
        machine.fire("kick")
        assert machine.is_final
        assert not machine.fire("open")

    def test_history(self, door_config):
        machine = StateMachine(door_config)
        machine.fire("open")
        machine.fire("close")
        history = machine.get_history()
        assert [(h.previous_state, h.current_state, h.trigger) for h in history] == [
            ("closed", "open", "open"),
            ("open", "closed", "close"),
        ]
        assert history[0].timestamp is not None


class TestRegistry:

    def test_register_and_get(self, door_config):
        registry = StateMachineRegistry()
        registry.register(door_config)
        assert registry.get("Door") is door_config
        assert registry.names() == ["Door"]
        registry.clear()
        assert registry.get("Door") is None
