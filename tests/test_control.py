"""
Control plane tests: command registry and MQTT message handling.
"""

import json
from unittest.mock import MagicMock

import pytest

from cadence_control import (
    CommandNotAvailableError,
    CommandRegistry,
    CommandValidationError,
    MQTTControlPlane,
)


class TestCommandRegistry:

    def test_execute_passes_payload_with_command(self):
        registry = CommandRegistry()
        handler = MagicMock()
        registry.register("add", handler, "Add", required_fields=("counter", "amount"))

        registry.execute("add", {"counter": "coins", "amount": 2})

        handler.assert_called_once_with({"command": "add", "counter": "coins", "amount": 2})

    def test_missing_fields(self):
        registry = CommandRegistry()
        handler = MagicMock()
        registry.register("add", handler, "Add", required_fields=("counter", "amount"))

        with pytest.raises(CommandValidationError, match="amount"):
            registry.execute("add", {"counter": "coins"})
        handler.assert_not_called()

    def test_unknown_command(self):
        registry = CommandRegistry()
        registry.register("pause", MagicMock(), "Pause")

        with pytest.raises(CommandNotAvailableError, match="pause"):
            registry.execute("explode")

    def test_duplicate_registration(self):
        registry = CommandRegistry()
        registry.register("pause", MagicMock(), "Pause")

        with pytest.raises(ValueError):
            registry.register("pause", MagicMock(), "Pause again")

    def test_introspection(self):
        registry = CommandRegistry()
        registry.register("pause", MagicMock(), "Pause")
        registry.register("resume", MagicMock(), "Resume")

        assert registry.is_available("pause")
        assert not registry.is_available("status")
        assert registry.available_commands == {"pause", "resume"}
        assert registry.get_help() == {"pause": "Pause", "resume": "Resume"}
        assert registry.count() == 2


@pytest.fixture
def plane():
    plane = MQTTControlPlane(
        broker_host="localhost",
        broker_port=1883,
        command_topic="cadence/control/arena_01/commands",
        status_topic="cadence/control/arena_01/status",
        client_id="runtime_arena_01",
    )
    plane.client = MagicMock()
    return plane


def message(payload):
    msg = MagicMock()
    msg.payload = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    return msg


class TestMQTTControlPlane:

    def test_dispatches_to_registry(self, plane):
        handler = MagicMock()
        plane.command_registry.register("pause", handler, "Pause")

        plane._on_message(plane.client, None, message({"command": "PAUSE"}))

        handler.assert_called_once()
        assert handler.call_args.args[0]["command"] == "pause"

    def test_bad_payloads_do_not_raise(self, plane):
        handler = MagicMock()
        plane.command_registry.register("set", handler, "Set", required_fields=("value",))

        plane._on_message(plane.client, None, message(b"{not json"))
        plane._on_message(plane.client, None, message([1, 2]))
        plane._on_message(plane.client, None, message({"command": ""}))
        plane._on_message(plane.client, None, message({"command": "unknown"}))
        plane._on_message(plane.client, None, message({"command": "set"}))

        handler.assert_not_called()

    def test_publish_status_is_retained(self, plane):
        plane.publish_status("running", details={"tick": 3})

        args, kwargs = plane.client.publish.call_args
        assert args[0] == "cadence/control/arena_01/status"
        body = json.loads(args[1])
        assert body["status"] == "running"
        assert body["details"] == {"tick": 3}
        assert kwargs == {"qos": 1, "retain": True}

    def test_subscribes_on_connect(self, plane):
        reason_code = MagicMock(is_failure=False)
        plane._on_connect(plane.client, None, None, reason_code, None)

        plane.client.subscribe.assert_called_once_with(
            "cadence/control/arena_01/commands", qos=1
        )
        assert plane._connected.is_set()
