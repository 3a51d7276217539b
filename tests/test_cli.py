"""
cadence-cli argument → payload translation (no broker contacted).
"""

from unittest.mock import patch

import pytest

from cadence_cli.cli import build_command, build_parser, load_yaml_config, main


def parse(*argv):
    return build_command(build_parser().parse_args(list(argv)))


class TestBuildCommand:

    @pytest.mark.parametrize("argv,expected", [
        (["add", "coins", "5"], {"command": "add", "counter": "coins", "amount": 5}),
        (["subtract", "health", "10"], {"command": "subtract", "counter": "health", "amount": 10}),
        (["set", "coins", "0"], {"command": "set", "counter": "coins", "value": 0}),
        (["check", "door"], {"command": "check", "condition": "door", "notify": True}),
        (["check", "door", "--quiet"], {"command": "check", "condition": "door", "notify": False}),
        (["zone-enter", "goal", "8"], {"command": "zone_enter", "zone": "goal", "layer": 8}),
        (["zone-exit", "goal", "8"], {"command": "zone_exit", "zone": "goal", "layer": 8}),
        (["zone-reset", "goal"], {"command": "zone_reset", "zone": "goal"}),
        (["trigger-timer", "blink"], {"command": "trigger_timer", "timer": "blink"}),
        (["cancel-timer", "blink"], {"command": "cancel_timer", "timer": "blink"}),
        (["set-time-scale", "0.5"], {"command": "set_time_scale", "time_scale": 0.5}),
        (["pause"], {"command": "pause"}),
        (["status"], {"command": "status"}),
    ])
    def test_payloads(self, argv, expected):
        assert parse(*argv) == expected

    def test_no_subcommand(self):
        assert parse() is None

    def test_send_yaml(self, tmp_path):
        path = tmp_path / "cmd.yaml"
        path.write_text("command: set\ncounter: coins\nvalue: 0\n")

        assert parse("send", str(path)) == {"command": "set", "counter": "coins", "value": 0}

    def test_yaml_needs_command_key(self, tmp_path):
        path = tmp_path / "cmd.yaml"
        path.write_text("counter: coins\n")

        with pytest.raises(ValueError):
            load_yaml_config(str(path))


class TestMain:

    def test_sends_to_service_topic(self):
        with patch("cadence_cli.cli.MQTTCommandClient") as client_cls:
            main(["--service-id", "arena_02", "add", "coins", "3"])

        client_cls.assert_called_once_with(broker="localhost", port=1883)
        client_cls.return_value.send_command.assert_called_once_with(
            "cadence/control/arena_02/commands",
            {"command": "add", "counter": "coins", "amount": 3},
            qos=1,
        )

    def test_connection_error_exits(self):
        with patch("cadence_cli.cli.MQTTCommandClient") as client_cls:
            client_cls.return_value.send_command.side_effect = ConnectionError("down")
            with pytest.raises(SystemExit) as exc:
                main(["pause"])
        assert exc.value.code == 1
