"""
RuntimeConfig loading and validation tests.
"""

import pytest

from cadence_runtime import (
    ConditionConfig,
    CounterConfig,
    MQTTConfig,
    RuntimeConfig,
    TimerConfig,
    ZoneTriggerConfig,
)
from cadence_state import Comparison, ShowMode, TargetMode

CONFIG_YAML = """
service_id: "arena_01"
tick_rate: 30
time_scale: 0.5

counters:
  - name: coins
    display: {prefix: "Coins: "}
  - name: health
    initial_value: 100

conditions:
  - name: door
    counter: coins
    threshold: 10
    comparison: ">="
    target_mode: dual
    show_mode: presence
    true_text: "Door open"
  - name: low_health
    counter: health
    threshold: 25
    comparison: less_or_equal

zones:
  - name: goal
    layers: [8]
    fire_once: true
    delay_seconds: 0.5

timers:
  - name: blink
    duration_seconds: 1
    use_unscaled_clock: true

mqtt_config:
  broker: "mqtt.local"
  port: 1884
"""


class TestFromYaml:

    def test_loads_everything(self, tmp_path):
        path = tmp_path / "runtime.yaml"
        path.write_text(CONFIG_YAML)

        config = RuntimeConfig.from_yaml(path)

        assert config.service_id == "arena_01"
        assert config.tick_rate == 30
        assert config.time_scale == 0.5
        assert [c.name for c in config.counters] == ["coins", "health"]
        assert config.counters[0].display.prefix == "Coins: "
        assert config.counters[1].display is None

        door, low_health = config.conditions
        assert door.comparison is Comparison.GREATER_OR_EQUAL
        assert door.target_mode is TargetMode.DUAL
        assert door.show_mode is ShowMode.PRESENCE
        assert door.resolved_true_widget == "door_true"
        assert door.resolved_false_widget == "door_false"
        assert low_health.comparison is Comparison.LESS_OR_EQUAL
        assert low_health.target_mode is TargetMode.SINGLE

        assert config.zones[0].layers == [8]
        assert config.timers[0].use_unscaled_clock is True
        assert config.mqtt_config.broker == "mqtt.local"
        assert config.format_topic(config.mqtt_config.signal_topic) == "cadence/data/signals/arena_01"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("service_id: [unclosed")
        with pytest.raises(ValueError, match="Invalid YAML"):
            RuntimeConfig.from_yaml(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            RuntimeConfig.from_yaml(path)


class TestValidation:

    def test_null_dual_widget_means_no_target(self, tmp_path):
        path = tmp_path / "runtime.yaml"
        path.write_text(
            "service_id: a\n"
            "counters: [{name: coins}]\n"
            "conditions:\n"
            "  - {name: door, counter: coins, target_mode: dual, false_widget: null}\n"
        )

        door, = RuntimeConfig.from_yaml(path).conditions
        assert door.resolved_true_widget == "door_true"
        assert door.resolved_false_widget is None

    def test_dual_condition_needs_one_widget(self):
        with pytest.raises(ValueError, match="needs a true_widget or a false_widget"):
            ConditionConfig(
                name="door",
                counter="coins",
                target_mode="dual",
                true_widget=None,
                false_widget=None,
            )


    def test_condition_must_reference_known_counter(self):
        with pytest.raises(ValueError, match="unknown counter 'gems'"):
            RuntimeConfig(
                service_id="a",
                counters=[CounterConfig(name="coins")],
                conditions=[ConditionConfig(name="door", counter="gems")],
            )

    def test_duplicate_names(self):
        with pytest.raises(ValueError, match="Duplicate counter names: coins"):
            RuntimeConfig(
                service_id="a",
                counters=[CounterConfig(name="coins"), CounterConfig(name="coins")],
            )

    def test_bad_comparison(self):
        with pytest.raises(ValueError):
            ConditionConfig(name="door", counter="coins", comparison="=>")

    def test_bad_target_mode(self):
        with pytest.raises(ValueError, match="door"):
            ConditionConfig(name="door", counter="coins", target_mode="triple")

    def test_zone_layers(self):
        with pytest.raises(ValueError):
            ZoneTriggerConfig(name="goal", layers=[])
        with pytest.raises(ValueError):
            ZoneTriggerConfig(name="goal", layers=[32])
        with pytest.raises(ValueError):
            ZoneTriggerConfig(name="goal", layers=[1], delay_seconds=-1)

    def test_negative_timer_duration(self):
        with pytest.raises(ValueError):
            TimerConfig(name="blink", duration_seconds=-0.5)

    def test_clamped_counter_cannot_start_negative(self):
        with pytest.raises(ValueError):
            CounterConfig(name="coins", initial_value=-1)
        assert CounterConfig(name="balance", initial_value=-1, clamp_floor=False)

    def test_mqtt(self):
        with pytest.raises(ValueError):
            MQTTConfig(port=0)
        with pytest.raises(ValueError):
            MQTTConfig(qos=3)

    def test_runtime_limits(self):
        with pytest.raises(ValueError):
            RuntimeConfig(service_id="")
        with pytest.raises(ValueError):
            RuntimeConfig(service_id="a", tick_rate=0)
        with pytest.raises(ValueError):
            RuntimeConfig(service_id="a", time_scale=-1)
