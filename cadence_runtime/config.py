"""
Configuration schema for the cadence runtime.

Counters, the conditions that watch them, zone triggers, standalone timers
and MQTT settings, loaded from YAML and validated at startup.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import yaml

from cadence_state import Comparison, ShowMode, TargetMode
from cadence_zone import MAX_LAYERS


# Default dual-mode widget: "<condition>_true" / "<condition>_false"
AUTO_WIDGET = "<auto>"


@dataclass(frozen=True)
class DisplayConfig:
    """Text display bound to a counter (`{prefix}{value}{suffix}`)."""

    prefix: str = ""
    suffix: str = ""
    update_continuously: bool = False
    widget: Optional[str] = None  # default: "<counter>_display"


@dataclass(frozen=True)
class CounterConfig:
    """Observable counter definition."""

    name: str
    initial_value: int = 0
    clamp_floor: bool = True
    display: Optional[DisplayConfig] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Counter name cannot be empty")
        if self.clamp_floor and self.initial_value < 0:
            raise ValueError(
                f"Counter '{self.name}' clamps at zero but initial_value is {self.initial_value}"
            )


@dataclass(frozen=True)
class ConditionConfig:
    """
    Conditional dispatcher definition.

    Single mode: one widget named after the condition, true_text/false_text
    are swapped into it.
    Dual mode: true_widget / false_widget (default "<name>_true" /
    "<name>_false"), true_text/false_text are optional overrides. An explicit
    null leaves that branch without a target; at least one must remain.
    """

    name: str
    counter: str
    threshold: int = 0
    comparison: Comparison = Comparison.GREATER_OR_EQUAL
    target_mode: TargetMode = TargetMode.SINGLE
    show_mode: ShowMode = ShowMode.LAYER_ALPHA
    true_text: str = ""
    false_text: str = ""
    true_widget: Optional[str] = AUTO_WIDGET
    false_widget: Optional[str] = AUTO_WIDGET
    auto_check_on_change: bool = True
    check_on_activate: bool = True
    invoke_on_auto_checks: bool = False
    only_on_state_change: bool = True
    debug_logs: bool = False

    def __post_init__(self):
        if not self.name:
            raise ValueError("Condition name cannot be empty")
        if not self.counter:
            raise ValueError(f"Condition '{self.name}' must reference a counter")
        # Accept plain strings from YAML
        object.__setattr__(self, "comparison", Comparison.parse(self.comparison))
        try:
            object.__setattr__(self, "target_mode", TargetMode(self.target_mode))
            object.__setattr__(self, "show_mode", ShowMode(self.show_mode))
        except ValueError as e:
            raise ValueError(f"Condition '{self.name}': {e}") from e
        if (
            self.target_mode is TargetMode.DUAL
            and self.true_widget is None
            and self.false_widget is None
        ):
            raise ValueError(f"Condition '{self.name}' needs a true_widget or a false_widget")

    @property
    def single_widget(self) -> str:
        return self.name

    @property
    def resolved_true_widget(self) -> Optional[str]:
        return self._resolve(self.true_widget, "true")

    @property
    def resolved_false_widget(self) -> Optional[str]:
        return self._resolve(self.false_widget, "false")

    def _resolve(self, widget: Optional[str], branch: str) -> Optional[str]:
        if widget == AUTO_WIDGET:
            return f"{self.name}_{branch}"
        return widget


@dataclass(frozen=True)
class ZoneTriggerConfig:
    """Layered zone trigger definition."""

    name: str
    layers: List[int] = field(default_factory=list)
    fire_once: bool = False
    delay_seconds: float = 0.0

    def __post_init__(self):
        if not self.name:
            raise ValueError("Zone name cannot be empty")
        if not self.layers:
            raise ValueError(f"Zone '{self.name}' must list at least one layer")
        for layer in self.layers:
            if not 0 <= layer < MAX_LAYERS:
                raise ValueError(
                    f"Zone '{self.name}' layer must be in [0, {MAX_LAYERS - 1}], got {layer}"
                )
        if self.delay_seconds < 0:
            raise ValueError(
                f"Zone '{self.name}' delay_seconds must be >= 0, got {self.delay_seconds}"
            )


@dataclass(frozen=True)
class TimerConfig:
    """Standalone deferred invoker, driven by trigger_timer / cancel_timer."""

    name: str
    duration_seconds: float = 0.5
    use_unscaled_clock: bool = False
    invoke_on_activate: bool = False

    def __post_init__(self):
        if not self.name:
            raise ValueError("Timer name cannot be empty")
        if self.duration_seconds < 0:
            raise ValueError(
                f"Timer '{self.name}' duration_seconds must be >= 0, got {self.duration_seconds}"
            )


@dataclass(frozen=True)
class MQTTConfig:
    """MQTT broker configuration."""

    broker: str = "localhost"
    port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    qos: int = 0  # Signal plane QoS (fire-and-forget)
    enabled: bool = True

    signal_topic: str = "cadence/data/signals/{service_id}"
    command_topic: str = "cadence/control/{service_id}/commands"
    status_topic: str = "cadence/control/{service_id}/status"

    def __post_init__(self):
        if not 1 <= self.port <= 65535:
            raise ValueError(f"MQTT port must be in [1, 65535], got {self.port}")
        if self.qos not in {0, 1, 2}:
            raise ValueError(f"MQTT QoS must be 0, 1, or 2, got {self.qos}")


@dataclass(frozen=True)
class RuntimeConfig:
    """
    Main configuration for the cadence runtime.

    Loaded from YAML and validated at startup; immutable afterwards.
    """

    service_id: str
    tick_rate: int = 60
    time_scale: float = 1.0
    counters: List[CounterConfig] = field(default_factory=list)
    conditions: List[ConditionConfig] = field(default_factory=list)
    zones: List[ZoneTriggerConfig] = field(default_factory=list)
    timers: List[TimerConfig] = field(default_factory=list)
    mqtt_config: MQTTConfig = field(default_factory=MQTTConfig)

    def __post_init__(self):
        if not self.service_id:
            raise ValueError("service_id cannot be empty")

        if not 1 <= self.tick_rate <= 240:
            raise ValueError(f"tick_rate must be in [1, 240], got {self.tick_rate}")

        if self.time_scale < 0:
            raise ValueError(f"time_scale must be >= 0, got {self.time_scale}")

        for kind, names in (
            ("counter", [c.name for c in self.counters]),
            ("condition", [c.name for c in self.conditions]),
            ("zone", [z.name for z in self.zones]),
            ("timer", [t.name for t in self.timers]),
        ):
            duplicates = sorted({name for name in names if names.count(name) > 1})
            if duplicates:
                raise ValueError(f"Duplicate {kind} names: {', '.join(duplicates)}")

        counter_names = {c.name for c in self.counters}
        for condition in self.conditions:
            if condition.counter not in counter_names:
                raise ValueError(
                    f"Condition '{condition.name}' references unknown counter "
                    f"'{condition.counter}'"
                )

    def format_topic(self, template: str) -> str:
        return template.format(service_id=self.service_id)

    @classmethod
    def from_dict(cls, data: dict) -> "RuntimeConfig":
        counters = []
        for c in data.get("counters", []) or []:
            display_data = c.get("display")
            counters.append(CounterConfig(
                name=c["name"],
                initial_value=c.get("initial_value", 0),
                clamp_floor=c.get("clamp_floor", True),
                display=DisplayConfig(**display_data) if display_data else None,
            ))

        conditions = [ConditionConfig(**c) for c in data.get("conditions", []) or []]
        zones = [
            ZoneTriggerConfig(
                name=z["name"],
                layers=[int(layer) for layer in z.get("layers", [])],
                fire_once=z.get("fire_once", False),
                delay_seconds=float(z.get("delay_seconds", 0.0)),
            )
            for z in data.get("zones", []) or []
        ]
        timers = [TimerConfig(**t) for t in data.get("timers", []) or []]
        mqtt_config = MQTTConfig(**(data.get("mqtt_config") or {}))

        return cls(
            service_id=data["service_id"],
            tick_rate=data.get("tick_rate", 60),
            time_scale=float(data.get("time_scale", 1.0)),
            counters=counters,
            conditions=conditions,
            zones=zones,
            timers=timers,
            mqtt_config=mqtt_config,
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "RuntimeConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            service_id: "arena_01"
            tick_rate: 60

            counters:
              - name: coins
                initial_value: 0
                display: {prefix: "Coins: "}

            conditions:
              - name: door
                counter: coins
                threshold: 10
                comparison: ">="
                target_mode: dual
                true_text: "Door open"
                false_text: "Collect 10 coins"
                invoke_on_auto_checks: true

            zones:
              - name: goal
                layers: [8]
                fire_once: true
                delay_seconds: 0.5

            mqtt_config:
              broker: "localhost"
              port: 1883
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping: {yaml_path}")
        return cls.from_dict(data)
