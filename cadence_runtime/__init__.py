"""
cadence_runtime - Composition root for reactive counters and triggers

Bounded Context: Building entities from configuration and driving time
Responsibilities:
  - Configuration loading and validation (RuntimeConfig)
  - Name lookup for counters, conditions, zones and timers (EntityRegistry)
  - Tick loop, command application and signal publishing (CadenceRuntime)
"""

from cadence_runtime.config import (
    RuntimeConfig,
    CounterConfig,
    DisplayConfig,
    ConditionConfig,
    ZoneTriggerConfig,
    TimerConfig,
    MQTTConfig,
)
from cadence_runtime.registry import EntityRegistry
from cadence_runtime.service import CadenceRuntime, COMMANDS

__all__ = [
    "RuntimeConfig",
    "CounterConfig",
    "DisplayConfig",
    "ConditionConfig",
    "ZoneTriggerConfig",
    "TimerConfig",
    "MQTTConfig",
    "EntityRegistry",
    "CadenceRuntime",
    "COMMANDS",
]
