"""
cadence_control - Control Plane for the cadence runtime

Bounded Context: MQTT-based command-and-control
Responsibilities:
  - MQTT connection management (Control Plane)
  - Command registration and payload validation
  - Command delegation (handlers queue work for the tick thread)
"""

from .registry import CommandRegistry, CommandNotAvailableError, CommandValidationError
from .plane import MQTTControlPlane

__all__ = [
    "CommandRegistry",
    "CommandNotAvailableError",
    "CommandValidationError",
    "MQTTControlPlane",
]
