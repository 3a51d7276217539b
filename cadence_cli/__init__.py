"""
Cadence CLI - Command-line interface for runtime control.

This package provides a CLI for sending MQTT commands to a cadence runtime
without manually writing JSON.

Usage:
    cadence-cli add coins 5
    cadence-cli set coins 0
    cadence-cli zone-enter goal 8
    cadence-cli trigger-timer blink
    cadence-cli pause
    cadence-cli send config/commands/reset_coins.yaml
"""

__version__ = "1.0.0"
