"""
MQTT publishers for cadence signal events.
"""

from .signal_event import SignalEventPublisher

__all__ = [
    'SignalEventPublisher',
]
