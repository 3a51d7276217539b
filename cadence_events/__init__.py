"""
cadence_events - Ordered callback channels

Bounded Context: Outbound notification fan-out
Responsibilities:
  - Keep an explicit, ordered list of callback handles per channel
  - Deliver in registration order
  - Isolate handler failures (log and continue)
"""

from .channel import CallbackChannel

__all__ = [
    "CallbackChannel",
]
