"""
Entity Registry - Thread-safe name lookup for runtime entities.

The runtime addresses counters, conditions, zone triggers and timers by
name (commands arrive as JSON with names, signals leave with names). The
registry owns that mapping.

Thread Safety:
- Uses threading.Lock for protecting dict mutations
- Entities are only mutated on the tick thread; the lock guards the
  mappings, not the entities
"""

import threading
from typing import Dict, List, Optional

from cadence_state import ObservableCounter, ConditionalDispatcher, CounterTextDisplay
from cadence_timing import DeferredInvoker
from cadence_zone import LayeredZoneTrigger


class EntityRegistry:
    """
    Registry of named runtime entities, one namespace per entity kind.

    Usage:
        registry = EntityRegistry()
        registry.add_counter("coins", ObservableCounter("coins"))
        registry.counter("coins").add(5)

        registry.add_counter("coins", other)  # ValueError: already exists
        registry.counter("gems")              # KeyError: not found
    """

    def __init__(self):
        self._counters: Dict[str, ObservableCounter] = {}
        self._conditions: Dict[str, ConditionalDispatcher] = {}
        self._zones: Dict[str, LayeredZoneTrigger] = {}
        self._timers: Dict[str, DeferredInvoker] = {}
        self._displays: Dict[str, CounterTextDisplay] = {}
        self._lock = threading.Lock()

    def _add(self, table: Dict, kind: str, name: str, entity) -> None:
        with self._lock:
            if name in table:
                raise ValueError(f"{kind.capitalize()} '{name}' already exists")
            table[name] = entity

    def _get(self, table: Dict, kind: str, name: str):
        with self._lock:
            if name not in table:
                raise KeyError(f"{kind.capitalize()} '{name}' not found")
            return table[name]

    # ===== Registration =====

    def add_counter(self, name: str, counter: ObservableCounter) -> None:
        self._add(self._counters, "counter", name, counter)

    def add_condition(self, name: str, condition: ConditionalDispatcher) -> None:
        self._add(self._conditions, "condition", name, condition)

    def add_zone(self, name: str, zone: LayeredZoneTrigger) -> None:
        self._add(self._zones, "zone", name, zone)

    def add_timer(self, name: str, timer: DeferredInvoker) -> None:
        self._add(self._timers, "timer", name, timer)

    def add_display(self, name: str, display: CounterTextDisplay) -> None:
        self._add(self._displays, "display", name, display)

    # ===== Lookup =====

    def counter(self, name: str) -> ObservableCounter:
        return self._get(self._counters, "counter", name)

    def condition(self, name: str) -> ConditionalDispatcher:
        return self._get(self._conditions, "condition", name)

    def zone(self, name: str) -> LayeredZoneTrigger:
        return self._get(self._zones, "zone", name)

    def timer(self, name: str) -> DeferredInvoker:
        return self._get(self._timers, "timer", name)

    def find_counter(self, name: str) -> Optional[ObservableCounter]:
        with self._lock:
            return self._counters.get(name)

    # ===== Snapshots =====

    def counters(self) -> List[ObservableCounter]:
        with self._lock:
            return list(self._counters.values())

    def conditions(self) -> List[ConditionalDispatcher]:
        with self._lock:
            return list(self._conditions.values())

    def zones(self) -> List[LayeredZoneTrigger]:
        with self._lock:
            return list(self._zones.values())

    def timers(self) -> List[DeferredInvoker]:
        with self._lock:
            return list(self._timers.values())

    def displays(self) -> List[CounterTextDisplay]:
        with self._lock:
            return list(self._displays.values())

    def snapshot(self) -> Dict[str, Dict]:
        """
        Summarize every entity for status reporting.

        Returns:
            {
                "counters": {"coins": 12},
                "conditions": {"door": True},
                "zones": {"goal": {"has_fired": False, "pending": False}},
                "timers": {"blink": {"pending": True}},
            }
        """
        with self._lock:
            return {
                "counters": {name: c.value for name, c in self._counters.items()},
                "conditions": {
                    name: c.last_result for name, c in self._conditions.items()
                },
                "zones": {
                    name: {"has_fired": z.has_fired, "pending": z.is_pending}
                    for name, z in self._zones.items()
                },
                "timers": {
                    name: {"pending": t.is_pending} for name, t in self._timers.items()
                },
            }

    def count(self) -> int:
        with self._lock:
            return (
                len(self._counters) + len(self._conditions)
                + len(self._zones) + len(self._timers)
            )
