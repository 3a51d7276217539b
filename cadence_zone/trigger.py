"""
Layered Zone Trigger Module
===========================

Filters overlap enter/exit notifications by layer.

Design:
- The physics system calls on_enter / on_exit with the overlapping
  object's layer; this module only filters and dispatches
- Enter may be delayed through a DeferredInvoker (scaled clock)
- fire_once arms on entry detection, not on callback firing
- Exit is never delayed and never suppressed by fire_once
"""

from typing import Optional

from cadence_events import CallbackChannel
from cadence_logging import StructuredLogger, LogEvent, create_logger
from cadence_timing import Clock, DeferredInvoker, TickScheduler
from cadence_zone.layers import LayerMask


class LayeredZoneTrigger:
    """
    Zone trigger that only reacts to objects on configured layers.

    Usage:
        goal = LayeredZoneTrigger(
            layer_mask=LayerMask.from_layers([PLAYER_LAYER]),
            fire_once=True,
            delay_seconds=0.5,
            scheduler=scheduler,
            clock=clock,
        )
        goal.on_enter_fired.add(show_victory)

        goal.on_enter(PLAYER_LAYER)   # show_victory 0.5s later
        goal.on_enter(PLAYER_LAYER)   # ignored, already fired
    """

    def __init__(
        self,
        layer_mask: LayerMask,
        fire_once: bool = False,
        delay_seconds: float = 0.0,
        scheduler: Optional[TickScheduler] = None,
        clock: Optional[Clock] = None,
        name: str = "zone",
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            layer_mask: Layers that may trigger the zone
            fire_once: Ignore entries after the first qualifying one
            delay_seconds: Delay before the enter event fires (scaled time)
            scheduler: Needed when delay_seconds > 0
            clock: Needed when delay_seconds > 0
            name: Identifier for logs
            logger: Diagnostic sink
        """
        self.layer_mask = layer_mask
        self.fire_once = fire_once
        self.name = name
        self.logger = logger or create_logger("zone")
        self.on_enter_fired = CallbackChannel(f"{name}.enter", logger=self.logger)
        self.on_exit_fired = CallbackChannel(f"{name}.exit", logger=self.logger)

        self.has_fired = False
        self._invoker: Optional[DeferredInvoker] = None

        if delay_seconds < 0:
            self.logger.warning(
                event=LogEvent.TIMER_DURATION_CLAMPED,
                message=f"[{name}] Negative delay clamped to 0",
                metadata={'zone': name, 'requested': delay_seconds}
            )
            delay_seconds = 0.0
        self.delay_seconds = delay_seconds

        if delay_seconds > 0:
            if scheduler is None or clock is None:
                self.logger.warning(
                    event=LogEvent.ZONE_MISCONFIGURED,
                    message=f"[{name}] Delay set without scheduler/clock; enter fires immediately",
                    metadata={'zone': name, 'delay': delay_seconds}
                )
            else:
                self._invoker = DeferredInvoker(
                    scheduler,
                    clock,
                    duration_seconds=delay_seconds,
                    name=f"{name}.enter_delay",
                    logger=self.logger,
                )

    @property
    def is_pending(self) -> bool:
        """A delayed enter event is waiting to fire."""
        return self._invoker is not None and self._invoker.is_pending

    def on_enter(self, layer: int) -> bool:
        """
        Overlap began with an object on `layer`.

        Returns:
            True if the entry qualified (fired now or scheduled)
        """
        if self.has_fired and self.fire_once:
            self.logger.debug(
                event=LogEvent.ZONE_IGNORED,
                message=f"[{self.name}] Entry ignored, already fired",
                metadata={'zone': self.name, 'layer': layer}
            )
            return False

        if layer not in self.layer_mask:
            self.logger.debug(
                event=LogEvent.ZONE_IGNORED,
                message=f"[{self.name}] Entry ignored, layer not in mask",
                metadata={'zone': self.name, 'layer': layer}
            )
            return False

        self.logger.info(
            event=LogEvent.ZONE_ENTERED,
            message=f"[{self.name}] Qualifying entry",
            metadata={'zone': self.name, 'layer': layer, 'delay': self.delay_seconds}
        )

        if self._invoker is not None:
            self._invoker.trigger(self._fire_enter)
        else:
            self._fire_enter()

        if self.fire_once:
            self.has_fired = True
        return True

    def on_exit(self, layer: int) -> bool:
        """
        Overlap ended with an object on `layer`.

        Returns:
            True if the exit qualified and the exit event fired
        """
        if layer not in self.layer_mask:
            return False

        self.logger.info(
            event=LogEvent.ZONE_EXITED,
            message=f"[{self.name}] Qualifying exit",
            metadata={'zone': self.name, 'layer': layer}
        )
        self.on_exit_fired.invoke()
        return True

    def reset(self) -> None:
        """Cancel a pending delayed enter and re-arm a fire-once trigger."""
        if self._invoker is not None:
            self._invoker.cancel()
        self.has_fired = False

    def _fire_enter(self) -> None:
        self.on_enter_fired.invoke()

    def __repr__(self) -> str:
        return (
            f"LayeredZoneTrigger(name={self.name!r}, mask={self.layer_mask.layers()}, "
            f"fire_once={self.fire_once}, has_fired={self.has_fired})"
        )
