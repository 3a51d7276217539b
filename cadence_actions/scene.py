"""
Scene Load Action Module
========================

Requests a scene transition, optionally after a delay.

The transition mechanics belong to the host; this module only decides
when to call the injected SceneLoader and brackets the call with
before/after notifications.
"""

from typing import Optional, Protocol

from cadence_events import CallbackChannel
from cadence_logging import StructuredLogger, LogEvent, create_logger
from cadence_timing import Clock, DeferredInvoker, TickScheduler


class SceneLoader(Protocol):
    """Host capability that performs the actual scene switch."""

    def load_scene(self, scene_name: str, additive: bool) -> None:
        ...


class SceneLoadAction:
    """
    Loads a configured scene on request.

    on_after_load fires right after the loader call, not after any
    asynchronous completion on the host side.

    Usage:
        action = SceneLoadAction(
            loader=host,
            scene_name="level_2",
            load_delay=1.0,
            scheduler=scheduler,
            clock=clock,
        )
        action.on_before_load.add(fade_out)
        action.load_scene()
    """

    def __init__(
        self,
        loader: Optional[SceneLoader],
        scene_name: str = "",
        load_additively: bool = False,
        load_delay: float = 0.0,
        scheduler: Optional[TickScheduler] = None,
        clock: Optional[Clock] = None,
        name: str = "scene_loader",
        logger: Optional[StructuredLogger] = None,
    ):
        self.loader = loader
        self.scene_name = scene_name
        self.load_additively = load_additively
        self.name = name
        self.logger = logger or create_logger("actions")
        self.on_before_load = CallbackChannel(f"{name}.before_load", logger=self.logger)
        self.on_after_load = CallbackChannel(f"{name}.after_load", logger=self.logger)

        self._invoker: Optional[DeferredInvoker] = None
        if scheduler is not None and clock is not None:
            self._invoker = DeferredInvoker(
                scheduler,
                clock,
                duration_seconds=load_delay,
                name=f"{name}.delay",
                logger=self.logger,
            )
        self.load_delay = self._invoker.duration_seconds if self._invoker else max(load_delay, 0.0)

    @property
    def is_pending(self) -> bool:
        return self._invoker is not None and self._invoker.is_pending

    def load_scene(self) -> bool:
        """
        Start loading the configured scene.

        Returns:
            False if no scene name is set (nothing happens), True otherwise
        """
        if not self.scene_name:
            self.logger.warning(
                event=LogEvent.SCENE_MISCONFIGURED,
                message=f"[{self.name}] Scene name not set",
                metadata={'action': self.name}
            )
            return False

        self.logger.info(
            event=LogEvent.SCENE_LOAD_REQUESTED,
            message=f"[{self.name}] Loading '{self.scene_name}'",
            metadata={
                'scene': self.scene_name,
                'additive': self.load_additively,
                'delay': self.load_delay,
            }
        )
        self.on_before_load.invoke()

        if self.load_delay > 0 and self._invoker is not None:
            self._invoker.trigger(self._perform_load)
        else:
            self._perform_load()
        return True

    def cancel(self) -> bool:
        """Cancel a delayed load that has not happened yet."""
        return self._invoker is not None and self._invoker.cancel()

    def _perform_load(self) -> None:
        if self.loader is None:
            self.logger.warning(
                event=LogEvent.SCENE_MISCONFIGURED,
                message=f"[{self.name}] No scene loader assigned",
                metadata={'action': self.name, 'scene': self.scene_name}
            )
        else:
            self.loader.load_scene(self.scene_name, self.load_additively)
            self.logger.info(
                event=LogEvent.SCENE_LOADED,
                message=f"[{self.name}] Loader called for '{self.scene_name}'",
                metadata={'scene': self.scene_name, 'additive': self.load_additively}
            )
        self.on_after_load.invoke()
