"""
Cadence Runtime - Composition root and tick driver.

This module provides the CadenceRuntime class which builds the reactive
entities described by a RuntimeConfig, wires their notifications to the
signal publisher, and drives time forward.

Architecture:
- step(real_dt) is the whole single-threaded core: drain commands,
  advance the clock, resume scheduled tasks, refresh continuous displays
- start() runs step() on a dedicated tick thread at config.tick_rate
- Counter changes, condition edges, zone firings, timer completions and
  widget updates leave as SignalEvents through SignalEventPublisher

Threading Model:
- Tick Thread (our thread): owns every counter, condition, zone and timer
- Control Plane Thread (paho-mqtt internal): command handlers only enqueue
- Signal Publisher Thread (paho-mqtt internal): network I/O

Nothing outside the tick thread touches an entity; commands cross the
thread boundary through a queue.Queue.
"""

import queue
import threading
import time
from typing import Any, Callable, Dict, Optional

from cadence_logging import LogEvent, StructuredLogger, create_logger
from cadence_mqtt import PublishedWidget, SignalEvent, SignalKind, Timestamp
from cadence_state import (
    ConditionalDispatcher, CounterTextDisplay, ObservableCounter, TargetMode
)
from cadence_timing import DeferredInvoker, FrameClock, TickScheduler
from cadence_zone import LayerMask, LayeredZoneTrigger
from cadence_runtime.config import ConditionConfig, CounterConfig, RuntimeConfig
from cadence_runtime.registry import EntityRegistry


# (command, description, required payload fields)
COMMANDS = (
    ("add", "Add an amount to a counter", ("counter", "amount")),
    ("subtract", "Subtract an amount from a counter", ("counter", "amount")),
    ("set", "Set a counter to an absolute value", ("counter", "value")),
    ("check", "Re-evaluate a condition (notify: bool, default true)", ("condition",)),
    ("zone_enter", "Report a layer entering a zone", ("zone", "layer")),
    ("zone_exit", "Report a layer leaving a zone", ("zone", "layer")),
    ("zone_reset", "Re-arm a fire-once zone", ("zone",)),
    ("trigger_timer", "Start (or restart) a timer", ("timer",)),
    ("cancel_timer", "Cancel a pending timer", ("timer",)),
    ("set_time_scale", "Change the scaled clock speed", ("time_scale",)),
    ("pause", "Freeze scaled time (unscaled timers keep running)", ()),
    ("resume", "Restore the time scale in effect before pause", ()),
    ("status", "Publish runtime status", ()),
)


class CadenceRuntime:
    """
    Runtime for one service_id.

    Usage (headless, driven by the caller):
        runtime = CadenceRuntime(RuntimeConfig.from_yaml("config.yaml"))
        runtime.setup()
        runtime.activate()

        runtime.queue_command({"command": "add", "counter": "coins", "amount": 5})
        runtime.step(1 / 60)

    Usage (service):
        runtime = CadenceRuntime(config, control_plane, publisher)
        runtime.setup()
        runtime.start()   # connects, then activates entities (non-blocking)
        runtime.wait()    # blocks until stop()
    """

    def __init__(
        self,
        config: RuntimeConfig,
        control_plane=None,  # MQTTControlPlane
        publisher=None,  # SignalEventPublisher
        clock: Optional[FrameClock] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            config: Runtime configuration
            control_plane: MQTT control plane for commands (optional)
            publisher: Publisher for signal events (optional)
            clock: Clock advanced by step(); defaults to FrameClock(config.time_scale)
            logger: Diagnostic sink shared by every entity
        """
        self.config = config
        self.control_plane = control_plane
        self.publisher = publisher
        self.logger = logger or create_logger("runtime")

        self.clock = clock or FrameClock(time_scale=config.time_scale)
        self.scheduler = TickScheduler(logger=self.logger)
        self.entities = EntityRegistry()
        self.widgets: Dict[str, PublishedWidget] = {}

        self._handlers: Dict[str, Callable[[Dict[str, Any]], None]] = {
            "add": self._handle_add,
            "subtract": self._handle_subtract,
            "set": self._handle_set,
            "check": self._handle_check,
            "zone_enter": self._handle_zone_enter,
            "zone_exit": self._handle_zone_exit,
            "zone_reset": self._handle_zone_reset,
            "trigger_timer": self._handle_trigger_timer,
            "cancel_timer": self._handle_cancel_timer,
            "set_time_scale": self._handle_set_time_scale,
            "pause": self._handle_pause,
            "resume": self._handle_resume,
            "status": self._handle_status,
        }

        self.command_queue: queue.Queue = queue.Queue(maxsize=1024)
        self._paused_scale: Optional[float] = None
        self._is_setup = False
        self._active = False

        # Tick thread
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._running = False

    # ===== Setup =====

    def setup(self) -> None:
        """
        Build entities from configuration and register command handlers.

        Entities stay inactive until activate(); start() activates them only
        after the publisher is connected.
        """
        if self._is_setup:
            self.logger.warning(
                event=LogEvent.RUNTIME_STARTED,
                message="Runtime already set up",
                metadata={'service_id': self.config.service_id}
            )
            return

        for counter_config in self.config.counters:
            self._build_counter(counter_config)
        for condition_config in self.config.conditions:
            self._build_condition(condition_config)
        for zone_config in self.config.zones:
            zone = LayeredZoneTrigger(
                LayerMask.from_layers(zone_config.layers),
                fire_once=zone_config.fire_once,
                delay_seconds=zone_config.delay_seconds,
                scheduler=self.scheduler,
                clock=self.clock,
                name=zone_config.name,
                logger=self.logger.bind(entity=zone_config.name),
            )
            zone.on_enter_fired.add(
                lambda n=zone_config.name: self.emit_signal(n, SignalKind.ZONE_ENTERED)
            )
            zone.on_exit_fired.add(
                lambda n=zone_config.name: self.emit_signal(n, SignalKind.ZONE_EXITED)
            )
            self.entities.add_zone(zone_config.name, zone)
        for timer_config in self.config.timers:
            timer = DeferredInvoker(
                self.scheduler,
                self.clock,
                duration_seconds=timer_config.duration_seconds,
                use_unscaled_clock=timer_config.use_unscaled_clock,
                invoke_on_activate=timer_config.invoke_on_activate,
                name=timer_config.name,
                logger=self.logger.bind(entity=timer_config.name),
            )
            timer.on_elapsed.add(
                lambda n=timer_config.name: self.emit_signal(n, SignalKind.TIMER_ELAPSED)
            )
            self.entities.add_timer(timer_config.name, timer)

        if self.control_plane is not None:
            self._setup_control_handlers()

        self._is_setup = True
        self.logger.info(
            event=LogEvent.RUNTIME_STARTED,
            message=f"Runtime set up for service_id={self.config.service_id}",
            metadata={'service_id': self.config.service_id, 'entities': self.entities.count()}
        )

    def activate(self) -> None:
        """
        Activate displays, conditions and timers (no-op while active).

        Displays write their current text, conditions run their activation
        check and timers with invoke_on_activate start. step() activates on
        first use; start() activates after connecting.
        """
        if self._active:
            return
        if not self._is_setup:
            self.setup()

        self._active = True
        for display in self.entities.displays():
            display.activate()
        for condition in self.entities.conditions():
            condition.activate()
        for timer in self.entities.timers():
            timer.activate()

    def deactivate(self) -> None:
        """Unsubscribe every entity and cancel pending tasks; activate() restores them."""
        if not self._active:
            return

        self._active = False
        for condition in self.entities.conditions():
            condition.deactivate()
        for display in self.entities.displays():
            display.deactivate()
        for timer in self.entities.timers():
            timer.deactivate()
        self.scheduler.cancel_all()

    def _widget(self, widget_id: str) -> PublishedWidget:
        # One instance per id, so dual targets naming the same widget share a surface
        widget = self.widgets.get(widget_id)
        if widget is None:
            widget = PublishedWidget(widget_id, emit=self.emit_signal)
            self.widgets[widget_id] = widget
        return widget

    def _optional_widget(self, widget_id: Optional[str]) -> Optional[PublishedWidget]:
        return None if widget_id is None else self._widget(widget_id)

    def _build_counter(self, counter_config: CounterConfig) -> None:
        counter = ObservableCounter(
            name=counter_config.name,
            initial_value=counter_config.initial_value,
            clamp_floor=counter_config.clamp_floor,
            logger=self.logger.bind(entity=counter_config.name),
        )
        counter.on_value_changed.add(
            lambda value, n=counter_config.name: self.emit_signal(
                n, SignalKind.COUNTER_CHANGED, value
            )
        )
        self.entities.add_counter(counter_config.name, counter)

        display_config = counter_config.display
        if display_config is not None:
            widget_id = display_config.widget or f"{counter_config.name}_display"
            self.entities.add_display(counter_config.name, CounterTextDisplay(
                counter,
                self._widget(widget_id),
                prefix=display_config.prefix,
                suffix=display_config.suffix,
                update_continuously=display_config.update_continuously,
                name=widget_id,
                logger=self.logger.bind(entity=widget_id),
            ))

    def _build_condition(self, condition_config: ConditionConfig) -> None:
        condition = ConditionalDispatcher(
            counter=self.entities.counter(condition_config.counter),
            threshold=condition_config.threshold,
            comparison=condition_config.comparison,
            target_mode=condition_config.target_mode,
            auto_check_on_change=condition_config.auto_check_on_change,
            check_on_activate=condition_config.check_on_activate,
            invoke_on_auto_checks=condition_config.invoke_on_auto_checks,
            only_on_state_change=condition_config.only_on_state_change,
            show_mode=condition_config.show_mode,
            debug_logs=condition_config.debug_logs,
            name=condition_config.name,
            logger=self.logger.bind(entity=condition_config.name),
        )

        if condition.target_mode is TargetMode.SINGLE:
            condition.single_target = self._widget(condition_config.single_widget)
            condition.single_true_text = condition_config.true_text
            condition.single_false_text = condition_config.false_text
        else:
            condition.true_target = self._optional_widget(condition_config.resolved_true_widget)
            condition.false_target = self._optional_widget(condition_config.resolved_false_widget)
            condition.true_text_override = condition_config.true_text
            condition.false_text_override = condition_config.false_text

        name = condition_config.name
        condition.on_became_true.add(
            lambda: self.emit_signal(name, SignalKind.BECAME_TRUE, True)
        )
        condition.on_became_false.add(
            lambda: self.emit_signal(name, SignalKind.BECAME_FALSE, False)
        )
        self.entities.add_condition(name, condition)

    def _setup_control_handlers(self) -> None:
        """
        Register command handlers with the control plane.

        Handlers run on the Control Plane thread, so every command is only
        queued here and applied by the tick thread.
        """
        registry = self.control_plane.command_registry
        for command, description, required_fields in COMMANDS:
            registry.register(
                command,
                self.queue_command,
                description,
                required_fields=required_fields,
            )

    # ===== Signals =====

    def emit_signal(self, source: str, kind: SignalKind, value: Any = None) -> None:
        """Publish one SignalEvent (no-op without a publisher)."""
        if self.publisher is None:
            return

        event = SignalEvent(
            schema_version="1.0",
            timestamp=Timestamp.now(),
            service_id=self.config.service_id,
            source=source,
            kind=kind,
            value=value,
            tick=self.scheduler.tick_count,
        )
        self.publisher.publish_signal(event)

    # ===== Commands =====

    def queue_command(self, command_data: Dict[str, Any]) -> bool:
        """
        Queue a command for the tick thread (thread-safe).

        Returns:
            False if the queue is full and the command was dropped
        """
        try:
            self.command_queue.put_nowait(dict(command_data))
        except queue.Full:
            self.logger.warning(
                event=LogEvent.COMMAND_REJECTED,
                message="Command queue full, dropping command",
                metadata={'command': command_data.get('command')}
            )
            return False

        self.logger.debug(
            event=LogEvent.COMMAND_QUEUED,
            message=f"Command queued: {command_data.get('command')}",
            metadata={'command': command_data.get('command')}
        )
        return True

    def apply_command(self, command_data: Dict[str, Any]) -> bool:
        """
        Apply one command immediately (tick thread only).

        Unknown entities and malformed values are logged and rejected.
        """
        command = command_data.get('command')
        handler = self._handlers.get(command)
        if handler is None:
            self.logger.warning(
                event=LogEvent.COMMAND_REJECTED,
                message=f"Unknown command: {command}",
                metadata={'command': command, 'available': sorted(self._handlers)}
            )
            return False

        try:
            handler(command_data)
        except (KeyError, ValueError, TypeError) as e:
            self.logger.warning(
                event=LogEvent.COMMAND_REJECTED,
                message=f"Command '{command}' rejected: {e}",
                metadata={'command': command, 'payload': command_data}
            )
            return False

        self.logger.info(
            event=LogEvent.COMMAND_APPLIED,
            message=f"Command applied: {command}",
            metadata={'command': command}
        )
        return True

    def _drain_commands(self) -> int:
        applied = 0
        while True:
            try:
                command_data = self.command_queue.get_nowait()
            except queue.Empty:
                return applied
            if self.apply_command(command_data):
                applied += 1

    def _handle_add(self, data: Dict[str, Any]) -> None:
        self.entities.counter(data['counter']).add(int(data['amount']))

    def _handle_subtract(self, data: Dict[str, Any]) -> None:
        self.entities.counter(data['counter']).subtract(int(data['amount']))

    def _handle_set(self, data: Dict[str, Any]) -> None:
        self.entities.counter(data['counter']).set(int(data['value']))

    def _handle_check(self, data: Dict[str, Any]) -> None:
        condition = self.entities.condition(data['condition'])
        notify = data.get('notify', True)
        if not isinstance(notify, bool):
            raise TypeError(f"notify must be a boolean, got {notify!r}")
        if notify:
            condition.check_and_notify()
        else:
            condition.check_visual_only()

    def _handle_zone_enter(self, data: Dict[str, Any]) -> None:
        self.entities.zone(data['zone']).on_enter(int(data['layer']))

    def _handle_zone_exit(self, data: Dict[str, Any]) -> None:
        self.entities.zone(data['zone']).on_exit(int(data['layer']))

    def _handle_zone_reset(self, data: Dict[str, Any]) -> None:
        self.entities.zone(data['zone']).reset()

    def _handle_trigger_timer(self, data: Dict[str, Any]) -> None:
        self.entities.timer(data['timer']).trigger()

    def _handle_cancel_timer(self, data: Dict[str, Any]) -> None:
        self.entities.timer(data['timer']).cancel()

    def _handle_set_time_scale(self, data: Dict[str, Any]) -> None:
        self.clock.time_scale = float(data['time_scale'])
        self._paused_scale = None

    def _handle_pause(self, data: Dict[str, Any]) -> None:
        if self._paused_scale is None:
            self._paused_scale = self.clock.time_scale
            self.clock.time_scale = 0.0
            self._publish_status()

    def _handle_resume(self, data: Dict[str, Any]) -> None:
        if self._paused_scale is not None:
            self.clock.time_scale = self._paused_scale
            self._paused_scale = None
            self._publish_status()

    def _handle_status(self, data: Dict[str, Any]) -> None:
        self._publish_status()

    def _publish_status(self) -> None:
        if self.control_plane is not None:
            state = "paused" if self.is_paused else "running"
            self.control_plane.publish_status(state, details=self.status())

    # ===== Tick =====

    @property
    def is_paused(self) -> bool:
        return self._paused_scale is not None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_active(self) -> bool:
        return self._active

    def step(self, real_dt: float) -> int:
        """
        Advance the runtime by one tick.

        Order:
        0. Activate entities on first use
        1. Apply queued commands
        2. Advance the clock by real_dt
        3. Resume scheduled tasks (deferred invocations)
        4. Refresh continuously updated displays

        Returns:
            Number of tasks still pending after the tick
        """
        self.activate()
        self._drain_commands()
        self.clock.advance(real_dt)
        pending = self.scheduler.tick()
        for display in self.entities.displays():
            display.refresh()
        return pending

    def status(self) -> Dict[str, Any]:
        return {
            "service_id": self.config.service_id,
            "tick": self.scheduler.tick_count,
            "scaled_time": self.clock.scaled_time,
            "unscaled_time": self.clock.unscaled_time,
            "time_scale": self.clock.time_scale,
            "paused": self.is_paused,
            "pending_tasks": self.scheduler.pending_count,
            **self.entities.snapshot(),
        }

    # ===== Lifecycle =====

    def start(self) -> None:
        """
        Start the runtime (non-blocking).

        Lifecycle:
        1. Connect control plane (if any)
        2. Connect signal publisher (if any)
        3. Activate entities, so their initial signals reach the broker
        4. Start the tick thread

        A stopped runtime can be started again; entities are re-activated.
        """
        if self._running:
            self.logger.warning(
                event=LogEvent.RUNTIME_STARTED,
                message="Runtime already running",
                metadata={'service_id': self.config.service_id}
            )
            return

        if not self._is_setup:
            self.setup()

        if self.control_plane is not None:
            if not self.control_plane.connect(timeout=5.0):
                raise RuntimeError("Failed to connect to MQTT broker (control plane)")

        if self.publisher is not None:
            self.publisher.connect()

        self.activate()

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._tick_loop,
            name="CadenceTickThread",
            daemon=True
        )
        self._thread.start()
        self._running = True

        self._publish_status()
        self.logger.info(
            event=LogEvent.RUNTIME_STARTED,
            message=f"Runtime started at {self.config.tick_rate} ticks/s",
            metadata={'service_id': self.config.service_id, 'tick_rate': self.config.tick_rate}
        )

    def _tick_loop(self) -> None:
        period = 1.0 / self.config.tick_rate
        last = time.monotonic()

        while not self._stop_event.is_set():
            now = time.monotonic()
            self.step(now - last)
            last = now

            remaining = period - (time.monotonic() - now)
            if remaining > 0:
                self._stop_event.wait(remaining)

    def wait(self) -> None:
        """Block until stop() is called."""
        if not self._running or self._thread is None:
            return

        try:
            while self._thread.is_alive():
                self._thread.join(timeout=0.5)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        """
        Stop the runtime gracefully.

        Lifecycle:
        1. Stop the tick thread
        2. Deactivate entities and cancel pending tasks
        3. Disconnect publisher
        4. Publish stopped status and disconnect control plane
        """
        if not self._running:
            return

        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=5.0)

        self.deactivate()

        if self.publisher is not None:
            self.publisher.disconnect()

        if self.control_plane is not None:
            self.control_plane.publish_status("stopped", details=self.status())
            self.control_plane.disconnect()

        self._running = False
        self.logger.info(
            event=LogEvent.RUNTIME_STOPPED,
            message="Runtime stopped",
            metadata={'service_id': self.config.service_id, 'tick': self.scheduler.tick_count}
        )
