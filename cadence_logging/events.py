"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Event Naming Convention:
    <component>.<category>.<action>

    component: counter, condition, timer, zone, scene, mqtt, command, runtime
    category: value, edge, task, trigger, publish, ...
    action: changed, fired, failed, ...

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.condition
    | filter event = "condition.edge.true"
    | stats count() by bin(5m)
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - counter.*: Observable counter mutations
    - condition.*: Conditional dispatcher evaluation and edges
    - timer.*: Deferred invocations and cooperative tasks
    - zone.*: Layered zone triggers
    - scene.* / message.*: Action components
    - mqtt.* / command.*: Transport and control plane
    - runtime.*: Composition root lifecycle
    - error.*: Error conditions
    """

    # ========== Counter Events ==========
    COUNTER_CHANGED = "counter.value.changed"
    """Counter value changed and observers were notified."""

    # ========== Condition Events ==========
    CONDITION_EVALUATED = "condition.evaluated"
    """Condition evaluated (debug trace)."""

    CONDITION_BECAME_TRUE = "condition.edge.true"
    """'Became true' notification dispatched."""

    CONDITION_BECAME_FALSE = "condition.edge.false"
    """'Became false' notification dispatched."""

    CONDITION_ACTIVATED = "condition.activated"
    """Dispatcher activated (subscribed to its counter)."""

    CONDITION_DEACTIVATED = "condition.deactivated"
    """Dispatcher deactivated (unsubscribed from its counter)."""

    CONDITION_MISCONFIGURED = "condition.misconfigured"
    """Dispatcher setup is incomplete; component stays inert."""

    CONDITION_AMBIGUOUS_TARGETS = "condition.targets.ambiguous"
    """TRUE and FALSE targets resolve to the same surface."""

    DISPLAY_MISCONFIGURED = "display.misconfigured"
    """Counter text display has no counter or no surface."""

    # ========== Timer Events ==========
    TIMER_STARTED = "timer.task.started"
    """Deferred invocation scheduled (or restarted)."""

    TIMER_FIRED = "timer.task.fired"
    """Deferred invocation elapsed and fired its callback."""

    TIMER_CANCELLED = "timer.task.cancelled"
    """Pending deferred invocation cancelled."""

    TASK_FAILED = "timer.task.failed"
    """Cooperative task raised while being resumed."""

    TIMER_DURATION_CLAMPED = "timer.duration.clamped"
    """Negative duration clamped to zero."""

    # ========== Zone Events ==========
    ZONE_ENTERED = "zone.trigger.entered"
    """Qualifying object entered a zone trigger."""

    ZONE_EXITED = "zone.trigger.exited"
    """Qualifying object exited a zone trigger."""

    ZONE_IGNORED = "zone.trigger.ignored"
    """Overlap ignored (layer not in mask, or already fired)."""

    ZONE_MISCONFIGURED = "zone.misconfigured"
    """Zone trigger has a delay but no scheduler."""

    # ========== Action Events ==========
    SCENE_LOAD_REQUESTED = "scene.load.requested"
    """Scene load requested (possibly delayed)."""

    SCENE_LOADED = "scene.load.performed"
    """Scene loader invoked."""

    SCENE_MISCONFIGURED = "scene.misconfigured"
    """Scene load requested without a scene name or loader."""

    MESSAGE_EMITTED = "message.emitted"
    """Message action emitted its text."""

    # ========== MQTT Events ==========
    MQTT_CONNECTED = "mqtt.connected"
    """MQTT broker connection established."""

    MQTT_DISCONNECTED = "mqtt.disconnected"
    """MQTT broker connection lost."""

    MQTT_PUBLISH_SUCCESS = "mqtt.publish.success"
    """Message successfully published to broker."""

    MQTT_PUBLISH_FAILED = "mqtt.publish.failed"
    """Message publication failed."""

    # ========== Command Events ==========
    COMMAND_QUEUED = "command.queued"
    """Control command queued for the tick thread."""

    COMMAND_APPLIED = "command.applied"
    """Control command applied on the tick thread."""

    COMMAND_REJECTED = "command.rejected"
    """Control command rejected (unknown target or bad payload)."""

    # ========== Runtime Events ==========
    RUNTIME_STARTED = "runtime.started"
    """Tick loop started."""

    RUNTIME_STOPPED = "runtime.stopped"
    """Tick loop stopped."""

    # ========== Error Events ==========
    CALLBACK_FAILED = "error.callback"
    """A registered callback raised during dispatch."""

    SERIALIZATION_ERROR = "error.serialization"
    """Failed to serialize message to JSON."""

    MQTT_CONNECTION_ERROR = "error.mqtt_connection"
    """Failed to connect to MQTT broker."""

    MQTT_PUBLISH_ERROR = "error.mqtt_publish"
    """Error during message publication."""


# Event categories for filtering
CONDITION_EVENTS = {
    LogEvent.CONDITION_EVALUATED,
    LogEvent.CONDITION_BECAME_TRUE,
    LogEvent.CONDITION_BECAME_FALSE,
    LogEvent.CONDITION_ACTIVATED,
    LogEvent.CONDITION_DEACTIVATED,
    LogEvent.CONDITION_MISCONFIGURED,
    LogEvent.CONDITION_AMBIGUOUS_TARGETS,
}

TIMER_EVENTS = {
    LogEvent.TIMER_STARTED,
    LogEvent.TIMER_FIRED,
    LogEvent.TIMER_CANCELLED,
    LogEvent.TASK_FAILED,
    LogEvent.TIMER_DURATION_CLAMPED,
}

ZONE_EVENTS = {
    LogEvent.ZONE_ENTERED,
    LogEvent.ZONE_EXITED,
    LogEvent.ZONE_IGNORED,
    LogEvent.ZONE_MISCONFIGURED,
}

ERROR_EVENTS = {
    LogEvent.CALLBACK_FAILED,
    LogEvent.SERIALIZATION_ERROR,
    LogEvent.MQTT_CONNECTION_ERROR,
    LogEvent.MQTT_PUBLISH_ERROR,
}
