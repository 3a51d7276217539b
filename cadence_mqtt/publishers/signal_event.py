"""
Signal Event Publisher
======================

Bounded Context: Outbound signal message production

Message Flow:
    CadenceRuntime → SignalEvent → SignalEventPublisher → MQTT Broker

One publisher per service_id, one topic. Publishing is best-effort: a
signal that cannot be serialized or sent is logged, counted as dropped and
reported as False; nothing is raised into the tick thread.
"""

import json
import threading
from collections import Counter
from typing import Dict, Any, Optional
import paho.mqtt.client as mqtt

from ..schemas import SignalEvent
from cadence_logging import StructuredLogger, LogEvent


class SignalEventPublisher:
    """
    Publishes SignalEvents as JSON on a single topic.

    Thread Safety:
        publish_signal() runs on the tick thread, connection callbacks on
        paho's loop thread. Counters are guarded by _stats_lock.

    Example:
        >>> publisher = SignalEventPublisher(
        ...     broker_host="localhost",
        ...     topic="cadence/data/signals/arena_01",
        ...     logger=logger
        ... )
        >>> publisher.connect()
        >>> publisher.publish_signal(event)
    """

    def __init__(
        self,
        broker_host: str,
        topic: str,
        logger: StructuredLogger,
        broker_port: int = 1883,
        client_id: str = "cadence_signal_publisher",
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 0
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.topic = topic
        self.client_id = client_id
        self.logger = logger
        self.qos = qos

        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        if username and password:
            self.client.username_pw_set(username, password)
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        self._connected = threading.Event()
        self._stats_lock = threading.Lock()
        self._published_by_kind: Counter = Counter()
        self._dropped = 0
        self._last_tick: Optional[int] = None

    @property
    def broker(self) -> str:
        return f"{self.broker_host}:{self.broker_port}"

    # ===== Connection (paho loop thread callbacks) =====

    def _on_connect(self, client, userdata, flags, reason_code, properties) -> None:
        if reason_code.is_failure:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message=f"Signal publisher refused by broker (rc={reason_code})",
                metadata={'broker': self.broker}
            )
            return

        self._connected.set()
        self.logger.info(
            event=LogEvent.MQTT_CONNECTED,
            message=f"Publishing signals on {self.topic}",
            metadata={'broker': self.broker, 'client_id': self.client_id, 'qos': self.qos}
        )

    def _on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties) -> None:
        self._connected.clear()
        self.logger.warning(
            event=LogEvent.MQTT_DISCONNECTED,
            message="Signal publisher lost its broker connection",
            metadata={'broker': self.broker, 'reason_code': str(reason_code)}
        )

    def connect(self, timeout: float = 10.0) -> bool:
        """
        Connect and start paho's network loop.

        Blocks until the broker acknowledges the connection, so signals
        emitted right after a successful connect() are delivered.

        Returns:
            True once connected, False on refusal or timeout
        """
        try:
            self.client.connect(self.broker_host, self.broker_port)
            self.client.loop_start()
        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Signal publisher could not reach broker",
                exc_info=e,
                metadata={'broker': self.broker}
            )
            return False

        if not self._connected.wait(timeout=timeout):
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message=f"No CONNACK within {timeout}s",
                metadata={'broker': self.broker, 'timeout': timeout}
            )
            return False
        return True

    def disconnect(self) -> None:
        try:
            self.client.loop_stop()
            self.client.disconnect()
        except Exception as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Error while disconnecting signal publisher",
                exc_info=e
            )
            return

        self._connected.clear()
        self.logger.info(
            event=LogEvent.MQTT_DISCONNECTED,
            message="Signal publisher disconnected",
            metadata=self.get_stats()
        )

    def is_connected(self) -> bool:
        return self._connected.is_set()

    # ===== Publishing (tick thread) =====

    def publish_signal(self, event: SignalEvent) -> bool:
        """
        Publish one signal event.

        Returns:
            True if handed to paho, False if dropped
        """
        metadata = {'source': event.source, 'kind': event.kind.value, 'tick': event.tick}

        if not self._connected.is_set():
            self._drop()
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message="Signal dropped: not connected to broker",
                metadata=metadata
            )
            return False

        try:
            payload = json.dumps(event.to_dict())
        except (TypeError, ValueError) as e:
            self._drop()
            self.logger.error(
                event=LogEvent.SERIALIZATION_ERROR,
                message="Signal value is not JSON serializable",
                exc_info=e,
                metadata=metadata
            )
            return False

        try:
            result = self.client.publish(topic=self.topic, payload=payload, qos=self.qos)
        except Exception as e:
            self._drop()
            self.logger.error(
                event=LogEvent.MQTT_PUBLISH_ERROR,
                message="Error publishing signal",
                exc_info=e,
                metadata=metadata
            )
            return False

        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            self._drop()
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message=f"Broker rejected signal (rc={result.rc})",
                metadata=metadata
            )
            return False

        with self._stats_lock:
            self._published_by_kind[event.kind.value] += 1
            self._last_tick = event.tick

        self.logger.debug(
            event=LogEvent.MQTT_PUBLISH_SUCCESS,
            message=f"{event.source} {event.kind.value}",
            metadata=metadata
        )
        return True

    def _drop(self) -> None:
        with self._stats_lock:
            self._dropped += 1

    def get_stats(self) -> Dict[str, Any]:
        """Published counts per signal kind, dropped count and connection state."""
        with self._stats_lock:
            return {
                'published': sum(self._published_by_kind.values()),
                'published_by_kind': dict(self._published_by_kind),
                'dropped': self._dropped,
                'last_tick': self._last_tick,
                'connected': self._connected.is_set(),
                'topic': self.topic,
                'broker': self.broker,
            }
