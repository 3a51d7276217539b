"""
MQTTControlPlane - MQTT command intake for the cadence runtime

Bounded Context: MQTT connection management + command reception
Responsibilities:
  - MQTT connection lifecycle (connect, disconnect)
  - Command message reception (subscribe to command topic)
  - Status publishing (publish to status topic)
  - Command delegation to CommandRegistry

QoS Policy:
  - Commands: QoS 1 (at-least-once delivery)
  - Status: QoS 1 + retained (last status persisted)

Threading:
  - paho-mqtt runs its own network thread (loop_start/loop_stop)
  - _on_message runs in that thread; registered handlers only queue
    commands for the tick thread
"""

import json
import logging
from datetime import datetime, timezone
from threading import Event
from typing import Any, Dict, Optional

import paho.mqtt.client as mqtt

from .registry import CommandRegistry, CommandNotAvailableError, CommandValidationError

logger = logging.getLogger(__name__)


class MQTTControlPlane:
    """
    MQTT Control Plane for receiving commands and publishing status.

    Example:
        control_plane = MQTTControlPlane(
            broker_host="localhost",
            broker_port=1883,
            command_topic="cadence/control/arena_01/commands",
            status_topic="cadence/control/arena_01/status",
            client_id="runtime_arena_01"
        )
        control_plane.command_registry.register('pause', runtime.queue_command, "Pause")

        if control_plane.connect(timeout=5.0):
            ...
        control_plane.disconnect()
    """

    def __init__(
        self,
        broker_host: str,
        broker_port: int,
        command_topic: str,
        status_topic: str,
        client_id: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.command_topic = command_topic
        self.status_topic = status_topic
        self.client_id = client_id

        self.client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=client_id,
            protocol=mqtt.MQTTv311,
        )
        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message
        self.client.on_disconnect = self._on_disconnect

        if username and password:
            self.client.username_pw_set(username, password)

        self._connected = Event()
        self._running = False

        self.command_registry = CommandRegistry()

    def connect(self, timeout: float = 5.0) -> bool:
        """
        Connect to MQTT broker, blocking until connected or timeout.

        Returns:
            True if connected successfully, False otherwise
        """
        try:
            logger.info(f"Connecting to MQTT broker: {self.broker_host}:{self.broker_port}")
            self.client.connect(self.broker_host, self.broker_port, keepalive=60)
            self.client.loop_start()
            self._running = True

            if self._connected.wait(timeout=timeout):
                logger.info("MQTT control plane connected")
                return True
            else:
                logger.error(f"Connection timeout after {timeout}s")
                return False

        except Exception as e:
            logger.error(f"Error connecting to MQTT: {e}")
            return False

    def disconnect(self) -> None:
        """Disconnect from MQTT broker. Safe to call multiple times."""
        if self._running:
            logger.info("Disconnecting from MQTT broker")
            self.publish_status("disconnected")
            self.client.loop_stop()
            self.client.disconnect()
            self._running = False
            self._connected.clear()
            logger.info("MQTT control plane disconnected")

    def publish_status(self, status: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Publish a retained status update (QoS 1).

        Args:
            status: Status string (e.g., "running", "paused", "stopped")
            details: Optional extra fields (counter values, tick, ...)
        """
        message = {
            "status": status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "client_id": self.client_id,
        }
        if details:
            message["details"] = details

        try:
            self.client.publish(
                self.status_topic,
                json.dumps(message, default=str),
                qos=1,
                retain=True,
            )
            logger.debug(f"Status published: {status}")
        except Exception as e:
            logger.error(f"Error publishing status: {e}")

    # ===== MQTT Callbacks (run in MQTT thread) =====

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        if not reason_code.is_failure:
            logger.info(f"Connected to broker (rc={reason_code})")
            client.subscribe(self.command_topic, qos=1)
            logger.info(f"Subscribed to: {self.command_topic} (QoS 1)")
            self.publish_status("connected")
            self._connected.set()
        else:
            logger.error(f"Connection failed (rc={reason_code})")
            self._connected.clear()

    def _on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties):
        if reason_code.is_failure:
            logger.warning(f"Unexpected disconnection (rc={reason_code})")
        else:
            logger.info("Disconnected from broker")
        self._connected.clear()

    def _on_message(self, client, userdata, msg):
        """Decode a command payload and hand it to the registry."""
        try:
            payload = msg.payload.decode('utf-8')
            logger.debug(f"Command received: {payload}")

            command_data = json.loads(payload)
            if not isinstance(command_data, dict):
                logger.warning(f"Command payload must be a JSON object, got: {payload}")
                return

            command = str(command_data.get('command', '')).lower()
            command_data['command'] = command
            if not command:
                logger.warning("Empty command received")
                return

            try:
                self.command_registry.execute(command, command_data)
                logger.debug(f"Command '{command}' accepted")

            except CommandNotAvailableError as e:
                logger.warning(f"{e}")
                available = ', '.join(sorted(self.command_registry.available_commands))
                logger.info(f"Available commands: {available}")

            except CommandValidationError as e:
                logger.warning(f"{e}")

        except json.JSONDecodeError as e:
            logger.error(f"Error decoding JSON: {msg.payload} ({e})")
        except Exception as e:
            logger.error(f"Error processing message: {e}", exc_info=True)
