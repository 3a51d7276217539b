"""
MQTT client wrapper for sending commands to a cadence runtime.

Handles MQTT connection, publishing, and disconnection.
"""

import json
import paho.mqtt.client as mqtt
from typing import Dict, Any, Optional


class MQTTCommandClient:
    """
    MQTT client for sending commands to a cadence runtime.

    Publishes commands to the control plane topic with QoS 1.
    """

    def __init__(
        self,
        broker: str = "localhost",
        port: int = 1883,
        username: Optional[str] = None,
        password: Optional[str] = None
    ):
        """
        Initialize MQTT command client.

        Args:
            broker: MQTT broker host
            port: MQTT broker port
            username: Optional MQTT username
            password: Optional MQTT password
        """
        self.broker = broker
        self.port = port

        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)

        if username and password:
            self.client.username_pw_set(username, password)

    def send_command(
        self,
        topic: str,
        command: Dict[str, Any],
        qos: int = 1,
        timeout: float = 5.0
    ) -> None:
        """
        Send command to MQTT topic.

        Args:
            topic: MQTT topic (e.g., "cadence/control/arena_01/commands")
            command: Command dictionary (will be JSON serialized)
            qos: Quality of Service (default: 1 for control commands)
            timeout: Seconds to wait for the broker acknowledgement

        Raises:
            ConnectionError: If unable to connect to MQTT broker
            ValueError: If command serialization fails
        """
        try:
            payload = json.dumps(command)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid command data: {e}") from e

        try:
            self.client.connect(self.broker, self.port, keepalive=60)
        except (ConnectionRefusedError, OSError) as e:
            raise ConnectionError(
                f"Unable to connect to MQTT broker at {self.broker}:{self.port}. "
                "Is mosquitto running?"
            ) from e

        self.client.loop_start()
        try:
            result = self.client.publish(topic, payload, qos=qos)
            result.wait_for_publish(timeout=timeout)
            if not result.is_published():
                raise RuntimeError(f"Command not acknowledged within {timeout}s")
        finally:
            self.client.disconnect()
            self.client.loop_stop()
