#!/usr/bin/env python3
"""
Cadence Runtime Service - Entry Point
=====================================

This script starts a cadence runtime, which:
- Builds counters, conditions, zone triggers and timers from YAML
- Ticks the scheduler at the configured rate
- Publishes counter changes, condition edges and widget updates to MQTT
- Responds to control commands via MQTT control plane

Usage:
    python run_runtime.py --config config/runtime_config.yaml

Architecture:
    - CadenceRuntime: Tick loop and composition root (cadence_runtime)
    - MQTTControlPlane: Command intake (cadence_control)
    - SignalEventPublisher: Publishes signal events (cadence_mqtt)

Lifecycle:
    1. Load configuration from YAML
    2. Setup logging (console + file)
    3. Create control plane and publisher (unless --headless or mqtt disabled)
    4. Create CadenceRuntime and build entities
    5. Start runtime (non-blocking)
    6. Wait for stop signal (Ctrl+C or SIGTERM)
    7. Graceful shutdown

Signals:
    - SIGTERM: Graceful shutdown
    - SIGINT (Ctrl+C): Graceful shutdown

Logs:
    - Console: INFO level (DEBUG with --debug)
    - File: logs/runtime.log
"""

import argparse
import signal
import sys
import logging
from pathlib import Path
from typing import Optional

from cadence_runtime import CadenceRuntime, RuntimeConfig
from cadence_control import MQTTControlPlane
from cadence_mqtt import SignalEventPublisher
from cadence_logging import create_logger


# ─────────────────────────────────────────────────────────────────────────────
# Logging Setup
# ─────────────────────────────────────────────────────────────────────────────

def setup_logging(log_file: Optional[Path] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Setup logging for the runtime service.

    Args:
        log_file: Optional path to log file
        level: Root log level

    Returns:
        Logger instance for the entry point
    """
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            *(
                [logging.FileHandler(log_file)]
                if log_file
                else []
            )
        ]
    )

    return logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Main Service
# ─────────────────────────────────────────────────────────────────────────────

class RuntimeApp:
    """
    Main application wrapper for CadenceRuntime.

    Handles:
    - Configuration loading
    - Component initialization (control plane, publisher)
    - Signal handling (SIGTERM, SIGINT)
    - Graceful shutdown
    """

    def __init__(
        self,
        config_path: Path,
        log_file: Optional[Path] = None,
        headless: bool = False,
        debug: bool = False,
    ):
        self.config_path = config_path
        self.headless = headless
        self.log_level = logging.DEBUG if debug else logging.INFO
        self.logger = setup_logging(log_file, self.log_level)

        # Components (initialized in setup())
        self.config: Optional[RuntimeConfig] = None
        self.control_plane: Optional[MQTTControlPlane] = None
        self.publisher: Optional[SignalEventPublisher] = None
        self.runtime: Optional[CadenceRuntime] = None

        self._shutdown_requested = False

    def setup(self):
        """
        Setup all components.

        Steps:
        1. Load configuration from YAML
        2. Create control plane and signal publisher
        3. Create CadenceRuntime and build entities
        """
        self.logger.info("=" * 80)
        self.logger.info("🚀 Cadence Runtime - Starting")
        self.logger.info("=" * 80)

        # 1. Load configuration
        self.logger.info(f"📄 Loading configuration: {self.config_path}")
        self.config = RuntimeConfig.from_yaml(self.config_path)
        self.logger.info(f"✅ Configuration loaded (service_id={self.config.service_id})")

        mqtt_config = self.config.mqtt_config
        use_mqtt = mqtt_config.enabled and not self.headless

        # 2. MQTT components
        if use_mqtt:
            self.logger.info("🔌 Creating MQTT control plane")
            self.control_plane = MQTTControlPlane(
                broker_host=mqtt_config.broker,
                broker_port=mqtt_config.port,
                command_topic=self.config.format_topic(mqtt_config.command_topic),
                status_topic=self.config.format_topic(mqtt_config.status_topic),
                client_id=f"runtime_{self.config.service_id}",
                username=mqtt_config.username,
                password=mqtt_config.password,
            )

            signal_topic = self.config.format_topic(mqtt_config.signal_topic)
            self.publisher = SignalEventPublisher(
                broker_host=mqtt_config.broker,
                broker_port=mqtt_config.port,
                topic=signal_topic,
                logger=create_logger(
                    component="mqtt_publisher",
                    level=self.log_level,
                    service_id=self.config.service_id,
                ),
                client_id=f"publisher_signals_{self.config.service_id}",
                username=mqtt_config.username,
                password=mqtt_config.password,
                qos=mqtt_config.qos,
            )
            self.logger.info(f"  - Signal topic: {signal_topic}")
            self.logger.info("✅ MQTT components created")
        else:
            self.logger.info("📴 MQTT disabled, running headless")

        # 3. Runtime
        self.runtime = CadenceRuntime(
            config=self.config,
            control_plane=self.control_plane,
            publisher=self.publisher,
            logger=create_logger(
                component="runtime",
                level=self.log_level,
                service_id=self.config.service_id,
            ),
        )
        self.runtime.setup()
        self.logger.info("✅ Runtime set up")
        self.logger.info("=" * 80)

    def run(self):
        """
        Run the runtime service.

        Blocks until shutdown is requested (via signal or exception).
        """
        if not self.runtime:
            raise RuntimeError("Runtime not initialized. Call setup() first.")

        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        try:
            self.runtime.start()

            self.logger.info(f"✅ Runtime ticking at {self.config.tick_rate} Hz")
            self.logger.info("Press Ctrl+C to stop")
            self.logger.info("=" * 80)

            self.runtime.wait()

        except KeyboardInterrupt:
            self.logger.info("⚠️  KeyboardInterrupt received")
            self.shutdown()

        except Exception as e:
            self.logger.error(f"❌ Runtime error: {e}", exc_info=True)
            self.shutdown()
            sys.exit(1)

    def shutdown(self):
        """Graceful shutdown of the runtime and its MQTT clients."""
        if self._shutdown_requested:
            self.logger.warning("⚠️  Shutdown already in progress")
            return

        self._shutdown_requested = True

        self.logger.info("=" * 80)
        self.logger.info("🛑 Shutting down runtime")
        self.logger.info("=" * 80)

        if self.runtime:
            try:
                self.runtime.stop()
                self.logger.info("✅ Runtime stopped")
            except Exception as e:
                self.logger.error(f"❌ Error stopping runtime: {e}")

        self.logger.info("✅ Shutdown complete")

    def _signal_handler(self, signum, frame):
        signal_name = signal.Signals(signum).name
        self.logger.info(f"⚠️  Received signal {signal_name} ({signum})")
        self.shutdown()
        sys.exit(0)


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

def parse_args():
    parser = argparse.ArgumentParser(
        description="Cadence Runtime - reactive counters, conditions and triggers over MQTT",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start with default config
  python run_runtime.py --config config/runtime_config.yaml

  # No broker (log-only, useful for config checks)
  python run_runtime.py --config config/runtime_config.yaml --headless

  # Verbose per-evaluation traces
  python run_runtime.py --config config/runtime_config.yaml --debug --no-log-file
        """
    )

    parser.add_argument(
        '--config',
        type=Path,
        required=True,
        help='Path to runtime configuration YAML file'
    )
    parser.add_argument(
        '--log-file',
        type=Path,
        default=Path('logs/runtime.log'),
        help='Path to log file (default: logs/runtime.log)'
    )
    parser.add_argument(
        '--no-log-file',
        action='store_true',
        help='Disable file logging (console only)'
    )
    parser.add_argument(
        '--headless',
        action='store_true',
        help='Do not connect to MQTT'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='DEBUG log level'
    )

    return parser.parse_args()


def main():
    args = parse_args()

    log_file = None if args.no_log_file else args.log_file

    if not args.config.exists():
        print(f"❌ Error: Configuration file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    app = RuntimeApp(
        config_path=args.config,
        log_file=log_file,
        headless=args.headless,
        debug=args.debug,
    )

    try:
        app.setup()
        app.run()
    except Exception as e:
        print(f"❌ Fatal error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
