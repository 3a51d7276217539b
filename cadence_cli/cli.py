"""
Cadence CLI - Main entry point.

Provides command-line interface for sending MQTT commands to a cadence runtime.
"""

import argparse
import yaml
import sys
from pathlib import Path
from typing import Dict, Any, Optional

from .mqtt_client import MQTTCommandClient


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    """
    Load a command payload from a YAML file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If YAML is invalid or has no 'command' key
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config, dict) or 'command' not in config:
        raise ValueError(f"{config_path} must be a mapping with a 'command' key")
    return config


def send_command(
    command: Dict[str, Any],
    service_id: str = "arena_01",
    broker: str = "localhost",
    port: int = 1883
) -> None:
    """
    Send command to a cadence runtime via MQTT.

    Args:
        command: Command dictionary
        service_id: Target service ID
        broker: MQTT broker host
        port: MQTT broker port
    """
    topic = f"cadence/control/{service_id}/commands"

    client = MQTTCommandClient(broker=broker, port=port)
    client.send_command(topic, command, qos=1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cadence-cli",
        description="Cadence CLI - Send MQTT commands to a cadence runtime",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Counters
  cadence-cli add coins 5
  cadence-cli subtract health 10
  cadence-cli set coins 0

  # Conditions (re-evaluate; --quiet skips callbacks)
  cadence-cli check door
  cadence-cli check door --quiet

  # Zones (layer index reported by the collision system)
  cadence-cli zone-enter goal 8
  cadence-cli zone-exit goal 8
  cadence-cli zone-reset goal

  # Timers and time
  cadence-cli trigger-timer blink
  cadence-cli cancel-timer blink
  cadence-cli set-time-scale 0.5

  # Raw payload from YAML
  cadence-cli send config/commands/reset_coins.yaml

  # Simple commands (no arguments)
  cadence-cli pause
  cadence-cli resume
  cadence-cli status
"""
    )

    # Global arguments
    parser.add_argument(
        "--service-id",
        default="arena_01",
        help="Target service ID (default: arena_01)"
    )
    parser.add_argument(
        "--broker",
        default="localhost",
        help="MQTT broker host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=1883,
        help="MQTT broker port (default: 1883)"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Counter commands
    for name, help_text, field in (
        ('add', 'Add an amount to a counter', 'amount'),
        ('subtract', 'Subtract an amount from a counter', 'amount'),
        ('set', 'Set a counter value', 'value'),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('counter', help='Counter name')
        sub.add_argument(field, type=int)

    check = subparsers.add_parser('check', help='Re-evaluate a condition')
    check.add_argument('condition', help='Condition name')
    check.add_argument('--quiet', action='store_true', help='Update visuals only, no callbacks')

    for name, help_text in (
        ('zone-enter', 'Report a layer entering a zone'),
        ('zone-exit', 'Report a layer leaving a zone'),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('zone', help='Zone name')
        sub.add_argument('layer', type=int, help='Layer index (0-31)')

    zone_reset = subparsers.add_parser('zone-reset', help='Re-arm a fire-once zone')
    zone_reset.add_argument('zone', help='Zone name')

    for name, help_text in (
        ('trigger-timer', 'Start or restart a timer'),
        ('cancel-timer', 'Cancel a pending timer'),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('timer', help='Timer name')

    time_scale = subparsers.add_parser('set-time-scale', help='Change scaled clock speed')
    time_scale.add_argument('time_scale', type=float)

    send = subparsers.add_parser('send', help='Send a raw command payload from YAML')
    send.add_argument('config', help='Path to command YAML')

    # Simple commands (no arguments)
    subparsers.add_parser('pause', help='Freeze scaled time')
    subparsers.add_parser('resume', help='Restore time scale')
    subparsers.add_parser('status', help='Publish runtime status')

    return parser


def build_command(args: argparse.Namespace) -> Optional[Dict[str, Any]]:
    """
    Translate parsed arguments into a command payload.

    Returns:
        Command dict, or None when no subcommand was given
    """
    if not args.command:
        return None

    if args.command == 'send':
        return load_yaml_config(args.config)

    if args.command in ('add', 'subtract'):
        return {'command': args.command, 'counter': args.counter, 'amount': args.amount}

    if args.command == 'set':
        return {'command': 'set', 'counter': args.counter, 'value': args.value}

    if args.command == 'check':
        return {'command': 'check', 'condition': args.condition, 'notify': not args.quiet}

    if args.command in ('zone-enter', 'zone-exit'):
        return {
            'command': args.command.replace('-', '_'),
            'zone': args.zone,
            'layer': args.layer,
        }

    if args.command == 'zone-reset':
        return {'command': 'zone_reset', 'zone': args.zone}

    if args.command in ('trigger-timer', 'cancel-timer'):
        return {'command': args.command.replace('-', '_'), 'timer': args.timer}

    if args.command == 'set-time-scale':
        return {'command': 'set_time_scale', 'time_scale': args.time_scale}

    # pause, resume, status
    return {'command': args.command}


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        command = build_command(args)
        if command is None:
            parser.print_help()
            sys.exit(1)

        send_command(command, args.service_id, args.broker, args.port)
        print(f"✅ Command sent: {command.get('command', 'unknown')}")

    except (FileNotFoundError, ValueError, ConnectionError, RuntimeError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
