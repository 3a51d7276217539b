"""
CommandRegistry - Explicit command registration with payload checks

Bounded Context: Command registration and validation
Responsibilities:
  - Register commands with handlers and the payload fields they need
  - Reject unknown commands and incomplete payloads before execution
  - Provide introspection (available_commands, get_help)

Threading: Registration is locked; execution runs on the caller's thread
(the MQTT thread for the control plane). Handlers must only enqueue work
for the tick thread, never touch core state directly.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Set, Tuple
import threading


class CommandNotAvailableError(Exception):
    """Raised when attempting to execute an unregistered command"""
    pass


class CommandValidationError(ValueError):
    """Raised when a command payload lacks required fields"""
    pass


@dataclass(frozen=True)
class CommandSpec:
    """Registered command: handler, help text, required payload fields."""
    handler: Callable[[Dict[str, Any]], None]
    description: str
    required_fields: Tuple[str, ...] = ()


class CommandRegistry:
    """
    Registry for control commands.

    Example:
        registry = CommandRegistry()
        registry.register('add', runtime.queue_command, "Add to a counter",
                          required_fields=('counter', 'amount'))

        registry.execute('add', {'command': 'add', 'counter': 'coins', 'amount': 3})
    """

    def __init__(self):
        self._commands: Dict[str, CommandSpec] = {}
        self._lock = threading.Lock()

    def register(
        self,
        command: str,
        handler: Callable[[Dict[str, Any]], None],
        description: str,
        required_fields: Tuple[str, ...] = (),
    ) -> None:
        """
        Register a command.

        Args:
            command: Command name (lowercase, no spaces)
            handler: Callable receiving the full command payload
            description: Human-readable description for help text
            required_fields: Payload keys that must be present

        Raises:
            ValueError: If command already registered
        """
        with self._lock:
            if command in self._commands:
                raise ValueError(f"Command '{command}' already registered")
            self._commands[command] = CommandSpec(
                handler=handler,
                description=description,
                required_fields=tuple(required_fields),
            )

    def execute(self, command: str, command_data: Dict[str, Any] = None) -> None:
        """
        Validate and execute a registered command.

        Raises:
            CommandNotAvailableError: If command not registered
            CommandValidationError: If required payload fields are missing
        """
        entry = self._commands.get(command)
        if entry is None:
            raise CommandNotAvailableError(
                f"Command '{command}' not available. "
                f"Available commands: {', '.join(sorted(self.available_commands))}"
            )

        payload = dict(command_data or {})
        payload.setdefault('command', command)
        missing = [name for name in entry.required_fields if name not in payload]
        if missing:
            raise CommandValidationError(
                f"Command '{command}' missing field(s): {', '.join(missing)}"
            )

        entry.handler(payload)

    def is_available(self, command: str) -> bool:
        return command in self._commands

    @property
    def available_commands(self) -> Set[str]:
        """Snapshot of registered command names."""
        return set(self._commands.keys())

    def get_help(self) -> Dict[str, str]:
        """Command name → description."""
        return {name: entry.description for name, entry in self._commands.items()}

    def count(self) -> int:
        return len(self._commands)
