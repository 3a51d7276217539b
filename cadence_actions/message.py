"""
Message action: emit a configured text on the diagnostic channel
(handy as a button or condition callback while wiring things up).
"""

from typing import Optional

from cadence_logging import StructuredLogger, LogEvent, create_logger


class MessageAction:

    def __init__(
        self,
        message: str = "",
        name: str = "message",
        logger: Optional[StructuredLogger] = None,
    ):
        self.message = message
        self.name = name
        self.logger = logger or create_logger("actions")

    def print_message(self) -> None:
        self.print_custom(self.message)

    def print_custom(self, custom_message: str) -> None:
        self.logger.info(
            event=LogEvent.MESSAGE_EMITTED,
            message=f"[{self.name}] {custom_message}",
            metadata={'action': self.name}
        )
