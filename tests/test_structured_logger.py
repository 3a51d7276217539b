"""
StructuredLogger tests: one JSON object per record, bound entity context.
"""

import json
import logging

import pytest

from cadence_logging import LogEvent, StructuredLogger, create_logger


def records(caplog, name):
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == name]


class TestStructuredLogger:

    def test_record_fields(self, caplog):
        logger = create_logger("state", service_id="arena_01")

        with caplog.at_level(logging.INFO, logger="cadence.state"):
            logger.info(
                event=LogEvent.COUNTER_CHANGED,
                message="coins changed",
                metadata={'value': 12},
            )

        record, = records(caplog, "cadence.state")
        assert record['level'] == "INFO"
        assert record['component'] == "state"
        assert record['service_id'] == "arena_01"
        assert record['event'] == "counter.value.changed"
        assert record['metadata'] == {'value': 12}

    def test_bind_adds_entity_and_keeps_parent_context(self, caplog):
        runtime_log = create_logger("runtime", service_id="arena_01")
        door_log = runtime_log.bind(entity="door")

        with caplog.at_level(logging.INFO, logger="cadence.runtime"):
            door_log.warning(event=LogEvent.CONDITION_MISCONFIGURED, message="no targets")
            runtime_log.info(event=LogEvent.RUNTIME_STARTED, message="started")

        bound, parent = records(caplog, "cadence.runtime")
        assert bound['entity'] == "door"
        assert bound['service_id'] == "arena_01"
        assert 'entity' not in parent
        assert door_log.logger is runtime_log.logger

    def test_debug_is_filtered_at_info(self, caplog):
        logger = create_logger("timing")

        with caplog.at_level(logging.INFO, logger="cadence.timing"):
            logger.debug(event=LogEvent.TIMER_STARTED, message="started")

        assert records(caplog, "cadence.timing") == []

    def test_error_carries_exception(self, caplog):
        logger = create_logger("events")

        with caplog.at_level(logging.ERROR, logger="cadence.events"):
            logger.error(
                event=LogEvent.CALLBACK_FAILED,
                message="handler raised",
                exc_info=RuntimeError("boom"),
            )

        record, = records(caplog, "cadence.events")
        assert record['exception'] == {'type': "RuntimeError", 'message': "boom"}

    @pytest.mark.parametrize("key", ["event", "message", "level"])
    def test_context_cannot_shadow_record_fields(self, key):
        with pytest.raises(ValueError):
            StructuredLogger("state").bind(**{key: "x"})
