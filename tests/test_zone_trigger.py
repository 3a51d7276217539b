"""
LayeredZoneTrigger Tests
========================

Layer filtering, fire-once and delayed enter notifications.
"""

import pytest

from cadence_logging import LogEvent
from cadence_zone import LayerMask, LayeredZoneTrigger, MAX_LAYERS
from conftest import Recorder, logged_events

PLAYER = 8
ENEMY = 9


class TestLayerMask:

    def test_membership(self):
        mask = LayerMask.from_layers([0, PLAYER])

        assert PLAYER in mask
        assert ENEMY not in mask
        assert mask.value == 257
        assert mask.layers() == [0, PLAYER]

    def test_out_of_range_never_member(self):
        mask = LayerMask.everything()

        assert MAX_LAYERS - 1 in mask
        assert MAX_LAYERS not in mask
        assert -1 not in mask

    def test_from_layers_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            LayerMask.from_layers([MAX_LAYERS])


class TestLayeredZoneTrigger:

    def test_immediate_enter_and_exit(self, logger):
        entered, exited = Recorder(), Recorder()
        zone = LayeredZoneTrigger(LayerMask.from_layers([PLAYER]), logger=logger)
        zone.on_enter_fired.add(entered)
        zone.on_exit_fired.add(exited)

        assert zone.on_enter(PLAYER) is True
        assert zone.on_exit(PLAYER) is True
        assert entered.count == 1
        assert exited.count == 1

    def test_other_layers_are_ignored(self, logger):
        entered, exited = Recorder(), Recorder()
        zone = LayeredZoneTrigger(LayerMask.from_layers([PLAYER]), logger=logger)
        zone.on_enter_fired.add(entered)
        zone.on_exit_fired.add(exited)

        assert zone.on_enter(ENEMY) is False
        assert zone.on_exit(ENEMY) is False
        assert entered.count == 0
        assert exited.count == 0
        assert LogEvent.ZONE_IGNORED in logged_events(logger, "debug")

    def test_fire_once_ignores_later_entries_but_not_exits(self, logger):
        entered, exited = Recorder(), Recorder()
        zone = LayeredZoneTrigger(
            LayerMask.from_layers([PLAYER]), fire_once=True, logger=logger
        )
        zone.on_enter_fired.add(entered)
        zone.on_exit_fired.add(exited)

        zone.on_enter(PLAYER)
        zone.on_exit(PLAYER)
        assert zone.on_enter(PLAYER) is False
        zone.on_exit(PLAYER)

        assert zone.has_fired
        assert entered.count == 1
        assert exited.count == 2

    def test_non_member_entry_does_not_consume_fire_once(self, logger):
        zone = LayeredZoneTrigger(
            LayerMask.from_layers([PLAYER]), fire_once=True, logger=logger
        )
        zone.on_enter(ENEMY)
        assert zone.has_fired is False

    def test_delayed_enter(self, scheduler, clock, run_ticks, logger):
        entered = Recorder()
        zone = LayeredZoneTrigger(
            LayerMask.from_layers([PLAYER]),
            delay_seconds=0.5,
            scheduler=scheduler,
            clock=clock,
            logger=logger,
        )
        zone.on_enter_fired.add(entered)

        zone.on_enter(PLAYER)
        assert entered.count == 0
        assert zone.is_pending

        run_ticks(2)
        assert entered.count == 1
        assert not zone.is_pending

    def test_fire_once_marks_fired_before_delay_elapses(self, scheduler, clock, run_ticks, logger):
        entered = Recorder()
        zone = LayeredZoneTrigger(
            LayerMask.from_layers([PLAYER]),
            fire_once=True,
            delay_seconds=0.5,
            scheduler=scheduler,
            clock=clock,
            logger=logger,
        )
        zone.on_enter_fired.add(entered)

        zone.on_enter(PLAYER)
        assert zone.has_fired
        assert zone.on_enter(PLAYER) is False

        run_ticks(4)
        assert entered.count == 1

    def test_repeated_entries_restart_delay(self, scheduler, clock, run_ticks, logger):
        entered = Recorder()
        zone = LayeredZoneTrigger(
            LayerMask.from_layers([PLAYER]),
            delay_seconds=0.5,
            scheduler=scheduler,
            clock=clock,
            logger=logger,
        )
        zone.on_enter_fired.add(entered)

        zone.on_enter(PLAYER)
        run_ticks(1)
        zone.on_enter(PLAYER)
        run_ticks(1)
        assert entered.count == 0

        run_ticks(1)
        assert entered.count == 1

    def test_exit_fires_immediately_even_with_delay(self, scheduler, clock, logger):
        exited = Recorder()
        zone = LayeredZoneTrigger(
            LayerMask.from_layers([PLAYER]),
            delay_seconds=0.5,
            scheduler=scheduler,
            clock=clock,
            logger=logger,
        )
        zone.on_exit_fired.add(exited)

        zone.on_exit(PLAYER)
        assert exited.count == 1

    def test_delay_without_scheduler_fires_immediately(self, logger):
        entered = Recorder()
        zone = LayeredZoneTrigger(
            LayerMask.from_layers([PLAYER]), delay_seconds=1.0, logger=logger
        )
        zone.on_enter_fired.add(entered)

        zone.on_enter(PLAYER)
        assert entered.count == 1
        assert LogEvent.ZONE_MISCONFIGURED in logged_events(logger, "warning")

    def test_negative_delay_clamped(self, logger):
        zone = LayeredZoneTrigger(LayerMask.from_layers([PLAYER]), delay_seconds=-1, logger=logger)

        assert zone.delay_seconds == 0.0
        assert LogEvent.TIMER_DURATION_CLAMPED in logged_events(logger, "warning")

    def test_reset_cancels_and_rearms(self, scheduler, clock, run_ticks, logger):
        entered = Recorder()
        zone = LayeredZoneTrigger(
            LayerMask.from_layers([PLAYER]),
            fire_once=True,
            delay_seconds=0.5,
            scheduler=scheduler,
            clock=clock,
            logger=logger,
        )
        zone.on_enter_fired.add(entered)

        zone.on_enter(PLAYER)
        zone.reset()
        run_ticks(4)
        assert entered.count == 0
        assert zone.has_fired is False

        zone.on_enter(PLAYER)
        run_ticks(2)
        assert entered.count == 1
