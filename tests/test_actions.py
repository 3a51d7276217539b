"""
Scene load and message action tests.
"""

from unittest.mock import MagicMock

from cadence_actions import MessageAction, SceneLoadAction
from cadence_logging import LogEvent
from conftest import logged_events


class TestSceneLoadAction:

    def test_immediate_load_brackets_loader_call(self, logger):
        order = []
        loader = MagicMock()
        loader.load_scene.side_effect = lambda name, additive: order.append(("load", name, additive))

        action = SceneLoadAction(loader, scene_name="level_2", load_additively=True, logger=logger)
        action.on_before_load.add(lambda: order.append("before"))
        action.on_after_load.add(lambda: order.append("after"))

        assert action.load_scene() is True
        assert order == ["before", ("load", "level_2", True), "after"]

    def test_missing_scene_name(self, logger):
        loader = MagicMock()
        action = SceneLoadAction(loader, logger=logger)
        before = MagicMock()
        action.on_before_load.add(before)

        assert action.load_scene() is False
        loader.load_scene.assert_not_called()
        before.assert_not_called()
        assert logged_events(logger, "warning") == [LogEvent.SCENE_MISCONFIGURED]

    def test_delayed_load(self, scheduler, clock, run_ticks, logger):
        loader = MagicMock()
        before, after = MagicMock(), MagicMock()
        action = SceneLoadAction(
            loader,
            scene_name="level_2",
            load_delay=1.0,
            scheduler=scheduler,
            clock=clock,
            logger=logger,
        )
        action.on_before_load.add(before)
        action.on_after_load.add(after)

        action.load_scene()
        before.assert_called_once()
        assert action.is_pending

        run_ticks(3)
        loader.load_scene.assert_not_called()

        run_ticks(1)
        loader.load_scene.assert_called_once_with("level_2", False)
        after.assert_called_once()

    def test_cancel_delayed_load(self, scheduler, clock, run_ticks, logger):
        loader = MagicMock()
        action = SceneLoadAction(
            loader, scene_name="menu", load_delay=0.5,
            scheduler=scheduler, clock=clock, logger=logger,
        )
        action.load_scene()
        assert action.cancel() is True

        run_ticks(4)
        loader.load_scene.assert_not_called()

    def test_missing_loader_still_notifies_after_load(self, logger):
        after = MagicMock()
        action = SceneLoadAction(None, scene_name="menu", logger=logger)
        action.on_after_load.add(after)

        action.load_scene()
        after.assert_called_once()
        assert LogEvent.SCENE_MISCONFIGURED in logged_events(logger, "warning")


class TestMessageAction:

    def test_print_message(self, logger):
        MessageAction("hello", logger=logger).print_message()

        call = logger.info.call_args
        assert call.kwargs['event'] == LogEvent.MESSAGE_EMITTED
        assert "hello" in call.kwargs['message']

    def test_print_custom(self, logger):
        MessageAction("unused", name="debug_button", logger=logger).print_custom("custom")

        assert "custom" in logger.info.call_args.kwargs['message']
