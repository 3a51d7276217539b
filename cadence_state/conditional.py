"""
Conditional Dispatcher Module
=============================

Bounded Context: Turning a counter value into presentation state and
edge-triggered notifications.

State machine:
    (unevaluated) --check--> TRUE / FALSE --check--> TRUE / FALSE ...

check(allow_notify):
    1. Update presentation to match the result (always, even when muted)
    2. Notify when allowed AND (edges not required OR first check OR changed)
    3. "became true" for TRUE, "became false" for FALSE
    4. Remember the result, whether or not a notification went out

The remembered result is the last *evaluated* one, so a muted check still
moves the edge reference forward.
"""

from typing import Optional

from cadence_events import CallbackChannel
from cadence_logging import StructuredLogger, LogEvent, create_logger
from cadence_state.comparison import Comparison
from cadence_state.counter import ObservableCounter
from cadence_state.presentation import (
    PresentationSink,
    ShowMode,
    TargetMode,
    same_surface,
)


class ConditionalDispatcher:
    """
    Compares a counter against a threshold and drives two exclusive branches.

    Single mode: one surface, text swaps between single_true_text and
    single_false_text, the surface is always kept shown.

    Dual mode: true_target shown when the condition holds, false_target
    otherwise; each branch may override its text. If both targets are the
    same surface only the texts change, so the surface never hides itself.

    Misconfiguration (no counter, no single surface, no dual target) is
    logged on activate(); the dispatcher then stays inert until a later
    activate() succeeds.

    Usage:
        door = ConditionalDispatcher(
            counter=coins,
            threshold=10,
            comparison=Comparison.GREATER_OR_EQUAL,
            target_mode=TargetMode.DUAL,
            true_target=open_label,
            false_target=locked_label,
            invoke_on_auto_checks=True,
        )
        door.on_became_true.add(open_door)
        door.activate()

        coins.add(10)   # open_label shown, open_door called once
        coins.add(1)    # still true: no second call (edge-only)
    """

    def __init__(
        self,
        counter: Optional[ObservableCounter] = None,
        threshold: int = 0,
        comparison: Comparison = Comparison.GREATER_OR_EQUAL,
        target_mode: TargetMode = TargetMode.SINGLE,
        single_target: Optional[PresentationSink] = None,
        single_true_text: str = "",
        single_false_text: str = "",
        true_target: Optional[PresentationSink] = None,
        false_target: Optional[PresentationSink] = None,
        true_text_override: str = "",
        false_text_override: str = "",
        auto_check_on_change: bool = True,
        check_on_activate: bool = True,
        invoke_on_auto_checks: bool = False,
        only_on_state_change: bool = True,
        show_mode: ShowMode = ShowMode.LAYER_ALPHA,
        debug_logs: bool = False,
        name: str = "condition",
        logger: Optional[StructuredLogger] = None,
    ):
        self.name = name
        self.logger = logger or create_logger("state")

        # Source
        self.counter = counter
        self.threshold = threshold
        self.comparison = comparison

        # Targets
        self.target_mode = target_mode
        self.single_target = single_target
        self.single_true_text = single_true_text
        self.single_false_text = single_false_text
        self.true_target = true_target
        self.false_target = false_target
        self.true_text_override = true_text_override
        self.false_text_override = false_text_override

        # Behavior
        self.auto_check_on_change = auto_check_on_change
        self.check_on_activate = check_on_activate
        self.invoke_on_auto_checks = invoke_on_auto_checks
        self.only_on_state_change = only_on_state_change
        self.show_mode = show_mode
        self.debug_logs = debug_logs

        # Events
        self.on_became_true = CallbackChannel(f"{name}.true", logger=self.logger)
        self.on_became_false = CallbackChannel(f"{name}.false", logger=self.logger)

        self._last_result: Optional[bool] = None
        self._active = False
        self._inert = False
        self._subscribed_to: Optional[ObservableCounter] = None

    # ===== Lifecycle =====

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_inert(self) -> bool:
        return self._inert

    @property
    def last_result(self) -> Optional[bool]:
        """Result of the most recent evaluation; None before the first check."""
        return self._last_result

    def activate(self) -> bool:
        """
        Subscribe to the counter and run the activation check.

        Returns:
            True if active, False if the setup is invalid (component inert)
        """
        if self._active:
            return True

        if not self.validate_setup():
            self._inert = True
            return False

        self._inert = False
        self._active = True

        if self.target_mode == TargetMode.DUAL and same_surface(self.true_target, self.false_target):
            self.logger.warning(
                event=LogEvent.CONDITION_AMBIGUOUS_TARGETS,
                message=(
                    f"[{self.name}] TRUE and FALSE targets reference the SAME surface. "
                    "Use single mode, or assign different surfaces (or leave one empty)."
                ),
                metadata={'condition': self.name}
            )

        if self.auto_check_on_change:
            self.counter.on_value_changed.add(self._on_counter_changed)
            self._subscribed_to = self.counter

        self.logger.info(
            event=LogEvent.CONDITION_ACTIVATED,
            message=f"[{self.name}] activated",
            metadata={
                'condition': self.name,
                'counter': self.counter.name,
                'expression': f"{self.counter.name} {self.comparison.value} {self.threshold}",
            }
        )

        if self.check_on_activate:
            self.check(self.invoke_on_auto_checks)
        return True

    def deactivate(self) -> None:
        """Unsubscribe from the counter so no callback outlives activation."""
        if self._subscribed_to is not None:
            self._subscribed_to.on_value_changed.remove(self._on_counter_changed)
            self._subscribed_to = None

        if self._active:
            self._active = False
            self.logger.info(
                event=LogEvent.CONDITION_DEACTIVATED,
                message=f"[{self.name}] deactivated",
                metadata={'condition': self.name}
            )

    def bind(self, counter: Optional[ObservableCounter]) -> bool:
        """
        Observe a different counter. An active dispatcher is re-activated
        against the new counter.

        Returns:
            Whether the dispatcher is active afterwards
        """
        was_active = self._active
        if was_active:
            self.deactivate()
        self.counter = counter
        if was_active:
            return self.activate()
        return False

    def validate_setup(self) -> bool:
        """Check required references, logging the first problem found."""
        problem = None
        if self.counter is None:
            problem = "No counter assigned."
        elif self.target_mode == TargetMode.SINGLE and self.single_target is None:
            problem = "Single mode selected but no single target assigned."
        elif (
            self.target_mode == TargetMode.DUAL
            and self.true_target is None
            and self.false_target is None
        ):
            problem = "Dual mode: assign at least one of TRUE/FALSE targets."

        if problem is None:
            return True

        self.logger.warning(
            event=LogEvent.CONDITION_MISCONFIGURED,
            message=f"[{self.name}] {problem}",
            metadata={'condition': self.name, 'target_mode': self.target_mode.value}
        )
        return False

    # ===== Evaluation =====

    def evaluate(self) -> bool:
        """Compute `counter OP threshold`; False without a counter."""
        if self.counter is None:
            return False
        return self.comparison.apply(self.counter.get(), self.threshold)

    def check_and_notify(self) -> Optional[bool]:
        return self.check(True)

    def check_visual_only(self) -> Optional[bool]:
        return self.check(False)

    def check(self, allow_notify: bool) -> Optional[bool]:
        """
        Evaluate, update presentation, and notify per the debounce policy.

        Returns:
            The evaluated result, or None when there is nothing to evaluate
            (no counter, or inert after a failed activation)
        """
        if self.counter is None or self._inert:
            return None

        result = self.evaluate()
        self._apply_result(result, allow_notify)
        return result

    def _on_counter_changed(self, _value: int) -> None:
        self.check(self.invoke_on_auto_checks)

    def _apply_result(self, result: bool, allow_notify: bool) -> None:
        # Visuals first so they appear even if listeners disable other things
        self._update_presentation(result)

        should_notify = allow_notify and (
            not self.only_on_state_change
            or self._last_result is None
            or result != self._last_result
        )
        if should_notify:
            if result:
                self.logger.info(
                    event=LogEvent.CONDITION_BECAME_TRUE,
                    message=f"[{self.name}] condition TRUE",
                    metadata={'condition': self.name, 'value': self.counter.get()}
                )
                self.on_became_true.invoke()
            else:
                self.logger.info(
                    event=LogEvent.CONDITION_BECAME_FALSE,
                    message=f"[{self.name}] condition FALSE",
                    metadata={'condition': self.name, 'value': self.counter.get()}
                )
                self.on_became_false.invoke()

        if self.debug_logs:
            self.logger.debug(
                event=LogEvent.CONDITION_EVALUATED,
                message=f"[{self.name}] result={'TRUE' if result else 'FALSE'}",
                metadata={
                    'condition': self.name,
                    'result': result,
                    'notified': should_notify,
                    'previous': self._last_result,
                }
            )

        self._last_result = result

    # ===== Presentation =====

    def _update_presentation(self, result: bool) -> None:
        if self.target_mode == TargetMode.SINGLE:
            self._update_single(result)
        else:
            self._update_dual(result)

    def _update_single(self, result: bool) -> None:
        target = self.single_target
        if target is None:
            return
        # Swap text only; a single target is never hidden
        target.set_text(self.single_true_text if result else self.single_false_text)
        self._show(target, True)

    def _update_dual(self, result: bool) -> None:
        if same_surface(self.true_target, self.false_target):
            # Text-only fallback, toggling would hide the shared surface
            if result and self.true_text_override:
                self.true_target.set_text(self.true_text_override)
            if not result and self.false_text_override:
                self.false_target.set_text(self.false_text_override)
            return

        if result and self.true_target is not None and self.true_text_override:
            self.true_target.set_text(self.true_text_override)
        if not result and self.false_target is not None and self.false_text_override:
            self.false_target.set_text(self.false_text_override)

        if self.true_target is not None:
            self._show(self.true_target, result)
        if self.false_target is not None:
            self._show(self.false_target, not result)

    def _show(self, target: PresentationSink, shown: bool) -> None:
        if self.show_mode == ShowMode.LAYER_ALPHA:
            target.set_visible(shown)
        else:
            target.set_present(shown)

    def __repr__(self) -> str:
        counter_name = self.counter.name if self.counter is not None else None
        return (
            f"ConditionalDispatcher(name={self.name!r}, "
            f"expression='{counter_name} {self.comparison.value} {self.threshold}', "
            f"last_result={self._last_result}, active={self._active})"
        )
