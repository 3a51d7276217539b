"""
ObservableCounter Tests
=======================

Clamp-then-compare-then-notify: observers hear about real changes only.
"""

from cadence_state import ObservableCounter


class TestObservableCounter:

    def test_add_notifies_with_new_value(self, recorder):
        coins = ObservableCounter("coins")
        coins.on_value_changed.add(recorder)

        assert coins.add(5) is True
        assert coins.value == 5
        assert recorder.calls == [(5,)]

    def test_add_zero_does_not_notify(self, recorder):
        coins = ObservableCounter("coins", initial_value=3)
        coins.on_value_changed.add(recorder)

        assert coins.add(0) is False
        assert recorder.count == 0

    def test_clamps_at_zero(self, recorder):
        health = ObservableCounter("health", initial_value=3)
        health.on_value_changed.add(recorder)

        health.add(-10)
        assert health.value == 0
        assert recorder.calls == [(0,)]

    def test_clamped_to_same_value_does_not_notify(self, recorder):
        health = ObservableCounter("health", initial_value=0)
        health.on_value_changed.add(recorder)

        assert health.add(-5) is False
        assert health.set(-1) is False
        assert recorder.count == 0

    def test_negative_allowed_without_clamp(self, recorder):
        balance = ObservableCounter("balance", clamp_floor=False)
        balance.on_value_changed.add(recorder)

        balance.add(-4)
        assert balance.value == -4
        assert recorder.calls == [(-4,)]

    def test_initial_value_is_clamped(self):
        assert ObservableCounter("x", initial_value=-7).value == 0
        assert ObservableCounter("x", initial_value=-7, clamp_floor=False).value == -7

    def test_subtract_uses_absolute_amount(self):
        coins = ObservableCounter("coins", initial_value=10)
        coins.subtract(3)
        assert coins.value == 7
        coins.subtract(-3)
        assert coins.value == 4

    def test_set_same_value_is_silent(self, recorder):
        coins = ObservableCounter("coins", initial_value=4)
        coins.on_value_changed.add(recorder)

        assert coins.set(4) is False
        assert coins.set(9) is True
        assert recorder.calls == [(9,)]
        assert coins.get() == 9

    def test_reentrant_mutation_from_observer(self):
        counter = ObservableCounter("combo")
        seen = []

        def cap_at_three(value):
            seen.append(value)
            if value > 3:
                counter.set(3)

        counter.on_value_changed.add(cap_at_three)
        counter.add(5)

        assert counter.value == 3
        assert seen == [5, 3]
