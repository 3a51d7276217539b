"""
SignalEvent schema and PublishedWidget tests.
"""

import pytest

from cadence_mqtt import PublishedWidget, SignalEvent, SignalKind, Timestamp


def make_event(**overrides):
    fields = dict(
        schema_version="1.0",
        timestamp=Timestamp(value="2025-10-24T15:30:45+00:00"),
        service_id="arena_01",
        source="coins",
        kind=SignalKind.COUNTER_CHANGED,
        value=12,
        tick=340,
    )
    fields.update(overrides)
    return SignalEvent(**fields)


class TestSignalEvent:

    def test_to_dict(self):
        assert make_event().to_dict() == {
            'schema_version': "1.0",
            'timestamp': "2025-10-24T15:30:45+00:00",
            'service_id': "arena_01",
            'source': "coins",
            'kind': "counter_changed",
            'value': 12,
            'tick': 340,
        }

    def test_from_dict_restores_kind(self):
        event = SignalEvent.from_dict(make_event(kind=SignalKind.BECAME_TRUE).to_dict())
        assert event.kind is SignalKind.BECAME_TRUE

    def test_from_dict_missing_field(self):
        data = make_event().to_dict()
        del data['source']
        with pytest.raises(ValueError, match="Missing required"):
            SignalEvent.from_dict(data)

    def test_from_dict_unknown_kind(self):
        data = make_event().to_dict()
        data['kind'] = "exploded"
        with pytest.raises(ValueError):
            SignalEvent.from_dict(data)

    def test_validation(self):
        with pytest.raises(ValueError):
            make_event(source="")
        with pytest.raises(ValueError):
            make_event(tick=-1)

    def test_widget_kinds(self):
        assert make_event(kind=SignalKind.WIDGET_TEXT).is_widget_update
        assert not make_event().is_widget_update

    def test_timestamp_roundtrip_to_datetime(self):
        ts = Timestamp.now()
        assert Timestamp.from_datetime(ts.to_datetime()) == ts


class TestPublishedWidget:

    def test_changes_are_recorded_and_emitted(self, recorder):
        widget = PublishedWidget("door_label", emit=recorder)

        widget.set_text("Door open")
        widget.set_visible(False)
        widget.set_present(False)

        assert recorder.calls == [
            ("door_label", SignalKind.WIDGET_TEXT, "Door open"),
            ("door_label", SignalKind.WIDGET_VISIBLE, False),
            ("door_label", SignalKind.WIDGET_PRESENT, False),
        ]
        assert widget.snapshot() == {'text': "Door open", 'visible': False, 'present': False}

    def test_surface_is_widget_id(self):
        assert PublishedWidget("a").surface == PublishedWidget("a").surface
        assert PublishedWidget("a").surface != PublishedWidget("b").surface

    def test_without_emit(self):
        widget = PublishedWidget("local")
        widget.set_text("x")
        assert widget.text == "x"
