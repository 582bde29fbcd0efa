import pytest

from plannerate.interaction.notifier import Notifier
from plannerate.interaction.payloads import (
    LayerPayload, PayloadType, ProductPayload, ShelfPayload, parse_payload,
)
from plannerate.interaction.scheduler import PollingScheduler
from plannerate.interaction.selection import SelectionContext
from plannerate.utils.error_handler import MalformedPayload


class TestParsePayload:

    def test_product_nested(self):
        payload = parse_payload('{"type": "product", "product": {"id": 7, "name": "Tea", "width": 12}}')
        assert isinstance(payload, ProductPayload)
        assert payload.type is PayloadType.PRODUCT
        assert payload.product.id == '7'
        assert payload.product.width == 12

    def test_product_inline_bytes(self):
        payload = parse_payload(b'{"type": "product", "id": "P-1", "width": 8.5}')
        assert payload.product.id == 'P-1'
        assert payload.product.width == 8.5

    def test_layer_accepts_both_key_styles(self):
        camel = parse_payload({'type': 'layer', 'layerId': 'l', 'segmentId': 's', 'shelfId': 'sh', 'quantity': '2'})
        snake = parse_payload({'type': 'layer', 'layer_id': 'l', 'segment_id': 's', 'shelf_id': 'sh', 'quantity': 2})
        assert isinstance(camel, LayerPayload)
        assert camel == snake
        assert camel.quantity == 2

    def test_shelf(self):
        payload = parse_payload({'type': 'shelf', 'shelfId': 'sh', 'sectionId': 'sec'})
        assert payload == ShelfPayload(shelf_id='sh', section_id='sec')

    @pytest.mark.parametrize('raw', [
        '',
        '{not json',
        '[1, 2]',
        '{"type": "pallet"}',
        '{"product": {"id": "P-1", "width": 3}}',
        '{"type": "product", "product": {"name": "No id", "width": 3}}',
        '{"type": "product", "product": {"id": "P-1", "width": 0}}',
        '{"type": "product", "product": "P-1"}',
        '{"type": "product", "product": {"id": "P-1", "width": NaN}}',
        '{"type": "product", "product": {"id": "P-1", "width": Infinity}}',
        '{"type": "layer", "layer_id": "l", "segment_id": "s", "quantity": 1}',
        '{"type": "layer", "layer_id": "l", "segment_id": "s", "shelf_id": "sh", "quantity": "many"}',
    ])
    def test_malformed(self, raw):
        with pytest.raises(MalformedPayload):
            parse_payload(raw)


class TestNotifier:

    def test_expires_after_duration(self, notifier, clock):
        notifier.show("Saved", level='success')
        clock.now = 2.9
        assert notifier.current.message == "Saved"
        clock.now = 3.0
        assert notifier.current is None

    def test_latest_replaces_previous(self, notifier):
        notifier.show("first")
        notifier.show("second", level='error', duration=10)
        assert notifier.current.message == "second"
        notifier.close()
        assert notifier.current is None

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            Notifier().show("hi", level='shout')


class TestSelectionContext:

    def test_last_writer_wins(self):
        selection = SelectionContext()
        assert selection.selected_layer_id is None
        selection.select('a')
        selection.select('b')
        assert selection.is_selected('b')
        assert not selection.is_selected('a')
        selection.clear()
        assert not selection.is_selected('b')


class TestPollingScheduler:

    def test_runs_only_when_due(self, clock):
        scheduler = PollingScheduler(clock=clock)
        fired = []
        scheduler.call_later(0.2, lambda: fired.append('snap'))
        clock.now = 0.1
        assert scheduler.run_due() == 0
        clock.now = 0.2
        assert scheduler.run_due() == 1
        assert fired == ['snap']
        assert scheduler.pending == []

    def test_cancelled_call_never_runs(self, clock):
        scheduler = PollingScheduler(clock=clock)
        fired = []
        call = scheduler.call_later(0.05, lambda: fired.append('leave'))
        call.cancel()
        clock.now = 1.0
        assert scheduler.run_due() == 0
        assert fired == []

    def test_runs_in_deadline_order(self, clock):
        scheduler = PollingScheduler(clock=clock)
        fired = []
        scheduler.call_later(0.2, lambda: fired.append('late'))
        scheduler.call_later(0.05, lambda: fired.append('early'))
        clock.now = 0.3
        scheduler.run_due()
        assert fired == ['early', 'late']
