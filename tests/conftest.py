import os
import tempfile
from pathlib import Path

import pytest

# Keep log files out of the working tree
os.environ.setdefault('PLANNERATE_LOG_DIR', tempfile.mkdtemp(prefix='plannerate-logs-'))

from plannerate.interaction.notifier import Notifier
from plannerate.interaction.selection import SelectionContext
from plannerate.models.fixture import Fixture, Section
from plannerate.models.product import Product
from plannerate.models.segment import Layer, Segment
from plannerate.models.shelf import Shelf
from plannerate.persistence.repository import InMemoryLayoutRepository
from plannerate.utils.error_handler import PersistenceFailure

DATA_DIR = Path(__file__).parent.parent / 'data' / 'fixtures'


class ManualHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose timers only fire when a test says so"""

    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback):
        handle = ManualHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def run_pending(self):
        results = []
        while self.pending:
            handle = self.pending[0]
            self.handles.remove(handle)
            results.append(handle.callback())
        return results


class RecordingRepository(InMemoryLayoutRepository):
    """In-memory repository that remembers every write it was asked for"""

    def __init__(self, fixture):
        super().__init__(fixture)
        self.calls = []

    def update_shelf(self, shelf_id, position=None, ordering=None, segment=None):
        self.calls.append(('update_shelf', shelf_id, position, ordering, segment))
        return super().update_shelf(shelf_id, position=position, ordering=ordering, segment=segment)

    def transfer_shelf(self, shelf_id, new_section_id, position, ordering):
        self.calls.append(('transfer_shelf', shelf_id, new_section_id, position, ordering))
        return super().transfer_shelf(shelf_id, new_section_id, position, ordering)

    def update_segment(self, segment_id, **fields):
        self.calls.append(('update_segment', segment_id, dict(fields)))
        return super().update_segment(segment_id, **fields)


class FailingRepository(RecordingRepository):
    """Rejects every write"""

    def update_shelf(self, shelf_id, position=None, ordering=None, segment=None):
        self.calls.append(('update_shelf', shelf_id, position, ordering, segment))
        raise PersistenceFailure("backend unavailable")

    def transfer_shelf(self, shelf_id, new_section_id, position, ordering):
        self.calls.append(('transfer_shelf', shelf_id, new_section_id, position, ordering))
        raise PersistenceFailure("backend unavailable")

    def update_segment(self, segment_id, **fields):
        self.calls.append(('update_segment', segment_id, dict(fields)))
        raise PersistenceFailure("backend unavailable")


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def make_segment(product_id, width, quantity=1, spacing=0.0, segment_id=None, layer_id=None):
    layer = Layer(
        product=Product(id=product_id, name=f"Product {product_id}", width=width),
        quantity=quantity,
        spacing=spacing,
    )
    if layer_id is not None:
        layer.id = layer_id
    segment = Segment(layer=layer, quantity=quantity)
    if segment_id is not None:
        segment.id = segment_id
        layer.segment_id = segment_id
    return segment


def make_fixture():
    """1200 tall gondola: section A (100 wide) with one stocked shelf, section B (130 wide) with an empty one"""
    stocked = Shelf(
        section_id=None,
        position=133,
        ordering=0,
        segments=[make_segment('P-1', 20, quantity=2, segment_id='seg-a', layer_id='layer-a')],
        id='shelf-a',
    )
    empty = Shelf(section_id=None, position=423, ordering=0, id='shelf-b')
    return Fixture(
        name='Test gondola',
        width=230,
        height=1200,
        base_height=17,
        shelf_height=4,
        hole_spacing=25,
        scale_factor=1,
        sections=[
            Section(width=100, ordering=0, name='A', shelves=[stocked], id='section-a'),
            Section(width=130, ordering=1, name='B', shelves=[empty], id='section-b'),
        ],
        id='fixture-1',
    )


@pytest.fixture
def fixture():
    return make_fixture()


@pytest.fixture
def repository(fixture):
    return RecordingRepository(fixture)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier(clock):
    return Notifier(clock=clock)


@pytest.fixture
def selection():
    return SelectionContext()


@pytest.fixture
def data_dir():
    return DATA_DIR
