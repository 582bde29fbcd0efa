from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Optional, Any
import copy

from ..models.fixture import Fixture, Section
from ..models.product import Status
from ..models.segment import Segment
from ..models.shelf import Shelf
from ..utils.error_handler import PersistenceFailure
from ..utils.logger import get_logger

SEGMENT_FIELDS = ('width', 'position', 'ordering', 'spacing', 'quantity', 'status', 'shelf_id')
LAYER_FIELDS = ('quantity', 'spacing', 'status', 'horizontal_alignment', 'vertical_alignment', 'is_justified')


class LayoutRepository(ABC):
    """Boundary to whatever stores fixtures, sections, shelves and segments.

    Implementations raise PersistenceFailure for anything they refuse or fail
    to apply. Segment and layer rows are written and deleted together.
    """

    @contextmanager
    def transaction(self):
        """Group several writes; override where the backend can roll back"""
        yield None

    @abstractmethod
    def create_shelf(self, section_id: str, height: float, depth: float,
                     position: float, ordering: int) -> Shelf:
        pass

    @abstractmethod
    def update_shelf(self, shelf_id: str, position: Optional[float] = None,
                     ordering: Optional[int] = None, segment: Optional[Segment] = None) -> Shelf:
        pass

    @abstractmethod
    def transfer_shelf(self, shelf_id: str, new_section_id: str,
                       position: float, ordering: int) -> Shelf:
        pass

    @abstractmethod
    def delete_shelf(self, shelf_id: str) -> None:
        pass

    @abstractmethod
    def create_segment(self, shelf_id: str, segment: Segment) -> Segment:
        pass

    @abstractmethod
    def update_segment(self, segment_id: str, **fields: Any) -> Segment:
        pass

    @abstractmethod
    def delete_segment(self, segment_id: str) -> None:
        pass

    def delete_layer(self, layer_id: str) -> None:
        """Deleting a layer removes its segment too"""
        segment_id = self.segment_id_for_layer(layer_id)
        if segment_id is None:
            raise PersistenceFailure(f"Layer not found: {layer_id}")
        self.delete_segment(segment_id)

    @abstractmethod
    def update_scale_factor(self, scale_factor: float) -> Fixture:
        pass

    @abstractmethod
    def segment_id_for_layer(self, layer_id: str) -> Optional[str]:
        pass


class InMemoryLayoutRepository(LayoutRepository):
    """Transactional in-process store for one fixture.

    Entities are copied on the way in and out so callers never share state
    with the store: what the engine holds locally and what is persisted stay
    separate, as they would with a remote backend.
    """

    def __init__(self, fixture: Fixture):
        self._fixture = copy.deepcopy(fixture)
        self.logger = get_logger()

    @property
    def fixture(self) -> Fixture:
        """Snapshot of the persisted fixture"""
        return copy.deepcopy(self._fixture)

    @contextmanager
    def transaction(self):
        """All-or-nothing boundary around multi-row writes"""
        snapshot = copy.deepcopy(self._fixture)
        try:
            yield self._fixture
        except Exception as e:
            self._fixture = snapshot
            self.logger.debug(f"Transaction rolled back: {e}")
            if isinstance(e, PersistenceFailure):
                raise
            raise PersistenceFailure(str(e)) from e

    def _section(self, fixture: Fixture, section_id: str) -> Section:
        section = fixture.find_section(section_id)
        if section is None:
            raise PersistenceFailure(f"Section not found: {section_id}")
        return section

    def _shelf(self, fixture: Fixture, shelf_id: str):
        section, shelf = fixture.locate_shelf(shelf_id)
        if shelf is None:
            raise PersistenceFailure(f"Shelf not found: {shelf_id}")
        return section, shelf

    def _segment(self, fixture: Fixture, segment_id: str):
        shelf, segment = fixture.locate_segment(segment_id)
        if segment is None:
            raise PersistenceFailure(f"Segment not found: {segment_id}")
        return shelf, segment

    def create_shelf(self, section_id, height, depth, position, ordering) -> Shelf:
        with self.transaction() as fixture:
            section = self._section(fixture, section_id)
            shelf = Shelf(
                section_id=section.id,
                position=position,
                height=height,
                depth=depth,
                ordering=ordering,
                status=Status.PUBLISHED,
            )
            section.add_shelf(shelf)
        self.logger.debug(f"Created shelf {shelf.id} in section {section_id} at {position}")
        return copy.deepcopy(shelf)

    def update_shelf(self, shelf_id, position=None, ordering=None, segment=None) -> Shelf:
        with self.transaction() as fixture:
            _, shelf = self._shelf(fixture, shelf_id)
            if position is not None:
                shelf.position = float(position)
            if ordering is not None:
                shelf.ordering = ordering
            if segment is not None:
                shelf.add_segment(self._detached(segment))
        return copy.deepcopy(shelf)

    def transfer_shelf(self, shelf_id, new_section_id, position, ordering) -> Shelf:
        with self.transaction() as fixture:
            source, shelf = self._shelf(fixture, shelf_id)
            destination = self._section(fixture, new_section_id)
            source.remove_shelf(shelf_id)
            shelf.position = float(position)
            shelf.ordering = ordering
            destination.add_shelf(shelf)
        self.logger.debug(f"Transferred shelf {shelf_id} from {source.id} to {new_section_id}")
        return copy.deepcopy(shelf)

    def delete_shelf(self, shelf_id) -> None:
        with self.transaction() as fixture:
            section, _ = self._shelf(fixture, shelf_id)
            section.remove_shelf(shelf_id)

    def create_segment(self, shelf_id, segment) -> Segment:
        with self.transaction() as fixture:
            _, shelf = self._shelf(fixture, shelf_id)
            stored = self._detached(segment)
            shelf.add_segment(stored)
        return copy.deepcopy(stored)

    def update_segment(self, segment_id, **fields) -> Segment:
        unknown = set(fields) - set(SEGMENT_FIELDS) - {'layer'}
        if unknown:
            raise PersistenceFailure(f"Unknown segment fields: {sorted(unknown)}")

        with self.transaction() as fixture:
            shelf, segment = self._segment(fixture, segment_id)
            target_shelf_id = fields.pop('shelf_id', None)
            layer_fields = fields.pop('layer', None) or {}

            for name, value in fields.items():
                if name == 'status' and not isinstance(value, Status):
                    value = Status(value)
                setattr(segment, name, value)

            for name, value in layer_fields.items():
                if name not in LAYER_FIELDS:
                    raise PersistenceFailure(f"Unknown layer field: {name}")
                setattr(segment.layer, name, value)

            if target_shelf_id is not None and target_shelf_id != shelf.id:
                _, target = self._shelf(fixture, target_shelf_id)
                shelf.remove_segment(segment_id)
                target.add_segment(segment)
        return copy.deepcopy(segment)

    def delete_segment(self, segment_id) -> None:
        with self.transaction() as fixture:
            shelf, _ = self._segment(fixture, segment_id)
            shelf.remove_segment(segment_id)

    def update_scale_factor(self, scale_factor) -> Fixture:
        with self.transaction() as fixture:
            if scale_factor is None or scale_factor <= 0:
                raise PersistenceFailure(f"Scale factor must be positive, got {scale_factor}")
            fixture.scale_factor = float(scale_factor)
        return copy.deepcopy(fixture)

    def segment_id_for_layer(self, layer_id) -> Optional[str]:
        for shelf in self._fixture.shelves:
            for segment in shelf.segments:
                if segment.layer.id == layer_id:
                    return segment.id
        return None

    def _detached(self, segment: Segment) -> Segment:
        stored = copy.deepcopy(segment)
        stored.layer.segment_id = stored.id
        return stored


def snapshot_counts(fixture: Fixture) -> Dict[str, int]:
    """Entity counts, handy for logging after a load or a commit"""
    shelves = fixture.shelves
    return {
        'sections': len(fixture.sections),
        'shelves': len(shelves),
        'segments': sum(len(s.segments) for s in shelves),
    }
