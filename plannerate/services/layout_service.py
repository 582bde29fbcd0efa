import copy
from typing import List, Optional

from ..layout.capacity_packer import CapacityCandidate, CapacityPacker
from ..layout.hole_grid import HoleGrid
from ..layout.shelf_distributor import ShelfDistributor
from ..layout.spacing_validator import validate_spacing
from ..models.fixture import Fixture, Section
from ..models.segment import Segment
from ..models.shelf import Shelf
from ..persistence.repository import LayoutRepository
from ..utils.constants import (
    DEFAULT_SHELF_DEPTH, DEFAULT_SHELF_GAP, DEFAULT_SHELF_HEIGHT, POSITION_TOLERANCE,
)
from ..utils.error_handler import ConfigurationError, InvalidGeometry, ValidationError
from ..utils.logger import get_logger


class LayoutService:
    """Layout edits that do not come from a pointer gesture.

    Every operation validates first, then calls the repository, and only
    touches the local fixture once the repository has accepted the change.
    """

    def __init__(self, fixture: Fixture, repository: LayoutRepository,
                 packer: Optional[CapacityPacker] = None,
                 distributor: Optional[ShelfDistributor] = None):
        self.fixture = fixture
        self.repository = repository
        self.packer = packer or CapacityPacker()
        self.distributor = distributor or ShelfDistributor()
        self.logger = get_logger()

    def _section(self, section_id: str) -> Section:
        section = self.fixture.find_section(section_id)
        if section is None:
            raise ConfigurationError(f"Section not found: {section_id}")
        return section

    def _segment(self, segment_id: str):
        shelf, segment = self.fixture.locate_segment(segment_id)
        if segment is None:
            raise ConfigurationError(f"Segment not found: {segment_id}")
        return shelf, segment

    # Shelves

    def create_shelf(self, section_id: str, position: Optional[float] = None,
                     height: float = DEFAULT_SHELF_HEIGHT,
                     depth: float = DEFAULT_SHELF_DEPTH) -> Shelf:
        """Add a shelf; without a position it goes DEFAULT_SHELF_GAP above the last one"""
        section = self._section(section_id)
        count = section.shelf_count
        if position is None:
            position = DEFAULT_SHELF_GAP * count if count > 0 else 0.0

        stored = self.repository.create_shelf(section.id, height=height, depth=depth,
                                              position=position, ordering=count)
        shelf = copy.deepcopy(stored)
        section.add_shelf(shelf)
        self.logger.info(f"Shelf {shelf.id} created in section {section.id} at {shelf.position:.2f}")
        return shelf

    def delete_shelf(self, shelf_id: str):
        section, shelf = self.fixture.locate_shelf(shelf_id)
        if shelf is None:
            raise ConfigurationError(f"Shelf not found: {shelf_id}")
        self.repository.delete_shelf(shelf_id)
        section.remove_shelf(shelf_id)
        self.logger.info(f"Shelf {shelf_id} deleted from section {section.id}")

    def distribute_shelves(self, section_id: str, shelf_count: int) -> List[Shelf]:
        """Spread shelf_count shelves evenly over the section's holes.

        Existing shelves are moved in ordering order, missing ones are
        created. Shelves beyond the number of distinct positions found are
        left where they are. Nothing is written when the computed layout
        breaks the minimum hole pitch, and the writes go through one
        repository transaction: a failure part way leaves both the store and
        the local fixture as they were.
        """
        section = self._section(section_id)
        grid = HoleGrid.from_fixture(self.fixture)
        positions = self.distributor.distribute(grid.positions_in_units(), shelf_count)
        if not positions:
            self.logger.warning(f"Section {section_id}: no holes available for {shelf_count} shelves")
            return []

        if not validate_spacing(positions, grid.pitch - POSITION_TOLERANCE):
            raise ValidationError(
                f"Distributed positions {positions} are closer than the hole pitch {grid.pitch}"
            )

        existing = sorted(section.shelves, key=lambda s: s.ordering)
        written = []
        with self.repository.transaction():
            for ordering, position in enumerate(positions):
                if ordering < len(existing):
                    shelf = existing[ordering]
                    stored = self.repository.update_shelf(shelf.id, position=position, ordering=ordering)
                else:
                    shelf = None
                    stored = self.repository.create_shelf(section.id, height=self.fixture.shelf_height,
                                                          depth=DEFAULT_SHELF_DEPTH,
                                                          position=position, ordering=ordering)
                written.append((shelf, stored))

        placed = []
        for shelf, stored in written:
            if shelf is None:
                shelf = copy.deepcopy(stored)
                section.add_shelf(shelf)
            else:
                shelf.position = stored.position
                shelf.ordering = stored.ordering
            placed.append(shelf)

        self.logger.info(f"Section {section_id}: distributed {len(placed)} shelves over {len(grid)} holes")
        return placed

    # Fixture

    def update_scale_factor(self, scale_factor: float) -> HoleGrid:
        """Change the display scale and return the regenerated hole grid"""
        if scale_factor is None or scale_factor <= 0:
            raise InvalidGeometry(f"Scale factor must be positive, got {scale_factor}")
        stored = self.repository.update_scale_factor(scale_factor)
        self.fixture.scale_factor = stored.scale_factor
        grid = HoleGrid.from_fixture(self.fixture)
        self.logger.info(f"Scale factor set to {stored.scale_factor}; {len(grid)} holes")
        return grid

    # Segments

    def resize_segment(self, segment_id: str, quantity: int) -> Segment:
        """Change how many facings a segment shows"""
        if quantity < 1:
            raise ValidationError(f"Quantity must be at least 1, got {quantity}")
        shelf, segment = self._segment(segment_id)
        section = self.fixture.find_section(shelf.section_id)

        candidate = CapacityCandidate.from_segment(segment, quantity=quantity, resize=True)
        self.packer.ensure_fits(shelf.segments, section.width, candidate)

        self.repository.update_segment(segment_id, quantity=quantity, layer={'quantity': quantity})
        segment.quantity = quantity
        segment.layer.quantity = quantity
        self.logger.info(f"Segment {segment_id}: quantity set to {quantity}")
        return segment

    def delete_segment(self, segment_id: str):
        shelf, _ = self._segment(segment_id)
        self.repository.delete_segment(segment_id)
        shelf.remove_segment(segment_id)
        self.logger.info(f"Segment {segment_id} deleted from shelf {shelf.id}")

    def delete_layer(self, layer_id: str):
        """Delete a layer together with the segment that holds it"""
        for shelf in self.fixture.shelves:
            for segment in shelf.segments:
                if segment.layer.id == layer_id:
                    self.repository.delete_layer(layer_id)
                    shelf.remove_segment(segment.id)
                    self.logger.info(f"Layer {layer_id} and segment {segment.id} deleted")
                    return
        raise ConfigurationError(f"Layer not found: {layer_id}")
