from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple

from .product import Status
from .segment import Segment, new_id
from .shelf import Shelf
from ..utils.constants import (
    DEFAULT_BASE_HEIGHT, DEFAULT_HOLE_SPACING, DEFAULT_SHELF_HEIGHT,
    DEFAULT_THICKNESS, DEFAULT_SCALE_FACTOR,
)

@dataclass
class Section:
    """Vertical slot of a fixture holding an ordered stack of shelves"""
    width: float
    ordering: int = 0
    name: str = ''
    status: Status = Status.PUBLISHED
    shelves: List[Shelf] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    fixture: Optional['Fixture'] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        self.width = float(self.width)
        for shelf in self.shelves:
            shelf.section_id = self.id

    @property
    def height(self) -> float:
        # Sections are always as tall as their fixture
        if self.fixture is None:
            raise AttributeError(f"Section {self.id} is not attached to a fixture")
        return self.fixture.height

    @property
    def shelf_count(self) -> int:
        return len(self.shelves)

    def find_shelf(self, shelf_id: str) -> Optional[Shelf]:
        return next((s for s in self.shelves if s.id == shelf_id), None)

    def add_shelf(self, shelf: Shelf):
        shelf.section_id = self.id
        self.shelves.append(shelf)

    def remove_shelf(self, shelf_id: str) -> Optional[Shelf]:
        shelf = self.find_shelf(shelf_id)
        if shelf is not None:
            self.shelves.remove(shelf)
        return shelf

    def shelf_positions(self) -> List[float]:
        """Shelf positions in ordering order"""
        return [s.position for s in sorted(self.shelves, key=lambda s: s.ordering)]

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'width': self.width,
            'height': self.height if self.fixture is not None else None,
            'ordering': self.ordering,
            'status': self.status.value,
            'shelves': [shelf.to_dict() for shelf in self.shelves],
        }

@dataclass
class Fixture:
    """Gondola: the physical display unit containing sections"""
    name: str
    width: float
    height: float
    base_height: float = DEFAULT_BASE_HEIGHT
    shelf_height: float = DEFAULT_SHELF_HEIGHT
    hole_spacing: float = DEFAULT_HOLE_SPACING
    thickness: float = DEFAULT_THICKNESS
    scale_factor: float = DEFAULT_SCALE_FACTOR  # display units per fixture unit
    status: Status = Status.PUBLISHED
    sections: List[Section] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        for attr in ('width', 'height', 'base_height', 'shelf_height',
                     'hole_spacing', 'thickness', 'scale_factor'):
            setattr(self, attr, float(getattr(self, attr)))
        for section in self.sections:
            section.fixture = self
        self.sections.sort(key=lambda s: s.ordering)

    def add_section(self, section: Section):
        section.fixture = self
        self.sections.append(section)
        self.sections.sort(key=lambda s: s.ordering)

    def find_section(self, section_id: str) -> Optional[Section]:
        return next((s for s in self.sections if s.id == section_id), None)

    def locate_shelf(self, shelf_id: str) -> Tuple[Optional[Section], Optional[Shelf]]:
        for section in self.sections:
            shelf = section.find_shelf(shelf_id)
            if shelf is not None:
                return section, shelf
        return None, None

    def locate_segment(self, segment_id: str) -> Tuple[Optional[Shelf], Optional[Segment]]:
        for section in self.sections:
            for shelf in section.shelves:
                segment = shelf.find_segment(segment_id)
                if segment is not None:
                    return shelf, segment
        return None, None

    @property
    def shelves(self) -> List[Shelf]:
        return [shelf for section in self.sections for shelf in section.shelves]

    @property
    def max_shelf_position(self) -> float:
        return self.height - self.shelf_height

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'width': self.width,
            'height': self.height,
            'base_height': self.base_height,
            'shelf_height': self.shelf_height,
            'hole_spacing': self.hole_spacing,
            'thickness': self.thickness,
            'scale_factor': self.scale_factor,
            'status': self.status.value,
            'sections': [section.to_dict() for section in self.sections],
        }
