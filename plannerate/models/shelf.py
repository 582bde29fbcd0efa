from dataclasses import dataclass, field
from typing import List, Dict, Optional

from .product import Status
from .segment import Segment, new_id
from ..utils.constants import DEFAULT_SHELF_HEIGHT, DEFAULT_SHELF_DEPTH

HORIZONTAL_ALIGNMENTS = ('left', 'center', 'right')
VERTICAL_ALIGNMENTS = ('top', 'middle', 'bottom')

@dataclass
class ShelfSettings:
    """Display alignment applied to the layers on a shelf"""
    horizontal_alignment: str = 'left'
    vertical_alignment: str = 'bottom'
    justify: bool = False

    def __post_init__(self):
        if self.horizontal_alignment not in HORIZONTAL_ALIGNMENTS:
            raise ValueError(f"Unknown horizontal alignment: {self.horizontal_alignment}")
        if self.vertical_alignment not in VERTICAL_ALIGNMENTS:
            raise ValueError(f"Unknown vertical alignment: {self.vertical_alignment}")

@dataclass
class Shelf:
    """Shelf data model"""
    section_id: Optional[str]
    position: float  # vertical offset from the section base (fixture units)
    height: float = DEFAULT_SHELF_HEIGHT
    depth: float = DEFAULT_SHELF_DEPTH
    ordering: int = 0
    status: Status = Status.PUBLISHED
    settings: ShelfSettings = field(default_factory=ShelfSettings)
    segments: List[Segment] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.position = float(self.position)
        for segment in self.segments:
            segment.shelf_id = self.id

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    def find_segment(self, segment_id: str) -> Optional[Segment]:
        return next((s for s in self.segments if s.id == segment_id), None)

    def add_segment(self, segment: Segment):
        segment.shelf_id = self.id
        self.segments.append(segment)

    def remove_segment(self, segment_id: str) -> Optional[Segment]:
        segment = self.find_segment(segment_id)
        if segment is not None:
            self.segments.remove(segment)
        return segment

    def to_dict(self) -> Dict:
        """Convert shelf to dictionary for export"""
        return {
            'id': self.id,
            'section_id': self.section_id,
            'position': self.position,
            'height': self.height,
            'depth': self.depth,
            'ordering': self.ordering,
            'status': self.status.value,
            'settings': {
                'horizontal_alignment': self.settings.horizontal_alignment,
                'vertical_alignment': self.settings.vertical_alignment,
                'justify': self.settings.justify,
            },
            'segments': [segment.to_dict() for segment in self.segments],
        }
