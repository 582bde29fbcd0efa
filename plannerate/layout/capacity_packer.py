"""Shelf width capacity.

Every check here goes through one piece of arithmetic, `measure`:

    occupied  = sum(product_width * quantity + layer_spacing) over segments
              (+ the candidate, unless it resizes an existing segment)
    available = section_width - width of the last product iterated

The margin is the width of the *last segment in iteration order*, not the
right-most one by position. That is how drops have always been accepted and
it is kept as-is so the same drops keep succeeding.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..models.segment import Segment
from ..utils.constants import SHELF_FULL_MESSAGE
from ..utils.error_handler import CapacityExceeded
from ..utils.logger import get_logger


@dataclass
class CapacityCandidate:
    """A segment about to be added to a shelf, or a new quantity for one"""
    product_width: float
    quantity: int = 1
    spacing: float = 0.0
    replaces: Optional[str] = None  # id of the existing segment being resized

    @classmethod
    def from_segment(cls, segment: Segment, quantity: Optional[int] = None,
                     resize: bool = False) -> 'CapacityCandidate':
        return cls(
            product_width=segment.layer.product.width,
            quantity=segment.layer.quantity if quantity is None else quantity,
            spacing=segment.layer.spacing or 0.0,
            replaces=segment.id if resize else None,
        )


@dataclass
class CapacityMeasure:
    occupied: float
    last_product_width: float
    section_width: float
    segment_count: int

    @property
    def available(self) -> float:
        return self.section_width - self.last_product_width

    @property
    def over_capacity(self) -> bool:
        # Nothing on the shelf yet: no margin applies and anything is accepted
        if self.segment_count == 0:
            return False
        return self.occupied > self.available

    @property
    def utilization(self) -> float:
        if self.section_width <= 0:
            return 0.0
        return (self.occupied / self.section_width) * 100


class CapacityPacker:
    """Decide whether a shelf has width left for a new or resized segment"""

    def __init__(self):
        self.logger = get_logger()

    def measure(self, segments: Iterable[Segment], section_width: float,
                candidate: Optional[CapacityCandidate] = None) -> CapacityMeasure:
        segments: List[Segment] = list(segments)
        occupied = 0.0
        last_product_width = 0.0
        replaced = False

        for segment in segments:
            layer = segment.layer
            product_width = float(layer.product.width)
            if candidate is not None and candidate.replaces is not None and candidate.replaces == segment.id:
                quantity = candidate.quantity
                replaced = True
            else:
                quantity = layer.quantity
            spacing = float(layer.spacing) if layer.spacing else 0.0

            occupied += product_width * quantity + spacing
            last_product_width = product_width

        if candidate is not None and not replaced:
            occupied += float(candidate.product_width) * candidate.quantity + (candidate.spacing or 0.0)

        return CapacityMeasure(
            occupied=occupied,
            last_product_width=last_product_width,
            section_width=float(section_width),
            segment_count=len(segments),
        )

    def occupied_width(self, segments: Iterable[Segment], section_width: float,
                       candidate: Optional[CapacityCandidate] = None) -> float:
        return self.measure(segments, section_width, candidate).occupied

    def capacity_shortfall(self, segments: Iterable[Segment], section_width: float,
                           candidate: Optional[CapacityCandidate] = None) -> Optional[str]:
        """Error message describing the overflow, or None when it fits"""
        result = self.measure(segments, section_width, candidate)
        if result.over_capacity:
            self.logger.debug(
                f"Over capacity: occupied {result.occupied:.1f} > available {result.available:.1f}"
            )
            return SHELF_FULL_MESSAGE
        return None

    def fits(self, segments: Iterable[Segment], section_width: float,
             candidate: Optional[CapacityCandidate] = None) -> bool:
        return self.capacity_shortfall(segments, section_width, candidate) is None

    def ensure_fits(self, segments: Iterable[Segment], section_width: float,
                    candidate: Optional[CapacityCandidate] = None) -> CapacityMeasure:
        """Raise CapacityExceeded when the candidate overflows the shelf"""
        result = self.measure(segments, section_width, candidate)
        if result.over_capacity:
            raise CapacityExceeded(SHELF_FULL_MESSAGE, occupied=result.occupied, available=result.available)
        return result
