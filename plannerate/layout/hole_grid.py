"""Pegboard hole grid.

The grid is the ordered set of vertical positions a shelf may snap to. It is
derived from fixture geometry and the display scale, never stored, and
recomputed whenever either changes.

Hole offsets are display units measured up from the top of the fixture base.
Positions are returned top-most first. Everything downstream relies on that
ordering: index 0 is the hole nearest the top of the fixture.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple
import math

import numpy as np

from ..models.fixture import Fixture
from ..utils.error_handler import InvalidGeometry


def compute_holes(fixture_height: float, base_height: float, shelf_height: float,
                  hole_spacing: float, scale_factor: float) -> List[float]:
    """Compute hole positions (display units), sorted descending.

    Raises InvalidGeometry for a non-positive scale factor, negative raw
    dimensions or a non-positive hole pitch. A fixture too short for a single
    hole pair is valid and yields an empty list.
    """
    if scale_factor is None or scale_factor <= 0:
        raise InvalidGeometry(f"Scale factor must be positive, got {scale_factor}")

    for name, value in (('fixture_height', fixture_height), ('base_height', base_height),
                        ('shelf_height', shelf_height), ('hole_spacing', hole_spacing)):
        if value < 0:
            raise InvalidGeometry(f"{name} cannot be negative, got {value}")

    height_scaled = fixture_height * scale_factor
    base_scaled = base_height * scale_factor
    spacing = shelf_height * scale_factor + hole_spacing * scale_factor

    if spacing <= 0:
        raise InvalidGeometry("shelf_height + hole_spacing must be positive")

    usable_height = height_scaled - base_scaled - spacing
    if usable_height < 0:
        return []

    hole_count = math.floor(usable_height / spacing)
    holes = np.arange(hole_count, dtype=float) * spacing
    return holes[::-1].tolist()


@dataclass(frozen=True)
class HoleGrid:
    """Snap positions for one fixture geometry at one scale"""
    fixture_height: float
    base_height: float
    shelf_height: float
    hole_spacing: float
    scale_factor: float

    @classmethod
    def from_fixture(cls, fixture: Fixture) -> 'HoleGrid':
        return cls(
            fixture_height=fixture.height,
            base_height=fixture.base_height,
            shelf_height=fixture.shelf_height,
            hole_spacing=fixture.hole_spacing,
            scale_factor=fixture.scale_factor,
        )

    @property
    def holes(self) -> List[float]:
        return compute_holes(self.fixture_height, self.base_height, self.shelf_height,
                             self.hole_spacing, self.scale_factor)

    @property
    def pitch(self) -> float:
        """Distance between adjacent holes in fixture units"""
        return self.shelf_height + self.hole_spacing

    def __len__(self) -> int:
        return len(self.holes)

    def positions_in_units(self) -> List[float]:
        """Shelf positions (fixture units) the holes correspond to, top-most first.

        Hole offsets start at the top of the base, so the lowest hole is the
        base height and the highest stays below fixture_height - shelf_height.
        Positions are built from the unscaled pitch so the display scale never
        leaks into stored values.
        """
        count = len(self.holes)
        positions = self.base_height + np.arange(count, dtype=float)[::-1] * self.pitch
        return positions.tolist()

    def nearest(self, position: float) -> Optional[float]:
        """Hole (fixture units) closest to position; ties go to the higher hole"""
        index, _ = self.nearest_index(position)
        if index is None:
            return None
        return self.positions_in_units()[index]

    def nearest_index(self, position: float) -> Tuple[Optional[int], Optional[float]]:
        positions = np.asarray(self.positions_in_units())
        if positions.size == 0:
            return None, None
        distances = np.abs(positions - position)
        index = int(np.argmin(distances))
        return index, float(distances[index])
