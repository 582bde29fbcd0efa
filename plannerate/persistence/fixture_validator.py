from typing import List, Tuple

from ..layout.capacity_packer import CapacityPacker
from ..layout.spacing_validator import validate_spacing
from ..models.fixture import Fixture

class FixtureValidator:
    """Validate fixture geometry and the layout it carries"""

    def __init__(self):
        self.warnings = []
        self.errors = []
        self.packer = CapacityPacker()

    def validate_fixture(self, fixture: Fixture) -> Tuple[bool, List[str]]:
        """Validate a fixture and return (is_valid, issues)"""
        self.warnings = []
        self.errors = []

        self._validate_geometry(fixture)

        if not fixture.sections:
            self.warnings.append(f"{fixture.name}: Fixture has no sections")

        for section in fixture.sections:
            if section.width <= 0:
                self.errors.append(f"Section {section.name or section.id}: Invalid width ({section.width})")
            self._validate_shelves(fixture, section)

        all_issues = self.errors + self.warnings
        return len(self.errors) == 0, all_issues

    def _validate_geometry(self, fixture: Fixture):
        if fixture.scale_factor <= 0:
            self.errors.append(f"{fixture.name}: Scale factor must be positive ({fixture.scale_factor})")
        for attr in ('width', 'height', 'base_height', 'shelf_height', 'hole_spacing', 'thickness'):
            if getattr(fixture, attr) < 0:
                self.errors.append(f"{fixture.name}: Negative {attr}")
        if fixture.base_height >= fixture.height:
            self.errors.append(f"{fixture.name}: Base height must be below fixture height")

    def _validate_shelves(self, fixture: Fixture, section):
        label = section.name or section.id
        for shelf in section.shelves:
            if shelf.position < fixture.base_height or shelf.position > fixture.max_shelf_position:
                self.warnings.append(
                    f"Section {label}: Shelf {shelf.id} at {shelf.position} is outside "
                    f"[{fixture.base_height}, {fixture.max_shelf_position}]"
                )
            if not self.packer.fits(shelf.segments, section.width):
                self.warnings.append(f"Section {label}: Shelf {shelf.id} segments exceed section width")

        if not validate_spacing(section.shelf_positions(), fixture.shelf_height):
            self.warnings.append(f"Section {label}: Shelves overlap or are out of order")
