import json
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from ..layout.capacity_packer import CapacityPacker
from ..layout.hole_grid import HoleGrid
from ..models.fixture import Fixture
from ..utils.error_handler import handle_errors
from ..utils.logger import get_logger

SHELF_COLUMNS = [
    'section_id', 'section_name', 'shelf_id', 'ordering', 'position',
    'segments', 'occupied', 'available', 'utilization', 'over_capacity',
]


def _recursive_convert(obj: Any) -> Any:
    """
    Recursively convert:
    - Dict keys that are Enums to their .value
    - Enum values to .value
    - Process nested lists and dicts
    """
    if isinstance(obj, dict):
        return {
            (k.value if isinstance(k, Enum) else k): _recursive_convert(v)
            for k, v in obj.items()
        }
    elif isinstance(obj, list):
        return [_recursive_convert(item) for item in obj]
    elif isinstance(obj, Enum):
        return obj.value
    return obj


class LayoutReport:
    """Shelf occupancy tables and fixture exports"""

    def __init__(self, output_dir: str = "output", packer: Optional[CapacityPacker] = None):
        self.output_dir = Path(output_dir)
        self.packer = packer or CapacityPacker()
        self.logger = get_logger()

    def shelf_table(self, fixture: Fixture) -> pd.DataFrame:
        """One row per shelf with its width usage"""
        rows = []
        for section in fixture.sections:
            for shelf in sorted(section.shelves, key=lambda s: s.ordering):
                result = self.packer.measure(shelf.segments, section.width)
                rows.append({
                    'section_id': section.id,
                    'section_name': section.name,
                    'shelf_id': shelf.id,
                    'ordering': shelf.ordering,
                    'position': shelf.position,
                    'segments': result.segment_count,
                    'occupied': result.occupied,
                    'available': result.available,
                    'utilization': round(result.utilization, 1),
                    'over_capacity': result.over_capacity,
                })
        return pd.DataFrame(rows, columns=SHELF_COLUMNS)

    def section_summary(self, fixture: Fixture) -> pd.DataFrame:
        """Per-section totals of the shelf table"""
        table = self.shelf_table(fixture)
        if table.empty:
            return pd.DataFrame(columns=['section_id', 'shelves', 'segments', 'mean_utilization', 'over_capacity'])
        return table.groupby('section_id', sort=False).agg(
            shelves=('shelf_id', 'count'),
            segments=('segments', 'sum'),
            mean_utilization=('utilization', 'mean'),
            over_capacity=('over_capacity', 'sum'),
        ).reset_index()

    def _ensure_output_dir(self):
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @handle_errors()
    def export_to_json(self, fixture: Fixture, filename: str = "layout.json") -> str:
        """Export the fixture, its hole grid and shelf metrics to JSON"""
        table = self.shelf_table(fixture)
        export_data = {
            'metadata': {
                'created_at': datetime.now().isoformat(),
                'fixture_id': fixture.id,
                'fixture_name': fixture.name,
                'status': fixture.status,
            },
            'holes': HoleGrid.from_fixture(fixture).positions_in_units(),
            'fixture': fixture.to_dict(),
            'shelves': json.loads(table.to_json(orient='records')),
        }
        cleaned = _recursive_convert(export_data)

        self._ensure_output_dir()
        filepath = self.output_dir / filename
        with open(filepath, 'w') as f:
            json.dump(cleaned, f, indent=2)

        self.logger.info(f"Exported layout to {filepath}")
        return str(filepath)

    @handle_errors()
    def export_to_csv(self, fixture: Fixture, filename: str = "layout_shelves.csv") -> str:
        self._ensure_output_dir()
        filepath = self.output_dir / filename
        self.shelf_table(fixture).to_csv(filepath, index=False)
        self.logger.info(f"Exported shelf table to {filepath}")
        return str(filepath)
