import json
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from ..models.fixture import Fixture, Section
from ..models.product import Product, Status
from ..models.segment import Layer, Segment
from ..models.shelf import Shelf, ShelfSettings
from ..utils.error_handler import ConfigurationError, handle_errors
from ..utils.logger import get_logger
from .repository import snapshot_counts

class FixtureLoader:
    """Handle loading fixture definitions and product catalogs"""

    def __init__(self, data_path: str = "data/fixtures"):
        self.data_path = Path(data_path)
        self.logger = get_logger()

    def get_available_fixtures(self) -> List[str]:
        """Names of the fixture definitions found in the data path"""
        if not self.data_path.exists():
            return []
        return sorted(path.stem.replace('_fixture', '') for path in self.data_path.glob("*_fixture.json"))

    @handle_errors()
    def load_fixture(self, name: str) -> Fixture:
        """Load a fixture definition by name"""
        file_path = self.data_path / f"{name}_fixture.json"
        if not file_path.exists():
            raise ConfigurationError(f"Fixture definition not found: {file_path}")
        return self.load_fixture_file(file_path)

    @handle_errors()
    def load_fixture_file(self, file_path) -> Fixture:
        with open(file_path, 'r') as f:
            data = json.load(f)
        fixture = self.fixture_from_dict(data)
        self.logger.info(f"Loaded fixture '{fixture.name}' from {file_path}: {snapshot_counts(fixture)}")
        return fixture

    def fixture_from_dict(self, data: Dict) -> Fixture:
        try:
            info = data['fixture']
            sections = [self._section_from_dict(s) for s in data.get('sections', [])]
            kwargs = {
                'name': info['name'],
                'width': float(info['width']),
                'height': float(info['height']),
                'sections': sections,
            }
            for key in ('base_height', 'shelf_height', 'hole_spacing', 'thickness', 'scale_factor'):
                if key in info:
                    kwargs[key] = float(info[key])
            if 'id' in info:
                kwargs['id'] = str(info['id'])
            if 'status' in info:
                kwargs['status'] = Status(info['status'])
            return Fixture(**kwargs)
        except KeyError as e:
            raise ConfigurationError(f"Missing key in fixture definition: {e}") from e
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in fixture definition: {e}") from e

    def _section_from_dict(self, data: Dict) -> Section:
        kwargs = {
            'width': float(data['width']),
            'ordering': int(data.get('ordering', 0)),
            'name': str(data.get('name', '')),
            'shelves': [self._shelf_from_dict(s, i) for i, s in enumerate(data.get('shelves', []))],
        }
        if 'id' in data:
            kwargs['id'] = str(data['id'])
        if 'status' in data:
            kwargs['status'] = Status(data['status'])
        return Section(**kwargs)

    def _shelf_from_dict(self, data: Dict, index: int) -> Shelf:
        settings = data.get('settings', {})
        kwargs = {
            'section_id': None,
            'position': float(data['position']),
            'ordering': int(data.get('ordering', index)),
            'settings': ShelfSettings(
                horizontal_alignment=settings.get('horizontal_alignment', 'left'),
                vertical_alignment=settings.get('vertical_alignment', 'bottom'),
                justify=bool(settings.get('justify', False)),
            ),
            'segments': [self._segment_from_dict(s, i + 1) for i, s in enumerate(data.get('segments', []))],
        }
        for key in ('height', 'depth'):
            if key in data:
                kwargs[key] = float(data[key])
        if 'id' in data:
            kwargs['id'] = str(data['id'])
        return Shelf(**kwargs)

    def _segment_from_dict(self, data: Dict, ordering: int) -> Segment:
        layer_data = data['layer']
        layer_kwargs = {
            'product': Product.from_dict(layer_data['product']),
            'quantity': int(layer_data.get('quantity', 1)),
            'spacing': float(layer_data.get('spacing', 0) or 0),
        }
        if 'id' in layer_data:
            layer_kwargs['id'] = str(layer_data['id'])
        for key in ('horizontal_alignment', 'vertical_alignment', 'is_justified'):
            if key in layer_data:
                layer_kwargs[key] = layer_data[key]

        kwargs = {
            'layer': Layer(**layer_kwargs),
            'ordering': int(data.get('ordering', ordering)),
            'width': float(data.get('width', 0) or 0),
            'position': float(data.get('position', 0) or 0),
            'spacing': float(data.get('spacing', 0) or 0),
            'quantity': int(data.get('quantity', 1)),
        }
        if 'id' in data:
            kwargs['id'] = str(data['id'])
        if 'status' in data:
            kwargs['status'] = Status(data['status'])
        return Segment(**kwargs)

    @handle_errors()
    def load_product_catalog(self, file_path) -> Dict[str, Product]:
        """Load products from a CSV catalog (id, name, width, height, depth[, image_url])"""
        df = pd.read_csv(file_path)
        missing = {'id', 'width'} - set(df.columns)
        if missing:
            raise ConfigurationError(f"Product catalog is missing columns: {sorted(missing)}")

        products = {}
        for _, row in df.iterrows():
            try:
                product = Product(
                    id=str(row['id']),
                    name=str(row['name']).strip() if 'name' in df.columns and pd.notna(row['name']) else '',
                    width=float(row['width']),
                    height=float(row['height']) if 'height' in df.columns and pd.notna(row['height']) else 0.0,
                    depth=float(row['depth']) if 'depth' in df.columns and pd.notna(row['depth']) else 0.0,
                    image_url=str(row['image_url']) if 'image_url' in df.columns and pd.notna(row['image_url']) else None,
                )
            except (TypeError, ValueError) as e:
                self.logger.warning(f"Skipping product {row.get('id', 'unknown')}: {e}")
                continue
            products[product.id] = product

        self.logger.info(f"Loaded {len(products)} products from {file_path}")
        return products
