from .product import Product, Status
from .segment import Segment, Layer
from .shelf import Shelf, ShelfSettings
from .fixture import Fixture, Section

__all__ = ['Product', 'Status', 'Segment', 'Layer', 'Shelf', 'ShelfSettings', 'Fixture', 'Section']
