from dataclasses import dataclass, field
from typing import Dict, Optional
import uuid

from .product import Product, Status

def new_id() -> str:
    return uuid.uuid4().hex

@dataclass
class Layer:
    """Product facing definition owned by a segment"""
    product: Product
    quantity: int = 1
    spacing: float = 0.0  # horizontal gap reserved after the facings
    status: Status = Status.PUBLISHED
    id: str = field(default_factory=new_id)
    segment_id: Optional[str] = None

    # Optional alignment overrides; None falls back to the shelf settings
    horizontal_alignment: Optional[str] = None
    vertical_alignment: Optional[str] = None
    is_justified: Optional[bool] = None

    @property
    def occupied_width(self) -> float:
        """Width the facings take on the shelf, spacing included"""
        return self.product.width * self.quantity + (self.spacing or 0.0)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'segment_id': self.segment_id,
            'product': self.product.to_dict(),
            'quantity': self.quantity,
            'spacing': self.spacing,
            'status': self.status.value,
            'horizontal_alignment': self.horizontal_alignment,
            'vertical_alignment': self.vertical_alignment,
            'is_justified': self.is_justified,
        }

@dataclass
class Segment:
    """Horizontal slot on a shelf holding exactly one layer"""
    layer: Layer
    ordering: int = 1
    width: float = 0.0
    position: float = 0.0  # horizontal offset within the shelf
    spacing: float = 0.0
    quantity: int = 1
    status: Status = Status.PUBLISHED
    id: str = field(default_factory=new_id)
    shelf_id: Optional[str] = None

    def __post_init__(self):
        self.layer.segment_id = self.id

    @property
    def product(self) -> Product:
        return self.layer.product

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'shelf_id': self.shelf_id,
            'width': self.width,
            'position': self.position,
            'ordering': self.ordering,
            'spacing': self.spacing,
            'quantity': self.quantity,
            'status': self.status.value,
            'layer': self.layer.to_dict(),
        }
