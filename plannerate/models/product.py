from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional
import math

class Status(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"

    @property
    def label(self) -> str:
        return {
            Status.DRAFT: "Draft",
            Status.PUBLISHED: "Published",
        }[self]

@dataclass
class Product:
    """Product referenced by a layer"""
    id: str
    name: str

    # Dimensions (fixture units, cm)
    width: float
    height: float = 0.0
    depth: float = 0.0

    image_url: Optional[str] = None

    def __post_init__(self):
        self.width = float(self.width)
        self.height = float(self.height)
        self.depth = float(self.depth)
        for name in ('width', 'height', 'depth'):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"Product {self.id}: {name} must be a finite number")

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'width': self.width,
            'height': self.height,
            'depth': self.depth,
            'image_url': self.image_url,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Product':
        return cls(
            id=str(data['id']),
            name=str(data.get('name', '')),
            width=float(data['width']),
            height=float(data.get('height', 0) or 0),
            depth=float(data.get('depth', 0) or 0),
            image_url=data.get('image_url'),
        )
