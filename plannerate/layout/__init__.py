from .hole_grid import HoleGrid, compute_holes
from .shelf_distributor import ShelfDistributor
from .spacing_validator import validate_spacing
from .capacity_packer import CapacityPacker, CapacityCandidate, CapacityMeasure

__all__ = [
    'HoleGrid', 'compute_holes', 'ShelfDistributor', 'validate_spacing',
    'CapacityPacker', 'CapacityCandidate', 'CapacityMeasure',
]
