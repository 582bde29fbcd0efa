from typing import Iterable, List
import math

from ..utils.constants import MIN_BASE_HEIGHT
from ..utils.logger import get_logger
from ..utils.monitor import monitor


def round_half_up(value: float) -> int:
    """Round to nearest, ties away from zero for positive values"""
    return int(math.floor(value + 0.5))


class ShelfDistributor:
    """Pick evenly spaced hole positions for a number of shelves"""

    def __init__(self, min_base_height: float = MIN_BASE_HEIGHT):
        self.min_base_height = min_base_height
        self.logger = get_logger()

    def usable_holes(self, holes: Iterable[float]) -> List[float]:
        """Unique holes, ascending, from the first one at or above the base floor"""
        ordered = sorted(set(holes))
        for index, hole in enumerate(ordered):
            if hole >= self.min_base_height:
                return ordered[index:]
        return []

    @monitor.time_it
    def distribute(self, holes: Iterable[float], shelf_count: int) -> List[float]:
        """Return ascending, unique Y positions for shelf_count shelves.

        The incoming order of holes is irrelevant; they are re-sorted
        ascending here. When rounding maps two shelves to the same hole the
        duplicate is dropped, so callers may get fewer positions than asked.
        """
        holes = list(holes)
        if shelf_count <= 0 or not holes:
            return []

        usable = self.usable_holes(holes)
        if not usable:
            return []

        if shelf_count == 1:
            return [usable[len(usable) // 2]]

        last_index = len(usable) - 1
        positions = [usable[0]]

        if shelf_count > 2:
            step = last_index / (shelf_count - 1)
            for i in range(1, shelf_count - 1):
                target = min(round_half_up(i * step), last_index)
                positions.append(usable[target])

        positions.append(usable[last_index])

        distributed = list(dict.fromkeys(positions))
        if len(distributed) < shelf_count:
            self.logger.debug(
                f"Requested {shelf_count} shelves but only {len(distributed)} distinct holes were selected"
            )
        return distributed
