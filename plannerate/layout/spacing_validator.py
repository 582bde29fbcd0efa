from typing import Sequence


def validate_spacing(positions: Sequence[float], min_spacing: float) -> bool:
    """Check adjacent shelf positions against a minimum gap.

    Pairs are compared in array order, not value order, and positions are
    never sorted here: a list in insertion order answers "was a shelf added
    out of position", which is what callers use it for.
    """
    for i in range(1, len(positions)):
        if (positions[i] - positions[i - 1]) < min_spacing:
            return False
    return True
