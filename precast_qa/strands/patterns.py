"""
Strand pattern helpers: strand properties, per-size counts, placement filters.
"""

from collections import Counter
from typing import Dict, List, Sequence

from ..models import PatternPlacement, StrandPosition
from ..schemas import StrandPattern, StrandSlot

# Seven-wire prestressing strand (ASTM A416, Grade 270)
STRAND_PROPERTIES = {
    '3/8"': {"diameter": 0.375, "area": 0.085},  # in, in²
    '1/2"': {"diameter": 0.5, "area": 0.153},
    '0.6"': {"diameter": 0.6, "area": 0.217},
}


def count_by_size(slots: Sequence[StrandSlot]) -> Dict[str, int]:
    """Number of strands of each size label, in first-seen order."""
    return dict(Counter(slot.size for slot in slots))


def total_strand_area(pattern: StrandPattern) -> float:
    """
    Total strand area in in². Uses the slots when the pattern has a layout,
    otherwise the aggregate counts. Unknown sizes contribute nothing.
    """
    counts = count_by_size(pattern.slots) if pattern.slots else pattern.counts_by_size
    area = sum(
        STRAND_PROPERTIES[size]["area"] * count
        for size, count in counts.items()
        if size in STRAND_PROPERTIES
    )
    return round(area, 3)


def patterns_for_position(patterns: Sequence[StrandPattern],
                          position: StrandPosition) -> List[StrandPattern]:
    """Patterns usable for a strand row: 'Both' patterns match either row."""
    position = StrandPosition(position)
    return [
        p for p in patterns
        if p.placement == PatternPlacement.BOTH or p.placement.value == position.value
    ]
