"""
Strand pattern comparator: design layout vs. as-cast layout.

Slots are compared by position: slot i of the design against slot i of
the cast pattern. No attempt is made to re-pair strands that were laid
out in a different order.
"""

import logging
from typing import List, Optional

from ..models import IssueType, StrandPosition
from ..schemas import (
    ComparisonResult,
    StrandCoordinate,
    StrandDifference,
    StrandPattern,
    StrandSlot,
)

logger = logging.getLogger(__name__)

# Allowed placement error per axis (inches). A difference of exactly the
# tolerance is still in place.
LOCATION_TOLERANCE_IN = 0.5

# Offsets are rounded to this many decimals before the tolerance check
OFFSET_DECIMALS = 6

# Summary wording per issue type, in summary order
_SUMMARY_LABELS = [
    (IssueType.MISSING_IN_CAST, "strand(s) missing in cast"),
    (IssueType.MISSING_IN_DESIGN, "extra strand(s) in cast"),
    (IssueType.SIZE_MISMATCH, "size mismatch(es)"),
    (IssueType.LOCATION_MISMATCH, "location mismatch(es)"),
]


def _fmt_in(value: float) -> str:
    return f'{value:g}"'


def _fmt_point(coord: StrandCoordinate) -> str:
    return f"({_fmt_in(coord.x)}, {_fmt_in(coord.y)})"


def _copy(coord: Optional[StrandCoordinate]) -> Optional[StrandCoordinate]:
    return StrandCoordinate(x=coord.x, y=coord.y) if coord is not None else None


def _compare_slot(slot_index: int, position: StrandPosition,
                  design: StrandSlot, cast: StrandSlot) -> List[StrandDifference]:
    label = f"{position.value} Strand {slot_index}"
    differences = []

    if design.size != cast.size:
        differences.append(StrandDifference(
            slot_index=slot_index,
            position=position,
            issue_type=IssueType.SIZE_MISMATCH,
            design_size=design.size,
            cast_size=cast.size,
            description=f"{label} size mismatch: Design={design.size}, Cast={cast.size}",
        ))

    # Size and location are independent findings: a slot can have both
    if design.coordinate is not None and cast.coordinate is not None:
        dx = round(abs(design.coordinate.x - cast.coordinate.x), OFFSET_DECIMALS)
        dy = round(abs(design.coordinate.y - cast.coordinate.y), OFFSET_DECIMALS)
        if dx > LOCATION_TOLERANCE_IN or dy > LOCATION_TOLERANCE_IN:
            differences.append(StrandDifference(
                slot_index=slot_index,
                position=position,
                issue_type=IssueType.LOCATION_MISMATCH,
                design_location=_copy(design.coordinate),
                cast_location=_copy(cast.coordinate),
                description=(
                    f"{label} location mismatch: "
                    f"Design={_fmt_point(design.coordinate)}, Cast={_fmt_point(cast.coordinate)}"
                ),
            ))

    return differences


def summarize_differences(differences: List[StrandDifference]) -> str:
    """'N difference(s) found: ...' with a count per issue type."""
    counts = {issue: 0 for issue, _ in _SUMMARY_LABELS}
    for diff in differences:
        counts[diff.issue_type] += 1
    parts = [f"{counts[issue]} {label}" for issue, label in _SUMMARY_LABELS if counts[issue]]
    return f"{len(differences)} difference(s) found: {', '.join(parts)}"


def compare_strand_patterns(
    design_pattern: Optional[StrandPattern],
    cast_pattern: Optional[StrandPattern],
    position: StrandPosition,
) -> ComparisonResult:
    """
    Diff a design strand pattern against the as-cast pattern.

    Never raises: missing patterns are reported in the summary. Patterns
    with the same id are identical by definition. Otherwise every slot
    index is compared and each finding becomes its own StrandDifference,
    in ascending slot order.
    """
    position = StrandPosition(position)
    row = position.value.lower()
    header = dict(
        position=position,
        has_design_pattern=design_pattern is not None,
        has_cast_pattern=cast_pattern is not None,
        design_pattern_id=design_pattern.id if design_pattern else None,
        design_pattern_name=design_pattern.name if design_pattern else None,
        cast_pattern_id=cast_pattern.id if cast_pattern else None,
        cast_pattern_name=cast_pattern.name if cast_pattern else None,
    )

    if design_pattern is None and cast_pattern is None:
        return ComparisonResult(**header, summary=f"No {row} strand pattern specified")
    if design_pattern is None:
        return ComparisonResult(**header, summary=f"No design pattern specified for {row} strands")
    if cast_pattern is None:
        return ComparisonResult(**header, summary=f"No cast pattern specified for {row} strands")

    if design_pattern.id == cast_pattern.id:
        return ComparisonResult(
            **header, summary=f"Design and cast patterns match ({design_pattern.name})"
        )

    design_slots = design_pattern.slots
    cast_slots = cast_pattern.slots
    differences: List[StrandDifference] = []

    for i in range(max(len(design_slots), len(cast_slots))):
        slot_index = i + 1
        design = design_slots[i] if i < len(design_slots) else None
        cast = cast_slots[i] if i < len(cast_slots) else None
        label = f"{position.value} Strand {slot_index}"

        if cast is None:
            differences.append(StrandDifference(
                slot_index=slot_index,
                position=position,
                issue_type=IssueType.MISSING_IN_CAST,
                design_size=design.size,
                design_location=_copy(design.coordinate),
                description=f"{label} ({design.size}) exists in design but missing in cast pattern",
            ))
        elif design is None:
            differences.append(StrandDifference(
                slot_index=slot_index,
                position=position,
                issue_type=IssueType.MISSING_IN_DESIGN,
                cast_size=cast.size,
                cast_location=_copy(cast.coordinate),
                description=f"{label} ({cast.size}) exists in cast but missing in design pattern",
            ))
        else:
            differences.extend(_compare_slot(slot_index, position, design, cast))

    if differences:
        summary = summarize_differences(differences)
        logger.info("%s strand comparison %s vs %s: %s",
                    position.value, design_pattern.id, cast_pattern.id, summary)
    else:
        summary = (
            f"Different patterns but no strand differences detected "
            f"(Design: {design_pattern.name}, Cast: {cast_pattern.name})"
        )

    return ComparisonResult(
        **header,
        differences=differences,
        has_differences=bool(differences),
        summary=summary,
    )
