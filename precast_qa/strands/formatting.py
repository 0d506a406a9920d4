"""
Strand comparison formatters.

Both read only the ComparisonResult. The display text goes to the app
screen and the markup fragment is dropped into the pour report.
"""

from html import escape

from ..models import IssueType
from ..schemas import ComparisonResult, StrandCoordinate, StrandDifference

# Report label and color per issue type
ISSUE_STYLES = {
    IssueType.MISSING_IN_CAST: ("Missing in Cast", "#dc2626"),
    IssueType.MISSING_IN_DESIGN: ("Extra in Cast", "#ea580c"),
    IssueType.SIZE_MISMATCH: ("Size Mismatch", "#ca8a04"),
    IssueType.LOCATION_MISMATCH: ("Location Mismatch", "#9333ea"),
}


def format_comparison_for_display(comparison: ComparisonResult) -> str:
    """Summary line, then one numbered line per difference."""
    if not comparison.has_differences:
        return comparison.summary

    lines = [comparison.summary, ""]
    for number, diff in enumerate(comparison.differences, start=1):
        lines.append(f"{number}. {diff.description}")
    return "\n".join(lines)


def _point(coord: StrandCoordinate) -> str:
    if coord is None:
        return "(unknown)"
    return f'({coord.x:g}", {coord.y:g}")'


def _difference_detail(diff: StrandDifference) -> str:
    strand = f"{diff.position.value} Strand {diff.slot_index}"
    if diff.issue_type == IssueType.MISSING_IN_CAST:
        return f"{strand} ({diff.design_size}) exists in design but not in cast pattern"
    if diff.issue_type == IssueType.MISSING_IN_DESIGN:
        return f"{strand} ({diff.cast_size}) exists in cast but not in design pattern"
    if diff.issue_type == IssueType.SIZE_MISMATCH:
        return f"{strand} - Design: {diff.design_size}, Cast: {diff.cast_size}"
    return f"{strand} - Design: {_point(diff.design_location)}, Cast: {_point(diff.cast_location)}"


def format_comparison_for_report(comparison: ComparisonResult) -> str:
    """HTML fragment for the pour report. All text is escaped."""
    if not comparison.has_differences:
        return f'<div class="info-text">{escape(comparison.summary)}</div>'

    items = []
    for diff in comparison.differences:
        label, color = ISSUE_STYLES[diff.issue_type]
        items.append(
            f'<li style="margin-bottom: 4px; color: #1f2937;">'
            f'<strong style="color: {color};">{label}:</strong> '
            f"{escape(_difference_detail(diff))}</li>"
        )

    return (
        '<div class="warning-box">'
        f'<div class="warning-text">&#9888; {escape(comparison.summary)}</div>'
        "</div>"
        '<div style="margin-top: 8px;">'
        '<ul style="margin: 0; padding-left: 20px; font-size: 7.5px; line-height: 1.5;">'
        + "".join(items)
        + "</ul></div>"
    )
