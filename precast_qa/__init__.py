"""
Precast QA engine: aggregate gradation and strand pattern checks.

Pure Python calculations. No I/O outside storage.py.
"""

from .gradation.calculator import compute_gradation, parse_weight
from .gradation.compliance import check_compliance, check_limits, check_specification
from .strands.comparator import compare_strand_patterns
from .strands.formatting import format_comparison_for_display, format_comparison_for_report

__all__ = [
    "compute_gradation",
    "parse_weight",
    "check_compliance",
    "check_limits",
    "check_specification",
    "compare_strand_patterns",
    "format_comparison_for_display",
    "format_comparison_for_report",
]
