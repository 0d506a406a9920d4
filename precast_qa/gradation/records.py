"""
Gradation test records: one per submitted sieve analysis.

create_test_record runs the calculator and compliance checker and freezes
the outcome. update_test_record is the only edit path: it keeps the id and
recomputes every derived field from the new raw input.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional, Sequence

from ..schemas import (
    AggregateSpecification,
    ChartPoint,
    DerivedSieveResult,
    TestRecord,
)
from .calculator import compute_gradation
from .compliance import check_limits, check_specification


def create_test_record(spec: AggregateSpecification, raw_weights, washed_weight=None,
                       test_date: date = None, record_id: str = None) -> TestRecord:
    gradation = compute_gradation(spec, raw_weights, washed_weight)
    compliance = check_specification(spec, gradation)
    limits = check_limits(spec, gradation.fineness_modulus, gradation.decant)

    return TestRecord(
        id=record_id or str(uuid.uuid4()),
        timestamp=datetime.utcnow(),
        aggregate_name=spec.name,
        date=test_date or date.today(),
        sieve_results=gradation.sieve_results,
        total_weight=gradation.total_weight,
        washed_weight=gradation.washed_weight,
        fineness_modulus=gradation.fineness_modulus,
        decant=gradation.decant,
        passes_envelope=compliance.passes_envelope,
        evaluable=compliance.evaluable,
        failed_sieves=compliance.failed_sieves,
        flag_reasons=limits.flag_reasons,
    )


def update_test_record(record: TestRecord, spec: AggregateSpecification, raw_weights,
                       washed_weight=None, test_date: date = None) -> TestRecord:
    """Edit in place: same id, new timestamp, all derived fields recomputed."""
    if spec.name != record.aggregate_name:
        raise ValueError(
            f"Test {record.id} is for {record.aggregate_name}, not {spec.name}"
        )
    return create_test_record(
        spec, raw_weights, washed_weight,
        test_date=test_date or record.date,
        record_id=record.id,
    )


def recompute_test_record(record: TestRecord, spec: AggregateSpecification) -> TestRecord:
    """Re-run a stored test against a (possibly edited) specification."""
    weights = {r.name: r.weight_retained for r in record.sieve_results}
    return update_test_record(record, spec, weights, record.washed_weight)


def prepare_chart_data(sieve_results: Sequence[DerivedSieveResult],
                       spec: AggregateSpecification) -> List[ChartPoint]:
    """
    Gradation curve points, smallest aperture first. The Pan and sieves
    without a percent passing are left out.
    """
    bounds_by_name = {t.name: t.bounds for t in spec.sieves}
    points = []
    for row in sieve_results:
        if row.aperture_size <= 0 or row.percent_passing is None:
            continue
        bounds = bounds_by_name.get(row.name)
        points.append(ChartPoint(
            size=row.aperture_size,
            sieve=row.name,
            percent_passing=row.percent_passing,
            lower=bounds.lower if bounds else None,
            upper=bounds.upper if bounds else None,
        ))
    points.reverse()
    return points


def _format_percent(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.0f}%"


def format_test_summary(record: TestRecord) -> str:
    """Plain-text summary for sharing a test result."""
    if not record.evaluable:
        verdict = "NOT EVALUABLE"
    else:
        verdict = "PASS" if record.passes_envelope else "FAIL"

    lines = [
        "Aggregate Gradation Test Results",
        "",
        f"Aggregate: {record.aggregate_name}",
        f"Date: {record.date.isoformat()}",
        f"Total Weight: {record.total_weight:.2f}g",
    ]
    if record.fineness_modulus is not None:
        lines.append(f"Fineness Modulus: {record.fineness_modulus:.2f}")
    if record.decant is not None:
        lines.append(f"Decant: {record.decant:.2f}%")
    lines.append(f"C33 Compliance: {verdict}")

    for failed in record.failed_sieves:
        lines.append(
            f"  {failed.sieve}: {failed.percent_passing:.0f}% passing, "
            f"limits {failed.lower_bound:g}-{failed.upper_bound:g} "
            f"({failed.deviation:g} points {failed.violated.value})"
        )
    for reason in record.flag_reasons:
        lines.append(f"  Warning: {reason}")

    lines.append("")
    lines.append("Sieve Data:")
    for row in record.sieve_results:
        weight = row.weight_retained or 0.0
        lines.append(f"{row.name}: {weight:g}g ({_format_percent(row.percent_passing)} passing)")

    return "\n".join(lines)
