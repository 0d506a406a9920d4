"""
Compliance checker: percent passing vs. the grading envelope (ASTM C33).

A sieve passes when lower <= percent passing <= upper. Sieves without
bounds are not checked. A test with zero total weight cannot be evaluated
and never passes.
"""

import logging
from typing import List, Optional, Sequence

from ..errors import IncompatibleEnvelopeLength
from ..models import BoundSide
from ..schemas import (
    AggregateSpecification,
    ComplianceBounds,
    ComplianceResult,
    DerivedSieveResult,
    FailedSieve,
    GradationResult,
    LimitCheck,
)

logger = logging.getLogger(__name__)

DEVIATION_DECIMALS = 2

# Percent passing within this distance of a bound counts as on the bound
BOUND_TOLERANCE = 1e-6


def check_compliance(
    derived_results: Sequence[DerivedSieveResult],
    envelope: Sequence[Optional[ComplianceBounds]],
) -> ComplianceResult:
    """
    Check each sieve's percent passing against its index-aligned bounds.

    Returns every failing sieve with the violated side and how far outside
    the band it fell. Raises IncompatibleEnvelopeLength when the two
    sequences differ in length.
    """
    if len(derived_results) != len(envelope):
        raise IncompatibleEnvelopeLength(len(derived_results), len(envelope))

    if any(r.percent_passing is None for r in derived_results):
        logger.warning("Compliance not evaluable: percent passing unavailable")
        return ComplianceResult(passes_envelope=False, evaluable=False)

    failed: List[FailedSieve] = []
    for result, bounds in zip(derived_results, envelope):
        if bounds is None:
            continue
        passing = result.percent_passing
        if passing < bounds.lower - BOUND_TOLERANCE:
            side, deviation = BoundSide.LOWER, bounds.lower - passing
        elif passing > bounds.upper + BOUND_TOLERANCE:
            side, deviation = BoundSide.UPPER, passing - bounds.upper
        else:
            continue
        failed.append(FailedSieve(
            sieve=result.name,
            percent_passing=passing,
            lower_bound=bounds.lower,
            upper_bound=bounds.upper,
            violated=side,
            deviation=round(deviation, DEVIATION_DECIMALS),
        ))

    if failed:
        logger.info("Envelope check failed at %s", ", ".join(f.sieve for f in failed))
    return ComplianceResult(passes_envelope=not failed, evaluable=True, failed_sieves=failed)


def check_specification(spec: AggregateSpecification, gradation: GradationResult) -> ComplianceResult:
    """check_compliance using the envelope carried by the aggregate specification."""
    return check_compliance(gradation.sieve_results, spec.envelope)


def check_limits(spec: AggregateSpecification, fineness_modulus: Optional[float],
                 decant: Optional[float]) -> LimitCheck:
    """
    Flag decant or fineness modulus above the aggregate's maximums.
    Flags are diagnostic and do not affect envelope compliance.
    """
    reasons = []
    if spec.max_decant is not None and decant is not None and decant > spec.max_decant:
        reasons.append(f"Decant {decant:.2f}% exceeds maximum {spec.max_decant:.2f}%")
    if (spec.max_fineness_modulus is not None and fineness_modulus is not None
            and fineness_modulus > spec.max_fineness_modulus):
        reasons.append(
            f"Fineness modulus {fineness_modulus:.2f} exceeds maximum {spec.max_fineness_modulus:.2f}"
        )
    return LimitCheck(flagged=bool(reasons), flag_reasons=reasons)
