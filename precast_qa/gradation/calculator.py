"""
Gradation calculator: sieve analysis of aggregate samples (ASTM C136).

Pure math. Given an AggregateSpecification and the raw weight retained on
each sieve, produce percent retained, cumulative retained and percent
passing per sieve, plus the fineness modulus and decant for fine aggregates.

Input: AggregateSpecification + raw weights (form strings or numbers)
Output: GradationResult (fresh objects; inputs are never modified)
"""

import logging
import math
from typing import Mapping, Optional, Sequence, Union

from ..errors import InvalidWeight
from ..models import AggregateClass
from ..schemas import AggregateSpecification, DerivedSieveResult, GradationResult
from .sieves import FINENESS_MODULUS_SIEVES

logger = logging.getLogger(__name__)

RawWeight = Union[str, float, int, None]


class GradationCalculator:
    """Stateless: one instance can serve any number of tests."""

    FM_SIEVES = FINENESS_MODULUS_SIEVES
    FM_DECIMALS = 2
    DECANT_DECIMALS = 2

    def calculate(self, spec: AggregateSpecification, raw_weights,
                  washed_weight: RawWeight = None) -> GradationResult:
        weights = self.align_weights(spec, raw_weights)
        total_weight = math.fsum(weights)

        if total_weight == 0:
            logger.warning("Total weight is zero for %s: percentages unavailable", spec.name)
            return GradationResult(
                sieve_results=[
                    DerivedSieveResult(name=t.name, aperture_size=t.aperture_size, weight_retained=w)
                    for t, w in zip(spec.sieves, weights)
                ],
                total_weight=0.0,
                washed_weight=self.parse_washed_weight(washed_weight) if self._is_fine(spec) else None,
            )

        sieve_results = []
        running = 0.0
        # Sieves are ordered largest aperture first, so accumulate toward the Pan
        for template, weight in zip(spec.sieves, weights):
            percent_retained = weight / total_weight * 100
            running += percent_retained
            cumulative = self._clamp(running)
            sieve_results.append(DerivedSieveResult(
                name=template.name,
                aperture_size=template.aperture_size,
                weight_retained=weight,
                percent_retained=percent_retained,
                cumulative_retained=cumulative,
                percent_passing=self._clamp(100 - cumulative),
            ))

        fineness_modulus = None
        decant = None
        washed = None
        if self._is_fine(spec):
            fineness_modulus = self.fineness_modulus(sieve_results)
            washed = self.parse_washed_weight(washed_weight)
            if washed is not None:
                decant = self.decant(total_weight, washed)

        logger.debug("Gradation for %s: total=%.2fg FM=%s decant=%s",
                     spec.name, total_weight, fineness_modulus, decant)
        return GradationResult(
            sieve_results=sieve_results,
            total_weight=total_weight,
            washed_weight=washed,
            fineness_modulus=fineness_modulus,
            decant=decant,
        )

    # --- Parsing ---

    def parse_weight(self, value: RawWeight, sieve: str = None) -> float:
        """
        Parse a weight in grams from form input.
        Blank input is an empty sieve (0.0). Anything else must be a finite,
        non-negative number, optionally suffixed with 'g'.
        """
        if value is None:
            return 0.0
        if isinstance(value, bool):
            raise InvalidWeight(f"Weight for {sieve or 'sieve'} is not a number: {value!r}",
                                sieve=sieve, value=value)
        if isinstance(value, (int, float)):
            weight = float(value)
        else:
            text = str(value).strip()
            if not text:
                return 0.0
            try:
                weight = float(text.removesuffix("g").strip())
            except ValueError:
                raise InvalidWeight(f"Weight for {sieve or 'sieve'} is not a number: {value!r}",
                                    sieve=sieve, value=value)

        if not math.isfinite(weight):
            raise InvalidWeight(f"Weight for {sieve or 'sieve'} must be finite: {value!r}",
                                sieve=sieve, value=value)
        if weight < 0:
            raise InvalidWeight(f"Weight for {sieve or 'sieve'} cannot be negative: {value!r}",
                                sieve=sieve, value=value)
        return weight

    def parse_washed_weight(self, value: RawWeight) -> Optional[float]:
        """Washed weight is optional: blank means no wash test was run."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return self.parse_weight(value, sieve="washed sample")

    def align_weights(self, spec: AggregateSpecification, raw_weights) -> list:
        """
        Parse raw weights into a list index-aligned with spec.sieves.
        Accepts a sequence in sieve order or a mapping of sieve name -> weight
        (sieves missing from the mapping are empty).
        """
        if isinstance(raw_weights, Mapping):
            unknown = [name for name in raw_weights if name not in spec.sieve_names]
            if unknown:
                raise InvalidWeight(
                    f"Weights given for sieves not in {spec.name}: {unknown}",
                    sieve=unknown[0], value=raw_weights[unknown[0]],
                )
            raw = [raw_weights.get(name) for name in spec.sieve_names]
        elif isinstance(raw_weights, Sequence) and not isinstance(raw_weights, str):
            if len(raw_weights) != len(spec.sieves):
                raise InvalidWeight(
                    f"Expected {len(spec.sieves)} weights for {spec.name}, got {len(raw_weights)}"
                )
            raw = list(raw_weights)
        else:
            raise InvalidWeight(f"Weights must be a sequence or mapping, got {type(raw_weights).__name__}")

        return [self.parse_weight(value, sieve=name) for name, value in zip(spec.sieve_names, raw)]

    # --- Derived values ---

    def fineness_modulus(self, sieve_results: Sequence[DerivedSieveResult]) -> Optional[float]:
        """Sum of cumulative retained on the standard FM sieves / 100."""
        cumulative = [r.cumulative_retained for r in sieve_results if r.name in self.FM_SIEVES]
        if any(c is None for c in cumulative):
            return None
        return round(math.fsum(cumulative) / 100, self.FM_DECIMALS)

    def decant(self, total_weight: float, washed_weight: float) -> float:
        """Percent of the sample lost in the wash."""
        if washed_weight > total_weight:
            raise InvalidWeight(
                f"Washed weight {washed_weight}g exceeds total weight {total_weight}g",
                sieve="washed sample", value=washed_weight,
            )
        return round((total_weight - washed_weight) / total_weight * 100, self.DECANT_DECIMALS)

    def _is_fine(self, spec: AggregateSpecification) -> bool:
        return spec.aggregate_class == AggregateClass.FINE

    def _clamp(self, percent: float) -> float:
        """Absorb floating rounding at the ends of the 0-100 range."""
        return min(100.0, max(0.0, percent))


_calculator = GradationCalculator()


def parse_weight(value: RawWeight, sieve: str = None) -> float:
    return _calculator.parse_weight(value, sieve)


def compute_gradation(spec: AggregateSpecification, raw_weights,
                      washed_weight: RawWeight = None) -> GradationResult:
    """
    Derive percent retained / cumulative / passing, fineness modulus and decant.

    Raises InvalidWeight for non-numeric, non-finite or negative weights, and
    when the washed weight exceeds the total. Zero total weight is not an
    error: every percentage comes back as None.
    """
    return _calculator.calculate(spec, raw_weights, washed_weight)
