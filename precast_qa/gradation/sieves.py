# Sieve reference data: source: ASTM C33 / C136 and plant aggregate submittals

from typing import Dict, List, Optional, Tuple

from ..models import AggregateClass
from ..schemas import AggregateSpecification, ComplianceBounds, SieveTemplate

PAN = "Pan"

# Standard sieve sizes: name -> aperture (mm)
STANDARD_SIEVES = {
    '2"': 50.0,
    '1 1/2"': 37.5,
    '1"': 25.0,
    '3/4"': 19.0,
    '1/2"': 12.5,
    '3/8"': 9.5,
    "#4": 4.75,
    "#8": 2.36,
    "#16": 1.18,
    "#30": 0.6,
    "#50": 0.3,
    "#100": 0.15,
    "#200": 0.075,
    PAN: 0.0,
}

# Cumulative retained on these sieves, / 100, is the fineness modulus
FINENESS_MODULUS_SIEVES = ("#4", "#8", "#16", "#30", "#50", "#100")

# Default sieve stacks offered when adding a new aggregate
_DEFAULT_SIEVE_LISTS = {
    AggregateClass.FINE: ['3/8"', "#4", "#8", "#16", "#30", "#50", "#100", "#200", PAN],
    AggregateClass.COARSE: ['2"', '1 1/2"', '1"', '3/4"', '1/2"', '3/8"', "#4", "#8", PAN],
}

# (sieve name, lower, upper): None/None means no constraint at that sieve
_DEFAULT_ENVELOPES = {
    "Keystone #7": (AggregateClass.COARSE, [
        ('3/4"', 90, 100),
        ('1/2"', 20, 55),
        ('3/8"', 0, 15),
        ("#4", 0, 5),
        ("#8", None, None),
        (PAN, None, None),
    ]),
    'Kraemer 9/16"': (AggregateClass.COARSE, [
        ('3/4"', 100, 100),
        ('1/2"', 90, 100),
        ('3/8"', 40, 70),
        ("#4", 0, 15),
        ("#8", 0, 5),
        (PAN, None, None),
    ]),
    "#9 Gravel (St. Croix)": (AggregateClass.COARSE, [
        ('1/2"', 100, 100),
        ('3/8"', 85, 100),
        ("#4", 10, 30),
        ("#8", 0, 10),
        ("#16", 0, 5),
        (PAN, None, None),
    ]),
    "Concrete Sand": (AggregateClass.FINE, [
        ('3/8"', 100, 100),
        ("#4", 95, 100),
        ("#8", 80, 100),
        ("#16", 50, 85),
        ("#30", 25, 60),
        ("#50", 10, 30),
        ("#100", 2, 10),
        (PAN, None, None),
    ]),
}


def get_sieve_list(aggregate_class: AggregateClass) -> List[str]:
    """Default sieve names for a new aggregate of this class, largest first."""
    return list(_DEFAULT_SIEVE_LISTS[AggregateClass(aggregate_class)])


def aperture_for(name: str) -> float:
    """Aperture in mm for a standard sieve name, or raises ValueError."""
    if name not in STANDARD_SIEVES:
        raise ValueError(
            f"Unknown sieve: {name}. Available: {list(STANDARD_SIEVES.keys())}"
        )
    return STANDARD_SIEVES[name]


def build_specification(
    name: str,
    aggregate_class: AggregateClass,
    sieves: List[Tuple[str, Optional[float], Optional[float]]],
    max_decant: float = None,
    max_fineness_modulus: float = None,
) -> AggregateSpecification:
    """
    Build an AggregateSpecification from standard sieve names.

    Each sieve entry is (name, lower, upper); a None side is unconstrained
    and both None means the sieve is not checked. Sieves are sorted by
    aperture so callers may list them in any order; the Pan is appended
    if missing.
    """
    templates = [
        SieveTemplate(
            name=sieve_name,
            aperture_size=aperture_for(sieve_name),
            bounds=ComplianceBounds.from_markers(lower, upper),
        )
        for sieve_name, lower, upper in sieves
    ]
    if not any(t.name == PAN for t in templates):
        templates.append(SieveTemplate(name=PAN, aperture_size=0.0))
    templates.sort(key=lambda t: t.aperture_size, reverse=True)

    return AggregateSpecification(
        name=name,
        aggregate_class=aggregate_class,
        sieves=templates,
        max_decant=max_decant,
        max_fineness_modulus=max_fineness_modulus,
    )


def default_aggregates() -> Dict[str, AggregateSpecification]:
    """Fresh copies of the built-in aggregate specifications, keyed by name."""
    return {
        name: build_specification(name, aggregate_class, sieves)
        for name, (aggregate_class, sieves) in _DEFAULT_ENVELOPES.items()
    }
