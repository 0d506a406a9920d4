from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict, Union
from datetime import date as date_type, datetime
from .models import AggregateClass, StrandPosition, PatternPlacement, IssueType, BoundSide

# Legacy envelope marker for "no constraint at this sieve"
NOT_SPECIFIED = "-"


class FrozenModel(BaseModel):
    class Config:
        frozen = True


# --- Gradation ---

class ComplianceBounds(FrozenModel):
    """Allowed percent-passing band at one sieve, inclusive on both ends."""
    lower: float = Field(ge=0, le=100)
    upper: float = Field(ge=0, le=100)

    @model_validator(mode="after")
    def _lower_not_above_upper(self):
        if self.lower > self.upper:
            raise ValueError(f"lower bound {self.lower} exceeds upper bound {self.upper}")
        return self

    def contains(self, percent_passing: float) -> bool:
        return self.lower <= percent_passing <= self.upper

    @classmethod
    def from_markers(cls, lower: Union[float, str, None],
                     upper: Union[float, str, None]) -> Optional["ComplianceBounds"]:
        """
        Build bounds from the legacy per-side representation, where '-' or
        None means no constraint on that side.

        Both sides unconstrained -> None (not specified).
        One side unconstrained -> open to 0 or 100 on that side.
        """
        lower_open = lower is None or lower == NOT_SPECIFIED
        upper_open = upper is None or upper == NOT_SPECIFIED
        if lower_open and upper_open:
            return None
        return cls(
            lower=0.0 if lower_open else float(lower),
            upper=100.0 if upper_open else float(upper),
        )


class SieveMeasurement(FrozenModel):
    name: str
    aperture_size: float = Field(ge=0)  # mm, 0 for Pan
    weight_retained: Optional[float] = Field(default=None, ge=0)  # grams


class DerivedSieveResult(SieveMeasurement):
    """A sieve row with derived percentages. None means unavailable (zero total)."""
    percent_retained: Optional[float] = Field(default=None, ge=0, le=100)
    cumulative_retained: Optional[float] = Field(default=None, ge=0, le=100)
    percent_passing: Optional[float] = Field(default=None, ge=0, le=100)


class SieveTemplate(FrozenModel):
    name: str
    aperture_size: float = Field(ge=0)
    bounds: Optional[ComplianceBounds] = None


class AggregateSpecification(FrozenModel):
    name: str
    aggregate_class: AggregateClass
    sieves: List[SieveTemplate] = Field(min_length=1)
    max_decant: Optional[float] = Field(default=None, ge=0)
    max_fineness_modulus: Optional[float] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("aggregate name must not be blank")
        return value.strip()

    @model_validator(mode="after")
    def _sieves_ordered(self):
        sizes = [s.aperture_size for s in self.sieves]
        for larger, smaller in zip(sizes, sizes[1:]):
            if smaller >= larger:
                raise ValueError(
                    f"sieves must be in strictly decreasing aperture order, got {sizes}"
                )
        if sizes[-1] != 0:
            raise ValueError("sieve stack must end with the zero-aperture Pan")
        return self

    @property
    def envelope(self) -> List[Optional[ComplianceBounds]]:
        return [s.bounds for s in self.sieves]

    @property
    def sieve_names(self) -> List[str]:
        return [s.name for s in self.sieves]


class GradationResult(FrozenModel):
    sieve_results: List[DerivedSieveResult]
    total_weight: float
    washed_weight: Optional[float] = None  # Fine aggregates only
    fineness_modulus: Optional[float] = None  # Fine aggregates only
    decant: Optional[float] = None  # Fine aggregates with a washed weight only

    @property
    def evaluable(self) -> bool:
        return self.total_weight > 0


class FailedSieve(FrozenModel):
    sieve: str
    percent_passing: float
    lower_bound: float
    upper_bound: float
    violated: BoundSide
    deviation: float  # percentage points outside the band


class ComplianceResult(FrozenModel):
    passes_envelope: bool
    evaluable: bool = True
    failed_sieves: List[FailedSieve] = []


class LimitCheck(FrozenModel):
    """Decant / fineness modulus limit flags. Diagnostic only."""
    flagged: bool = False
    flag_reasons: List[str] = []


class TestRecord(FrozenModel):
    __test__ = False  # keep pytest from collecting this model

    id: str
    timestamp: datetime
    aggregate_name: str
    date: date_type
    sieve_results: List[DerivedSieveResult]
    total_weight: float = Field(ge=0)
    washed_weight: Optional[float] = Field(default=None, ge=0)
    fineness_modulus: Optional[float] = None
    decant: Optional[float] = None
    passes_envelope: bool = False
    evaluable: bool = True
    failed_sieves: List[FailedSieve] = []
    flag_reasons: List[str] = []


class ChartPoint(FrozenModel):
    size: float
    sieve: str
    percent_passing: float
    lower: Optional[float] = None
    upper: Optional[float] = None


# --- Strand patterns ---

class StrandCoordinate(FrozenModel):
    x: float  # inches from left edge
    y: float  # inches from bottom


class StrandSlot(FrozenModel):
    index: int = Field(ge=1)
    size: str  # label, e.g. '1/2"'
    coordinate: Optional[StrandCoordinate] = None


class StrandPattern(FrozenModel):
    id: str
    name: str
    slots: List[StrandSlot] = []
    counts_by_size: Dict[str, int] = {}
    placement: PatternPlacement = PatternPlacement.BOTH
    e_value: Optional[float] = None  # inches, bottom to strand centroid
    pulling_force: Optional[float] = Field(default=None, gt=0, lt=100)  # % of break strength


class StrandDifference(FrozenModel):
    slot_index: int
    position: StrandPosition
    issue_type: IssueType
    design_size: Optional[str] = None
    cast_size: Optional[str] = None
    design_location: Optional[StrandCoordinate] = None
    cast_location: Optional[StrandCoordinate] = None
    description: str


class ComparisonResult(FrozenModel):
    position: StrandPosition
    has_design_pattern: bool
    has_cast_pattern: bool
    design_pattern_id: Optional[str] = None
    design_pattern_name: Optional[str] = None
    cast_pattern_id: Optional[str] = None
    cast_pattern_name: Optional[str] = None
    differences: List[StrandDifference] = []
    has_differences: bool = False
    summary: str = ""
