from sqlalchemy import Column, Integer, String, Float, DateTime, Date, Boolean, JSON
from datetime import datetime
from .database import Base
import enum


# --- Enums ---

class AggregateClass(str, enum.Enum):
    FINE = "Fine"
    COARSE = "Coarse"


class StrandPosition(str, enum.Enum):
    """Which strand row a comparison is labeled with."""
    BOTTOM = "Bottom"
    TOP = "Top"


class PatternPlacement(str, enum.Enum):
    """Where a stored strand pattern may be used."""
    BOTTOM = "Bottom"
    TOP = "Top"
    BOTH = "Both"


class IssueType(str, enum.Enum):
    MISSING_IN_CAST = "missing_in_cast"
    MISSING_IN_DESIGN = "missing_in_design"
    SIZE_MISMATCH = "size_mismatch"
    LOCATION_MISMATCH = "location_mismatch"


class BoundSide(str, enum.Enum):
    LOWER = "lower"
    UPPER = "upper"


# --- Tables ---
# Full records are stored as JSON payloads so every schema field round-trips.
# Scalar columns duplicate the fields we filter or sort on.

class AggregateSpecificationRow(Base):
    """Aggregate library: one row per named aggregate product."""
    __tablename__ = "aggregate_specifications"

    name = Column(String, primary_key=True)
    aggregate_class = Column(String, nullable=False)  # 'Fine' | 'Coarse'
    is_default = Column(Boolean, default=False)
    spec_json = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class GradationTest(Base):
    """Gradation test history."""
    __tablename__ = "gradation_tests"

    id = Column(String, primary_key=True)  # UUID
    aggregate_name = Column(String, nullable=False, index=True)
    test_date = Column(Date, nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)
    total_weight = Column(Float, default=0.0)
    passes_envelope = Column(Boolean, default=False)
    record_json = Column(JSON, nullable=False)


class StrandPatternRow(Base):
    """Strand pattern library."""
    __tablename__ = "strand_patterns"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    placement = Column(String, default=PatternPlacement.BOTH.value)
    slot_count = Column(Integer, default=0)
    pattern_json = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
