"""
Storage for the aggregate library, gradation test history and strand patterns.

Every record is written as its full JSON form and read back through the
pydantic schema, so nothing is lost on a round trip. Callers own the
Session (see database.get_db).
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from . import models
from .config import settings
from .errors import MissingAggregateSpecification, TestRecordNotFound
from .gradation.records import update_test_record
from .models import PatternPlacement, StrandPosition
from .schemas import AggregateSpecification, StrandPattern, TestRecord

logger = logging.getLogger(__name__)


# --- Aggregate library ---

def save_aggregate(db: Session, spec: AggregateSpecification, is_default: bool = None) -> AggregateSpecification:
    """Insert or replace an aggregate specification by name."""
    row = db.query(models.AggregateSpecificationRow).filter(
        models.AggregateSpecificationRow.name == spec.name
    ).first()
    if row is None:
        row = models.AggregateSpecificationRow(name=spec.name)
        db.add(row)
        logger.info("Adding aggregate %s", spec.name)
    else:
        logger.info("Updating aggregate %s", spec.name)
    row.aggregate_class = spec.aggregate_class.value
    row.spec_json = spec.model_dump(mode="json")
    if is_default is not None:
        row.is_default = is_default
    db.commit()
    return spec


def get_aggregate(db: Session, name: str) -> AggregateSpecification:
    """Look up an aggregate by name, or raise MissingAggregateSpecification."""
    row = db.query(models.AggregateSpecificationRow).filter(
        models.AggregateSpecificationRow.name == name
    ).first()
    if row is None:
        raise MissingAggregateSpecification(name, list_aggregate_names(db))
    return AggregateSpecification.model_validate(row.spec_json)


def list_aggregate_names(db: Session, defaults_only: bool = False) -> List[str]:
    query = db.query(models.AggregateSpecificationRow.name)
    if defaults_only:
        query = query.filter(models.AggregateSpecificationRow.is_default.is_(True))
    return [name for (name,) in query.order_by(models.AggregateSpecificationRow.name).all()]


def delete_aggregate(db: Session, name: str) -> None:
    row = db.query(models.AggregateSpecificationRow).filter(
        models.AggregateSpecificationRow.name == name
    ).first()
    if row is None:
        raise MissingAggregateSpecification(name, list_aggregate_names(db))
    db.delete(row)
    db.commit()
    logger.info("Deleted aggregate %s", name)


# --- Gradation test history ---

def _record_row(row: models.GradationTest, record: TestRecord) -> models.GradationTest:
    row.aggregate_name = record.aggregate_name
    row.test_date = record.date
    row.timestamp = record.timestamp
    row.total_weight = record.total_weight
    row.passes_envelope = record.passes_envelope
    row.record_json = record.model_dump(mode="json")
    return row


def add_test(db: Session, record: TestRecord) -> TestRecord:
    """Store a new test. Only the newest MAX_TEST_HISTORY tests are kept."""
    db.add(_record_row(models.GradationTest(id=record.id), record))
    db.flush()

    stale = db.query(models.GradationTest).order_by(
        models.GradationTest.timestamp.desc()
    ).offset(settings.MAX_TEST_HISTORY).all()
    for row in stale:
        db.delete(row)
    if stale:
        logger.info("Dropped %d test(s) past the history limit", len(stale))

    db.commit()
    logger.info("Stored test %s for %s (pass=%s)", record.id, record.aggregate_name, record.passes_envelope)
    return record


def get_test(db: Session, test_id: str) -> Optional[TestRecord]:
    row = db.query(models.GradationTest).filter(models.GradationTest.id == test_id).first()
    if row is None:
        return None
    return TestRecord.model_validate(row.record_json)


def list_tests(db: Session, aggregate_name: str = None) -> List[TestRecord]:
    """Test history, newest first, optionally for one aggregate."""
    query = db.query(models.GradationTest)
    if aggregate_name:
        query = query.filter(models.GradationTest.aggregate_name == aggregate_name)
    rows = query.order_by(models.GradationTest.timestamp.desc()).all()
    return [TestRecord.model_validate(row.record_json) for row in rows]


def update_test(db: Session, test_id: str, raw_weights, washed_weight=None, test_date=None) -> TestRecord:
    """
    Edit a stored test with new raw input. All derived fields are recomputed
    against the aggregate's current specification.
    Raises TestRecordNotFound for an unknown id.
    """
    row = db.query(models.GradationTest).filter(models.GradationTest.id == test_id).first()
    if row is None:
        raise TestRecordNotFound(test_id)
    existing = TestRecord.model_validate(row.record_json)
    spec = get_aggregate(db, existing.aggregate_name)

    updated = update_test_record(existing, spec, raw_weights, washed_weight, test_date)
    _record_row(row, updated)
    db.commit()
    logger.info("Updated test %s (pass=%s)", test_id, updated.passes_envelope)
    return updated


def delete_test(db: Session, test_id: str) -> bool:
    deleted = db.query(models.GradationTest).filter(models.GradationTest.id == test_id).delete()
    db.commit()
    return bool(deleted)


def clear_tests(db: Session) -> int:
    count = db.query(models.GradationTest).delete()
    db.commit()
    logger.info("Cleared %d test(s)", count)
    return count


# --- Strand patterns ---

def save_pattern(db: Session, pattern: StrandPattern) -> StrandPattern:
    row = db.query(models.StrandPatternRow).filter(models.StrandPatternRow.id == pattern.id).first()
    if row is None:
        row = models.StrandPatternRow(id=pattern.id)
        db.add(row)
    row.name = pattern.name
    row.placement = pattern.placement.value
    row.slot_count = len(pattern.slots)
    row.pattern_json = pattern.model_dump(mode="json")
    db.commit()
    logger.info("Saved strand pattern %s (%s)", pattern.id, pattern.name)
    return pattern


def get_pattern(db: Session, pattern_id: Optional[str]) -> Optional[StrandPattern]:
    """Pattern by id. A missing id or unknown pattern gives None: the comparator handles absence."""
    if not pattern_id:
        return None
    row = db.query(models.StrandPatternRow).filter(models.StrandPatternRow.id == pattern_id).first()
    if row is None:
        return None
    return StrandPattern.model_validate(row.pattern_json)


def list_patterns(db: Session, position: StrandPosition = None) -> List[StrandPattern]:
    """All patterns, or those usable for one strand row ('Both' matches either)."""
    query = db.query(models.StrandPatternRow)
    if position is not None:
        query = query.filter(models.StrandPatternRow.placement.in_(
            [StrandPosition(position).value, PatternPlacement.BOTH.value]
        ))
    rows = query.order_by(models.StrandPatternRow.name).all()
    return [StrandPattern.model_validate(row.pattern_json) for row in rows]


def delete_pattern(db: Session, pattern_id: str) -> bool:
    deleted = db.query(models.StrandPatternRow).filter(models.StrandPatternRow.id == pattern_id).delete()
    db.commit()
    return bool(deleted)
