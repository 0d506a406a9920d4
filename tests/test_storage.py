"""
Storage tests: aggregate library, test history, strand patterns in SQLite.
"""

from datetime import date, datetime, timedelta

import pytest

from precast_qa import models, storage
from precast_qa.config import settings
from precast_qa.errors import MissingAggregateSpecification, QAError, TestRecordNotFound
from precast_qa.gradation.records import create_test_record
from precast_qa.gradation.sieves import build_specification
from precast_qa.models import AggregateClass, PatternPlacement, StrandPosition
from precast_qa.schemas import StrandCoordinate, StrandPattern, StrandSlot
from precast_qa.strands.comparator import compare_strand_patterns

FAILING_COARSE = {'3/4"': 0, '1/2"': 200, '3/8"': 300, "#4": 400, "#8": 100, "Pan": 0}
PASSING_COARSE = {'3/4"': 50, '1/2"': 500, '3/8"': 350, "#4": 80, "#8": 20, "Pan": 0}


# ============================================================
# Aggregate library
# ============================================================

def test_tables_exist(db):
    assert db.query(models.AggregateSpecificationRow).count() == 0
    assert db.query(models.GradationTest).count() == 0
    assert db.query(models.StrandPatternRow).count() == 0


def test_aggregate_round_trip(db, concrete_sand):
    storage.save_aggregate(db, concrete_sand, is_default=True)
    assert storage.get_aggregate(db, "Concrete Sand") == concrete_sand
    assert storage.list_aggregate_names(db, defaults_only=True) == ["Concrete Sand"]


def test_aggregate_update_replaces(db, keystone):
    storage.save_aggregate(db, keystone)
    relaxed = build_specification("Keystone #7", AggregateClass.COARSE, [('1/2"', 20, 85)], max_decant=1.5)
    storage.save_aggregate(db, relaxed)

    assert db.query(models.AggregateSpecificationRow).count() == 1
    assert storage.get_aggregate(db, "Keystone #7").max_decant == 1.5


def test_missing_aggregate(db, keystone):
    storage.save_aggregate(db, keystone)
    with pytest.raises(MissingAggregateSpecification) as exc:
        storage.get_aggregate(db, "Nope")
    assert exc.value.available == ["Keystone #7"]

    storage.delete_aggregate(db, "Keystone #7")
    with pytest.raises(MissingAggregateSpecification):
        storage.delete_aggregate(db, "Keystone #7")


# ============================================================
# Test history
# ============================================================

def test_test_record_round_trip(db, keystone):
    record = create_test_record(keystone, FAILING_COARSE, test_date=date(2026, 3, 2))
    storage.add_test(db, record)

    restored = storage.get_test(db, record.id)
    assert restored == record
    assert storage.get_test(db, "missing") is None


def test_history_newest_first_and_filtered(db, keystone, concrete_sand):
    start = datetime(2026, 3, 1, 8, 0)
    for i in range(3):
        record = create_test_record(keystone, FAILING_COARSE)
        storage.add_test(db, record.model_copy(update={"timestamp": start + timedelta(hours=i)}))
    sand = create_test_record(concrete_sand, [0, 20, 80, 200, 250, 250, 150, 50])
    storage.add_test(db, sand.model_copy(update={"timestamp": start + timedelta(hours=5)}))

    history = storage.list_tests(db)
    assert history[0].id == sand.id
    assert [r.timestamp for r in history] == sorted((r.timestamp for r in history), reverse=True)
    assert len(storage.list_tests(db, aggregate_name="Keystone #7")) == 3


def test_history_limit_drops_oldest(db, keystone, monkeypatch):
    monkeypatch.setattr(settings, "MAX_TEST_HISTORY", 3)
    start = datetime(2026, 3, 1, 8, 0)
    ids = []
    for i in range(5):
        record = create_test_record(keystone, FAILING_COARSE)
        storage.add_test(db, record.model_copy(update={"timestamp": start + timedelta(hours=i)}))
        ids.append(record.id)

    kept = [r.id for r in storage.list_tests(db)]
    assert kept == list(reversed(ids[2:]))


def test_update_test_recomputes(db, keystone):
    storage.save_aggregate(db, keystone)
    record = create_test_record(keystone, FAILING_COARSE)
    storage.add_test(db, record)

    updated = storage.update_test(db, record.id, PASSING_COARSE)
    assert updated.id == record.id
    assert updated.passes_envelope is True
    assert storage.get_test(db, record.id) == updated
    assert db.query(models.GradationTest).filter_by(id=record.id).one().passes_envelope is True


def test_update_missing_test(db):
    with pytest.raises(TestRecordNotFound) as exc:
        storage.update_test(db, "missing", PASSING_COARSE)
    assert exc.value.test_id == "missing"
    assert isinstance(exc.value, QAError)


def test_delete_and_clear(db, keystone):
    first = create_test_record(keystone, FAILING_COARSE)
    second = create_test_record(keystone, PASSING_COARSE)
    storage.add_test(db, first)
    storage.add_test(db, second)

    assert storage.delete_test(db, first.id) is True
    assert storage.delete_test(db, first.id) is False
    assert storage.clear_tests(db) == 1
    assert storage.list_tests(db) == []


# ============================================================
# Strand patterns
# ============================================================

def _stored_pattern(pattern_id, placement, sizes):
    return StrandPattern(
        id=pattern_id,
        name=f"{pattern_id} pattern",
        placement=placement,
        slots=[
            StrandSlot(index=i, size=size, coordinate=StrandCoordinate(x=2.0 * i, y=1.75))
            for i, size in enumerate(sizes, start=1)
        ],
        counts_by_size={'1/2"': len(sizes)},
        e_value=1.75,
        pulling_force=75,
    )


def test_pattern_round_trip(db):
    pattern = _stored_pattern("101-75", PatternPlacement.BOTTOM, ['1/2"', '1/2"'])
    storage.save_pattern(db, pattern)
    assert storage.get_pattern(db, "101-75") == pattern
    assert storage.get_pattern(db, None) is None
    assert storage.get_pattern(db, "nope") is None


def test_patterns_by_position(db):
    storage.save_pattern(db, _stored_pattern("a-top", PatternPlacement.TOP, ['3/8"']))
    storage.save_pattern(db, _stored_pattern("b-bottom", PatternPlacement.BOTTOM, ['1/2"']))
    storage.save_pattern(db, _stored_pattern("c-both", PatternPlacement.BOTH, ['1/2"']))

    assert [p.id for p in storage.list_patterns(db, StrandPosition.TOP)] == ["a-top", "c-both"]
    assert [p.id for p in storage.list_patterns(db, StrandPosition.BOTTOM)] == ["b-bottom", "c-both"]
    assert len(storage.list_patterns(db)) == 3

    assert storage.delete_pattern(db, "a-top") is True
    assert len(storage.list_patterns(db)) == 2


def test_compare_stored_patterns(db):
    """Lookup by id feeds straight into the comparator; unknown ids compare as absent."""
    storage.save_pattern(db, _stored_pattern("design", PatternPlacement.BOTTOM, ['1/2"', '1/2"', '1/2"']))
    storage.save_pattern(db, _stored_pattern("cast", PatternPlacement.BOTTOM, ['1/2"', '1/2"']))

    result = compare_strand_patterns(
        storage.get_pattern(db, "design"), storage.get_pattern(db, "cast"), StrandPosition.BOTTOM
    )
    assert result.summary == "1 difference(s) found: 1 strand(s) missing in cast"

    missing = compare_strand_patterns(storage.get_pattern(db, "design"), storage.get_pattern(db, "gone"), "Bottom")
    assert missing.summary == "No cast pattern specified for bottom strands"
