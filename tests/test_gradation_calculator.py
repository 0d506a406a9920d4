"""
Gradation calculator tests.

Tests:
1-5.   Weight parsing (blank, numeric strings, invalid input)
6-9.   Percent retained / cumulative / passing
10-11. Zero total weight
12-14. Fineness modulus
15-18. Decant
19-20. Input alignment + no aliasing
"""

import math

import pytest

from precast_qa.errors import InvalidWeight
from precast_qa.gradation.calculator import GradationCalculator, compute_gradation, parse_weight


def _coarse_weights():
    """Keystone #7 sample: 1000g total."""
    return {'3/4"': 0, '1/2"': 200, '3/8"': 300, "#4": 400, "#8": 100, "Pan": 0}


def _sand_weights():
    """Concrete Sand sample: 1000g total, inside every C33 band."""
    return ["0", "20", "80", "200", "250", "250", "150", "50"]


# ============================================================
# Weight parsing
# ============================================================

def test_parse_weight_blank_is_zero():
    """Blank form fields are empty sieves, not errors."""
    assert parse_weight(None) == 0.0
    assert parse_weight("") == 0.0
    assert parse_weight("   ") == 0.0


def test_parse_weight_numbers_and_strings():
    assert parse_weight(12) == 12.0
    assert parse_weight(12.5) == 12.5
    assert parse_weight(" 250.4 ") == 250.4
    assert parse_weight("300g") == 300.0


def test_parse_weight_rejects_non_numeric():
    with pytest.raises(InvalidWeight) as exc:
        parse_weight("abc", sieve="#4")
    assert exc.value.sieve == "#4"
    assert exc.value.value == "abc"


def test_parse_weight_single_gram_suffix():
    assert parse_weight("5 g") == 5.0
    for bad in ("g", " g ", "5gg"):
        with pytest.raises(InvalidWeight):
            parse_weight(bad)


def test_parse_weight_rejects_negative_and_non_finite():
    for bad in (-1, "-0.5", float("nan"), float("inf"), "inf", True):
        with pytest.raises(InvalidWeight):
            parse_weight(bad)


# ============================================================
# Percentages
# ============================================================

def test_coarse_percent_passing_example(keystone):
    """0/200/300/400/100/0 on Keystone #7 -> 100/80/50/10/0 passing."""
    result = compute_gradation(keystone, _coarse_weights())
    passing = {r.name: r.percent_passing for r in result.sieve_results}

    assert result.total_weight == 1000.0
    assert passing['3/4"'] == pytest.approx(100)
    assert passing['1/2"'] == pytest.approx(80)
    assert passing['3/8"'] == pytest.approx(50)
    assert passing["#4"] == pytest.approx(10)
    assert passing["#8"] == pytest.approx(0)
    assert passing["Pan"] == pytest.approx(0)


def test_percent_retained_sums_to_100(concrete_sand):
    weights = ["12.3", "45.6", "78.9", "0", "33.3", "1.1", "7.77", "0.4"]
    result = compute_gradation(concrete_sand, weights)
    total = math.fsum(r.percent_retained for r in result.sieve_results)
    assert abs(total - 100) < 1e-6


def test_cumulative_non_decreasing_and_passing_non_increasing(concrete_sand):
    """Moving toward the Pan, cumulative retained only grows and passing only drops."""
    weights = ["3.3", "17", "0", "91.2", "44", "12.9", "66.6", "5"]
    rows = compute_gradation(concrete_sand, weights).sieve_results

    for larger, smaller in zip(rows, rows[1:]):
        assert smaller.cumulative_retained >= larger.cumulative_retained
        assert larger.percent_passing >= smaller.percent_passing
    for row in rows:
        assert row.percent_passing == 100 - row.cumulative_retained
        assert 0 <= row.percent_passing <= 100


def test_last_sieve_passes_nothing(keystone):
    """Everything is retained somewhere, so the Pan row passes 0%."""
    result = compute_gradation(keystone, [1, 2, 3, 4, 5, 6])
    assert result.sieve_results[-1].cumulative_retained == pytest.approx(100)
    assert result.sieve_results[-1].percent_passing == pytest.approx(0)


# ============================================================
# Zero total weight
# ============================================================

def test_zero_total_weight_percentages_unavailable(keystone):
    result = compute_gradation(keystone, ["", "", "0", None, "", ""])
    assert result.total_weight == 0.0
    assert not result.evaluable
    for row in result.sieve_results:
        assert row.percent_retained is None
        assert row.cumulative_retained is None
        assert row.percent_passing is None


def test_zero_total_weight_fine_has_no_fm_or_decant(concrete_sand):
    result = compute_gradation(concrete_sand, [0] * 8, washed_weight="500")
    assert result.fineness_modulus is None
    assert result.decant is None


# ============================================================
# Fineness modulus
# ============================================================

def test_fineness_modulus_fine_aggregate(concrete_sand):
    """Cumulative retained 2+10+30+55+80+95 on #4..#100 -> FM 2.72."""
    result = compute_gradation(concrete_sand, _sand_weights())
    assert result.fineness_modulus == 2.72


def test_fineness_modulus_not_applicable_for_coarse(keystone):
    for weights in (_coarse_weights(), [5, 5, 5, 5, 5, 5], [0, 0, 0, 0, 0, 1]):
        assert compute_gradation(keystone, weights).fineness_modulus is None


def test_fineness_modulus_rounds_to_two_decimals(concrete_sand):
    result = compute_gradation(concrete_sand, ["0", "7", "31", "101", "233", "301", "213", "114"])
    assert result.fineness_modulus == round(result.fineness_modulus, 2)


# ============================================================
# Decant
# ============================================================

def test_decant_fine_aggregate(concrete_sand):
    result = compute_gradation(concrete_sand, _sand_weights(), washed_weight="985")
    assert result.washed_weight == 985.0
    assert result.decant == 1.5


def test_decant_without_washed_weight_is_none(concrete_sand):
    assert compute_gradation(concrete_sand, _sand_weights()).decant is None
    assert compute_gradation(concrete_sand, _sand_weights(), washed_weight="  ").decant is None


def test_decant_washed_exceeds_total_rejected(concrete_sand):
    """Washed weight above total is an error, never clamped."""
    with pytest.raises(InvalidWeight):
        compute_gradation(concrete_sand, _sand_weights(), washed_weight=1000.01)


def test_decant_ignored_for_coarse(keystone):
    result = compute_gradation(keystone, _coarse_weights(), washed_weight=950)
    assert result.decant is None
    assert result.washed_weight is None


# ============================================================
# Input alignment
# ============================================================

def test_weights_must_align_with_sieves(keystone):
    with pytest.raises(InvalidWeight):
        compute_gradation(keystone, [1, 2, 3])
    with pytest.raises(InvalidWeight):
        compute_gradation(keystone, {"#200": 5})
    with pytest.raises(InvalidWeight):
        compute_gradation(keystone, "100")


def test_results_are_fresh_values(keystone):
    """Two runs never share row objects and the spec is untouched."""
    before = keystone.model_dump()
    first = compute_gradation(keystone, _coarse_weights())
    second = compute_gradation(keystone, _coarse_weights())

    assert first == second
    assert first.sieve_results[0] is not second.sieve_results[0]
    assert keystone.model_dump() == before


def test_calculator_instance_is_reusable(keystone, concrete_sand):
    calc = GradationCalculator()
    coarse = calc.calculate(keystone, _coarse_weights())
    fine = calc.calculate(concrete_sand, _sand_weights())
    assert coarse.fineness_modulus is None
    assert fine.fineness_modulus == 2.72
