"""Tests for day count inference."""

import math

import pytest

from medication_tracker.domain.extraction import DosageExtraction
from medication_tracker.services.inference import (
    coerce_number,
    fill_missing_days,
    infer_days,
    units_per_dose,
)


def test_infers_days_from_quantity_and_frequency() -> None:
    assert infer_days(30, 3, "500mg tablet") == 10


def test_two_tablets_per_dose_halves_the_days() -> None:
    assert infer_days(30, 2, "2 tablet") == 8


def test_rounds_up_partial_days() -> None:
    assert infer_days("10 tablets", "3", None) == 4


def test_result_is_at_least_one_day() -> None:
    assert infer_days(0, 2) == 1


@pytest.mark.parametrize(
    ("quantity", "frequency"),
    [(None, 2), (30, None), ("many", 2), (30, "twice"), (30, 0)],
)
def test_returns_none_when_inference_is_impossible(
    quantity: object, frequency: object
) -> None:
    assert infer_days(quantity, frequency) is None


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Take 2 Tablets daily", 2),
        ("3 capsules", 3),
        ("2 pills", 2),
        ("3 PILL", 3),
        ("500mg tablet", 1),
        ("12 tablets", 1),
        ("Take 12 tablets", 1),
        ("0.2 tablet", 1),
        ("1/2 tablet", 1),
        ("4 tablets", 1),
        (None, 1),
    ],
)
def test_units_per_dose(text: str | None, expected: int) -> None:
    assert units_per_dose(text) == expected


def test_inferred_days_cover_the_quantity() -> None:
    for quantity in (1, 7, 28, 30, 45, 90):
        for frequency in range(1, 5):
            for text, units in (("1 tablet", 1), ("2 tablet", 2), ("3 pill", 3)):
                days = infer_days(quantity, frequency, text)
                assert days is not None
                assert days >= 1
                assert days * frequency * units >= quantity
                assert days == max(math.ceil(quantity / (frequency * units)), 1)


def test_coerce_number_strips_text() -> None:
    assert coerce_number("30 tablets") == 30
    assert coerce_number("2.5ml") == 2.5
    assert coerce_number("") is None
    assert coerce_number(True) is None


def test_fill_missing_days_infers_when_absent() -> None:
    extraction = DosageExtraction(
        name="Amoxicillin", dosage="500mg capsule", frequency=3, quantity=21
    )

    assert fill_missing_days(extraction).days == 7


def test_fill_missing_days_keeps_explicit_days() -> None:
    extraction = DosageExtraction(frequency=3, quantity=21, days=5)

    assert fill_missing_days(extraction).days == 5


def test_fill_missing_days_leaves_unknown_as_none() -> None:
    extraction = DosageExtraction(dosage="500mg", quantity=21)

    assert fill_missing_days(extraction).days is None
