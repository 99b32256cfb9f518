import pytest

from core.units import coerce_amount, coerce_price, is_discrete_unit, minor_to_price, parse_number, price_to_minor


@pytest.mark.parametrize("unit", ["pieces", "boxes", "cans", "bottles"])
def test_discrete_units_floor_to_whole_numbers(unit):
    assert is_discrete_unit(unit)
    assert coerce_amount(12.7, unit) == 12
    assert isinstance(coerce_amount(12.7, unit), int)


@pytest.mark.parametrize("unit", ["kg", "g", "liters", "ml"])
def test_continuous_units_keep_fractions(unit):
    assert not is_discrete_unit(unit)
    assert coerce_amount(12.7, unit) == pytest.approx(12.7)


def test_amounts_and_prices_never_go_negative():
    assert coerce_amount(-3, "kg") == 0
    assert coerce_amount(-3.5, "pieces") == 0
    assert coerce_price(-1.25) == 0


@pytest.mark.parametrize("raw,expected", [
    ("4.5", 4.5),
    (" 7 ", 7.0),
    ("", 0.0),
    ("abc", 0.0),
    (None, 0.0),
    ("nan", 0.0),
    ("inf", 0.0),
    (3, 3.0),
])
def test_parse_number_is_lenient(raw, expected):
    assert parse_number(raw) == expected


def test_price_minor_units():
    assert price_to_minor(2.4) == 240
    assert price_to_minor(0.1 + 0.2) == 30
    assert price_to_minor(None) is None
    assert minor_to_price(1999) == pytest.approx(19.99)
    assert minor_to_price(None) == 0.0
