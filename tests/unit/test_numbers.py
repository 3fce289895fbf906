import pytest

from shopbot.filters.numbers import extract_numbers, parse_locale_number


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("1.200", 1200),
        ("1,200", 1200),
        ("450,50", 450.5),
        ("12,5", 12.5),
        ("1.234,56", 1234.56),
        ("1,234.56", 1234.56),
        ("600", 600),
        ("0.500", 0.5),
        ("7.5", 7.5),
    ],
)
def test_parse_locale_number(token, expected):
    assert parse_locale_number(token) == pytest.approx(expected)


@pytest.mark.parametrize("token", ["abc", "", None, "1.2.3,4,5"])
def test_parse_locale_number_rejects_garbage(token):
    assert parse_locale_number(token) is None


def test_extract_numbers_keeps_order():
    assert extract_numbers("between 1.200 and 450,50 euros, 8kg") == [1200, 450.5, 8]


def test_extract_numbers_without_digits():
    assert extract_numbers("no numbers here") == []


def test_trailing_punctuation_is_not_part_of_a_number():
    assert extract_numbers("my budget is 1,200, front load") == [1200]
    assert extract_numbers("around 450,50. Thanks") == [450.5]
    assert extract_numbers("8kg.") == [8]
