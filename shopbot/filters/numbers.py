"""Locale-tolerant numeric token parsing."""

from __future__ import annotations

import re

NUMBER_PATTERN = re.compile(r"(\d+(?:[\d,.]*\d)?)")


def parse_locale_number(token: str | None) -> float | None:
    """Parse ``token`` treating ``,``/``.`` as group or decimal separators.

    When both separators occur, whichever appears last is the decimal mark.
    A lone separator followed by exactly three digits is a thousands separator
    (``1,200`` and ``1.200`` are both 1200, ``450,50`` is 450.5).
    Returns ``None`` for anything that is not a number.
    """

    if token is None:
        return None
    normalized = re.sub(r"\s", "", token)
    if not normalized:
        return None

    last_comma = normalized.rfind(",")
    last_dot = normalized.rfind(".")
    if last_comma >= 0 and last_dot >= 0:
        if last_comma > last_dot:
            normalized = normalized.replace(".", "").replace(",", ".")
        else:
            normalized = normalized.replace(",", "")
    elif last_comma >= 0:
        decimals = len(normalized) - last_comma - 1
        if decimals == 3:
            normalized = normalized.replace(",", "")
        else:
            normalized = normalized.replace(",", ".")
    elif last_dot >= 0 and _is_dot_grouped(normalized):
        normalized = normalized.replace(".", "")

    try:
        return float(normalized)
    except ValueError:
        return None


def _is_dot_grouped(token: str) -> bool:
    groups = token.split(".")
    head, tail = groups[0], groups[1:]
    if not head.isdigit() or head == "0":
        return False
    return all(len(group) == 3 and group.isdigit() for group in tail)


def extract_numbers(text: str) -> list[float]:
    """Return every parseable number in ``text``, in order of appearance."""

    values: list[float] = []
    for match in NUMBER_PATTERN.finditer(text):
        parsed = parse_locale_number(match.group(1))
        if parsed is not None:
            values.append(parsed)
    return values
