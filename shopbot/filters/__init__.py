"""Filter package exports."""

from .heuristics import enrich_filter
from .merge import merge_filters
from .models import QueryFilter
from .numbers import extract_numbers, parse_locale_number

__all__ = [
    "QueryFilter",
    "enrich_filter",
    "extract_numbers",
    "merge_filters",
    "parse_locale_number",
]
