"""Date helpers shared by schemas and evaluators."""

from __future__ import annotations

from datetime import date

import pendulum
from pendulum.parsing.exceptions import ParserError


def parse_date(value: str | date | None, *, default: date | None = None) -> date | None:
    """Parse ``YYYY-MM`` or ISO-8601 strings; unparseable values yield ``default``."""
    if value is None or value == "":
        return default
    if isinstance(value, date):
        return value
    try:
        if len(value) == 7 and value[4] == "-":
            return pendulum.date(int(value[:4]), int(value[5:7]), 1)
        parsed = pendulum.parse(value)
    except (ValueError, ParserError):
        return default
    if isinstance(parsed, pendulum.DateTime):
        return parsed.date()
    if isinstance(parsed, pendulum.Date):
        return parsed
    return default


def months_between(start: date, end: date) -> int:
    """Whole months from ``start`` to ``end``; negative when ``end`` is earlier."""
    return _as_datetime(start).diff(_as_datetime(end), abs=False).in_months()


def resolve_as_of(as_of: date | None, fallback: date | None = None) -> date:
    if as_of is not None:
        return as_of
    if fallback is not None:
        return fallback
    return pendulum.today().date()


def _as_datetime(value: date) -> pendulum.DateTime:
    return pendulum.datetime(value.year, value.month, value.day)
