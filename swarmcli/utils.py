"""Small text helpers used when reading docker command output."""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Iterable
from typing import Any


def _parse_float(text: str) -> float | None:
    """Parse a plain decimal float, rejecting Python-only spellings such as '1_0'."""
    if "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def parse_and_sum_percent_lines(lines: Iterable[str]) -> float:
    """Sum lines like ``'12.5%'``, skipping any that are not numbers."""
    total = 0.0
    for line in lines:
        value = line.strip()
        if value.endswith("%"):
            value = value[:-1]
        number = _parse_float(value)
        if number is not None and not math.isnan(number):
            total += number
    return total


def count_non_empty_lines(lines: Iterable[str]) -> int:
    """Count the lines that hold anything besides whitespace."""
    return sum(1 for line in lines if line.strip())


def fields_as_strings(record: Any) -> list[str]:
    """Return each field of a dataclass instance as a string, in declaration order.

    Anything that is not a dataclass instance yields an empty list.
    """
    if not dataclasses.is_dataclass(record) or isinstance(record, type):
        return []
    return [str(getattr(record, field.name)) for field in dataclasses.fields(record)]