"""Ordered fallback resolution with tagged results.

Display names and lot numbers can come from several places (the attempt row,
the registration, the competitor). resolve_first() walks the sources in the
given order and reports which one answered, so callers and tests can see the
precedence instead of reading it out of chained ``or`` expressions.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    value: T
    source: str


@dataclass(frozen=True)
class Default(Generic[T]):
    value: T


Resolved = Union[Found[T], Default[T]]


def is_present(value: Any) -> bool:
    return value is not None


def is_finite_number(value: Any) -> bool:
    # bool is an int subclass; a stray True must not read as lot number 1.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_non_empty_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def resolve_first(
    candidates: Iterable[tuple[str, Any]],
    default: T,
    accept: Callable[[Any], bool] = is_present,
) -> Resolved[T]:
    """
    Return the first candidate value accepted by ``accept``.

    Args:
      candidates: ordered (source, value) pairs.
      default: value used when no candidate is accepted.
      accept: predicate deciding whether a candidate value is usable.
    """
    for source, value in candidates:
        if accept(value):
            return Found(value=value, source=source)
    return Default(value=default)
