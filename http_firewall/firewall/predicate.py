"""Composable boolean predicates used for host, header and parameter rules."""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Iterable
from typing import Any


class Predicate:
    """Wrap a unary boolean function.

    Combinators return new predicates and never mutate their operands::

        trusted = Predicate.of(lambda h: h == "example.com").or_(lambda h: h == "localhost")
        trusted = Predicate.of(is_internal) & ~Predicate.of(is_blocked)
    """

    __slots__ = ("_condition",)

    def __init__(self, condition: Callable[[Any], bool]) -> None:
        if not callable(condition):
            raise TypeError(f"Predicate condition must be callable, got {type(condition).__name__}")
        self._condition = condition

    @classmethod
    def of(cls, condition: Predicate | Callable[[Any], bool]) -> Predicate:
        """Return ``condition`` as a Predicate, wrapping raw callables."""
        if isinstance(condition, Predicate):
            return condition
        return cls(condition)

    def test(self, value: Any) -> bool:
        return bool(self._condition(value))

    def and_(self, other: Predicate | Callable[[Any], bool]) -> Predicate:
        right = Predicate.of(other)
        return Predicate(lambda value: self.test(value) and right.test(value))

    def or_(self, other: Predicate | Callable[[Any], bool]) -> Predicate:
        right = Predicate.of(other)
        return Predicate(lambda value: self.test(value) or right.test(value))

    def not_(self) -> Predicate:
        return Predicate(lambda value: not self.test(value))

    __call__ = test

    def __and__(self, other: Predicate | Callable[[Any], bool]) -> Predicate:
        return self.and_(other)

    def __or__(self, other: Predicate | Callable[[Any], bool]) -> Predicate:
        return self.or_(other)

    def __invert__(self) -> Predicate:
        return self.not_()

    def __repr__(self) -> str:
        name = getattr(self._condition, "__name__", type(self._condition).__name__)
        return f"Predicate({name})"


def _allow_any(value: Any) -> bool:
    return True


def _assigned_and_not_control(value: str) -> bool:
    # Cn: unassigned code point, Cc: C0/C1 control character
    return all(unicodedata.category(ch) not in ("Cn", "Cc") for ch in value)


ALLOW_ANY = Predicate(_allow_any)
ASSIGNED_AND_NOT_CONTROL = Predicate(_assigned_and_not_control)


def value_in(values: Iterable[str]) -> Predicate:
    """Exact membership in a fixed set of strings."""
    allowed = frozenset(values)
    return Predicate(lambda value: value in allowed)


def hostname_in(hostnames: Iterable[str]) -> Predicate:
    """Case-insensitive membership in a fixed set of host names."""
    allowed = frozenset(h.lower() for h in hostnames)
    return Predicate(lambda hostname: hostname.lower() in allowed)
