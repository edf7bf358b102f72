from __future__ import annotations

from typing import Any, Iterable, Iterator, Optional


class AxisScope:
    """
    One axis of an assignment scope (projects or issue types).

    No values means the wildcard "every value on this axis". The wildcard
    overlaps every other axis scope, including another wildcard.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[str] = ()) -> None:
        # dict.fromkeys de-duplicates while keeping first-seen order
        self._values: tuple[str, ...] = tuple(dict.fromkeys(values))

    @classmethod
    def wildcard(cls) -> "AxisScope":
        return cls()

    @property
    def is_wildcard(self) -> bool:
        return not self._values

    @property
    def values(self) -> list[str]:
        return list(self._values)

    def overlaps(self, other: "AxisScope") -> bool:
        if self.is_wildcard or other.is_wildcard:
            return True
        return not set(self._values).isdisjoint(other._values)

    def covers(self, value: Optional[str]) -> bool:
        """True if a concrete value falls inside this axis.

        A missing value is only covered by the wildcard.
        """
        if self.is_wildcard:
            return True
        return bool(value) and value in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AxisScope):
            return NotImplemented
        return set(self._values) == set(other._values)

    def __hash__(self) -> int:
        return hash(frozenset(self._values))

    def __repr__(self) -> str:
        if self.is_wildcard:
            return "AxisScope(*)"
        return f"AxisScope({list(self._values)!r})"


def parse_axis(value: Any) -> list[str]:
    """Normalise raw axis input into an ordered, de-duplicated list.

    Accepts a list, tuple, set, frozenset or AxisScope of non-blank strings.
    Raises ValueError for anything else; a bare string is not a collection.
    """
    if isinstance(value, AxisScope):
        return value.values
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValueError(f"must be a list of strings, got {type(value).__name__}")
    cleaned: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValueError(f"entries must be non-empty strings, got {item!r}")
        cleaned.append(item.strip())
    return list(dict.fromkeys(cleaned))
