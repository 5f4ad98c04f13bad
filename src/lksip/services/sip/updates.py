"""
Per-field update states for partial (patch) mutations.

A patch field is ``ABSENT`` (left untouched), ``Set(value)`` or, for list
fields only, ``SetList(items)``. ``SetList(())`` clears the list, which is not
the same thing as leaving it ``ABSENT``.
"""

from dataclasses import dataclass
from typing import Any, Tuple, Union


class Absent:
    """Field not provided on this invocation."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = Absent()


@dataclass(frozen=True)
class Set:
    value: Any


@dataclass(frozen=True)
class SetList:
    items: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))


FieldUpdate = Union[Absent, Set, SetList]
