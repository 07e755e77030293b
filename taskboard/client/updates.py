"""Tagged per-field update values for partial task edits.

A partial update has to tell apart "the user did not touch this field" from
"the user cleared this field". Each field of a :class:`TaskPatch` is one of
``UNCHANGED``, ``CLEAR`` or ``SetTo(value)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


class _Marker:
    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __copy__(self) -> "_Marker":
        return self

    def __deepcopy__(self, _memo: dict) -> "_Marker":
        return self


UNCHANGED = _Marker("UNCHANGED")
CLEAR = _Marker("CLEAR")


@dataclass(frozen=True)
class SetTo:
    value: Any


# wire key -> may be cleared to absent
FIELDS: dict[str, bool] = {
    "title": False,
    "description": False,
    "status": False,
    "priority": True,
    "dueDate": True,
}


def tag(fields: Mapping[str, Any], name: str) -> Any:
    if name not in fields:
        return UNCHANGED
    value = fields[name]
    if value is None:
        if not FIELDS[name]:
            raise ValueError(f"{name} cannot be cleared")
        return CLEAR
    return SetTo(value)


@dataclass(frozen=True)
class TaskPatch:
    title: Any = field(default=UNCHANGED)
    description: Any = field(default=UNCHANGED)
    status: Any = field(default=UNCHANGED)
    priority: Any = field(default=UNCHANGED)
    dueDate: Any = field(default=UNCHANGED)

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "TaskPatch":
        """Build a patch from wire-shaped fields; unknown keys are ignored."""

        return cls(**{name: tag(fields, name) for name in FIELDS})

    def items(self):
        for name in FIELDS:
            yield name, getattr(self, name)

    def is_empty(self) -> bool:
        return all(value is UNCHANGED for _, value in self.items())

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for name, value in self.items():
            if value is CLEAR:
                payload[name] = None
            elif isinstance(value, SetTo):
                payload[name] = value.value
        return payload

    def apply(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Return a copy of ``record`` with this patch merged in.

        Cleared fields are removed from the result, never set to None.
        """

        updated = dict(record)
        for name, value in self.items():
            if value is CLEAR:
                updated.pop(name, None)
            elif isinstance(value, SetTo):
                updated[name] = value.value
        return updated
