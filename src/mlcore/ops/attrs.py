#
# SPDX-License-Identifier: BSD-3-Clause
# Copyright (c) 2024-2026 The MLCore Project Authors
#
"""Typed operation attributes.

An attribute value is one of: int, float, bool, str or a tuple of ints.
Lookups take a typed default, the default is returned when the key is
missing or when the stored value is of another variant.
"""

from collections.abc import Iterator, Mapping, Sequence
from typing import TypeAlias, TypeVar
from typing_extensions import override

__all__ = [
    "AttrValue",
    "OpAttrs",
    "to_attr_value",
]

AttrValue: TypeAlias = int | float | bool | str | tuple[int, ...]

T = TypeVar("T", int, float, bool, str, tuple[int, ...])


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def to_attr_value(value: object) -> AttrValue:
    """Normalize value to an attribute variant, raise TypeError if none fits."""
    match value:
        case bool() | str() | float():
            return value
        case int():
            return int(value)
        case list() | tuple() if all(_is_int(v) for v in value):
            return tuple(int(v) for v in value)
        case _:
            raise TypeError(
                f"unsupported attribute value, expected int, float, bool, str "
                f"or int sequence: {value!r}"
            )


class OpAttrs(Mapping[str, AttrValue]):
    def __init__(self, attrs: Mapping[str, object] | None = None) -> None:
        self._attrs: dict[str, AttrValue] = {}
        for key, value in (attrs or {}).items():
            self.set(key, value)

    def set(self, key: str, value: object) -> None:
        self._attrs[key] = to_attr_value(value)

    def remove(self, key: str) -> None:
        self._attrs.pop(key, None)

    def get_value(self, key: str) -> AttrValue | None:
        return self._attrs.get(key)

    @override
    def get(self, key: str, default: T) -> T:  # type: ignore[override]
        """
        Typed lookup, the variant expected is the one of default.
        An int value is accepted when a float is expected, a bool is never
        accepted as an int.
        """
        value = self._attrs.get(key)
        if value is None:
            return default
        match default:
            case bool():
                return value if isinstance(value, bool) else default
            case int():
                return value if _is_int(value) else default
            case float():
                if isinstance(value, float):
                    return value  # type: ignore[return-value]
                return float(value) if _is_int(value) else default  # type: ignore[return-value, arg-type]
            case str():
                return value if isinstance(value, str) else default
            case tuple():
                return value if isinstance(value, tuple) else default
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        return self.get(key, default)

    def get_float(self, key: str, default: float = 0.0) -> float:
        return self.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self.get(key, default)

    def get_str(self, key: str, default: str = "") -> str:
        return self.get(key, default)

    def get_ints(self, key: str, default: Sequence[int] = ()) -> tuple[int, ...]:
        return self.get(key, tuple(default))

    def copy(self) -> "OpAttrs":
        return OpAttrs(self._attrs)

    def to_dict(self) -> dict[str, int | float | bool | str | list[int]]:
        return {
            key: list(value) if isinstance(value, tuple) else value
            for key, value in self._attrs.items()
        }

    @override
    def __getitem__(self, key: str) -> AttrValue:
        return self._attrs[key]

    @override
    def __iter__(self) -> Iterator[str]:
        return iter(self._attrs)

    @override
    def __len__(self) -> int:
        return len(self._attrs)

    @override
    def __repr__(self) -> str:
        return f"OpAttrs({self._attrs})"
