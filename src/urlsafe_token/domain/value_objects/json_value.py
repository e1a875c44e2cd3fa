# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""JSON value type.

The set of values a token can carry: the JSON data model expressed with
native Python types. Integers and floats are both accepted; a decoded
number keeps whatever type the JSON text implies (``1`` -> ``int``,
``1.0`` -> ``float``).

Layer:
    domain/value_objects
"""

from __future__ import annotations

from typing import TypeAlias, Union

JsonScalar: TypeAlias = Union[None, bool, int, float, str]
JsonValue: TypeAlias = Union[JsonScalar, list["JsonValue"], dict[str, "JsonValue"]]

__all__ = ["JsonScalar", "JsonValue"]
