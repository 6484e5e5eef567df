import re

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

import numpy as np
import polars as pl

from ..errors import MalformedField

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT32 = np.iinfo(np.int32)
_SEPARATORS = re.compile(r"[\t\n]")

Value = Union[str, int]


class ColumnType(Enum):
    """Supported column value types."""

    TEXT = "text"
    INT32 = "int"
    CHAR = "char"

    @classmethod
    def from_tag(cls, tag: str) -> "ColumnType":
        key = tag.strip().lower()
        if key in ("text", "str", "string"):
            return cls.TEXT
        if key in ("int", "int32", "integer"):
            return cls.INT32
        if key == "char":
            return cls.CHAR
        raise ValueError(f"Unknown column type {tag!r}; expected one of text, int, char")


_DEFAULTS = {ColumnType.TEXT: "", ColumnType.INT32: 0, ColumnType.CHAR: "."}
_DTYPES = {ColumnType.TEXT: pl.Utf8, ColumnType.INT32: pl.Int32, ColumnType.CHAR: pl.Utf8}


@dataclass(frozen=True)
class Column:
    """A named, typed column of a BED schema.

    **Attributes**

    - `name`: Column name, e.g. `chromStart`.
    - `type`: The `ColumnType` governing how the column is parsed and formatted.
    """

    name: str
    type: ColumnType

    @property
    def default(self) -> Value:
        return _DEFAULTS[self.type]

    @property
    def dtype(self) -> pl.DataType:
        return _DTYPES[self.type]

    def parse(self, token: str, index: int) -> Value:
        """Convert one raw token into this column's value.

        **Arguments:**

        - `token`: Raw tab-delimited token, taken as-is.
        - `index`: Position of the column in its schema, reported on failure.

        **Raises:**

        - `MalformedField`: If the token is not a valid value for the column type.
        """
        if self.type is ColumnType.TEXT:
            return token
        if self.type is ColumnType.INT32:
            if _INT_RE.fullmatch(token) is None:
                raise MalformedField(index, token)
            value = int(token)
            if not _INT32.min <= value <= _INT32.max:
                raise MalformedField(index, token)
            return value
        if not token:
            raise MalformedField(index, token)
        return token[0]

    def format(self, value: Value) -> str:
        if self.type is ColumnType.INT32:
            return str(int(value))
        return value

    def check(self, value: Any, index: int) -> Value:
        """Validate a caller-supplied value for this column and return it."""
        if self.type is ColumnType.INT32:
            # bool is an int subclass but never a valid coordinate
            if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
                raise TypeError(f"Column {index} ({self.name}) expects an int, got {type(value).__name__}")
            value = int(value)
            if not _INT32.min <= value <= _INT32.max:
                raise ValueError(f"Column {index} ({self.name}) value {value} does not fit in int32")
            return value
        if not isinstance(value, str):
            raise TypeError(f"Column {index} ({self.name}) expects a str, got {type(value).__name__}")
        if self.type is ColumnType.CHAR and len(value) != 1:
            raise ValueError(f"Column {index} ({self.name}) expects a single character, got {value!r}")
        if _SEPARATORS.search(value):
            raise ValueError(f"Column {index} ({self.name}) value {value!r} contains a tab or newline")
        return value
