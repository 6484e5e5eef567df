import operator

from functools import total_ordering
from typing import Any, Iterable, Iterator, Mapping, Optional, TextIO, Union

from ..errors import MissingField
from .columns import Value
from .schema import BED3, Schema


@total_ordering
class Record:
    """One BED entry stored as a fixed-shape tuple of typed column values.

    The number of columns and the type of each column are given by `schema` and
    never change. Values are validated against the schema on construction, so
    a record can always be serialized.

    **Arguments:**

    - `values`: Column values in schema order. If `None`, each column takes its default.
    - `schema`: The record's `Schema`. Defaults to `BED3` (chrom, chromStart, chromEnd).

    **Raises:**

    - `ValueError`: If the number of values does not match the number of columns.
    - `TypeError`: If a value has the wrong type for its column.
    """

    __slots__ = ("_schema", "_values")

    def __init__(self, values: Optional[Iterable[Value]] = None, schema: Schema = BED3):
        if values is None:
            values = tuple(column.default for column in schema)
        else:
            values = tuple(values)
            if len(values) != len(schema):
                raise ValueError(f"Expected {len(schema)} values for schema {schema!r}, got {len(values)}")
            values = tuple(column.check(value, i) for i, (column, value) in enumerate(zip(schema, values)))
        self._schema = schema
        self._values = values

    @classmethod
    def empty(cls, schema: Schema = BED3) -> "Record":
        return cls(None, schema)

    @classmethod
    def from_values(cls, values: Iterable[Value], schema: Schema = BED3) -> "Record":
        return cls(values, schema)

    @classmethod
    def _trusted(cls, values: tuple, schema: Schema) -> "Record":
        # values already converted by the schema's columns
        record = cls.__new__(cls)
        record._schema = schema
        record._values = values
        return record

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def values(self) -> tuple:
        return self._values

    def copy(self) -> "Record":
        return Record._trusted(self._values, self._schema)

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return self.copy()

    def _position(self, key: Union[int, str]) -> int:
        if isinstance(key, str):
            return self._schema.index(key)
        if isinstance(key, bool):
            raise TypeError("Column key must be an int or str, got bool")
        try:
            pos = operator.index(key)
        except TypeError:
            raise TypeError(f"Column key must be an int or str, got {type(key).__name__}") from None
        if not 0 <= pos < len(self._values):
            raise IndexError(f"Column index {pos} out of range for record with {len(self._values)} columns")
        return pos

    def get(self, key: Union[int, str]) -> Value:
        """Return the value of a column by 0-based index or by name.

        Any integer-like index is accepted, numpy integers included.

        **Raises:**

        - `IndexError`: If an integer index is outside `[0, len(schema))`.
        - `KeyError`: If a name is not a column of the schema.
        """
        return self._values[self._position(key)]

    __getitem__ = get

    def replace(self, changes: Optional[Mapping[Union[int, str], Any]] = None, **kwargs) -> "Record":
        """Return a new record with some columns reassigned.

        Columns may be given by index or name in `changes`, or by name as keyword arguments.
        """
        values = list(self._values)
        updates = dict(changes or {})
        updates.update(kwargs)
        for key, value in updates.items():
            values[self._position(key)] = value
        return Record(values, self._schema)

    def as_dict(self) -> dict:
        return dict(zip(self._schema.names, self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Value]:
        return iter(self._values)

    def to_text(self) -> str:
        """Return the tab-joined text of all columns, without a trailing newline."""
        return "\t".join(column.format(value) for column, value in zip(self._schema, self._values))

    def __str__(self):
        return self.to_text()

    def __repr__(self):
        return f"Record({self._values!r}, schema={self._schema!r})"

    @classmethod
    def parse(cls, line: Optional[str], schema: Schema = BED3) -> Optional["Record"]:
        """Parse one tab-delimited line into a record.

        One trailing line terminator is removed before splitting. Tokens beyond the
        schema's column count are ignored.

        **Arguments:**

        - `line`: A single line of text. `None` or `""` means no line was available.
        - `schema`: The schema to parse against.

        **Returns:**

        - The parsed `Record`, or `None` at end of input.

        **Raises:**

        - `MissingField`: If the line has fewer tokens than the schema has columns.
        - `MalformedField`: If a token cannot be converted to its column's type.
        """
        if not line:
            return None
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        tokens = line.split("\t")
        values = []
        for i, column in enumerate(schema):
            if i >= len(tokens):
                raise MissingField(i)
            values.append(column.parse(tokens[i], i))
        return cls._trusted(tuple(values), schema)

    @classmethod
    def read(cls, stream: TextIO, schema: Schema = BED3) -> Optional["Record"]:
        """Read and parse the next line of `stream`; `None` at end of input."""
        return cls.parse(stream.readline(), schema)

    @staticmethod
    def dump(sink: TextIO, records: Iterable["Record"]) -> None:
        """Write each record followed by a newline to `sink`, in the given order."""
        for record in records:
            sink.write(record.to_text() + "\n")

    @staticmethod
    def compare(a: "Record", b: "Record") -> int:
        """Compare two records column by column; returns -1, 0 or 1."""
        if a._schema != b._schema:
            raise TypeError(f"Cannot compare records with schemas {a._schema!r} and {b._schema!r}")
        for x, y in zip(a._values, b._values):
            if x != y:
                return -1 if x < y else 1
        return 0

    def __eq__(self, other):
        if not isinstance(other, Record):
            return NotImplemented
        return self._schema == other._schema and self._values == other._values

    def __lt__(self, other):
        if not isinstance(other, Record):
            return NotImplemented
        return Record.compare(self, other) < 0

    def __hash__(self):
        return hash((self._schema, self._values))
