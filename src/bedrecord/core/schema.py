from typing import Iterator, Union

from .columns import Column, ColumnType


class Schema:
    """Ordered, fixed list of typed columns that defines the shape of a record.

    Schemas compare equal when their columns (names and types) are equal.
    """

    __slots__ = ("_columns", "_index")

    def __init__(self, columns):
        columns = tuple(columns)
        if len(columns) == 0:
            raise ValueError("A schema requires at least one column")
        index = {}
        for i, column in enumerate(columns):
            if not isinstance(column, Column):
                raise TypeError(f"Schema columns must be Column instances, got {type(column).__name__}")
            if column.name in index:
                raise ValueError(f"Duplicate column name {column.name!r} in schema")
            index[column.name] = i
        self._columns = columns
        self._index = index

    @classmethod
    def from_descriptor(cls, descriptor: str) -> "Schema":
        """Build a schema from a descriptor such as `chrom:text,chromStart:int,chromEnd:int`."""
        columns = []
        for item in descriptor.split(","):
            item = item.strip()
            if not item:
                continue
            name, sep, tag = item.partition(":")
            if not sep or not name.strip():
                raise ValueError(f"Invalid column descriptor {item!r}; expected name:type")
            columns.append(Column(name.strip(), ColumnType.from_tag(tag)))
        return cls(columns)

    @property
    def columns(self) -> tuple:
        return self._columns

    @property
    def names(self) -> list[str]:
        return [column.name for column in self._columns]

    @property
    def polars_schema(self) -> dict:
        return {column.name: column.dtype for column in self._columns}

    def index(self, name: str) -> int:
        try:
            return self._index[name]
        except KeyError:
            raise KeyError(f"Column {name!r} not in schema ({', '.join(self.names)})") from None

    def extend(self, *columns: Column) -> "Schema":
        return Schema(self._columns + columns)

    def descriptor(self) -> str:
        return ",".join(f"{column.name}:{column.type.value}" for column in self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __iter__(self) -> Iterator[Column]:
        return iter(self._columns)

    def __getitem__(self, key: Union[int, str]) -> Column:
        if isinstance(key, str):
            return self._columns[self.index(key)]
        return self._columns[key]

    def __eq__(self, other):
        if not isinstance(other, Schema):
            return NotImplemented
        return self._columns == other._columns

    def __hash__(self):
        return hash(self._columns)

    def __repr__(self):
        return f"Schema({self.descriptor()!r})"


_BED12_COLUMNS = (
    Column("chrom", ColumnType.TEXT),
    Column("chromStart", ColumnType.INT32),
    Column("chromEnd", ColumnType.INT32),
    Column("name", ColumnType.TEXT),
    Column("score", ColumnType.INT32),
    Column("strand", ColumnType.CHAR),
    Column("thickStart", ColumnType.INT32),
    Column("thickEnd", ColumnType.INT32),
    Column("itemRgb", ColumnType.TEXT),
    Column("blockCount", ColumnType.INT32),
    Column("blockSizes", ColumnType.TEXT),
    Column("blockStarts", ColumnType.TEXT),
)


def bed_schema(num_columns: int) -> Schema:
    """Return the standard BED schema with the first `num_columns` columns (3 to 12)."""
    if not 3 <= num_columns <= len(_BED12_COLUMNS):
        raise ValueError(f"BED schemas have 3 to {len(_BED12_COLUMNS)} columns, got {num_columns}")
    return Schema(_BED12_COLUMNS[:num_columns])


BED3 = bed_schema(3)
BED4 = bed_schema(4)
BED5 = bed_schema(5)
BED6 = bed_schema(6)
BED8 = bed_schema(8)
BED9 = bed_schema(9)
BED12 = bed_schema(12)
