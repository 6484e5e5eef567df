from typing import Optional


class BedParseError(ValueError):
    """A BED line could not be converted into a record.

    **Attributes**

    - `column_index`: 0-based index of the offending column.
    - `line_no`: 1-based line number in the source, when known. Only the I/O layer sets this.
    """

    def __init__(self, column_index: int, message: str):
        super().__init__(message)
        self.column_index = column_index
        self.line_no: Optional[int] = None

    def __str__(self):
        msg = super().__str__()
        if self.line_no is not None:
            return f"line {self.line_no}: {msg}"
        return msg


class MissingField(BedParseError):
    """The line has fewer tab-separated tokens than the schema has columns."""

    def __init__(self, column_index: int):
        super().__init__(column_index, f"missing field for column {column_index}")


class MalformedField(BedParseError):
    """A token is present but cannot be converted to its column's type."""

    def __init__(self, column_index: int, raw_token: str):
        super().__init__(column_index, f"malformed field for column {column_index}: {raw_token!r}")
        self.raw_token = raw_token
