"""I/O utilities for reading and writing BED format files."""

import gzip
import logging
import os

from contextlib import contextmanager, suppress
from os import PathLike
from typing import Iterable, Iterator, Optional, TextIO, Union

import polars as pl

from .core.record import Record
from .core.schema import BED3, Schema
from .errors import BedParseError, MalformedField

logger = logging.getLogger(__name__)

_HEADER_PREFIXES = ("#", "browser", "track")
_ON_ERROR = ("raise", "skip")

Source = Union[str, PathLike, TextIO]


def _open(path: Union[str, PathLike], mode: str, compress: Optional[bool] = None) -> TextIO:
    # undecodable bytes become lone surrogates instead of aborting the read
    if compress is None:
        compress = str(path).endswith(".gz")
    if compress:
        return gzip.open(path, mode + "t", encoding="utf-8", errors="surrogateescape")
    return open(path, mode, encoding="utf-8", errors="surrogateescape")


@contextmanager
def _as_stream(source: Source, mode: str = "r") -> Iterator[TextIO]:
    if isinstance(source, (str, PathLike)):
        with _open(source, mode) as f:
            yield f
    else:
        yield source


def _is_header(line: str) -> bool:
    return not line.strip() or line.startswith(_HEADER_PREFIXES)


def _undecodable_field(line: str, schema: Schema) -> Optional[MalformedField]:
    """Return a `MalformedField` for the first schema column holding bytes that are not UTF-8."""
    try:
        line.encode("utf-8")
        return None
    except UnicodeEncodeError:
        pass
    tokens = line.rstrip("\n").rstrip("\r").split("\t")
    for index, token in enumerate(tokens[: len(schema)]):
        try:
            token.encode("utf-8")
        except UnicodeEncodeError:
            return MalformedField(index, token)
    return None


def read_records(
    source: Source,
    schema: Schema = BED3,
    skip_headers: bool = True,
    on_error: str = "raise",
) -> Iterator[Record]:
    """Iterate over the records of a BED file or open text stream.

    **Arguments:**

    - `source`: Path to a BED file (`.gz` is decompressed) or a readable text stream.
    - `schema`: Schema every line is parsed against.
    - `skip_headers`: Skip blank lines, `#` comments and `browser`/`track` lines.
    - `on_error`: `"raise"` to propagate the first parse error, `"skip"` to log and drop bad lines.

    **Raises:**

    - `BedParseError`: On a malformed or short line when `on_error="raise"`. Its `line_no` is set.
    """
    if on_error not in _ON_ERROR:
        raise ValueError(f"on_error must be one of {_ON_ERROR}, got {on_error!r}")

    for result in scan_bed(source, schema, skip_headers):
        if isinstance(result, BedParseError):
            if on_error == "raise":
                raise result
            logger.warning(f"Skipping {result}")
            continue
        yield result


def scan_bed(
    source: Source,
    schema: Schema = BED3,
    skip_headers: bool = True,
) -> Iterator[Union[Record, BedParseError]]:
    """Parse every line of `source`, yielding either a `Record` or the `BedParseError` it raised.

    Errors carry the 1-based `line_no` of the offending line.
    """
    with _as_stream(source) as stream:
        for line_no, line in enumerate(stream, start=1):
            if skip_headers and _is_header(line):
                continue
            try:
                bad_field = _undecodable_field(line, schema)
                if bad_field is not None:
                    raise bad_field
                record = Record.parse(line, schema)
            except BedParseError as err:
                err.line_no = line_no
                yield err
                continue
            if record is not None:
                yield record


def write_bed(path: Union[str, PathLike], records: Iterable[Record]) -> int:
    """Write records to `path`, one line each; returns the number written.

    Records go to a `.partial` sibling first, which replaces `path` only once every
    record has been written. If iterating `records` raises, `path` is left untouched.
    """
    count = 0

    def _counted():
        nonlocal count
        for record in records:
            count += 1
            yield record

    partial = f"{os.fspath(path)}.partial"
    try:
        with _open(partial, "w", compress=str(path).endswith(".gz")) as f:
            Record.dump(f, _counted())
        os.replace(partial, path)
    except BaseException:
        with suppress(FileNotFoundError):
            os.remove(partial)
        raise
    logger.info(f"Wrote {count} records to {path}")
    return count


def records_to_frame(records: Iterable[Record], schema: Schema = BED3) -> pl.DataFrame:
    """Collect records into a Polars table typed by `schema.polars_schema`."""
    rows = []
    for record in records:
        if record.schema != schema:
            raise TypeError(f"Record schema {record.schema!r} does not match {schema!r}")
        rows.append(record.values)
    if not rows:
        return pl.DataFrame(schema=schema.polars_schema)
    return pl.DataFrame(rows, schema=schema.polars_schema, orient="row")


def frame_to_records(df: pl.DataFrame, schema: Schema = BED3) -> Iterator[Record]:
    """Yield one record per row of `df`, reading the columns named by `schema`."""
    missing = [name for name in schema.names if name not in df.columns]
    if missing:
        raise ValueError(f"Required columns {missing} not found in table")
    for row in df.select(schema.names).iter_rows():
        yield Record(row, schema)


def read_bed(bed_file: Union[str, PathLike], schema: Schema = BED3, on_error: str = "raise") -> pl.DataFrame:
    """Read a UCSC BED file into a typed Polars table.

    !!! info

        BED intervals use 0-based, half-open coordinates $[start, end)$,
        where `start` is inclusive and `end` is exclusive.

    **Arguments:**

    - `bed_file`: Path to a tab-delimited BED text file.
    - `schema`: Schema for the columns to read; defaults to `BED3`.
    - `on_error`: `"raise"` or `"skip"`, as for `read_records`.

    **Returns:**

    - `polars.DataFrame` with one column per schema column, e.g. `chrom`, `chromStart`, and `chromEnd`.

    **Raises:**

    - `BedParseError`: If a non-comment line cannot be parsed and `on_error="raise"`.
    """
    return records_to_frame(read_records(bed_file, schema, on_error=on_error), schema)
