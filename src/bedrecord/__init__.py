from importlib.metadata import PackageNotFoundError, version  # pragma: no cover

# annoying 'as' notation to avoid warnings/errors about unused imports...
from .bed_io import (
    frame_to_records as frame_to_records,
    read_bed as read_bed,
    read_records as read_records,
    records_to_frame as records_to_frame,
    scan_bed as scan_bed,
    write_bed as write_bed,
)
from .core import (
    BED3 as BED3,
    BED4 as BED4,
    BED5 as BED5,
    BED6 as BED6,
    BED8 as BED8,
    BED9 as BED9,
    BED12 as BED12,
    bed_schema as bed_schema,
    Column as Column,
    ColumnType as ColumnType,
    Record as Record,
    Schema as Schema,
)
from .errors import (
    BedParseError as BedParseError,
    MalformedField as MalformedField,
    MissingField as MissingField,
)

try:
    # Change here if project is renamed and does not equal the package name
    dist_name = __name__
    __version__ = version(dist_name)
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"
finally:
    del version, PackageNotFoundError
