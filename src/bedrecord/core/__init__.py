from .columns import Column as Column, ColumnType as ColumnType
from .record import Record as Record
from .schema import (
    BED3 as BED3,
    BED4 as BED4,
    BED5 as BED5,
    BED6 as BED6,
    BED8 as BED8,
    BED9 as BED9,
    BED12 as BED12,
    bed_schema as bed_schema,
    Schema as Schema,
)
