"""Tests for reading and writing BED files."""

import gzip
import io
import logging

import polars as pl
import pytest

from bedrecord import (
    BED3,
    BED4,
    BED12,
    frame_to_records,
    MalformedField,
    MissingField,
    read_bed,
    read_records,
    Record,
    records_to_frame,
    scan_bed,
    write_bed,
)
from tests.helpers.bed_fixtures import make_bed3

# --- read_records ---


def test_read_records_basic(regions_bed_path):
    records = list(read_records(regions_bed_path))
    assert [r.values for r in records] == [("chr1", 1000, 2000), ("chr2", 150, 300), ("chr1", 500, 900)]


def test_read_records_from_stream():
    stream = io.StringIO("chr1\t1\t2\nchr2\t3\t4\n")
    assert list(read_records(stream)) == [make_bed3("chr1", 1, 2), make_bed3("chr2", 3, 4)]


def test_read_records_skips_comments_and_headers(genes_bed_path):
    records = list(read_records(genes_bed_path, BED12))
    assert len(records) == 2
    assert records[0]["name"] == "DDX11L1"
    assert records[1]["strand"] == "-"


def test_read_records_without_header_skipping_fails_on_track_line(genes_bed_path):
    with pytest.raises(MissingField) as exc_info:
        list(read_records(genes_bed_path, BED12, skip_headers=False))
    assert exc_info.value.line_no == 1


def test_read_records_sets_line_number(malformed_bed_path):
    with pytest.raises(MissingField) as exc_info:
        list(read_records(malformed_bed_path))
    assert exc_info.value.line_no == 2
    assert exc_info.value.column_index == 2
    assert str(exc_info.value).startswith("line 2:")


def test_read_records_skip_logs_bad_lines(malformed_bed_path, caplog):
    with caplog.at_level(logging.WARNING, logger="bedrecord.bed_io"):
        records = list(read_records(malformed_bed_path, on_error="skip"))
    assert [r.values for r in records] == [("chr1", 100, 200), ("chr3", 7, 9)]
    messages = [rec.getMessage() for rec in caplog.records]
    assert any("line 2" in m for m in messages)
    assert any("line 3" in m and "'NaN'" in m for m in messages)


def test_read_records_rejects_unknown_on_error(regions_bed_path):
    with pytest.raises(ValueError, match="on_error"):
        list(read_records(regions_bed_path, on_error="ignore"))


def test_scan_bed_yields_records_and_errors(malformed_bed_path):
    results = list(scan_bed(malformed_bed_path))
    assert len(results) == 4
    assert isinstance(results[0], Record)
    assert isinstance(results[1], MissingField)
    assert isinstance(results[2], MalformedField)
    assert results[2].raw_token == "NaN"
    assert results[2].line_no == 3
    assert isinstance(results[3], Record)


def test_scan_bed_reports_undecodable_bytes(tmp_path):
    path = tmp_path / "latin1.bed"
    path.write_bytes(b"chr1\t1\t2\nchr\xff\t3\t4\nchr2\t5\t6\tn\xe9\n")
    results = list(scan_bed(path))
    assert results[0] == make_bed3("chr1", 1, 2)
    assert isinstance(results[1], MalformedField)
    assert results[1].column_index == 0
    assert results[1].line_no == 2
    # bytes past the schema's columns are ignored like any extra token
    assert results[2] == make_bed3("chr2", 5, 6)



# --- write_bed ---


def test_write_bed_round_trip(tmp_path, bed3_records):
    out = tmp_path / "out.bed"
    assert write_bed(out, bed3_records) == 2
    assert out.read_text() == "chr1\t1\t2\nchr2\t3\t4\n"
    assert list(read_records(out)) == bed3_records


def test_write_bed_gzip(tmp_path, genes_bed_path):
    records = list(read_records(genes_bed_path, BED12))
    out = tmp_path / "genes.bed.gz"
    write_bed(out, records)
    with gzip.open(out, "rt") as f:
        lines = f.read().splitlines()
    assert lines == [r.to_text() for r in records]
    assert list(read_records(out, BED12)) == records


def test_write_bed_leaves_no_output_when_reading_fails(tmp_path, malformed_bed_path):
    out = tmp_path / "out.bed"
    with pytest.raises(MissingField):
        write_bed(out, read_records(malformed_bed_path))
    assert list(tmp_path.iterdir()) == []


def test_write_bed_keeps_existing_file_when_reading_fails(tmp_path, malformed_bed_path):
    out = tmp_path / "out.bed"
    out.write_text("chr9\t1\t2\n")
    with pytest.raises(MissingField):
        write_bed(out, read_records(malformed_bed_path))
    assert out.read_text() == "chr9\t1\t2\n"
    assert list(tmp_path.iterdir()) == [out]



# --- polars bridge ---


def test_read_bed_basic(regions_bed_path):
    df = read_bed(regions_bed_path)
    assert isinstance(df, pl.DataFrame)
    assert df.shape == (3, 3)
    assert df.columns == ["chrom", "chromStart", "chromEnd"]
    assert df.schema["chromStart"] == pl.Int32
    assert df["chrom"][0] == "chr1"
    assert df["chromStart"][0] == 1000
    assert df["chromEnd"][0] == 2000


def test_read_bed_full_schema(genes_bed_path):
    df = read_bed(genes_bed_path, BED12)
    assert df.shape == (2, 12)
    assert df["blockCount"].to_list() == [3, 2]
    assert df["strand"].to_list() == ["+", "-"]


def test_records_to_frame_empty():
    df = records_to_frame([], BED3)
    assert df.shape == (0, 3)
    assert df.columns == BED3.names


def test_records_to_frame_rejects_mixed_schema(genes_bed_path):
    records = list(read_records(genes_bed_path, BED12))
    with pytest.raises(TypeError):
        records_to_frame(records, BED3)


def test_frame_to_records_round_trip(genes_bed_path):
    records = list(read_records(genes_bed_path, BED12))
    df = records_to_frame(records, BED12)
    assert list(frame_to_records(df, BED12)) == records


def test_frame_round_trip_keeps_carriage_return_in_text():
    record = Record.parse("chr1\t1\t2\tgene\r\r\n", BED4)
    assert record["name"] == "gene\r"
    df = records_to_frame([record], BED4)
    assert list(frame_to_records(df, BED4)) == [record]



def test_frame_to_records_requires_columns():
    df = pl.DataFrame({"chrom": ["chr1"], "start": [1], "end": [2]})
    with pytest.raises(ValueError, match="Required columns"):
        list(frame_to_records(df, BED3))
