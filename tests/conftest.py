from __future__ import annotations

from pathlib import Path

import pytest

from bedrecord import BED12, Record
from tests.helpers.bed_fixtures import bed12_line, make_bed3


@pytest.fixture(scope="session")
def test_data_dir() -> Path:
    return Path(__file__).parent / "testdata"


@pytest.fixture(scope="session")
def regions_bed_path(test_data_dir: Path) -> Path:
    return test_data_dir / "regions.bed"


@pytest.fixture(scope="session")
def genes_bed_path(test_data_dir: Path) -> Path:
    return test_data_dir / "genes.bed"


@pytest.fixture(scope="session")
def malformed_bed_path(test_data_dir: Path) -> Path:
    return test_data_dir / "malformed.bed"


@pytest.fixture
def bed3_records() -> list[Record]:
    return [make_bed3("chr1", 1, 2), make_bed3("chr2", 3, 4)]


@pytest.fixture
def bed12_record() -> Record:
    return Record.parse(bed12_line(), BED12)
