"""Shared test fixtures for bamwindow tests."""

import os

import pysam
import pytest
from create_fixtures import create_empty_bam, create_paired_bam, create_single_end_bam


class FakeStore:
    """In-memory alignment store recording every fetch request."""

    def __init__(self, records_by_contig=None, fail_with=None):
        self.records_by_contig = records_by_contig or {}
        self.fail_with = fail_with
        self.calls = []
        self.closed = False

    def fetch(self, contig, start, stop):
        self.calls.append((contig, start, stop))
        if self.fail_with is not None:
            raise self.fail_with
        if contig not in self.records_by_contig:
            raise ValueError(f"invalid contig `{contig}`")
        return [
            r
            for r in self.records_by_contig[contig]
            if r.reference_start < stop and r.reference_end > start
        ]

    def close(self):
        self.closed = True


def _make_read(
    name="r1",
    start=100,
    length=50,
    flag=0,
    cigar=None,
    seq=None,
    mapq=60,
    qual="I",
    tlen=0,
    mate_start=-1,
):
    cigar = cigar or [(0, length)]
    query_len = sum(n for op, n in cigar if op in (0, 1, 4, 7, 8))
    a = pysam.AlignedSegment()
    a.query_name = name
    a.query_sequence = seq or "A" * query_len
    a.flag = flag
    a.reference_id = 0
    a.reference_start = start
    a.mapping_quality = mapq
    a.cigartuples = cigar
    a.query_qualities = pysam.qualitystring_to_array(qual * query_len)
    a.next_reference_id = 0
    a.next_reference_start = mate_start
    a.template_length = tlen
    return a


@pytest.fixture
def make_read():
    """Factory for header-less pysam reads."""
    return _make_read


@pytest.fixture
def fake_store():
    """Factory for in-memory stores: ``fake_store({"chr1": [reads]})``."""
    return FakeStore


@pytest.fixture(autouse=True)
def _clear_bamwindow_env(monkeypatch):
    """Keep BAMWINDOW_* variables from the developer's shell out of tests."""
    for key in list(os.environ.keys()):
        if key.startswith("BAMWINDOW_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(scope="session")
def fixtures_dir(tmp_path_factory):
    """Temp directory holding BAM fixtures built once per session."""
    return str(tmp_path_factory.mktemp("fixtures"))


@pytest.fixture(scope="session")
def paired_bam_path(fixtures_dir):
    """Path to the indexed paired-end test BAM."""
    return create_paired_bam(fixtures_dir)


@pytest.fixture(scope="session")
def single_end_bam_path(fixtures_dir):
    """Path to an indexed BAM without read pairs."""
    return create_single_end_bam(fixtures_dir)


@pytest.fixture(scope="session")
def empty_bam_path(fixtures_dir):
    """Path to an empty BAM file (header only)."""
    return create_empty_bam(fixtures_dir)
