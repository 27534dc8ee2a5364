"""Tests for the text-level VCF reader and writer."""

from __future__ import annotations

import gzip
import io

import pytest

from vcf_grpaf.logging_utils import StreamError
from vcf_grpaf.vcf_io import RawLine, VariantRecord, VcfTextReader, VcfTextWriter

from .conftest import HEADER_LINES, RECORD_LINES, vcf_text


def test_reader_splits_header_and_records():
    reader = VcfTextReader(io.StringIO(vcf_text()))

    assert reader.header.lines == tuple(HEADER_LINES)
    assert reader.header.samples == ("s1", "s2", "s3", "s4")
    lines = list(reader)
    assert [line.text for line in lines] == RECORD_LINES
    assert lines[0].line_number == len(HEADER_LINES) + 1


def test_reader_reads_gzip_input(tmp_path):
    path = tmp_path / "input.vcf.gz"
    with gzip.open(path, "wt", encoding="utf-8") as handle:
        handle.write(vcf_text())

    with VcfTextReader.from_path(str(path)) as reader:
        assert len(list(reader)) == len(RECORD_LINES)


def test_missing_chrom_line_is_stream_error():
    with pytest.raises(StreamError, match="#CHROM"):
        VcfTextReader(io.StringIO("##fileformat=VCFv4.2\n"))


def test_data_before_header_is_stream_error():
    with pytest.raises(StreamError):
        VcfTextReader(io.StringIO("##fileformat=VCFv4.2\nchr1\t1\t.\tA\tC\t.\t.\t.\n"))


def test_header_without_fileformat_is_stream_error():
    text = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"

    with pytest.raises(StreamError, match="Invalid VCF header"):
        VcfTextReader(io.StringIO(text))


def test_undecodable_header_is_stream_error(tmp_path):
    path = tmp_path / "bad.vcf"
    path.write_bytes(b"##fileformat=VCFv4.2\n##source=caf\xff\n" + vcf_text().split("\n", 1)[1].encode())

    with pytest.raises(StreamError, match="failed to read header line"):
        VcfTextReader.from_path(str(path))


@pytest.mark.parametrize(
    "payload",
    [
        vcf_text().encode(),
        gzip.compress(vcf_text().encode())[:40],
    ],
    ids=["not-gzip", "truncated-gzip"],
)
def test_corrupt_gzip_header_is_stream_error(tmp_path, payload):
    path = tmp_path / "input.vcf.gz"
    path.write_bytes(payload)

    with pytest.raises(StreamError, match="failed to read header line"):
        VcfTextReader.from_path(str(path))


def test_record_genotypes_use_gt_position():
    record = VariantRecord.parse(RawLine(10, "chr1\t5\t.\tA\tC\t.\t.\t.\tDP:GT\t3:0/1\t4"), 2)

    assert record.genotypes(["a", "b"]) == {"a": "0/1", "b": None}
    assert record.describe() == "chr1:5 (line 10)"


def test_record_without_gt_reports_every_sample_missing():
    record = VariantRecord.parse(RawLine(1, "chr1\t5\t.\tA\tC\t.\t.\t.\tDP\t3\t4"), 2)

    assert record.genotypes(["a", "b"]) == {"a": None, "b": None}


@pytest.mark.parametrize(
    "text, samples",
    [
        ("chr1\t5\t.\tA\tC\t.\t.", 0),
        ("chr1\t5\t.\tA\tC\t.\t.\t.\tGT\t0/1", 2),
    ],
)
def test_malformed_records_raise_stream_error(text, samples):
    with pytest.raises(StreamError):
        VariantRecord.parse(RawLine(3, text), samples)


def test_with_info_replaces_only_info_column():
    record = VariantRecord.parse(RawLine(1, RECORD_LINES[0]), 4)

    rewritten = record.with_info("X=1").split("\t")

    assert rewritten[7] == "X=1"
    assert rewritten[:7] == RECORD_LINES[0].split("\t")[:7]
    assert rewritten[8:] == RECORD_LINES[0].split("\t")[8:]


def test_writer_plain_output(tmp_path):
    path = tmp_path / "out" / "result.vcf"

    with VcfTextWriter(str(path)) as writer:
        writer.write_header(["##fileformat=VCFv4.2", "#CHROM"])
        writer.write_line("chr1\t1")

    assert path.read_text(encoding="utf-8") == "##fileformat=VCFv4.2\n#CHROM\nchr1\t1\n"


def test_writer_bgzips_and_indexes(tmp_path):
    path = tmp_path / "result.vcf.gz"

    with VcfTextWriter(str(path)) as writer:
        writer.write_header(HEADER_LINES)
        for line in RECORD_LINES:
            writer.write_line(line)

    with gzip.open(path, "rt", encoding="utf-8") as handle:
        assert handle.read() == vcf_text()
    assert (tmp_path / "result.vcf.gz.tbi").exists()
    assert not (tmp_path / "result.vcf.gz.tmp").exists()
