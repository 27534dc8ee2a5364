"""Shared pytest fixtures for the vcf_grpaf test suite."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import pytest

from vcf_grpaf.groups import GroupRegistry
from vcf_grpaf.logging_utils import logger

HEADER_LINES: List[str] = [
    "##fileformat=VCFv4.2",
    "##reference=GRCh38",
    "##contig=<ID=chr1,length=1000>",
    '##INFO=<ID=FOO,Number=1,Type=Integer,Description="Unrelated annotation">',
    '##INFO=<ID=AF_groupX,Number=1,Type=Float,Description="AF on 3 groupX samples">',
    '##INFO=<ID=HWE_groupA,Number=1,Type=Float,Description="HWE p-value for groupA">',
    '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
    '##FORMAT=<ID=DP,Number=1,Type=Integer,Description="Read depth">',
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\ts1\ts2\ts3\ts4",
]

RECORD_LINES: List[str] = [
    "chr1\t100\trs1\tA\tG\t50\tPASS\tAF_groupX=0.3;FOO=1\tGT:DP\t0/1:10\t1/1:12\t./.:0\t0/0:9",
    "chr1\t200\t.\tC\tT\t.\tPASS\t.\tGT\t0|0\t0|1\t1\t0/1",
    "chr1\t300\t.\tG\tA,C\t20\tq10\tDB;HWE_groupA=0.5\tGT\t1/2\t2/2\t0\t./.",
]

LABEL_LINES: List[str] = [
    "s1\tgroupA",
    "s2\tgroupA",
    "s3\tgroupB",
]


def vcf_text(header: Sequence[str] = HEADER_LINES, records: Sequence[str] = RECORD_LINES) -> str:
    return "".join(line + "\n" for line in list(header) + list(records))


@pytest.fixture
def sample_vcf(tmp_path: Path) -> Path:
    path = tmp_path / "input.vcf"
    path.write_text(vcf_text(), encoding="utf-8")
    return path


@pytest.fixture
def labels_file(tmp_path: Path) -> Path:
    path = tmp_path / "labels.tsv"
    path.write_text("\n" + "\n".join(LABEL_LINES) + "\n\n", encoding="utf-8")
    return path


@pytest.fixture
def registry() -> GroupRegistry:
    pairs = [tuple(line.split("\t")) for line in LABEL_LINES]
    return GroupRegistry.from_labels(pairs, ["s1", "s2", "s3", "s4"])


@pytest.fixture
def grpaf_caplog(caplog, monkeypatch):
    """``caplog`` that also sees records from the non-propagating package logger."""
    monkeypatch.setattr(logger, "propagate", True)
    return caplog
