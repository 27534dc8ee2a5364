"""Text-level VCF reading and writing.

Records are kept as raw tab-separated text: only the INFO column is ever
replaced, so every other column is written back exactly as it was read. The
header is validated and its sample list extracted with :mod:`vcfpy`; compressed
output is BGZF-compressed and tabix-indexed with :mod:`pysam`.
"""
from __future__ import annotations

import gzip
import io
import os
import sys
import warnings
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, TextIO, Tuple

from . import pysam, vcfpy
from .logging_utils import GrpAFError, StreamError, handle_critical_error, log_message

FIXED_COLUMNS = 8
INFO_COLUMN = 7
FORMAT_COLUMN = 8
COMPRESSED_SUFFIXES = (".gz", ".bgz")


def _is_compressed(path: str) -> bool:
    return path.endswith(COMPRESSED_SUFFIXES)


def open_vcf(path: str) -> TextIO:
    """Open *path* for reading text; ``-`` is standard input."""
    if path == "-":
        return sys.stdin
    if _is_compressed(path):
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


@dataclass(frozen=True)
class VcfHeader:
    """Serialized header lines (without newlines) and the sample columns."""

    lines: Tuple[str, ...]
    samples: Tuple[str, ...]


def parse_header_lines(lines: Sequence[str], source: str = "<stream>") -> VcfHeader:
    """Validate *lines* with vcfpy and return the header with its sample list."""

    text = "".join(line + "\n" for line in lines)
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            reader = vcfpy.Reader.from_stream(io.StringIO(text), path=source)
    except (vcfpy.VCFPyException, ValueError) as exc:
        handle_critical_error(f"Invalid VCF header in {source}: {exc}", exc_cls=StreamError, exc_info=exc)
    samples = tuple(reader.header.samples.names)
    return VcfHeader(lines=tuple(lines), samples=samples)


@dataclass(frozen=True)
class RawLine:
    line_number: int
    text: str


@dataclass
class VariantRecord:
    """One data line split into its columns."""

    line_number: int
    fields: List[str]

    @classmethod
    def parse(cls, raw: RawLine, sample_count: int) -> "VariantRecord":
        fields = raw.text.split("\t")
        if len(fields) < FIXED_COLUMNS:
            raise StreamError(
                f"Line {raw.line_number}: expected at least {FIXED_COLUMNS} columns, found {len(fields)}"
            )
        expected = FIXED_COLUMNS + 1 + sample_count if sample_count else None
        if expected is not None and len(fields) != expected:
            raise StreamError(
                f"Line {raw.line_number} ({fields[0]}:{fields[1]}): expected {expected} columns "
                f"for {sample_count} sample(s), found {len(fields)}"
            )
        return cls(raw.line_number, fields)

    @property
    def chrom(self) -> str:
        return self.fields[0]

    @property
    def pos(self) -> str:
        return self.fields[1]

    @property
    def info(self) -> str:
        return self.fields[INFO_COLUMN]

    def describe(self) -> str:
        return f"{self.chrom}:{self.pos} (line {self.line_number})"

    def genotypes(self, sample_names: Sequence[str]) -> Dict[str, Optional[str]]:
        """Return the raw GT string of every sample, ``None`` when absent."""
        if len(self.fields) <= FORMAT_COLUMN:
            return {}
        format_keys = self.fields[FORMAT_COLUMN].split(":")
        try:
            gt_index = format_keys.index("GT")
        except ValueError:
            return {name: None for name in sample_names}
        calls: Dict[str, Optional[str]] = {}
        for name, column in zip(sample_names, self.fields[FORMAT_COLUMN + 1 :]):
            parts = column.split(":")
            calls[name] = parts[gt_index] if gt_index < len(parts) else None
        return calls

    def with_info(self, info: str) -> str:
        fields = list(self.fields)
        fields[INFO_COLUMN] = info
        return "\t".join(fields)


class VcfTextReader:
    """Read the header eagerly, then yield data lines lazily."""

    def __init__(self, stream: TextIO, path: str = "<stream>"):
        self.stream = stream
        self.path = path
        self._line_number = 0
        self.header = parse_header_lines(self._read_header_lines(), source=path)

    @classmethod
    def from_path(cls, path: str) -> "VcfTextReader":
        try:
            stream = open_vcf(path)
        except OSError as exc:
            handle_critical_error(f"Failed to open {path}: {exc}", exc_cls=StreamError, exc_info=exc)
        try:
            return cls(stream, path="<stdin>" if path == "-" else path)
        except BaseException:
            if stream is not sys.stdin:
                stream.close()
            raise

    def _read_header_lines(self) -> List[str]:
        lines: List[str] = []
        try:
            for raw in self.stream:
                self._line_number += 1
                line = raw.rstrip("\r\n")
                if not line.startswith("#"):
                    handle_critical_error(
                        f"{self.path}: data line {self._line_number} found before the #CHROM header line",
                        exc_cls=StreamError,
                    )
                lines.append(line)
                if line.startswith("#CHROM"):
                    return lines
        except (OSError, EOFError, UnicodeDecodeError) as exc:
            handle_critical_error(
                f"{self.path}: failed to read header line {self._line_number + 1}: {exc}",
                exc_cls=StreamError,
                exc_info=exc,
            )
        handle_critical_error(f"{self.path}: missing #CHROM header line", exc_cls=StreamError)

    def __iter__(self) -> Iterator[RawLine]:
        try:
            for raw in self.stream:
                self._line_number += 1
                line = raw.rstrip("\r\n")
                if not line:
                    continue
                if line.startswith("#"):
                    raise StreamError(f"{self.path}: header line {self._line_number} found after #CHROM")
                yield RawLine(self._line_number, line)
        except (OSError, EOFError, UnicodeDecodeError) as exc:
            raise StreamError(f"{self.path}: failed to read line {self._line_number + 1}: {exc}") from exc

    def close(self) -> None:
        if self.stream is not sys.stdin:
            self.stream.close()

    def __enter__(self) -> "VcfTextReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class VcfTextWriter:
    """Write header and data lines; ``.vcf.gz`` targets are bgzipped and indexed on close."""

    def __init__(self, path: str, verbose: bool = False):
        self.path = path
        self.verbose = verbose
        self.compress = path != "-" and _is_compressed(path)
        if path == "-":
            self.plain_path = None
            self.handle: TextIO = sys.stdout
        else:
            self.plain_path = path + ".tmp" if self.compress else path
            directory = os.path.dirname(os.path.abspath(path))
            os.makedirs(directory, exist_ok=True)
            self.handle = open(self.plain_path, "w", encoding="utf-8")

    def write_header(self, lines: Sequence[str]) -> None:
        for line in lines:
            self.handle.write(line + "\n")

    def write_line(self, line: str) -> None:
        self.handle.write(line + "\n")

    def close(self, index: bool = True) -> None:
        if self.handle is sys.stdout:
            self.handle.flush()
            return
        self.handle.close()
        if not self.compress:
            return
        try:
            pysam.tabix_compress(self.plain_path, self.path, force=True)
            os.remove(self.plain_path)
        except (OSError, ValueError) as exc:
            handle_critical_error(f"Failed to compress {self.path}: {exc}", exc_cls=GrpAFError, exc_info=exc)
        if not index:
            return
        try:
            pysam.tabix_index(self.path, preset="vcf", force=True)
        except (OSError, ValueError) as exc:
            handle_critical_error(f"Failed to index {self.path}: {exc}", exc_cls=GrpAFError, exc_info=exc)
        log_message(f"Wrote bgzipped and indexed VCF: {self.path}", self.verbose)

    def __enter__(self) -> "VcfTextWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Partial output stays on disk; only a complete file is indexed.
        self.close(index=exc_type is None)


__all__ = [
    "RawLine",
    "VariantRecord",
    "VcfHeader",
    "VcfTextReader",
    "VcfTextWriter",
    "open_vcf",
    "parse_header_lines",
]
