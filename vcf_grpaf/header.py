"""Normalization of the ``##INFO`` declarations for group statistics.

The header is handled as serialized lines so that unrelated meta-information
passes through byte for byte. Declarations for group statistics are rebuilt
from the registry on every run with :class:`vcfpy.InfoHeaderLine`, mirroring
the per-record pruning done by :mod:`vcf_grpaf.tags`.
"""
from __future__ import annotations

import logging
import re
from collections import OrderedDict
from typing import List, Sequence

from . import vcfpy

from .groups import GroupRegistry
from .logging_utils import log_message
from .stats import FLOAT_METRICS, METRICS
from .tags import is_recognized_key, tag_key

INFO_HEADER_PATTERN = re.compile(r"^##INFO=<ID=([^,>]+)")


def info_declaration(metric: str, group: str, member_count: int) -> vcfpy.InfoHeaderLine:
    """Return the ``##INFO`` header line describing ``<metric>_<group>``."""
    mapping = OrderedDict(
        [
            ("ID", tag_key(metric, group)),
            ("Number", 1),
            ("Type", "Float" if metric in FLOAT_METRICS else "Integer"),
            ("Description", f"{metric} on {member_count} {group} samples"),
        ]
    )
    return vcfpy.InfoHeaderLine.from_mapping(mapping)


def build_info_declarations(registry: GroupRegistry) -> List[str]:
    """Serialized declarations for every (metric, group) pair, in tag order."""
    lines: List[str] = []
    for group in registry.groups:
        count = registry.size(group)
        for metric in METRICS:
            lines.append(info_declaration(metric, group, count).serialize())
    return lines


def declared_info_id(line: str):
    match = INFO_HEADER_PATTERN.match(line.strip())
    return match.group(1) if match else None


def find_group_declarations(header_lines: Sequence[str]) -> List[str]:
    """IDs of existing ``##INFO`` declarations that belong to group statistics."""
    found: List[str] = []
    for line in header_lines:
        info_id = declared_info_id(line)
        if info_id is not None and is_recognized_key(info_id):
            found.append(info_id)
    return found


def synchronize_header(
    header_lines: Sequence[str],
    registry: GroupRegistry,
    verbose: bool = False,
) -> List[str]:
    """Return *header_lines* with exactly one declaration per metric and group.

    Existing group-statistics declarations are dropped, whichever group they
    name, and the fresh set is appended after the remaining meta-information
    lines, right before the ``#CHROM`` line.
    """

    meta_lines: List[str] = []
    column_lines: List[str] = []
    removed: List[str] = []
    for line in header_lines:
        if line.startswith("##"):
            info_id = declared_info_id(line)
            if info_id is not None and is_recognized_key(info_id):
                removed.append(info_id)
                continue
            meta_lines.append(line)
        else:
            column_lines.append(line)

    if removed:
        log_message(f"Found related tags in input VCF: {removed}", verbose)

    declarations = build_info_declarations(registry)
    log_message(
        f"Declaring {len(declarations)} INFO field(s) for {len(registry)} group(s).",
        verbose,
        level=logging.DEBUG,
    )
    return meta_lines + declarations + column_lines


__all__ = [
    "INFO_HEADER_PATTERN",
    "build_info_declarations",
    "find_group_declarations",
    "info_declaration",
    "synchronize_header",
]
