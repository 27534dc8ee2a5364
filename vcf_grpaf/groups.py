"""Sample to group resolution for the label table.

The label table is a headerless, tab-separated file with two columns: the
sample name and the group it belongs to. :func:`load_labels` parses it into an
ordered list of pairs and :meth:`GroupRegistry.from_labels` turns those pairs
into the immutable registry shared by every worker.
"""
from __future__ import annotations

import os
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from .logging_utils import (
    ConfigError,
    UnknownSampleError,
    handle_critical_error,
    handle_non_critical_error,
)

# Characters that would corrupt the ``KEY=VALUE;KEY=VALUE`` INFO syntax.
FORBIDDEN_GROUP_PATTERN = re.compile(r"[;=,\s]")


def validate_group_name(group: str) -> None:
    """Raise :class:`ConfigError` when *group* cannot be embedded in an INFO key."""
    if not group:
        handle_critical_error("Group names must not be empty.", exc_cls=ConfigError)
    if FORBIDDEN_GROUP_PATTERN.search(group):
        handle_critical_error(
            f"Group name {group!r} contains a character reserved by the INFO field syntax "
            "(';', '=', ',' or whitespace).",
            exc_cls=ConfigError,
        )


def parse_label_lines(lines: Iterable[str], source: str = "<labels>") -> List[Tuple[str, str]]:
    """Return ``(sample, group)`` pairs parsed from *lines*."""

    pairs: List[Tuple[str, str]] = []
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            continue
        fields = line.split("\t")
        if len(fields) != 2:
            handle_critical_error(
                f"{source}:{line_number}: expected 2 tab-separated fields (sample, group), "
                f"found {len(fields)}.",
                exc_cls=ConfigError,
            )
        sample, group = (value.strip() for value in fields)
        if not sample:
            handle_critical_error(f"{source}:{line_number}: empty sample name.", exc_cls=ConfigError)
        validate_group_name(group)
        pairs.append((sample, group))
    return pairs


def load_labels(path: str) -> List[Tuple[str, str]]:
    """Read the label table at *path*."""

    if not os.path.exists(path):
        handle_critical_error(f"Label file does not exist: {path}", exc_cls=ConfigError)
    if not os.path.isfile(path):
        handle_critical_error(f"Label file is not a file: {path}", exc_cls=ConfigError)

    try:
        with open(path, "r", encoding="utf-8") as handle:
            pairs = parse_label_lines(handle, source=path)
    except (OSError, UnicodeDecodeError) as exc:
        handle_critical_error(f"Failed to read label file {path}: {exc}", exc_cls=ConfigError, exc_info=exc)

    if not pairs:
        handle_critical_error(f"Label file {path} does not assign any sample to a group.", exc_cls=ConfigError)
    return pairs


@dataclass(frozen=True)
class GroupRegistry:
    """Immutable sample to group mapping.

    ``groups`` keeps the order in which each group first appears in the label
    table, which in turn fixes the order of header declarations and INFO tags.
    """

    groups: Tuple[str, ...]
    members: Mapping[str, Tuple[str, ...]]
    sample_to_group: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_labels(
        cls,
        pairs: Sequence[Tuple[str, str]],
        stream_samples: Optional[Sequence[str]] = None,
        *,
        strict: bool = False,
    ) -> "GroupRegistry":
        """Build a registry from label *pairs*.

        When *stream_samples* is given, labelled samples absent from it are
        dropped and reported once as an :class:`UnknownSampleError`; with
        ``strict`` the error is raised instead.
        """

        assignment: "OrderedDict[str, str]" = OrderedDict()
        first_seen: List[str] = []
        for sample, group in pairs:
            validate_group_name(group)
            previous = assignment.get(sample)
            if previous is not None and previous != group:
                handle_non_critical_error(
                    f"Sample {sample} is assigned to both {previous} and {group}; using {group}."
                )
            assignment[sample] = group
            if group not in first_seen:
                first_seen.append(group)

        if stream_samples is not None:
            present = set(stream_samples)
            unknown = [sample for sample in assignment if sample not in present]
            if unknown:
                message = (
                    f"{len(unknown)} labelled sample(s) not found in the VCF: "
                    + ", ".join(unknown)
                )
                if strict:
                    handle_critical_error(message, exc_cls=UnknownSampleError)
                handle_non_critical_error(message)
            # Follow the VCF column order inside each group.
            ordered_samples = [sample for sample in stream_samples if sample in assignment]
        else:
            ordered_samples = list(assignment)

        assigned_groups = set(assignment.values())
        for group in first_seen:
            if group not in assigned_groups:
                handle_non_critical_error(
                    f"Group {group} has no members left after reassignment; dropping it."
                )

        grouped: "OrderedDict[str, List[str]]" = OrderedDict(
            (group, []) for group in first_seen if group in assigned_groups
        )
        for sample in ordered_samples:
            grouped[assignment[sample]].append(sample)

        return cls(
            groups=tuple(grouped),
            members={group: tuple(samples) for group, samples in grouped.items()},
            sample_to_group={sample: assignment[sample] for sample in ordered_samples},
        )

    def group_of(self, sample: str) -> Optional[str]:
        return self.sample_to_group.get(sample)

    def size(self, group: str) -> int:
        return len(self.members[group])

    def __len__(self) -> int:
        return len(self.groups)


__all__ = [
    "GroupRegistry",
    "load_labels",
    "parse_label_lines",
    "validate_group_name",
]
