"""Rewriting of per-group statistics inside the INFO column.

All tags of the form ``<PREFIX>_<GROUP>`` where ``PREFIX`` is one of the
published metrics (or a legacy group-statistics prefix) are treated as one
unit: every run drops them all and writes a fresh set. The group suffix is not
checked against the current registry, so tags of renamed or removed groups are
pruned as well. Every other INFO entry is kept verbatim and in place.
"""
from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence

from .stats import LEGACY_PREFIXES, METRICS, GroupMetrics

INFO_SEPARATOR = ";"
INFO_MISSING = "."
RECOGNIZED_PREFIXES: tuple[str, ...] = METRICS + LEGACY_PREFIXES


def split_info(info_text: str) -> List[str]:
    """Return the raw ``KEY[=VALUE]`` entries of *info_text*."""
    text = (info_text or "").strip()
    if not text or text == INFO_MISSING:
        return []
    return [entry for entry in text.split(INFO_SEPARATOR) if entry]


def entry_key(entry: str) -> str:
    return entry.split("=", 1)[0]


def is_recognized_key(key: str, prefixes: Iterable[str] = RECOGNIZED_PREFIXES) -> bool:
    """Return True if *key* is a group statistic such as ``AF_groupA``."""
    for prefix in prefixes:
        stem = prefix + "_"
        if key.startswith(stem) and len(key) > len(stem):
            return True
    return False


def tag_key(metric: str, group: str) -> str:
    return f"{metric}_{group}"


def format_value(value) -> str:
    if isinstance(value, float):
        return "%g" % value
    return str(value)


def build_group_entries(
    metrics_by_group: Mapping[str, GroupMetrics],
    groups: Sequence[str],
) -> List[str]:
    """Serialize metrics as INFO entries, metric order nested in group order."""
    entries: List[str] = []
    for group in groups:
        metrics = metrics_by_group.get(group)
        if metrics is None:
            continue
        for metric, value in metrics.items():
            entries.append(f"{tag_key(metric, group)}={format_value(value)}")
    return entries


def rewrite_info(
    info_text: str,
    metrics_by_group: Mapping[str, GroupMetrics],
    groups: Sequence[str],
) -> str:
    """Return *info_text* with all group statistics replaced by *metrics_by_group*."""
    kept = [entry for entry in split_info(info_text) if not is_recognized_key(entry_key(entry))]
    combined = kept + build_group_entries(metrics_by_group, groups)
    return INFO_SEPARATOR.join(combined) if combined else INFO_MISSING


__all__ = [
    "RECOGNIZED_PREFIXES",
    "build_group_entries",
    "entry_key",
    "format_value",
    "is_recognized_key",
    "rewrite_info",
    "split_info",
    "tag_key",
]
