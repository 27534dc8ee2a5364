"""Per-group allele counters and the metrics derived from them."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .genotypes import Classification, GenotypeClass

METRICS: Tuple[str, ...] = (
    "AF",
    "MAF",
    "MAC",
    "AC",
    "AN",
    "N_HEMI",
    "N_MISS",
    "N_HOMREF",
    "N_HET",
    "N_HOMALT",
)
"""Published metrics, in the order their INFO tags are written."""

FLOAT_METRICS = frozenset({"AF", "MAF"})

FREQUENCY_METRICS = frozenset({"AF", "MAF", "MAC"})
"""Metrics that are undefined when a group has no called alleles."""

LEGACY_PREFIXES: Tuple[str, ...] = ("ExcHet", "HWE")
"""Tags written by earlier group-statistics runs that are pruned but not regenerated."""


@dataclass
class GroupCounters:
    """Mutable counters for one group on one record."""

    allele_count_alt: int = 0
    allele_number: int = 0
    n_hemi: int = 0
    n_miss: int = 0
    n_homref: int = 0
    n_het: int = 0
    n_homalt: int = 0

    def add(self, call: Classification) -> None:
        kind = call.kind
        if kind is GenotypeClass.MISSING:
            self.n_miss += 1
            return
        if kind is GenotypeClass.HEMI:
            self.n_hemi += 1
        elif kind is GenotypeClass.HOM_REF:
            self.n_homref += 1
        elif kind is GenotypeClass.HET:
            self.n_het += 1
        else:
            self.n_homalt += 1
        self.allele_number += call.allele_number
        self.allele_count_alt += call.alt_alleles

    def update(self, calls: Iterable[Classification]) -> "GroupCounters":
        for call in calls:
            self.add(call)
        return self

    @property
    def n_samples(self) -> int:
        return self.n_homref + self.n_het + self.n_homalt + self.n_hemi + self.n_miss


@dataclass(frozen=True)
class GroupMetrics:
    """Snapshot of the published metrics for one group on one record.

    ``af``, ``maf`` and ``mac`` are ``None`` when ``an`` is zero.
    """

    ac: int
    an: int
    n_hemi: int
    n_miss: int
    n_homref: int
    n_het: int
    n_homalt: int
    af: Optional[float] = None
    maf: Optional[float] = None
    mac: Optional[int] = None

    def value(self, metric: str):
        return getattr(self, metric.lower())

    def items(self):
        """Yield ``(metric, value)`` pairs in publication order, skipping undefined ones."""
        for metric in METRICS:
            value = self.value(metric)
            if value is None:
                continue
            yield metric, value


def compute_metrics(counters: GroupCounters) -> GroupMetrics:
    ac = counters.allele_count_alt
    an = counters.allele_number
    af = maf = mac = None
    if an > 0:
        af = ac / an
        mac = min(ac, an - ac)
        maf = mac / an
    return GroupMetrics(
        ac=ac,
        an=an,
        n_hemi=counters.n_hemi,
        n_miss=counters.n_miss,
        n_homref=counters.n_homref,
        n_het=counters.n_het,
        n_homalt=counters.n_homalt,
        af=af,
        maf=maf,
        mac=mac,
    )


__all__ = [
    "FLOAT_METRICS",
    "FREQUENCY_METRICS",
    "GroupCounters",
    "GroupMetrics",
    "LEGACY_PREFIXES",
    "METRICS",
    "compute_metrics",
]
