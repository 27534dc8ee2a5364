"""Classification of raw ``GT`` strings."""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import List, Optional

from .logging_utils import StreamError, UnsupportedPloidyError

MISSING_ALLELE = "."
GT_SEPARATOR_PATTERN = re.compile(r"[/|]")


class GenotypeClass(enum.Enum):
    HOM_REF = "HomRef"
    HET = "Het"
    HOM_ALT = "HomAlt"
    HEMI = "Hemi"
    MISSING = "Missing"


@dataclass(frozen=True)
class Classification:
    """Typed view of one genotype call.

    ``alt_alleles`` is the number of alternate alleles the call contributes to
    AC; ``allele_number`` its contribution to AN.
    """

    kind: GenotypeClass
    alt_alleles: int = 0

    @property
    def allele_number(self) -> int:
        if self.kind is GenotypeClass.MISSING:
            return 0
        if self.kind is GenotypeClass.HEMI:
            return 1
        return 2


MISSING = Classification(GenotypeClass.MISSING)


def split_alleles(gt_value: Optional[str]) -> List[str]:
    """Split a GT string on the phase separators, keeping the tokens verbatim."""
    if gt_value is None:
        return []
    text = gt_value.strip()
    if not text:
        return []
    return GT_SEPARATOR_PATTERN.split(text)


def _allele_index(token: str) -> int:
    try:
        index = int(token)
    except ValueError:
        raise StreamError(f"Malformed allele {token!r} in genotype") from None
    if index < 0:
        raise StreamError(f"Negative allele index {index} in genotype")
    return index


def classify_genotype(gt_value: Optional[str]) -> Classification:
    """Classify a raw genotype such as ``0/1``, ``1|1``, ``1`` or ``./.``.

    Any missing allele makes the whole call missing. A single allele is
    hemizygous; two alleles are compared with every non-zero index collapsed
    into "alternate". Calls with more than two alleles raise
    :class:`UnsupportedPloidyError`.
    """

    tokens = split_alleles(gt_value)
    if not tokens or any(token.strip() in {"", MISSING_ALLELE} for token in tokens):
        return MISSING

    if len(tokens) > 2:
        raise UnsupportedPloidyError(
            f"Genotype {gt_value!r} has ploidy {len(tokens)}; only haploid and diploid calls are supported"
        )

    indices = [_allele_index(token.strip()) for token in tokens]
    if len(indices) == 1:
        return Classification(GenotypeClass.HEMI, 1 if indices[0] > 0 else 0)

    first, second = indices
    if first == second:
        if first == 0:
            return Classification(GenotypeClass.HOM_REF, 0)
        return Classification(GenotypeClass.HOM_ALT, 2)
    return Classification(GenotypeClass.HET, 1)


__all__ = [
    "Classification",
    "GenotypeClass",
    "MISSING",
    "classify_genotype",
    "split_alleles",
]
