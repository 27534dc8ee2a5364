"""Per-group allele frequency annotation for VCF files.

The package recomputes AF, MAF, MAC, AC, AN and genotype-class counts for
user-defined sample groups and rewrites them into the INFO column, replacing
the tags of earlier runs. Importing the package verifies that the runtime
dependencies :mod:`vcfpy` (header parsing) and :mod:`pysam` (BGZF and tabix)
are available so later operations can rely on them without deferred import
errors.
"""

from __future__ import annotations

__version__ = "0.1.0"


def _import_dependency(name: str):
    try:
        module = __import__(name)
    except ImportError as exc:  # pragma: no cover - exercised when dependency missing
        raise ModuleNotFoundError(
            f"The '{name}' package is required for vcf_grpaf. "
            f"Please install it with 'pip install {name}'."
        ) from exc
    return module


vcfpy = _import_dependency("vcfpy")
pysam = _import_dependency("pysam")

from .genotypes import Classification, GenotypeClass, classify_genotype  # noqa: E402
from .groups import GroupRegistry, load_labels  # noqa: E402
from .header import synchronize_header  # noqa: E402
from .logging_utils import (  # noqa: E402
    ConfigError,
    GrpAFError,
    StreamError,
    UnknownSampleError,
    UnsupportedPloidyError,
)
from .pipeline import RecordPipeline, ordered_map, run_pipeline  # noqa: E402
from .stats import METRICS, GroupCounters, GroupMetrics, compute_metrics  # noqa: E402
from .tags import rewrite_info  # noqa: E402

__all__ = [
    "Classification",
    "ConfigError",
    "GenotypeClass",
    "GroupCounters",
    "GroupMetrics",
    "GroupRegistry",
    "GrpAFError",
    "METRICS",
    "RecordPipeline",
    "StreamError",
    "UnknownSampleError",
    "UnsupportedPloidyError",
    "classify_genotype",
    "compute_metrics",
    "load_labels",
    "ordered_map",
    "rewrite_info",
    "run_pipeline",
    "synchronize_header",
    "vcfpy",
    "pysam",
]
