"""Per-record orchestration and the ordered, bounded record stream."""
from __future__ import annotations

import collections
import concurrent.futures
import logging
from typing import Callable, Deque, Dict, Iterable, Iterator, Mapping, Optional, Sequence, TypeVar

from .genotypes import classify_genotype
from .groups import GroupRegistry
from .header import synchronize_header
from .logging_utils import (
    StreamError,
    UnsupportedPloidyError,
    handle_non_critical_error,
    log_message,
)
from .stats import GroupCounters, GroupMetrics, compute_metrics
from .tags import rewrite_info
from .vcf_io import RawLine, VariantRecord, VcfTextReader, VcfTextWriter

DEFAULT_WINDOW = 1000
PROGRESS_INTERVAL = 10000

T = TypeVar("T")
R = TypeVar("R")


class RecordPipeline:
    """Recompute group statistics for single records.

    Instances hold only the registry and the sample list, both read-only, so a
    single pipeline can be shared by every worker thread.
    """

    def __init__(self, registry: GroupRegistry, sample_names: Sequence[str]):
        self.registry = registry
        self.sample_names = tuple(sample_names)

    def group_metrics(
        self,
        genotypes: Mapping[str, Optional[str]],
        locus: str = "<record>",
    ) -> Dict[str, GroupMetrics]:
        """Classify every member call and return metrics keyed by group."""

        metrics: Dict[str, GroupMetrics] = {}
        for group in self.registry.groups:
            counters = GroupCounters()
            for sample in self.registry.members[group]:
                if sample not in genotypes:
                    continue
                try:
                    call = classify_genotype(genotypes[sample])
                except UnsupportedPloidyError as exc:
                    handle_non_critical_error(
                        f"{locus}: sample {sample}: {exc}; excluded from {group} counts."
                    )
                    continue
                except StreamError as exc:
                    raise StreamError(f"{locus}: sample {sample}: {exc}") from exc
                counters.add(call)
            metrics[group] = compute_metrics(counters)
        return metrics

    def rewrite(self, info_text: str, genotypes: Mapping[str, Optional[str]], locus: str = "<record>") -> str:
        """Return the replacement INFO text for one record."""
        return rewrite_info(info_text, self.group_metrics(genotypes, locus), self.registry.groups)

    def process_line(self, raw: RawLine) -> str:
        record = VariantRecord.parse(raw, len(self.sample_names))
        genotypes = record.genotypes(self.sample_names)
        return record.with_info(self.rewrite(record.info, genotypes, record.describe()))


def ordered_map(
    func: Callable[[T], R],
    items: Iterable[T],
    *,
    workers: int = 1,
    window: int = DEFAULT_WINDOW,
) -> Iterator[R]:
    """Yield ``func(item)`` for every item, in input order.

    With more than one worker the items are processed by a thread pool. At
    most *window* items are in flight; once the window is full the oldest
    submission is awaited before the next item is read, so a slow record holds
    back reading instead of letting results pile up. The first exception is
    re-raised in input order and all outstanding work is cancelled. When
    reading *items* fails, every item read before the failure is yielded
    first, so the output before the error does not depend on *workers*.
    """

    if workers <= 1:
        for item in items:
            yield func(item)
        return

    pending: Deque[concurrent.futures.Future] = collections.deque()
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="vcf_grpaf")
    iterator = iter(items)
    try:
        while True:
            try:
                item = next(iterator)
            except StopIteration:
                break
            except Exception:
                # Deliver items read before the failure, then re-raise.
                while pending:
                    yield pending.popleft().result()
                raise
            pending.append(executor.submit(func, item))
            if len(pending) >= window:
                yield pending.popleft().result()
        while pending:
            yield pending.popleft().result()
    finally:
        executor.shutdown(wait=True, cancel_futures=True)


def run_pipeline(
    reader: VcfTextReader,
    writer: VcfTextWriter,
    registry: GroupRegistry,
    *,
    workers: int = 1,
    window: int = DEFAULT_WINDOW,
    verbose: bool = False,
) -> int:
    """Synchronize the header, then stream every record from *reader* to *writer*.

    Returns the number of records written.
    """

    writer.write_header(synchronize_header(reader.header.lines, registry, verbose))

    pipeline = RecordPipeline(registry, reader.header.samples)
    processed = 0
    for line in ordered_map(pipeline.process_line, reader, workers=workers, window=window):
        writer.write_line(line)
        processed += 1
        if processed % PROGRESS_INTERVAL == 0:
            log_message(f"Processed {processed} variants", verbose)
    log_message(f"Processed {processed} variants in total", verbose, level=logging.DEBUG)
    return processed


__all__ = [
    "DEFAULT_WINDOW",
    "RecordPipeline",
    "ordered_map",
    "run_pipeline",
]
