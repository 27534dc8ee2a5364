"""Shared logging helpers and error classes for the group statistics workflow.

The module wires the ``vcf_grpaf`` logger to emit timestamped messages on the
console. :func:`configure_logging` is an idempotent entry point for adjusting
the behaviour: call it with ``log_level`` to change verbosity, ``log_file`` to
add a persistent trail, or disable the console handler entirely. Repeated
invocations clear previous handlers so no duplicate outputs accumulate.

Errors fall into two families. Fatal conditions (:class:`ConfigError`,
:class:`StreamError`) are routed through :func:`handle_critical_error`, which
records them at ``CRITICAL`` level and raises. Recoverable conditions
(:class:`UnknownSampleError`, :class:`UnsupportedPloidyError`) are reported
through :func:`handle_non_critical_error` as warnings and processing continues.
"""
from __future__ import annotations

import logging
import os
from typing import Iterable

LOG_FILE = "vcf_grpaf.log"
LOG_FORMAT = "%(asctime)s : %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("vcf_grpaf")
logger.propagate = False


def _normalize_level(level: int | str) -> int:
    """Return a numeric logging level for *level*."""
    if isinstance(level, str):
        name = level.upper()
        try:
            return logging._nameToLevel[name]  # type: ignore[attr-defined]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {level}") from exc
    return int(level)


def _clear_handlers(existing: Iterable[logging.Handler]) -> None:
    for h in list(existing):
        try:
            h.close()
        finally:
            logger.removeHandler(h)


def configure_logging(
    *,
    log_level: int | str = logging.INFO,
    log_file: str | os.PathLike[str] | None = None,
    enable_file_logging: bool = True,
    enable_console: bool = True,
    create_dirs: bool = True,
) -> None:
    """Idempotent logger setup for ``vcf_grpaf``.

    A file handler is only installed when ``log_file`` is given and
    ``enable_file_logging`` is true.
    """
    level = _normalize_level(log_level)
    _clear_handlers(logger.handlers)
    logger.setLevel(level)

    fmt = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if enable_file_logging and log_file:
        path = os.fspath(log_file)
        if create_dirs:
            d = os.path.dirname(path)
            if d:
                os.makedirs(d, exist_ok=True)
        fh = logging.FileHandler(path)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    if enable_console:
        sh = logging.StreamHandler()
        sh.setFormatter(fmt)
        logger.addHandler(sh)


class GrpAFError(RuntimeError):
    """Base exception for errors raised while recomputing group statistics."""


class ConfigError(GrpAFError):
    """Raised for unusable configuration: label table, group names, options."""


class StreamError(GrpAFError):
    """Raised when the input VCF stream is malformed past recovery."""


class UnknownSampleError(GrpAFError):
    """Raised when labelled samples are missing from the VCF sample list."""


class UnsupportedPloidyError(GrpAFError, ValueError):
    """Raised when a genotype carries more than two allele tokens."""


def log_message(
    message: str,
    verbose: bool = False,
    level: int = logging.INFO,
    *,
    exc_info: BaseException | bool | None = None,
) -> None:
    """Log *message* at the requested level and optionally echo it to stdout."""

    logger.log(level, message, exc_info=exc_info)
    if verbose:
        print(message)


def handle_critical_error(
    message: str,
    exc_cls=None,
    *,
    exc_info: BaseException | bool | None = None,
) -> None:
    """Log and raise a fatal error."""

    log_message(message, level=logging.ERROR)
    logger.critical(message, exc_info=exc_info)
    exception_class = exc_cls or GrpAFError
    if isinstance(exc_info, BaseException):
        raise exception_class(message) from exc_info
    raise exception_class(message)


def handle_non_critical_error(message: str) -> None:
    """Log a recoverable error as a warning."""

    log_message(message, level=logging.WARNING)


__all__ = [
    "LOG_FILE",
    "configure_logging",
    "logger",
    "log_message",
    "handle_critical_error",
    "handle_non_critical_error",
    "GrpAFError",
    "ConfigError",
    "StreamError",
    "UnknownSampleError",
    "UnsupportedPloidyError",
]

# Default configuration: console only at INFO level.
configure_logging()
