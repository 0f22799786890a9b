"""Sampled trace output.

Benches and block devices trace through the ``benchrun.trace`` logger;
``TraceHandler`` forwards those records to a ``TraceWriter`` which applies
period/frequency sampling and writes to a file (``-`` for stdout).
"""

from __future__ import annotations

import logging
import os
import sys
import time
import traceback
from typing import Optional, TextIO

TRACE_LOGGER = "benchrun.trace"
TRACE_FORMAT = "%(pathname)s:%(lineno)d:trace: %(message)s"

# only retry opening a failed trace file this often
REOPEN_INTERVAL_NS = 100 * 1000 * 1000


class TraceWriter:
    """Append-only trace sink.

    Args:
        path: File to append to, ``-`` for stdout.
        period: Keep one call out of every ``period`` (0 keeps all).
        freq: Write at most ``freq`` records per second (0 is unlimited).
        backtrace: Append the caller's stack after every record.
    """

    def __init__(
        self,
        path: str,
        period: int = 0,
        freq: int = 0,
        backtrace: bool = False,
        clock=time.monotonic_ns,
    ) -> None:
        self.path = path
        self.period = period
        self.freq = freq
        self.backtrace = backtrace
        self._clock = clock
        self._file: Optional[TextIO] = None
        self._cycles = 0
        self._last_time: Optional[int] = None
        self._last_open: Optional[int] = None

    def _sampled_out(self) -> bool:
        if self.period:
            skip = self._cycles % self.period != 0
            self._cycles += 1
            if skip:
                return True
        if self.freq:
            now = self._clock()
            if self._last_time is not None and now - self._last_time < 1_000_000_000 // self.freq:
                return True
            self._last_time = now
        return False

    def _ensure_open(self) -> bool:
        if self._file is not None:
            return True
        now = self._clock()
        if self._last_open is not None and now - self._last_open < REOPEN_INTERVAL_NS:
            return False
        self._last_open = now
        try:
            if self.path == "-":
                self._file = os.fdopen(os.dup(sys.stdout.fileno()), "a", encoding="utf-8")
            else:
                self._file = open(self.path, "a", encoding="utf-8")
        except (OSError, ValueError):
            return False
        return True

    def write(self, text: str) -> None:
        if self._sampled_out() or not self._ensure_open():
            return
        try:
            self._file.write(text)
            if self.backtrace:
                # skip our own frames
                for frame in traceback.format_stack()[:-2]:
                    self._file.write("\tat " + frame.strip().splitlines()[0] + "\n")
            self._file.flush()
        except OSError:
            self.close()

    def close(self) -> None:
        if self._file is not None:
            try:
                self._file.close()
            except OSError:
                pass
            self._file = None


class TraceHandler(logging.Handler):
    def __init__(self, writer: TraceWriter) -> None:
        super().__init__(level=logging.DEBUG)
        self.writer = writer
        self.setFormatter(logging.Formatter(TRACE_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.writer.write(self.format(record) + "\n")
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        self.writer.close()
        super().close()


def install_trace(writer: TraceWriter) -> TraceHandler:
    """Route the trace logger into ``writer`` and return the installed handler."""
    logger = logging.getLogger(TRACE_LOGGER)
    handler = TraceHandler(writer)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return handler


def trace(fmt: str, *args) -> None:
    """Emit one trace record from the caller's location."""
    logging.getLogger(TRACE_LOGGER).debug(fmt, *args, stacklevel=2)
