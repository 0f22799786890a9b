"""Measurement recording for bench bodies.

``start``/``stop`` bracket a region and report how many bytes the block
device read, programmed and erased in between; ``result``/``fresult`` report
an explicit number. Each record is printed as a ``benched`` line, the format
downstream tooling parses, and kept for persistence.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

from benchrun.errors import ConfigurationError


@dataclass(frozen=True)
class Measurement:
    meas: str
    iter: int
    size: int
    readed: Optional[int] = None
    proged: Optional[int] = None
    erased: Optional[int] = None
    result: Optional[float] = None


@dataclass
class _OpenRecord:
    meas: str
    iter: int
    size: int
    last_readed: int
    last_proged: int
    last_erased: int


def io_counters(bd) -> tuple[int, int, int]:
    """Cumulative ``(readed, proged, erased)`` bytes of a block device.

    A missing device (or one without counters) reads as zero.
    """
    if bd is None:
        return 0, 0, 0
    return (
        int(getattr(bd, "readed", 0)),
        int(getattr(bd, "proged", 0)),
        int(getattr(bd, "erased", 0)),
    )


class BenchRecorder:
    def __init__(self, out: TextIO | None = None) -> None:
        self.out = out if out is not None else sys.stdout
        self.bd = None
        self.measurements: List[Measurement] = []
        self._open: List[_OpenRecord] = []

    def reset(self, cfg) -> None:
        """Attach to the block device of a new run and forget open records."""
        self.bd = getattr(cfg, "bd", None)
        self._open = []
        self.measurements = []

    def start(self, meas: str, iter: int, size: int) -> None:
        readed, proged, erased = io_counters(self.bd)
        self._open.append(_OpenRecord(meas, iter, size, readed, proged, erased))

    def stop(self, meas: str) -> Measurement:
        readed, proged, erased = io_counters(self.bd)
        for i, record in enumerate(self._open):
            if record.meas == meas:
                del self._open[i]
                m = Measurement(
                    meas=record.meas,
                    iter=record.iter,
                    size=record.size,
                    readed=readed - record.last_readed,
                    proged=proged - record.last_proged,
                    erased=erased - record.last_erased,
                )
                print(
                    f"benched {m.meas} {m.iter} {m.size} {m.readed} {m.proged} {m.erased}",
                    file=self.out,
                )
                self.measurements.append(m)
                return m
        raise ConfigurationError(f"bench stopped before it was started ({meas})")

    def result(self, meas: str, iter: int, size: int, result: int) -> Measurement:
        m = Measurement(meas=meas, iter=iter, size=size, result=result)
        print(f"benched {meas} {iter} {size} {result}", file=self.out)
        self.measurements.append(m)
        return m

    def fresult(self, meas: str, iter: int, size: int, result: float) -> Measurement:
        m = Measurement(meas=meas, iter=iter, size=size, result=float(result))
        print(f"benched {meas} {iter} {size} {result:.6f}", file=self.out)
        self.measurements.append(m)
        return m
