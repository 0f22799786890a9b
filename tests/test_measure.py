from __future__ import annotations

import io
from types import SimpleNamespace

import pytest

from benchrun.errors import ConfigurationError
from benchrun.measure import BenchRecorder, Measurement


def _recorder(bd=None):
    out = io.StringIO()
    recorder = BenchRecorder(out)
    recorder.reset(SimpleNamespace(bd=bd))
    return recorder, out


def test_start_stop_reports_io_deltas():
    bd = SimpleNamespace(readed=100, proged=10, erased=0)
    recorder, out = _recorder(bd)
    recorder.start("write", 0, 64)
    bd.readed += 5
    bd.proged += 64
    bd.erased += 4096
    m = recorder.stop("write")
    assert m == Measurement("write", 0, 64, readed=5, proged=64, erased=4096)
    assert out.getvalue() == "benched write 0 64 5 64 4096\n"


def test_nested_measurements_stop_by_name():
    recorder, out = _recorder()
    recorder.start("outer", 0, 1)
    recorder.start("inner", 1, 2)
    recorder.stop("outer")
    recorder.stop("inner")
    assert [m.meas for m in recorder.measurements] == ["outer", "inner"]
    assert out.getvalue().splitlines() == ["benched outer 0 1 0 0 0", "benched inner 1 2 0 0 0"]


def test_stop_without_start():
    recorder, _ = _recorder()
    with pytest.raises(ConfigurationError, match="before it was started"):
        recorder.stop("missing")


def test_results():
    recorder, out = _recorder()
    recorder.result("count", 2, 8, 42)
    recorder.fresult("ratio", 2, 8, 1.5)
    assert out.getvalue().splitlines() == ["benched count 2 8 42", "benched ratio 2 8 1.500000"]
    assert recorder.measurements[1].result == 1.5


def test_reset_forgets_previous_run():
    recorder, _ = _recorder()
    recorder.start("a", 0, 0)
    recorder.result("b", 0, 0, 1)
    recorder.reset(SimpleNamespace(bd=None))
    assert recorder.measurements == []
    with pytest.raises(ConfigurationError):
        recorder.stop("a")
