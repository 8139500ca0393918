"""Tests for population progress ETA smoothing and run timing output."""

from __future__ import annotations

import io

from popsynth.runtime import progress as progress_mod


def _fake_monotonic(times):
    iterator = iter(times)

    def _next():
        return next(iterator)

    return _next


def test_progress_eta_prefers_recent_objects(monkeypatch, capsys):
    times = [0.0, 1.0, 2.0, 3.0, 4.0]
    monkeypatch.setattr(progress_mod.time, "monotonic", _fake_monotonic(times))
    reporter = progress_mod.ProgressReporter(6, label="star", enabled=True)

    for index in range(4):
        reporter.update(index, force=True)

    out = capsys.readouterr().out.strip().splitlines()
    assert out, "Expected progress output for ETA"
    assert "star 4/6" in out[-1]
    assert "ETA 2s" in out[-1]


def test_progress_disabled_writes_nothing():
    stream = io.StringIO()
    reporter = progress_mod.ProgressReporter(3, enabled=False, stream=stream)
    for index in range(3):
        reporter.update(index)
    reporter.finish(2)
    assert stream.getvalue() == ""


def test_format_wall_time_truncates_components():
    assert progress_mod.format_wall_time(65.9) == "0:1:5"
    assert progress_mod.format_wall_time(3 * 3600 + 7 * 60 + 2.5) == "3:7:2"


def test_run_timer_announces_start_and_end():
    stream = io.StringIO()
    timer = progress_mod.RunTimer("binaries", stream=stream)
    timer.finish()
    text = stream.getvalue()
    assert text.startswith("Start generating binaries at ")
    assert "End generating binaries at " in text
    assert "CPU seconds" in text
    assert "(hh:mm:ss)" in text


def test_run_timer_disabled_is_silent():
    stream = io.StringIO()
    progress_mod.RunTimer("stars", stream=stream, enabled=False).finish()
    assert stream.getvalue() == ""
